from __future__ import annotations

import threading
import uuid

import pytest

from crmenrich.domain.enrichment import (
    CANCELLED_REASON,
    EnrichmentRequest,
    EnrichmentValidationError,
    enrich_batch,
)
from tests.helpers.crm import make_contact, make_profile
from tests.support.stores import FakeContactStore, FakeUnitOfWorkFactory


def _seed_pairs(factory: FakeUnitOfWorkFactory, count: int) -> list[EnrichmentRequest]:
    database = factory.database
    database.seed_profile(make_profile(email="shared@x.com", location="Berlin"))
    requests: list[EnrichmentRequest] = []
    for index in range(count):
        contact = database.seed_contact(make_contact(f"First{index}", f"Last{index}"))
        requests.append(
            EnrichmentRequest.build(contact.id, ["email", "location"], profile_id="eps-1")
        )
    return requests


def test_empty_batch_is_rejected(fake_unit_of_work: FakeUnitOfWorkFactory) -> None:
    with pytest.raises(EnrichmentValidationError):
        enrich_batch([], unit_of_work_factory=fake_unit_of_work, max_concurrency=2)


def test_partial_failure_is_reported_not_raised(fake_unit_of_work: FakeUnitOfWorkFactory) -> None:
    requests = _seed_pairs(fake_unit_of_work, 5)
    missing_id = uuid.uuid4()
    requests[2] = EnrichmentRequest.build(missing_id, ["email"], profile_id="eps-1")

    result = enrich_batch(requests, unit_of_work_factory=fake_unit_of_work, max_concurrency=3)

    assert result.succeeded == 4
    assert result.failed == 1
    assert result.total == 5
    assert len(result.updated_contacts) == 4
    (error,) = result.errors
    assert error.contact_id == missing_id
    assert "not found" in error.reason.lower()


def test_successful_items_are_persisted(fake_unit_of_work: FakeUnitOfWorkFactory) -> None:
    requests = _seed_pairs(fake_unit_of_work, 4)

    result = enrich_batch(requests, unit_of_work_factory=fake_unit_of_work, max_concurrency=4)

    assert result.succeeded == 4
    for request in requests:
        assert request.contact_id is not None
        stored = fake_unit_of_work.database.stored_contact(request.contact_id)
        assert stored.email == "shared@x.com"
        assert stored.custom_fields == {"location": "Berlin"}


def test_shared_new_company_is_created_once(fake_unit_of_work: FakeUnitOfWorkFactory) -> None:
    database = fake_unit_of_work.database
    database.seed_profile(make_profile(companyName="Nova Labs"))
    requests = [
        EnrichmentRequest.build(
            database.seed_contact(make_contact(f"C{index}", "Doe")).id,
            ["companyName"],
            profile_id="eps-1",
        )
        for index in range(6)
    ]

    result = enrich_batch(requests, unit_of_work_factory=fake_unit_of_work, max_concurrency=6)

    assert result.succeeded == 6
    assert result.companies_created == 1
    assert len(database.companies) == 1
    (company,) = database.companies.values()
    assert {contact.company_id for contact in result.updated_contacts} == {company.id}


def test_unexpected_exception_is_counted(
    fake_unit_of_work: FakeUnitOfWorkFactory,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    requests = _seed_pairs(fake_unit_of_work, 2)
    original_get = FakeContactStore.get
    exploding_id = requests[0].contact_id

    def flaky_get(self: FakeContactStore, contact_id: uuid.UUID):  # noqa: ANN202
        if contact_id == exploding_id:
            raise KeyError("boom")
        return original_get(self, contact_id)

    monkeypatch.setattr(FakeContactStore, "get", flaky_get)

    result = enrich_batch(requests, unit_of_work_factory=fake_unit_of_work, max_concurrency=2)

    assert result.succeeded == 1
    assert result.failed == 1
    assert result.errors[0].contact_id == exploding_id
    assert "KeyError" in result.errors[0].reason


def test_same_contact_requests_run_in_submission_order(
    fake_unit_of_work: FakeUnitOfWorkFactory,
) -> None:
    database = fake_unit_of_work.database
    contact = database.seed_contact(make_contact())
    database.seed_profile(make_profile("first", jobTitle="Engineer"))
    database.seed_profile(make_profile("second", jobTitle="Director"))
    requests = [
        EnrichmentRequest.build(contact.id, ["jobTitle"], profile_id="first"),
        EnrichmentRequest.build(contact.id, ["jobTitle"], profile_id="second"),
    ]

    result = enrich_batch(requests, unit_of_work_factory=fake_unit_of_work, max_concurrency=4)

    assert result.succeeded == 2
    assert database.stored_contact(contact.id).job_title == "Director"


def test_cancelled_batch_dispatches_nothing(fake_unit_of_work: FakeUnitOfWorkFactory) -> None:
    requests = _seed_pairs(fake_unit_of_work, 3)
    cancel = threading.Event()
    cancel.set()

    result = enrich_batch(
        requests,
        unit_of_work_factory=fake_unit_of_work,
        max_concurrency=2,
        cancel_event=cancel,
    )

    assert result.succeeded == 0
    assert result.failed == 3
    assert {error.reason for error in result.errors} == {CANCELLED_REASON}
    assert fake_unit_of_work.created == []


def test_cancellation_mid_batch_preserves_counts(
    fake_unit_of_work: FakeUnitOfWorkFactory,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    database = fake_unit_of_work.database
    contact = database.seed_contact(make_contact())
    database.seed_profile(make_profile(jobTitle="Engineer"))
    cancel = threading.Event()
    original_get = FakeContactStore.get
    requests = [
        EnrichmentRequest.build(contact.id, ["jobTitle"], profile_id="eps-1") for _ in range(3)
    ]

    def cancelling_get(self: FakeContactStore, contact_id: uuid.UUID):  # noqa: ANN202
        cancel.set()
        return original_get(self, contact_id)

    monkeypatch.setattr(FakeContactStore, "get", cancelling_get)

    result = enrich_batch(
        requests,
        unit_of_work_factory=fake_unit_of_work,
        max_concurrency=1,
        cancel_event=cancel,
    )

    assert result.total == 3
    assert result.succeeded == 1
    assert [error.reason for error in result.errors] == [CANCELLED_REASON, CANCELLED_REASON]
