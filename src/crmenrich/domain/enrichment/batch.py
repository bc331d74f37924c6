"""Fan enrichment requests out over a bounded worker pool and aggregate the results."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .apply import apply_enrichment
from .errors import EnrichmentError, EnrichmentValidationError

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from threading import Event
    from uuid import UUID

    from crmenrich.domain.model import Contact
    from crmenrich.domain.ports.unit_of_work import EnrichmentUnitOfWork

    from .contracts import EnrichmentOutcome, EnrichmentRequest

log = logging.getLogger(__name__)

CANCELLED_REASON = "cancelled before dispatch"


@dataclass(slots=True, frozen=True)
class BatchItemError:
    contact_id: UUID | None
    reason: str


@dataclass(slots=True)
class BatchEnrichmentResult:
    """Aggregate of a batch run; ``succeeded + failed`` equals the number of requests."""

    succeeded: int = 0
    failed: int = 0
    companies_created: int = 0
    updated_contacts: list[Contact] = field(default_factory=list["Contact"])
    errors: list[BatchItemError] = field(default_factory=list[BatchItemError])

    @property
    def total(self) -> int:
        return self.succeeded + self.failed


type _ItemResult = EnrichmentOutcome | BatchItemError


def enrich_batch(
    requests: Sequence[EnrichmentRequest],
    *,
    unit_of_work_factory: Callable[[], EnrichmentUnitOfWork],
    max_concurrency: int,
    cancel_event: Event | None = None,
) -> BatchEnrichmentResult:
    """Enrich many contacts, tolerating per-item failure.

    Requests for the same contact run sequentially in submission order; distinct
    contacts run concurrently on at most ``max_concurrency`` threads. Once
    ``cancel_event`` is set no further request is started; those left over are
    recorded as failed.
    """

    if not requests:
        raise EnrichmentValidationError("Batch enrichment requires at least one request")
    if max_concurrency < 1:
        raise EnrichmentValidationError("max_concurrency must be at least 1")

    groups = _group_by_contact(requests)
    log.info(
        "Starting batch enrichment: requests=%s, contacts=%s, max_concurrency=%s",
        len(requests),
        len(groups),
        max_concurrency,
    )

    result = BatchEnrichmentResult()
    with ThreadPoolExecutor(
        max_workers=min(max_concurrency, len(groups)),
        thread_name_prefix="crmenrich-batch",
    ) as executor:
        futures = [
            executor.submit(_run_group, group, unit_of_work_factory, cancel_event)
            for group in groups
        ]
        for future in as_completed(futures):
            for item in future.result():
                _record(result, item)

    log.info(
        "Finished batch enrichment: succeeded=%s, failed=%s, companies_created=%s",
        result.succeeded,
        result.failed,
        result.companies_created,
    )
    return result


def _group_by_contact(requests: Sequence[EnrichmentRequest]) -> list[list[EnrichmentRequest]]:
    groups: dict[UUID | None, list[EnrichmentRequest]] = {}
    for request in requests:
        groups.setdefault(request.contact_id, []).append(request)
    return list(groups.values())


def _run_group(
    group: list[EnrichmentRequest],
    unit_of_work_factory: Callable[[], EnrichmentUnitOfWork],
    cancel_event: Event | None,
) -> list[_ItemResult]:
    results: list[_ItemResult] = []
    for request in group:
        if cancel_event is not None and cancel_event.is_set():
            results.append(BatchItemError(contact_id=request.contact_id, reason=CANCELLED_REASON))
            continue
        results.append(_run_one(request, unit_of_work_factory))
    return results


def _run_one(
    request: EnrichmentRequest,
    unit_of_work_factory: Callable[[], EnrichmentUnitOfWork],
) -> _ItemResult:
    try:
        return apply_enrichment(request, unit_of_work_factory=unit_of_work_factory)
    except EnrichmentError as exc:
        log.warning("Enrichment failed for contact %s: %s", request.contact_id, exc)
        return BatchItemError(contact_id=request.contact_id, reason=str(exc))
    except Exception as exc:  # noqa: BLE001
        log.exception("Unexpected failure enriching contact %s", request.contact_id)
        return BatchItemError(
            contact_id=request.contact_id,
            reason=f"unexpected error: {type(exc).__name__}: {exc}",
        )


def _record(result: BatchEnrichmentResult, item: _ItemResult) -> None:
    if isinstance(item, BatchItemError):
        result.failed += 1
        result.errors.append(item)
        return
    result.succeeded += 1
    result.updated_contacts.append(item.contact)
    if item.company_created:
        result.companies_created += 1
