from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import inspect
from sqlalchemy.orm import sessionmaker

from crmenrich.adapters.sqlalchemy import (
    SqlAlchemyCompanyStore,
    SqlAlchemyContactStore,
    SqlAlchemyProfileStore,
)
from crmenrich.domain.model import EpsProfile
from crmenrich.domain.ports.persistence import (
    CompanyNameConflictError,
    CompanyStore,
    ContactStore,
    ProfileStore,
    StoreError,
)
from tests.helpers.crm import make_contact

if TYPE_CHECKING:
    from collections.abc import Iterator

    from sqlalchemy.engine import Engine
    from sqlalchemy.orm import Session


@pytest.fixture
def session(sqlite_engine: Engine) -> Iterator[Session]:
    factory = sessionmaker(bind=sqlite_engine, expire_on_commit=False)
    with factory() as session:
        yield session


def test_stores_satisfy_ports(session: Session) -> None:
    assert isinstance(SqlAlchemyContactStore(session), ContactStore)
    assert isinstance(SqlAlchemyCompanyStore(session), CompanyStore)
    assert isinstance(SqlAlchemyProfileStore(session), ProfileStore)


def test_schema_has_unique_company_name(sqlite_engine: Engine) -> None:
    inspector = inspect(sqlite_engine)

    assert set(inspector.get_table_names()) >= {"contact", "company", "eps_profile"}
    unique_columns = [
        constraint["column_names"] for constraint in inspector.get_unique_constraints("company")
    ]
    unique_indexes = [
        index["column_names"] for index in inspector.get_indexes("company") if index["unique"]
    ]
    assert ["normalized_name"] in unique_columns + unique_indexes


def test_contact_update_merges_custom_fields(session: Session) -> None:
    store = SqlAlchemyContactStore(session)
    contact = make_contact(custom_fields={"location": "Paris"})
    store.add(contact)
    session.commit()

    store.update(contact.id, {"phone": "+1 555", "custom_fields": {"skills": ["Go"]}})
    session.commit()
    session.expire_all()

    reloaded = store.get(contact.id)
    assert reloaded is not None
    assert reloaded.phone == "+1 555"
    assert reloaded.custom_fields == {"location": "Paris", "skills": ["Go"]}


def test_update_of_missing_contact_raises_store_error(session: Session) -> None:
    with pytest.raises(StoreError):
        SqlAlchemyContactStore(session).update(uuid.uuid4(), {"phone": "+1"})


def test_company_create_and_find_by_name(session: Session) -> None:
    store = SqlAlchemyCompanyStore(session)

    created = store.create("  Acme Corp ", "Manufacturing")
    session.commit()

    found = store.find_by_name("acme   CORP")
    assert found is not None
    assert found.id == created.id
    assert found.name == "Acme Corp"
    assert found.industry == "Manufacturing"
    assert store.get(created.id) is found


def test_duplicate_company_name_raises_conflict(session: Session) -> None:
    store = SqlAlchemyCompanyStore(session)
    store.create("Acme Corp")
    session.commit()

    with pytest.raises(CompanyNameConflictError) as excinfo:
        store.create("ACME  corp")

    assert excinfo.value.name == "ACME  corp"
    # The session stays usable after a conflict.
    assert store.find_by_name("acme corp") is not None


def test_profile_save_is_an_upsert(session: Session) -> None:
    store = SqlAlchemyProfileStore(session)
    store.save(EpsProfile(id="eps-1", document={"id": "eps-1", "email": "old@x.com"}))
    session.commit()

    store.save(EpsProfile(id="eps-1", document={"id": "eps-1", "email": "new@x.com"}))
    session.commit()
    session.expire_all()

    reloaded = store.get("eps-1")
    assert reloaded is not None
    assert reloaded.document["email"] == "new@x.com"
    assert store.get("missing") is None
