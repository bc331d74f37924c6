"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from sqlalchemy import insert, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from crmenrich.adapters.sqlalchemy.mappings import company_table
from crmenrich.domain.model import Company, Contact, EpsProfile, normalize_company_name
from crmenrich.domain.ports.persistence import CompanyNameConflictError, StoreError

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping
    from uuid import UUID

    from sqlalchemy.orm import Session
    from sqlalchemy.sql.dml import Insert

log = logging.getLogger(__name__)


@contextmanager
def _translate_errors(action: str) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as exc:
        raise StoreError(f"Failed to {action}: {exc}") from exc


class SqlAlchemyContactStore:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, contact: Contact) -> None:
        with _translate_errors(f"add contact {contact.id}"):
            self.session.add(contact)
            self.session.flush()

    def get(self, contact_id: UUID) -> Contact | None:
        with _translate_errors(f"load contact {contact_id}"):
            return self.session.get(Contact, contact_id)

    def update(self, contact_id: UUID, changes: Mapping[str, Any]) -> Contact:
        with _translate_errors(f"update contact {contact_id}"):
            contact = self.session.get(Contact, contact_id)
            if contact is None:
                raise StoreError(f"Cannot update missing contact {contact_id}")
            contact.apply_changes(changes)
            self.session.flush()
            return contact


class SqlAlchemyCompanyStore:
    """Company store relying on the unique ``normalized_name`` index."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, company_id: UUID) -> Company | None:
        with _translate_errors(f"load company {company_id}"):
            return self.session.get(Company, company_id)

    def find_by_name(self, normalized_name: str) -> Company | None:
        key = normalize_company_name(normalized_name)
        stmt = select(Company).where(company_table.c.normalized_name == key).limit(1)
        with _translate_errors(f"look up company {key!r}"):
            return self.session.execute(stmt).scalar_one_or_none()

    def create(self, name: str, industry: str | None = None) -> Company:
        company = Company(name=name, industry=industry)
        values = {
            "id": company.id,
            "name": company.name,
            "industry": company.industry,
            "normalized_name": company.normalized_name,
        }
        with _translate_errors(f"create company {company.name!r}"):
            stmt = self._insert_ignoring_conflicts(values)
            if stmt is None:
                self._insert_in_savepoint(values, company.name)
            elif self.session.execute(stmt).rowcount == 0:
                raise CompanyNameConflictError(company.name)
            created = self.session.get(Company, company.id)
        if created is None:
            raise StoreError(f"Company {company.name!r} vanished after insert")
        return created

    def _insert_ignoring_conflicts(self, values: dict[str, Any]) -> Insert | None:
        dialect = self.session.get_bind().dialect.name
        if dialect == "sqlite":
            return (
                sqlite.insert(company_table)
                .values(**values)
                .on_conflict_do_nothing(index_elements=[company_table.c.normalized_name])
            )
        if dialect == "postgresql":
            return (
                postgresql.insert(company_table)
                .values(**values)
                .on_conflict_do_nothing(index_elements=[company_table.c.normalized_name])
            )
        return None

    def _insert_in_savepoint(self, values: dict[str, Any], name: str) -> None:
        try:
            with self.session.begin_nested():
                self.session.execute(insert(company_table).values(**values))
        except IntegrityError as exc:
            log.debug("Company insert rejected by unique index: %s", exc)
            raise CompanyNameConflictError(name) from exc


class SqlAlchemyProfileStore:
    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, profile_id: str) -> EpsProfile | None:
        with _translate_errors(f"load EPS profile {profile_id}"):
            return self.session.get(EpsProfile, profile_id)

    def save(self, profile: EpsProfile) -> EpsProfile:
        with _translate_errors(f"save EPS profile {profile.id}"):
            merged = self.session.merge(profile)
            self.session.flush()
            return merged
