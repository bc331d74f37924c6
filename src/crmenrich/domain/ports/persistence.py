"""Ports for persisting CRM records and candidate profiles."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping
    from uuid import UUID

    from crmenrich.domain.model import Company, Contact, EpsProfile


class StoreError(RuntimeError):
    """Raised by store adapters when a read or write cannot be completed."""


class CompanyNameConflictError(StoreError):
    """Raised when a company with the same normalized name already exists."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Company name already exists: {name!r}")
        self.name = name


@runtime_checkable
class ContactStore(Protocol):
    """Persistence contract for contacts."""

    def add(self, contact: Contact) -> None: ...

    def get(self, contact_id: UUID) -> Contact | None: ...

    def update(self, contact_id: UUID, changes: Mapping[str, Any]) -> Contact: ...


@runtime_checkable
class CompanyStore(Protocol):
    """Persistence contract for companies, unique by normalized name."""

    def get(self, company_id: UUID) -> Company | None: ...

    def find_by_name(self, normalized_name: str) -> Company | None: ...

    def create(self, name: str, industry: str | None = None) -> Company: ...


@runtime_checkable
class ProfileStore(Protocol):
    """Local snapshot of candidate profiles returned by the match provider."""

    def get(self, profile_id: str) -> EpsProfile | None: ...

    def save(self, profile: EpsProfile) -> EpsProfile: ...
