"""Transaction boundary shared by every enrichment operation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from types import TracebackType

    from crmenrich.domain.ports.persistence import CompanyStore, ContactStore, ProfileStore


@dataclass(slots=True)
class EnrichmentRepositories:
    contacts: ContactStore
    companies: CompanyStore
    profiles: ProfileStore


@runtime_checkable
class EnrichmentUnitOfWork(Protocol):
    """One transaction over the contact, company and profile stores.

    Leaving the block without ``commit()`` discards staged writes; leaving it
    with an exception rolls back explicitly.
    """

    @property
    def repositories(self) -> EnrichmentRepositories: ...

    def __enter__(self) -> EnrichmentUnitOfWork: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...
