"""Port for the external match provider."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Iterable

    from crmenrich.domain.model import CandidateMatch, Contact


class MatchProviderError(RuntimeError):
    """Raised when the match provider cannot be queried."""


@runtime_checkable
class CandidateMatchProvider(Protocol):
    """Callable port returning candidate profiles for a contact."""

    def __call__(self, contact: Contact) -> Iterable[CandidateMatch]: ...
