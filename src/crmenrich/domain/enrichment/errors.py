"""Error taxonomy for contact enrichment."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from uuid import UUID


class EnrichmentError(RuntimeError):
    """Base class for errors raised while enriching a single contact."""

    def __init__(self, message: str, *, contact_id: UUID | None = None) -> None:
        super().__init__(message)
        self.contact_id = contact_id


class EnrichmentValidationError(EnrichmentError):
    """Raised for requests that cannot be attempted as submitted."""


class NotFoundError(EnrichmentError):
    """Raised when a referenced record does not exist."""


class ContactNotFoundError(NotFoundError):
    def __init__(self, contact_id: UUID) -> None:
        super().__init__(f"Contact not found: {contact_id}", contact_id=contact_id)


class ProfileNotFoundError(NotFoundError):
    def __init__(self, profile_id: str, *, contact_id: UUID | None = None) -> None:
        super().__init__(f"EPS profile not found: {profile_id}", contact_id=contact_id)
        self.profile_id = profile_id


class DependencyFailureError(EnrichmentError):
    """Raised when a store read or write fails; the cause is chained."""
