"""CRM records owned by the local stores: contacts and companies."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from .entity import Entity

if TYPE_CHECKING:
    from collections.abc import Mapping
    from uuid import UUID


def normalize_company_name(name: str) -> str:
    """Return the comparison key used for company uniqueness."""

    return " ".join(name.split()).casefold()


@dataclass(eq=False, kw_only=True)
class Company(Entity):
    name: str
    industry: str | None = None
    normalized_name: str = field(init=False)

    def __post_init__(self) -> None:
        self.name = self.name.strip()
        if not self.name:
            raise ValueError("Company name must not be blank")
        self.normalized_name = normalize_company_name(self.name)


@dataclass(eq=False, kw_only=True)
class Contact(Entity):
    first_name: str
    last_name: str
    email: str | None = None
    phone: str | None = None
    job_title: str | None = None
    linkedin_url: str | None = None
    twitter_handle: str | None = None
    company_id: UUID | None = None
    custom_fields: dict[str, Any] = field(default_factory=dict[str, Any])

    @property
    def display_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part).strip()

    def apply_changes(self, changes: Mapping[str, Any]) -> None:
        """Write a partial update onto this contact.

        ``custom_fields`` in ``changes`` is merged key by key into the existing
        bag; every other key names a flat attribute.
        """

        for attribute, value in changes.items():
            if attribute == "custom_fields":
                # Reassign so change tracking sees a new JSON value.
                self.custom_fields = {**self.custom_fields, **value}
            elif attribute in _UPDATABLE_ATTRIBUTES:
                setattr(self, attribute, value)
            else:
                raise AttributeError(f"Contact has no updatable attribute {attribute!r}")


_UPDATABLE_ATTRIBUTES: frozenset[str] = frozenset(
    {
        "first_name",
        "last_name",
        "email",
        "phone",
        "job_title",
        "linkedin_url",
        "twitter_handle",
        "company_id",
    }
)
