"""Value objects shared by the enrichment stages.

This module intentionally holds only data carriers; the stages that produce
and consume them live in ``normalize``, ``eligibility``, ``apply`` and
``batch``.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from uuid import UUID

    from crmenrich.domain.model import Company, Contact, EpsProfile


@dataclass(slots=True, frozen=True)
class FieldValue:
    """A normalized EPS value plus its one-line summary for display."""

    value: Any
    display_value: str


@dataclass(slots=True, frozen=True)
class NormalizedProfile(Mapping[str, FieldValue]):
    """Flat projection of an EPS document keyed by enrichment field key.

    Keys are only present when the document carried usable data for them.
    """

    profile_id: str | None = None
    fields: Mapping[str, FieldValue] = field(default_factory=dict[str, FieldValue])

    def __getitem__(self, key: str) -> FieldValue:
        return self.fields[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self.fields)

    def value_of(self, key: str) -> Any:
        entry = self.fields.get(key)
        return None if entry is None else entry.value


@dataclass(slots=True, frozen=True)
class EligibleField:
    key: str
    label: str
    value: Any
    display_value: str


@dataclass(slots=True, frozen=True)
class EnrichmentRequest:
    """One (contact, chosen profile, selected keys) triple.

    Either ``profile`` or ``profile_id`` identifies the chosen match; an
    explicit profile wins and is not looked up.
    """

    contact_id: UUID | None
    selected_keys: frozenset[str]
    profile: EpsProfile | None = None
    profile_id: str | None = None

    @classmethod
    def build(
        cls,
        contact_id: UUID | None,
        selected_keys: Iterable[str],
        *,
        profile: EpsProfile | None = None,
        profile_id: str | None = None,
    ) -> EnrichmentRequest:
        return cls(
            contact_id=contact_id,
            selected_keys=frozenset(selected_keys),
            profile=profile,
            profile_id=profile_id,
        )

    @property
    def resolved_profile_id(self) -> str | None:
        if self.profile is not None:
            return self.profile.id
        return self.profile_id


@dataclass(slots=True, frozen=True)
class EnrichmentPlan:
    """Writes derived from the selected keys, before anything is persisted."""

    changes: Mapping[str, Any]
    applied_keys: tuple[str, ...]
    ignored_keys: tuple[str, ...]
    company_name: str | None = None
    company_industry: str | None = None

    @property
    def links_company(self) -> bool:
        return self.company_name is not None


@dataclass(slots=True)
class EnrichmentOutcome:
    """Result of enriching one contact."""

    contact: Contact
    company_created: bool = False
    applied_keys: tuple[str, ...] = ()
    ignored_keys: tuple[str, ...] = ()
    company: Company | None = None
