"""External people-data profiles as seen by the CRM.

Profiles are read-only snapshots of documents returned by the External Profile
Source (EPS). The document is kept as-is; typed access happens in
``crmenrich.domain.enrichment.normalize``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Mapping


@dataclass(eq=False, kw_only=True)
class EpsProfile:
    """One candidate profile document keyed by the provider's profile id."""

    id: str
    document: dict[str, Any] = field(default_factory=dict[str, Any])

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> EpsProfile:
        profile_id = document.get("id")
        if profile_id is None or not str(profile_id).strip():
            raise ValueError("EPS profile document has no id")
        return cls(id=str(profile_id).strip(), document=dict(document))

    @property
    def full_name(self) -> str | None:
        value = self.document.get("fullName")
        return value if isinstance(value, str) else None


@dataclass(slots=True, kw_only=True)
class CandidateMatch:
    """Provider-ranked candidate profile for a contact."""

    profile: EpsProfile
    match_score: float = 0.0
    match_reasons: tuple[str, ...] = ()
