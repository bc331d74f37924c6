"""Declarative field table shared by eligibility and apply.

Each enrichable key is declared once: where its value is stored on a
``Contact`` and which rule decides whether an EPS value may be written there.
The table order is the order in which eligible fields are reported.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Any, Final

if TYPE_CHECKING:
    from crmenrich.domain.model import Contact


class Storage(StrEnum):
    FLAT = "flat"
    CUSTOM = "custom"


class EligibilityRule(StrEnum):
    FILL_IF_EMPTY = "fill_if_empty"
    """Eligible while the local value is missing, blank or an empty collection."""

    REFRESHABLE = "refreshable"
    """Eligible while the local value is empty or differs from the EPS value."""

    FILL_ONLY = "fill_only"
    """Any present local value blocks eligibility, even an empty collection."""


@dataclass(slots=True, frozen=True)
class FieldSpec:
    key: str
    label: str
    storage: Storage
    target: str
    rule: EligibilityRule
    links_company: bool = False


def _flat(key: str, label: str, attribute: str, rule: EligibilityRule) -> FieldSpec:
    return FieldSpec(key=key, label=label, storage=Storage.FLAT, target=attribute, rule=rule)


def _custom(
    key: str,
    label: str,
    *,
    target: str | None = None,
    rule: EligibilityRule = EligibilityRule.FILL_ONLY,
    links_company: bool = False,
) -> FieldSpec:
    return FieldSpec(
        key=key,
        label=label,
        storage=Storage.CUSTOM,
        target=target or key,
        rule=rule,
        links_company=links_company,
    )


FIELD_TABLE: Final[tuple[FieldSpec, ...]] = (
    _flat("phone", "Phone", "phone", EligibilityRule.FILL_IF_EMPTY),
    _flat("email", "Email", "email", EligibilityRule.FILL_IF_EMPTY),
    _flat("jobTitle", "Job Title", "job_title", EligibilityRule.REFRESHABLE),
    _flat("linkedinUrl", "LinkedIn URL", "linkedin_url", EligibilityRule.FILL_IF_EMPTY),
    _custom("companyName", "Current Company", target="currentCompany", links_company=True),
    _custom("skills", "Skills", rule=EligibilityRule.FILL_IF_EMPTY),
    _custom("location", "Location"),
    _custom("industry", "Industry"),
    _custom("experience", "Work Experience"),
    _custom("education", "Education"),
    _custom("languages", "Languages"),
    _custom("certifications", "Certifications"),
    _custom("interests", "Interests"),
    _custom("socialProfiles", "Social Profiles"),
    _custom("websites", "Personal Websites"),
    _custom("githubUrl", "GitHub Profile"),
    _flat("twitterHandle", "Twitter Handle", "twitter_handle", EligibilityRule.FILL_IF_EMPTY),
    _custom("personalEmails", "Personal Emails"),
    _custom("workEmails", "Work Emails"),
    _custom("phoneNumbers", "Additional Phone Numbers"),
    _custom("companyInfo", "Company Details", links_company=True),
)

FIELD_SPECS_BY_KEY: Final[dict[str, FieldSpec]] = {spec.key: spec for spec in FIELD_TABLE}
ENRICHABLE_KEYS: Final[frozenset[str]] = frozenset(FIELD_SPECS_BY_KEY)


def local_value(contact: Contact, spec: FieldSpec) -> Any:
    if spec.storage is Storage.FLAT:
        return getattr(contact, spec.target)
    return contact.custom_fields.get(spec.target)


def has_content(value: Any) -> bool:
    """Return whether a value carries data (blank strings and empty collections do not)."""

    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, (list, tuple, dict, set, frozenset)):
        return len(value) > 0
    return True


def is_present(value: Any) -> bool:
    """Presence test for fill-only fields: only ``None`` and ``""`` count as absent."""

    return value is not None and value != ""
