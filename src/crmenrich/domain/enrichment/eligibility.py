"""Decide which normalized EPS fields may be merged into a contact."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .contracts import EligibleField
from .fields import FIELD_TABLE, EligibilityRule, FieldSpec, has_content, is_present, local_value

if TYPE_CHECKING:
    from crmenrich.domain.model import Contact

    from .contracts import NormalizedProfile


def resolve_eligible(contact: Contact, normalized: NormalizedProfile) -> list[EligibleField]:
    """Return eligible fields in field-table order.

    Pure: reads the contact as given and never mutates it.
    """

    eligible: list[EligibleField] = []
    for spec in FIELD_TABLE:
        remote = normalized.get(spec.key)
        if remote is None or not has_content(remote.value):
            continue
        if not is_eligible(spec, local_value(contact, spec), remote.value):
            continue
        eligible.append(
            EligibleField(
                key=spec.key,
                label=spec.label,
                value=remote.value,
                display_value=remote.display_value,
            )
        )
    return eligible


def is_eligible(spec: FieldSpec, local: Any, remote: Any) -> bool:
    match spec.rule:
        case EligibilityRule.FILL_IF_EMPTY:
            return not has_content(local)
        case EligibilityRule.REFRESHABLE:
            if not has_content(local):
                return True
            return _comparable(local) != _comparable(remote)
        case EligibilityRule.FILL_ONLY:
            return not is_present(local)


def _comparable(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip()
    return value
