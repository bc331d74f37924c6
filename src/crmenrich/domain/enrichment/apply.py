"""Apply a selected subset of eligible EPS fields to one contact."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from crmenrich.domain.model import normalize_company_name
from crmenrich.domain.ports.persistence import CompanyNameConflictError, StoreError

from .contracts import EnrichmentOutcome, EnrichmentPlan
from .eligibility import resolve_eligible
from .errors import (
    ContactNotFoundError,
    DependencyFailureError,
    EnrichmentValidationError,
    ProfileNotFoundError,
)
from .fields import FIELD_SPECS_BY_KEY, Storage
from .normalize import normalize_profile

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable
    from uuid import UUID

    from crmenrich.domain.model import Company, Contact, EpsProfile
    from crmenrich.domain.ports.persistence import CompanyStore, ProfileStore
    from crmenrich.domain.ports.unit_of_work import EnrichmentUnitOfWork

    from .contracts import EnrichmentRequest, NormalizedProfile

log = logging.getLogger(__name__)


def plan_enrichment(
    contact: Contact,
    normalized: NormalizedProfile,
    selected_keys: Iterable[str],
) -> EnrichmentPlan:
    """Route selected eligible values to their storage slots without touching the contact.

    Keys outside the eligible set for this contact are ignored and reported.
    """

    selected = set(selected_keys)
    eligible = {item.key: item for item in resolve_eligible(contact, normalized)}

    flat_writes: dict[str, Any] = {}
    custom_writes: dict[str, Any] = {}
    applied: list[str] = []
    for key, item in eligible.items():
        if key not in selected:
            continue
        spec = FIELD_SPECS_BY_KEY[key]
        if spec.storage is Storage.FLAT:
            flat_writes[spec.target] = item.value
        else:
            custom_writes[spec.target] = item.value
        applied.append(key)

    ignored = tuple(sorted(selected.difference(applied)))
    if ignored:
        log.debug("Ignoring ineligible keys for contact %s: %s", contact.id, ", ".join(ignored))

    changes: dict[str, Any] = dict(flat_writes)
    if custom_writes:
        changes["custom_fields"] = custom_writes

    company_name, company_industry = _company_target(contact, normalized, applied)
    return EnrichmentPlan(
        changes=changes,
        applied_keys=tuple(applied),
        ignored_keys=ignored,
        company_name=company_name,
        company_industry=company_industry,
    )


def apply_enrichment(
    request: EnrichmentRequest,
    *,
    unit_of_work_factory: Callable[[], EnrichmentUnitOfWork],
) -> EnrichmentOutcome:
    """Enrich one contact inside a single unit of work.

    The company (when one has to be created) is written before the contact and
    both are committed together.
    """

    contact_id = _require_contact_id(request)
    profile_id = request.resolved_profile_id
    if request.profile is None and not (profile_id and profile_id.strip()):
        raise EnrichmentValidationError("An EPS profile reference is required", contact_id=contact_id)

    try:
        with unit_of_work_factory() as uow:
            repositories = uow.repositories
            contact = repositories.contacts.get(contact_id)
            if contact is None:
                raise ContactNotFoundError(contact_id)

            profile = request.profile or _load_profile(repositories.profiles, profile_id, contact_id)
            plan = plan_enrichment(contact, normalize_profile(profile), request.selected_keys)

            changes = dict(plan.changes)
            company: Company | None = None
            company_created = False
            if plan.company_name is not None:
                company, company_created = _resolve_company(
                    repositories.companies,
                    plan.company_name,
                    plan.company_industry,
                    contact_id=contact_id,
                )
                changes["company_id"] = company.id

            updated = repositories.contacts.update(contact_id, changes) if changes else contact
            uow.commit()
    except StoreError as exc:
        raise DependencyFailureError(
            f"Store failure while enriching contact {contact_id}: {exc}",
            contact_id=contact_id,
        ) from exc

    log.info(
        "Enriched contact %s: applied=%s, ignored=%s, company_created=%s",
        contact_id,
        list(plan.applied_keys),
        list(plan.ignored_keys),
        company_created,
    )
    return EnrichmentOutcome(
        contact=updated,
        company_created=company_created,
        applied_keys=plan.applied_keys,
        ignored_keys=plan.ignored_keys,
        company=company,
    )


def _require_contact_id(request: EnrichmentRequest) -> UUID:
    if request.contact_id is None:
        raise EnrichmentValidationError("A contact reference is required")
    return request.contact_id


def _load_profile(profiles: ProfileStore, profile_id: str | None, contact_id: UUID) -> EpsProfile:
    assert profile_id is not None
    profile = profiles.get(profile_id.strip())
    if profile is None:
        raise ProfileNotFoundError(profile_id, contact_id=contact_id)
    return profile


def _company_target(
    contact: Contact,
    normalized: NormalizedProfile,
    applied: list[str],
) -> tuple[str | None, str | None]:
    if contact.company_id is not None:
        return None, None
    if not any(FIELD_SPECS_BY_KEY[key].links_company for key in applied):
        return None, None

    info = normalized.value_of("companyInfo")
    info = info if isinstance(info, Mapping) else {}
    name = normalized.value_of("companyName") if "companyName" in applied else None
    if not isinstance(name, str) or not name.strip():
        name = info.get("name")
    if not isinstance(name, str) or not name.strip():
        return None, None

    industry = info.get("industry")
    if not isinstance(industry, str) or not industry.strip():
        industry = normalized.value_of("industry")
    return name.strip(), industry.strip() if isinstance(industry, str) and industry.strip() else None


def _resolve_company(
    companies: CompanyStore,
    name: str,
    industry: str | None,
    *,
    contact_id: UUID,
) -> tuple[Company, bool]:
    normalized_name = normalize_company_name(name)
    existing = companies.find_by_name(normalized_name)
    if existing is not None:
        log.info("Linking contact %s to existing company %s (%s)", contact_id, existing.id, existing.name)
        return existing, False

    try:
        company = companies.create(name, industry)
    except CompanyNameConflictError:
        log.warning("Company %r was created concurrently; re-fetching by name", name)
        existing = companies.find_by_name(normalized_name)
        if existing is None:
            raise DependencyFailureError(
                f"Company {name!r} conflicted on create but could not be re-fetched",
                contact_id=contact_id,
            ) from None
        return existing, False

    log.info("Created company %s (%s) for contact %s", company.id, company.name, contact_id)
    return company, True
