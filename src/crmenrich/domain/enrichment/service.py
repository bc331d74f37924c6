"""Read-side enrichment services: candidate lookup and eligible-field preview."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from crmenrich.domain.ports.persistence import StoreError

from .eligibility import resolve_eligible
from .errors import ContactNotFoundError, DependencyFailureError, ProfileNotFoundError
from .normalize import normalize_profile

if TYPE_CHECKING:
    from collections.abc import Callable
    from uuid import UUID

    from crmenrich.domain.model import CandidateMatch
    from crmenrich.domain.ports.matching import CandidateMatchProvider
    from crmenrich.domain.ports.unit_of_work import EnrichmentUnitOfWork

    from .contracts import EligibleField

log = logging.getLogger(__name__)


def compute_eligible_fields(
    contact_id: UUID,
    profile_id: str,
    *,
    unit_of_work_factory: Callable[[], EnrichmentUnitOfWork],
) -> list[EligibleField]:
    """Return the fields of a stored profile that may be merged into a contact."""

    try:
        with unit_of_work_factory() as uow:
            contact = uow.repositories.contacts.get(contact_id)
            if contact is None:
                raise ContactNotFoundError(contact_id)
            profile = uow.repositories.profiles.get(profile_id)
            if profile is None:
                raise ProfileNotFoundError(profile_id, contact_id=contact_id)
    except StoreError as exc:
        raise DependencyFailureError(
            f"Store failure while reading contact {contact_id}: {exc}",
            contact_id=contact_id,
        ) from exc

    return resolve_eligible(contact, normalize_profile(profile))


def find_candidate_matches(
    contact_id: UUID,
    *,
    provider: CandidateMatchProvider,
    unit_of_work_factory: Callable[[], EnrichmentUnitOfWork],
) -> list[CandidateMatch]:
    """Ask the match provider for candidates and keep their profiles for later lookup.

    Candidates are returned best score first.
    """

    try:
        with unit_of_work_factory() as uow:
            contact = uow.repositories.contacts.get(contact_id)
            if contact is None:
                raise ContactNotFoundError(contact_id)

            matches = sorted(provider(contact), key=lambda match: match.match_score, reverse=True)
            for match in matches:
                uow.repositories.profiles.save(match.profile)
            uow.commit()
    except StoreError as exc:
        raise DependencyFailureError(
            f"Store failure while saving candidates for contact {contact_id}: {exc}",
            contact_id=contact_id,
        ) from exc

    log.info("Found %s candidate profile(s) for contact %s", len(matches), contact_id)
    return matches
