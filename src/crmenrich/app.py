"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from logging import getLogger
from typing import TYPE_CHECKING

from crmenrich.adapters.match_provider import build_http_match_provider
from crmenrich.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyEnrichmentUnitOfWork,
    is_started,
    startup,
)
from crmenrich.config import get_enrichment_config
from crmenrich.domain.enrichment import (
    BatchEnrichmentResult,
    EligibleField,
    EnrichmentOutcome,
    EnrichmentRequest,
    apply_enrichment,
    compute_eligible_fields as _compute_eligible_fields,
    enrich_batch as _enrich_batch,
    find_candidate_matches,
)
from crmenrich.domain.ports.unit_of_work import EnrichmentUnitOfWork

if TYPE_CHECKING:
    from collections.abc import Sequence
    from threading import Event
    from uuid import UUID

    from crmenrich.domain.model import CandidateMatch
    from crmenrich.domain.ports.matching import CandidateMatchProvider

UnitOfWorkFactory = Callable[[], EnrichmentUnitOfWork]


log = getLogger(__name__)


def _default_unit_of_work() -> UnitOfWorkFactory:
    if not is_started():
        startup()
    return SqlAlchemyEnrichmentUnitOfWork


def candidate_matches(
    contact_id: UUID,
    *,
    provider: CandidateMatchProvider | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> list[CandidateMatch]:
    """Return ranked candidate profiles for a contact and keep them for later enrichment."""

    effective_uow = unit_of_work_factory or _default_unit_of_work()
    effective_provider = provider or build_http_match_provider()
    return find_candidate_matches(
        contact_id,
        provider=effective_provider,
        unit_of_work_factory=effective_uow,
    )


def compute_eligible_fields(
    contact_id: UUID,
    profile_id: str,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> list[EligibleField]:
    """Preview which fields of a stored candidate profile may be merged."""

    return _compute_eligible_fields(
        contact_id,
        profile_id,
        unit_of_work_factory=unit_of_work_factory or _default_unit_of_work(),
    )


def enrich_one(
    contact_id: UUID,
    profile_id: str,
    selected_keys: Iterable[str],
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> EnrichmentOutcome:
    """Apply the selected fields of one stored profile to one contact."""

    request = EnrichmentRequest.build(contact_id, selected_keys, profile_id=profile_id)
    return apply_enrichment(
        request,
        unit_of_work_factory=unit_of_work_factory or _default_unit_of_work(),
    )


def enrich_batch(
    requests: Sequence[EnrichmentRequest],
    *,
    max_concurrency: int | None = None,
    cancel_event: Event | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> BatchEnrichmentResult:
    """Enrich many contacts concurrently; per-item failures land in the result."""

    effective_concurrency = (
        get_enrichment_config().max_concurrency if max_concurrency is None else max_concurrency
    )
    log.debug("Resolved batch max_concurrency=%s", effective_concurrency)
    return _enrich_batch(
        requests,
        unit_of_work_factory=unit_of_work_factory or _default_unit_of_work(),
        max_concurrency=effective_concurrency,
        cancel_event=cancel_event,
    )
