"""Contact enrichment: normalize EPS profiles, resolve eligibility, apply selections."""

from __future__ import annotations

from .apply import apply_enrichment, plan_enrichment
from .batch import CANCELLED_REASON, BatchEnrichmentResult, BatchItemError, enrich_batch
from .contracts import (
    EligibleField,
    EnrichmentOutcome,
    EnrichmentPlan,
    EnrichmentRequest,
    FieldValue,
    NormalizedProfile,
)
from .eligibility import resolve_eligible
from .errors import (
    ContactNotFoundError,
    DependencyFailureError,
    EnrichmentError,
    EnrichmentValidationError,
    NotFoundError,
    ProfileNotFoundError,
)
from .fields import ENRICHABLE_KEYS, FIELD_TABLE, EligibilityRule, FieldSpec, Storage
from .normalize import normalize_profile
from .service import compute_eligible_fields, find_candidate_matches

__all__ = [
    "CANCELLED_REASON",
    "ENRICHABLE_KEYS",
    "FIELD_TABLE",
    "BatchEnrichmentResult",
    "BatchItemError",
    "ContactNotFoundError",
    "DependencyFailureError",
    "EligibilityRule",
    "EligibleField",
    "EnrichmentError",
    "EnrichmentOutcome",
    "EnrichmentPlan",
    "EnrichmentRequest",
    "EnrichmentValidationError",
    "FieldSpec",
    "FieldValue",
    "NormalizedProfile",
    "NotFoundError",
    "ProfileNotFoundError",
    "Storage",
    "apply_enrichment",
    "compute_eligible_fields",
    "enrich_batch",
    "find_candidate_matches",
    "normalize_profile",
    "plan_enrichment",
]
