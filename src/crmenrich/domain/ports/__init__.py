"""Ports consumed by the enrichment services."""

from __future__ import annotations

from .matching import CandidateMatchProvider, MatchProviderError
from .persistence import (
    CompanyNameConflictError,
    CompanyStore,
    ContactStore,
    ProfileStore,
    StoreError,
)
from .unit_of_work import EnrichmentRepositories, EnrichmentUnitOfWork

__all__ = [
    "CandidateMatchProvider",
    "CompanyNameConflictError",
    "CompanyStore",
    "ContactStore",
    "EnrichmentRepositories",
    "EnrichmentUnitOfWork",
    "MatchProviderError",
    "ProfileStore",
    "StoreError",
]
