"""Batch enrichment defaults."""

from __future__ import annotations

from dataclasses import dataclass

from .env import positive_int_env_var

DEFAULT_MAX_CONCURRENCY = 4


@dataclass(frozen=True, slots=True)
class EnrichmentConfig:
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY


def get_enrichment_config() -> EnrichmentConfig:
    return EnrichmentConfig(
        max_concurrency=positive_int_env_var(
            "CRMENRICH_MAX_CONCURRENCY",
            default=DEFAULT_MAX_CONCURRENCY,
        )
    )
