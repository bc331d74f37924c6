"""Application configuration helpers."""

from __future__ import annotations

from .enrichment import DEFAULT_MAX_CONCURRENCY, EnrichmentConfig, get_enrichment_config
from .env import (
    bool_env_var,
    optional_env_var,
    positive_float_env_var,
    positive_int_env_var,
    require_env_vars,
)
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
from .logging import LOG_LEVEL_ENV_VAR, configure_logging, resolve_log_level
from .match_provider import MatchProviderConfig, get_match_provider_config
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config

__all__ = [
    "DEFAULT_MAX_CONCURRENCY",
    "LOG_LEVEL_ENV_VAR",
    "CacheConfig",
    "ConfigurationError",
    "DatabaseConfig",
    "EnrichmentConfig",
    "MatchProviderConfig",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "StorageConfig",
    "bool_env_var",
    "configure_logging",
    "get_database_config",
    "get_enrichment_config",
    "get_match_provider_config",
    "get_storage_config",
    "optional_env_var",
    "positive_float_env_var",
    "positive_int_env_var",
    "require_env_vars",
    "resolve_log_level",
]
