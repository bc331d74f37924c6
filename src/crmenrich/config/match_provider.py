"""External match provider configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_var, positive_float_env_var, positive_int_env_var, require_env_vars
from .errors import ConfigurationError
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy

MATCH_PROVIDER_TIMEOUT_SECONDS = 30.0
MATCH_CACHE_TTL_SECONDS = 300.0
DEFAULT_MATCH_LIMIT = 10


@dataclass(frozen=True, slots=True)
class MatchProviderConfig:
    resilience: ResilienceConfig
    limit: int = DEFAULT_MATCH_LIMIT


def _cache_from_env() -> CacheConfig | None:
    """``CRMENRICH_MATCH_PROVIDER_CACHE`` selects ``memory`` (default), ``sqlite`` or ``off``."""

    backend = (optional_env_var("CRMENRICH_MATCH_PROVIDER_CACHE") or "memory").lower()
    match backend:
        case "off":
            return None
        case "memory":
            return CacheConfig(backend="memory", default_ttl_seconds=MATCH_CACHE_TTL_SECONDS)
        case "sqlite":
            return CacheConfig(backend="sqlite", default_ttl_seconds=MATCH_CACHE_TTL_SECONDS)
        case _:
            raise ConfigurationError(
                f"CRMENRICH_MATCH_PROVIDER_CACHE must be memory, sqlite or off, got {backend!r}"
            )


def get_match_provider_config(
    *,
    resilience: ResilienceConfig | None = None,
) -> MatchProviderConfig:
    limit = positive_int_env_var("CRMENRICH_MATCH_PROVIDER_LIMIT", default=DEFAULT_MATCH_LIMIT)
    if resilience is not None:
        return MatchProviderConfig(resilience=resilience, limit=limit)

    values = require_env_vars(("CRMENRICH_MATCH_PROVIDER_URL",))
    headers = {"Accept": "application/json"}
    token = optional_env_var("CRMENRICH_MATCH_PROVIDER_TOKEN")
    if token is not None:
        headers["X-Api-Key"] = token

    return MatchProviderConfig(
        resilience=ResilienceConfig(
            name="match_provider",
            base_url=values["CRMENRICH_MATCH_PROVIDER_URL"].rstrip("/"),
            timeout_seconds=positive_float_env_var(
                "CRMENRICH_MATCH_PROVIDER_TIMEOUT",
                default=MATCH_PROVIDER_TIMEOUT_SECONDS,
            ),
            retry=RetryPolicy(total=3),
            ratelimit=RateLimit(max_calls=5, per_seconds=1.0),
            cache=_cache_from_env(),
            default_headers=headers,
        ),
        limit=limit,
    )
