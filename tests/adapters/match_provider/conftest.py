"""Shared fixtures for match provider adapter tests."""

from __future__ import annotations

import pytest

from crmenrich.config.http_resilience import ResilienceConfig, RetryPolicy
from crmenrich.config.match_provider import MatchProviderConfig


@pytest.fixture
def provider_config() -> MatchProviderConfig:
    return MatchProviderConfig(
        resilience=ResilienceConfig(
            name="match_provider_test",
            base_url="https://people.example/api",
            timeout_seconds=5.0,
            retry=RetryPolicy(total=2, backoff_factor=0.0, backoff_jitter=0.0),
            ratelimit=None,
            cache=None,
            default_headers={"Accept": "application/json", "X-Api-Key": "secret"},
        ),
        limit=5,
    )
