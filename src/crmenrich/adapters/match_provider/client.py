"""HTTP client for the external match provider."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError

from crmenrich.adapters.http_resilience import ResilientClient
from crmenrich.domain.ports.matching import MatchProviderError

from .schema import MatchResponse

if TYPE_CHECKING:
    from collections.abc import Callable

    from crmenrich.config.http_resilience import ResilienceConfig
    from crmenrich.config.match_provider import MatchProviderConfig

log = getLogger(__name__)

MATCHES_PATH = "matches"


class MatchProviderClient:
    """Low-level HTTP client for the match provider's ``/matches`` endpoint."""

    def __init__(
        self,
        *,
        config: MatchProviderConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._resilience = config.resilience
        self._client_factory = client_factory or ResilientClient

    def search_matches(
        self,
        *,
        name: str,
        email: str | None = None,
        company: str | None = None,
    ) -> MatchResponse:
        return asyncio.run(self._search_matches_async(name=name, email=email, company=company))

    async def _search_matches_async(
        self,
        *,
        name: str,
        email: str | None,
        company: str | None,
    ) -> MatchResponse:
        if self._resilience.base_url is None:
            raise MatchProviderError("Missing match provider base_url in resilience configuration")

        params: dict[str, str] = {"name": name, "limit": str(self._config.limit)}
        if email:
            params["email"] = email
        if company:
            params["company"] = company

        async with self._client_factory(self._resilience) as client:
            try:
                response = await client.get(MATCHES_PATH, params=params)
                response.raise_for_status()
            except httpx.HTTPError as exc:
                raise MatchProviderError(f"Match provider request failed: {exc}") from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise MatchProviderError("Match provider returned invalid JSON") from exc
        if not isinstance(payload, dict):
            raise MatchProviderError("Unexpected match provider response payload")

        try:
            return MatchResponse.model_validate(payload)
        except ValidationError as exc:
            raise MatchProviderError(f"Malformed match provider response: {exc}") from exc
