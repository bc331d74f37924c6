"""Async HTTP client with retry, rate limiting and optional response caching."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Any, TypedDict, Unpack

import httpx
from aiolimiter import AsyncLimiter
from hishel import AsyncSqliteStorage, FilterPolicy
from hishel import Response as HishelCacheResponse
from hishel._policies import BaseFilter
from hishel.httpx import AsyncCacheClient
from httpx_retries import Retry, RetryTransport

from crmenrich.config import get_storage_config

if TYPE_CHECKING:
    from types import TracebackType

    from httpx._client import UseClientDefault
    from httpx._types import HeaderTypes, QueryParamTypes, TimeoutTypes, URLTypes

    from crmenrich.config.http_resilience import CacheConfig, ResilienceConfig, RetryPolicy

log = getLogger(__name__)


class RequestOptions(TypedDict, total=False):
    params: QueryParamTypes | None
    headers: HeaderTypes | None
    follow_redirects: bool | UseClientDefault
    timeout: TimeoutTypes | UseClientDefault


class ResilientClient:
    """``httpx.AsyncClient`` wrapper applying one ``ResilienceConfig``.

    ``transport`` replaces the network layer underneath the retry transport,
    which keeps retries and rate limiting active against a mock transport.
    """

    def __init__(
        self,
        config: ResilienceConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self._limiter = (
            AsyncLimiter(config.ratelimit.max_calls, config.ratelimit.per_seconds)
            if config.ratelimit is not None
            else None
        )
        self._client = _build_client(config, transport)

    async def __aenter__(self) -> ResilientClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def get(self, url: URLTypes, **kwargs: Unpack[RequestOptions]) -> httpx.Response:
        if self._limiter is None:
            response = await self._client.get(url, **kwargs)
        else:
            async with self._limiter:
                response = await self._client.get(url, **kwargs)
        log.debug(
            "%s GET %s -> %s%s",
            self.config.name,
            response.request.url.path,
            response.status_code,
            " (cached)" if response.extensions.get("hishel_from_cache") else "",
        )
        return response


def _build_client(
    config: ResilienceConfig,
    transport: httpx.AsyncBaseTransport | None,
) -> httpx.AsyncClient:
    options: dict[str, Any] = {
        "timeout": config.timeout_seconds,
        "transport": RetryTransport(transport=transport, retry=_build_retry(config.retry)),
    }
    if config.base_url is not None:
        options["base_url"] = config.base_url
    if config.default_headers:
        options["headers"] = dict(config.default_headers)
    if config.response_hooks:
        options["event_hooks"] = {"response": list(config.response_hooks)}

    if config.cache is None:
        return httpx.AsyncClient(**options)
    storage = _build_cache_storage(config.cache)
    policy = FilterPolicy(
        response_filters=[_StatusCodeFilter(config.cache.cacheable_statuses)],
    )
    return AsyncCacheClient(**options, storage=storage, policy=policy)


def _build_retry(policy: RetryPolicy) -> Retry:
    return Retry(
        total=policy.total,
        backoff_factor=policy.backoff_factor,
        max_backoff_wait=policy.max_backoff_wait,
        respect_retry_after_header=policy.respect_retry_after_header,
        allowed_methods=tuple(policy.allowed_methods),
        status_forcelist=tuple(policy.status_forcelist),
        retry_on_exceptions=policy.retry_on_exceptions,
        backoff_jitter=policy.backoff_jitter,
    )


class _StatusCodeFilter(BaseFilter[HishelCacheResponse]):
    """Keeps error responses out of the cache so a retry later can succeed."""

    def __init__(self, statuses: frozenset[int]) -> None:
        self._statuses = statuses

    def needs_body(self) -> bool:
        return False

    def apply(self, item: HishelCacheResponse, body: bytes | None) -> bool:  # noqa: ARG002
        return item.status_code in self._statuses


def _build_cache_storage(config: CacheConfig) -> AsyncSqliteStorage:
    match config.backend:
        case "sqlite":
            database_path = config.sqlite_path or str(get_storage_config().http_cache_path())
        case "memory":
            database_path = ":memory:"
        case _:
            raise ValueError(f"Unsupported cache backend: {config.backend}")

    return AsyncSqliteStorage(
        database_path=database_path,
        default_ttl=config.default_ttl_seconds,
        refresh_ttl_on_access=config.refresh_ttl_on_access,
    )
