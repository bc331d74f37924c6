"""External match provider adapter."""

from __future__ import annotations

from .client import MatchProviderClient
from .fetcher import build_http_match_provider
from .schema import MatchEntry, MatchResponse
from .translator import translate_matches

__all__ = [
    "MatchEntry",
    "MatchProviderClient",
    "MatchResponse",
    "build_http_match_provider",
    "translate_matches",
]
