"""Translate match provider payloads into domain candidate matches."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from crmenrich.domain.model import CandidateMatch, EpsProfile

if TYPE_CHECKING:
    from .schema import MatchEntry, MatchResponse

log = logging.getLogger(__name__)


def translate_matches(response: MatchResponse) -> list[CandidateMatch]:
    """Return candidates best score first, skipping entries without a usable profile."""

    candidates: list[CandidateMatch] = []
    for position, entry in enumerate(response.matches):
        candidate = translate_match(entry)
        if candidate is None:
            log.warning("Skipping match provider entry %s: profile has no id", position)
            continue
        candidates.append(candidate)
    candidates.sort(key=lambda candidate: candidate.match_score, reverse=True)
    return candidates


def translate_match(entry: MatchEntry) -> CandidateMatch | None:
    if entry.profile is None:
        return None
    try:
        profile = EpsProfile.from_document(entry.profile)
    except ValueError:
        return None
    return CandidateMatch(
        profile=profile,
        match_score=entry.match_score,
        match_reasons=tuple(reason for reason in entry.match_reasons if reason.strip()),
    )
