"""Match provider entry point implementing the candidate match port."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Protocol

from crmenrich.config import get_match_provider_config

from .client import MatchProviderClient
from .translator import translate_matches

if TYPE_CHECKING:
    from crmenrich.config.match_provider import MatchProviderConfig
    from crmenrich.domain.model import CandidateMatch, Contact
    from crmenrich.domain.ports.matching import CandidateMatchProvider

    from .schema import MatchResponse

log = getLogger(__name__)


class MatchSearchClient(Protocol):
    def search_matches(
        self,
        *,
        name: str,
        email: str | None = None,
        company: str | None = None,
    ) -> MatchResponse: ...


def build_http_match_provider(
    *,
    config: MatchProviderConfig | None = None,
    client: MatchSearchClient | None = None,
) -> CandidateMatchProvider:
    """Return a ``CandidateMatchProvider`` querying the configured HTTP endpoint."""

    active_client = client or MatchProviderClient(config=config or get_match_provider_config())

    def provider(contact: Contact) -> list[CandidateMatch]:
        company = contact.custom_fields.get("currentCompany")
        response = active_client.search_matches(
            name=contact.display_name,
            email=contact.email,
            company=company if isinstance(company, str) else None,
        )
        candidates = translate_matches(response)
        log.debug("Match provider returned %s candidate(s) for contact %s", len(candidates), contact.id)
        return candidates

    return provider
