"""Response envelope of the external match provider.

Only the envelope is typed; each ``profile`` stays a loose mapping so the
profile normalizer can treat malformed sub-structures as missing data.
"""

from __future__ import annotations

import logging
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field

log = logging.getLogger(__name__)


class MatchProviderBaseModel(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)
    _logged_extra_keys: ClassVar[set[str]] = set()

    def model_post_init(self, _context: object, /) -> None:
        extras = self.__pydantic_extra__
        if not extras:
            return
        new_keys = set(extras).difference(self._logged_extra_keys)
        if not new_keys:
            return
        self._logged_extra_keys.update(new_keys)
        log.debug(
            "Match provider %s: unmodeled keys: %s",
            type(self).__name__,
            ", ".join(sorted(new_keys)),
        )


class MatchEntry(MatchProviderBaseModel):
    profile: dict[str, Any] | None = None
    match_score: float = Field(default=0.0, alias="matchScore")
    match_reasons: list[str] = Field(default_factory=list, alias="matchReasons")


class MatchResponse(MatchProviderBaseModel):
    matches: list[MatchEntry] = Field(default_factory=list)
