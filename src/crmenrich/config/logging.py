"""Root logger setup for processes embedding the enrichment engine."""

from __future__ import annotations

import logging

from .env import optional_env_var
from .errors import ConfigurationError

LOG_LEVEL_ENV_VAR = "CRMENRICH_LOG_LEVEL"

# Per-request chatter from the HTTP stack drowns out batch summaries.
_NOISY_LOGGERS = ("httpx", "httpcore", "hishel")


def resolve_log_level(level: int | str | None = None) -> int:
    """Turn a level name or number into a ``logging`` level.

    ``None`` falls back to ``CRMENRICH_LOG_LEVEL`` and then to INFO.
    """

    if level is None:
        level = optional_env_var(LOG_LEVEL_ENV_VAR) or logging.INFO
    if isinstance(level, int):
        return level
    resolved = logging.getLevelNamesMapping().get(level.strip().upper())
    if resolved is None:
        raise ConfigurationError(f"Unknown log level {level!r}")
    return resolved


def configure_logging(*, level: int | str | None = None, force: bool = False) -> int:
    """Initialise the root logger with a terse service format and return the level used.

    Pass ``force=True`` to reconfigure during tests or specialised entry points.
    """

    resolved = resolve_log_level(level)
    logging.basicConfig(
        level=resolved,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )
    if resolved > logging.DEBUG:
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)
    return resolved
