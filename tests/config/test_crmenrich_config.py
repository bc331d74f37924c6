from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

import pytest

from crmenrich.config import (
    LOG_LEVEL_ENV_VAR,
    ConfigurationError,
    MissingConfigurationError,
    configure_logging,
    get_database_config,
    get_enrichment_config,
    get_match_provider_config,
    get_storage_config,
    require_env_vars,
    resolve_log_level,
)


def test_require_env_vars_returns_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "value")

    result = require_env_vars(["EXAMPLE_VAR"])

    assert result["EXAMPLE_VAR"] == "value"


def test_require_env_vars_raises_for_missing_and_blank(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("MISSING_VAR", raising=False)
    monkeypatch.setenv("BLANK_VAR", "   ")

    with pytest.raises(MissingConfigurationError) as exc:
        require_env_vars(["MISSING_VAR", "BLANK_VAR"])

    assert "BLANK_VAR, MISSING_VAR" in str(exc.value)


def test_storage_config_respects_data_dir(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("CRMENRICH_DATA_DIR", str(tmp_path / "store"))

    config = get_storage_config()

    assert config.resolve_data_dir() == (tmp_path / "store").resolve()
    assert config.database_path().name == "crmenrich.db"
    assert (tmp_path / "store").is_dir()


def test_database_uri_override(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URI", "postgresql+psycopg://crm@db/crm")

    assert get_database_config().uri == "postgresql+psycopg://crm@db/crm"


def test_database_uri_defaults_to_sqlite_in_data_dir() -> None:
    uri = get_database_config().uri

    assert uri.startswith("sqlite+pysqlite:///")
    assert uri.endswith("crmenrich.db")


def test_max_concurrency_defaults_and_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    assert get_enrichment_config().max_concurrency == 4

    monkeypatch.setenv("CRMENRICH_MAX_CONCURRENCY", "12")
    assert get_enrichment_config().max_concurrency == 12


@pytest.mark.parametrize("raw", ["zero", "0", "-3"])
def test_invalid_max_concurrency_is_rejected(monkeypatch: pytest.MonkeyPatch, raw: str) -> None:
    monkeypatch.setenv("CRMENRICH_MAX_CONCURRENCY", raw)

    with pytest.raises(ConfigurationError):
        get_enrichment_config()


def test_match_provider_requires_url() -> None:
    with pytest.raises(MissingConfigurationError, match="CRMENRICH_MATCH_PROVIDER_URL"):
        get_match_provider_config()


def test_match_provider_config_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CRMENRICH_MATCH_PROVIDER_URL", "https://people.example/api/")
    monkeypatch.setenv("CRMENRICH_MATCH_PROVIDER_TOKEN", " token ")

    config = get_match_provider_config()

    resilience = config.resilience
    assert resilience.base_url == "https://people.example/api"
    assert resilience.default_headers is not None
    assert resilience.default_headers["X-Api-Key"] == "token"
    assert resilience.ratelimit is not None
    assert resilience.cache is not None
    assert resilience.cache.backend == "memory"


def test_match_provider_token_is_optional(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CRMENRICH_MATCH_PROVIDER_URL", "https://people.example/api")

    config = get_match_provider_config()

    assert config.resilience.default_headers is not None
    assert "X-Api-Key" not in config.resilience.default_headers


@pytest.fixture
def restore_root_logger() -> Iterator[None]:
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    httpx_level = logging.getLogger("httpx").level
    try:
        yield
    finally:
        root.handlers[:] = handlers
        root.setLevel(level)
        logging.getLogger("httpx").setLevel(httpx_level)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("debug", logging.DEBUG),
        (" Warning ", logging.WARNING),
        (logging.ERROR, logging.ERROR),
    ],
)
def test_resolve_log_level_accepts_names_and_numbers(raw: int | str, expected: int) -> None:
    assert resolve_log_level(raw) == expected


def test_resolve_log_level_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    assert resolve_log_level() == logging.INFO

    monkeypatch.setenv(LOG_LEVEL_ENV_VAR, "warning")

    assert resolve_log_level() == logging.WARNING


def test_resolve_log_level_rejects_unknown_names() -> None:
    with pytest.raises(ConfigurationError, match="verbose"):
        resolve_log_level("verbose")


@pytest.mark.usefixtures("restore_root_logger")
def test_configure_logging_quiets_http_loggers() -> None:
    level = configure_logging(level="info", force=True)

    assert level == logging.INFO
    assert logging.getLogger().level == logging.INFO
    assert logging.getLogger("httpx").level == logging.WARNING


def test_database_echo_flag(monkeypatch: pytest.MonkeyPatch) -> None:
    assert get_database_config().echo is False

    monkeypatch.setenv("CRMENRICH_DATABASE_ECHO", "yes")
    assert get_database_config().echo is True

    monkeypatch.setenv("CRMENRICH_DATABASE_ECHO", "sometimes")
    with pytest.raises(ConfigurationError, match="CRMENRICH_DATABASE_ECHO"):
        get_database_config()


def test_missing_configuration_lists_names() -> None:
    with pytest.raises(MissingConfigurationError) as exc:
        require_env_vars(["ZETA_VAR", "ALPHA_VAR"])

    assert exc.value.names == ["ALPHA_VAR", "ZETA_VAR"]


def test_match_provider_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CRMENRICH_MATCH_PROVIDER_URL", "https://people.example/api")
    monkeypatch.setenv("CRMENRICH_MATCH_PROVIDER_TIMEOUT", "2.5")
    monkeypatch.setenv("CRMENRICH_MATCH_PROVIDER_LIMIT", "3")
    monkeypatch.setenv("CRMENRICH_MATCH_PROVIDER_CACHE", "off")

    config = get_match_provider_config()

    assert config.limit == 3
    assert config.resilience.timeout_seconds == 2.5
    assert config.resilience.cache is None


@pytest.mark.parametrize(
    ("name", "value"),
    [
        ("CRMENRICH_MATCH_PROVIDER_TIMEOUT", "-1"),
        ("CRMENRICH_MATCH_PROVIDER_CACHE", "redis"),
    ],
)
def test_invalid_match_provider_overrides_are_rejected(
    monkeypatch: pytest.MonkeyPatch,
    name: str,
    value: str,
) -> None:
    monkeypatch.setenv("CRMENRICH_MATCH_PROVIDER_URL", "https://people.example/api")
    monkeypatch.setenv(name, value)

    with pytest.raises(ConfigurationError, match=name):
        get_match_provider_config()
