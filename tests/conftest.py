from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine  # noqa: TC002

from crmenrich.adapters.sqlalchemy import start_mappers
from crmenrich.adapters.sqlalchemy.mappings import create_all_tables
from crmenrich.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyEnrichmentUnitOfWork,
    shutdown,
    startup,
)
from tests.support.stores import FakeUnitOfWorkFactory

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator
    from pathlib import Path

_CRMENRICH_ENV_VARS = (
    "DATABASE_URI",
    "CRMENRICH_DATABASE_ECHO",
    "CRMENRICH_LOG_LEVEL",
    "CRMENRICH_MAX_CONCURRENCY",
    "CRMENRICH_MATCH_PROVIDER_URL",
    "CRMENRICH_MATCH_PROVIDER_TOKEN",
    "CRMENRICH_MATCH_PROVIDER_TIMEOUT",
    "CRMENRICH_MATCH_PROVIDER_LIMIT",
    "CRMENRICH_MATCH_PROVIDER_CACHE",
)


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("CRMENRICH_DATA_DIR", str(tmp_path / "data"))
    for name in _CRMENRICH_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def sqlite_engine(tmp_path: Path) -> Iterator[Engine]:
    # File-backed so worker threads share one database.
    engine = create_engine(f"sqlite+pysqlite:///{tmp_path / 'crmenrich.db'}")
    start_mappers()
    create_all_tables(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def sqlite_unit_of_work(
    sqlite_engine: Engine,
) -> Iterator[Callable[[], SqlAlchemyEnrichmentUnitOfWork]]:
    startup(engine=sqlite_engine, force=True)

    def factory() -> SqlAlchemyEnrichmentUnitOfWork:
        return SqlAlchemyEnrichmentUnitOfWork()

    try:
        yield factory
    finally:
        shutdown()


@pytest.fixture
def fake_unit_of_work() -> FakeUnitOfWorkFactory:
    return FakeUnitOfWorkFactory()
