"""SQLAlchemy-backed unit of work for contact enrichment."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from crmenrich.adapters.sqlalchemy.mappings import create_all_tables, start_mappers
from crmenrich.adapters.sqlalchemy.repositories import (
    SqlAlchemyCompanyStore,
    SqlAlchemyContactStore,
    SqlAlchemyProfileStore,
)
from crmenrich.config import get_database_config
from crmenrich.domain.ports.persistence import StoreError
from crmenrich.domain.ports.unit_of_work import EnrichmentRepositories

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)


class StartupError(RuntimeError):
    """Raised when the adapter is used before ``startup()`` or started twice."""


@dataclass(slots=True)
class _AdapterState:
    engine: Engine | None = None
    session_factory: sessionmaker[Session] | None = None

    def require_session_factory(self) -> sessionmaker[Session]:
        if self.session_factory is None:
            raise StartupError(
                "SQLAlchemy adapter not initialised. Call startup() before "
                "requesting an enrichment unit of work."
            )
        return self.session_factory


_STATE = _AdapterState()


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> Engine:
    """Bind the adapter to ``engine`` (or a new one) and create missing tables."""

    if _STATE.engine is not None and not force:
        raise StartupError("SQLAlchemy adapter already initialised. Pass force=True to rebind.")

    if engine is None:
        config = get_database_config()
        engine = create_engine(database_uri or config.uri, echo=config.echo)
    start_mappers()
    create_all_tables(engine)

    previous = _STATE.engine
    _STATE.engine = engine
    # Sessions outlive commit() in callers that return the updated contact.
    _STATE.session_factory = sessionmaker(bind=engine, expire_on_commit=False)
    if previous is not None and previous is not engine:
        previous.dispose()
    log.info("Enrichment store bound to %s", engine.url.render_as_string(hide_password=True))
    return engine


def configured_engine() -> Engine | None:
    return _STATE.engine


def is_started() -> bool:
    return _STATE.engine is not None


def shutdown() -> None:
    """Dispose the bound engine; a later ``startup()`` may bind a new one."""

    if _STATE.engine is not None:
        _STATE.engine.dispose()
    _STATE.engine = None
    _STATE.session_factory = None


class SqlAlchemyEnrichmentUnitOfWork:
    """One SQLAlchemy session per enrichment request.

    The session factory is captured at construction, so a unit of work keeps
    working against the engine it was created for even if the adapter is
    rebound afterwards.
    """

    def __init__(self) -> None:
        self._session_factory = _STATE.require_session_factory()
        self._session: Session | None = None
        self._repositories: EnrichmentRepositories | None = None

    def __enter__(self) -> SqlAlchemyEnrichmentUnitOfWork:
        if self._session is not None:
            raise StartupError("Unit of work session already open")
        session = self._session_factory()
        self._session = session
        self._repositories = EnrichmentRepositories(
            contacts=SqlAlchemyContactStore(session),
            companies=SqlAlchemyCompanyStore(session),
            profiles=SqlAlchemyProfileStore(session),
        )
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        try:
            if exc_type is not None:
                self.rollback()
        finally:
            self.session.close()
            self._session = None
            self._repositories = None
        return False

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work session not open")
        return self._session

    @property
    def repositories(self) -> EnrichmentRepositories:
        if self._repositories is None:
            raise StartupError("Unit of work session not open")
        return self._repositories

    def commit(self) -> None:
        try:
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise StoreError(f"Commit failed: {exc}") from exc

    def rollback(self) -> None:
        self.session.rollback()


if TYPE_CHECKING:
    from crmenrich.domain.ports.unit_of_work import EnrichmentUnitOfWork

    _uow_check: EnrichmentUnitOfWork = SqlAlchemyEnrichmentUnitOfWork()
