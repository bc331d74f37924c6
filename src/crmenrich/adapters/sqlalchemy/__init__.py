"""SQLAlchemy adapter package for crmenrich."""

from __future__ import annotations

from .mappings import create_all_tables, mapper_registry, start_mappers
from .repositories import SqlAlchemyCompanyStore, SqlAlchemyContactStore, SqlAlchemyProfileStore
from .unit_of_work import (
    SqlAlchemyEnrichmentUnitOfWork,
    StartupError,
    configured_engine,
    is_started,
    shutdown,
    startup,
)

__all__ = [
    "SqlAlchemyCompanyStore",
    "SqlAlchemyContactStore",
    "SqlAlchemyEnrichmentUnitOfWork",
    "SqlAlchemyProfileStore",
    "StartupError",
    "configured_engine",
    "create_all_tables",
    "is_started",
    "mapper_registry",
    "shutdown",
    "start_mappers",
    "startup",
]
