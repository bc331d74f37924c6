"""SQLAlchemy mapping metadata for the CRM enrichment model."""

from __future__ import annotations

import logging
import uuid
from functools import cache
from typing import TYPE_CHECKING

from sqlalchemy import JSON, Column, ForeignKey, String, Table, Uuid, orm
from sqlalchemy.orm import configure_mappers

from crmenrich.domain.model import Company, Contact, EpsProfile

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

company_table = Table(
    "company",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("name", String, nullable=False),
    Column("industry", String, nullable=True),
    Column("normalized_name", String, nullable=False, unique=True),
)

contact_table = Table(
    "contact",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("first_name", String, nullable=False),
    Column("last_name", String, nullable=False),
    Column("email", String, nullable=True),
    Column("phone", String, nullable=True),
    Column("job_title", String, nullable=True),
    Column("linkedin_url", String, nullable=True),
    Column("twitter_handle", String, nullable=True),
    Column(
        "company_id",
        UUIDColumnType,
        ForeignKey("company.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    ),
    Column("custom_fields", JSON, nullable=False, default=dict),
)

eps_profile_table = Table(
    "eps_profile",
    mapper_registry.metadata,
    Column("id", String, primary_key=True),
    Column("document", JSON, nullable=False, default=dict),
)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(Company, company_table)
    mapper_registry.map_imperatively(Contact, contact_table)
    mapper_registry.map_imperatively(EpsProfile, eps_profile_table)

    configure_mappers()
    return mapper_registry


def create_all_tables(engine: Engine) -> None:
    """Create database tables for the mapped metadata."""

    log.info("Creating all tables")
    mapper_registry.metadata.create_all(engine)
