"""SQLAlchemy mapping metadata for the scholarsync domain model."""

from __future__ import annotations

import json
import logging
import uuid
from functools import cache
from typing import TYPE_CHECKING, Any, cast

from sqlalchemy import (
    Boolean,
    Column,
    Dialect,
    Enum,
    Float,
    Index,
    Integer,
    String,
    Table,
    Text,
    TypeDecorator,
    UniqueConstraint,
    Uuid,
    orm,
)
from sqlalchemy.orm import configure_mappers

from scholarsync.domain.model import ModerationState, ReferenceTerm, Scholarship, Vocabulary

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]


class StringListType(TypeDecorator[list[str]]):
    """Ordered list of strings stored as a JSON array."""

    impl = Text
    cache_ok = True

    def process_bind_param(self, value: list[str] | None, dialect: Dialect) -> str | None:
        _ = dialect
        if value is None:
            return None
        return json.dumps([str(item) for item in value])

    def process_result_value(self, value: str | None, dialect: Dialect) -> list[str]:
        _ = dialect
        if value is None:
            return []
        loaded = json.loads(value)
        if not isinstance(loaded, list):
            return []
        return [str(item) for item in cast(list[Any], loaded)]


class UUIDListType(TypeDecorator[list[uuid.UUID]]):
    """Ordered list of entity ids stored as a JSON array of strings."""

    impl = Text
    cache_ok = True

    def process_bind_param(self, value: list[uuid.UUID] | None, dialect: Dialect) -> str | None:
        _ = dialect
        if value is None:
            return None
        return json.dumps([str(item) for item in value])

    def process_result_value(self, value: str | None, dialect: Dialect) -> list[uuid.UUID]:
        _ = dialect
        if value is None:
            return []
        loaded = json.loads(value)
        if not isinstance(loaded, list):
            return []
        return [uuid.UUID(str(item)) for item in cast(list[Any], loaded)]


class JSONPayloadType(TypeDecorator[Any]):
    """Arbitrary JSON document stored as text."""

    impl = Text
    cache_ok = True

    def process_bind_param(self, value: Any, dialect: Dialect) -> str | None:
        _ = dialect
        if value is None:
            return None
        return json.dumps(value, ensure_ascii=False)

    def process_result_value(self, value: str | None, dialect: Dialect) -> Any:
        _ = dialect
        if value is None:
            return None
        return json.loads(value)


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

scholarship_table = Table(
    "scholarship",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("code", String, nullable=False),
    Column("title", String, nullable=False, default=""),
    Column("api_hash", String(64), nullable=True),
    Column("last_update", Integer, nullable=True),
    Column("import_stamp", Integer, nullable=True),
    Column("description", Text, nullable=True),
    Column("class_levels", StringListType, nullable=False, default=list),
    Column("kind", String, nullable=True),
    Column("minimum_gpa", Float, nullable=True),
    Column("minimum_age", Integer, nullable=True),
    Column("race_codes", StringListType, nullable=False, default=list),
    Column("international", StringListType, nullable=False, default=list),
    Column("population", StringListType, nullable=False, default=list),
    Column("home_state_ids", UUIDListType, nullable=False, default=list),
    Column("school_ids", UUIDListType, nullable=False, default=list),
    Column("major_ids", UUIDListType, nullable=False, default=list),
    Column("published", Boolean, nullable=False, default=False),
    Column(
        "moderation_state",
        Enum(ModerationState, native_enum=False, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=ModerationState.DRAFT,
    ),
    UniqueConstraint("code", "api_hash"),
    Index("ix_scholarship_code", "code"),
    Index("ix_scholarship_published_api_hash", "published", "api_hash"),
)

reference_term_table = Table(
    "reference_term",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column(
        "vocabulary",
        Enum(Vocabulary, native_enum=False, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    ),
    Column("key", String, nullable=False),
    Column("name", String, nullable=False),
    Column("code", String, nullable=True),
    Column("school_ids", UUIDListType, nullable=False, default=list),
    UniqueConstraint("vocabulary", "key"),
)

queue_item_table = Table(
    "queue_item",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String, nullable=False),
    Column("payload", JSONPayloadType, nullable=False),
    Column("created", Float, nullable=False),
    # 0 means unclaimed, otherwise the epoch second the lease runs out
    Column("expire", Float, nullable=False, default=0.0),
    Index("ix_queue_item_name_expire", "name", "expire"),
)


@cache
def start_mappers() -> orm.registry:
    """Configure imperative mappings between domain entities and tables."""

    mapper_registry.map_imperatively(Scholarship, scholarship_table)
    mapper_registry.map_imperatively(ReferenceTerm, reference_term_table)

    configure_mappers()
    return mapper_registry


def create_all_tables(engine: Engine) -> None:
    """Create database tables for the mapped metadata."""

    log.info("Creating all tables")
    mapper_registry.metadata.create_all(engine)
