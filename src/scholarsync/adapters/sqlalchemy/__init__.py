"""SQLAlchemy adapter package for scholarsync."""

from __future__ import annotations

from .mappings import create_all_tables, mapper_registry, start_mappers
from .queue import SqlAlchemyWorkQueue
from .repositories import SqlAlchemyReferenceTermRepository, SqlAlchemyScholarshipRepository
from .unit_of_work import (
    SqlAlchemyScholarshipUnitOfWork,
    StartupError,
    is_started,
    shutdown,
    startup,
)

__all__ = [
    "SqlAlchemyReferenceTermRepository",
    "SqlAlchemyScholarshipRepository",
    "SqlAlchemyScholarshipUnitOfWork",
    "SqlAlchemyWorkQueue",
    "StartupError",
    "create_all_tables",
    "is_started",
    "mapper_registry",
    "shutdown",
    "start_mappers",
    "startup",
]
