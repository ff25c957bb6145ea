"""SQLAlchemy-backed unit of work for scholarship imports."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Literal

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from scholarsync.adapters.sqlalchemy.mappings import create_all_tables, start_mappers
from scholarsync.adapters.sqlalchemy.queue import SqlAlchemyWorkQueue
from scholarsync.adapters.sqlalchemy.repositories import (
    SqlAlchemyReferenceTermRepository,
    SqlAlchemyScholarshipRepository,
)
from scholarsync.config import ARCHIVE_QUEUE, IMPORT_QUEUE, get_database_uri
from scholarsync.domain.ports.unit_of_work import ScholarshipRepositories

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Engine

log = getLogger(__name__)


class StartupError(RuntimeError):
    """Raised when a SQLAlchemy unit of work is used before initialisation."""


@dataclass(slots=True)
class _AdapterState:
    _engine: Engine | None = None
    _session_factory: sessionmaker[Session] | None = None

    @property
    def engine(self) -> Engine | None:
        return self._engine

    @engine.setter
    def engine(self, value: Engine | None) -> None:
        self._session_factory = None
        self._engine = value

    @property
    def session_factory(self) -> sessionmaker[Session]:
        if self._engine is None:
            raise StartupError(
                "SQLAlchemy adapter not initialised. Call scholarsync.adapters.sqlalchemy."
                "unit_of_work.startup() before requesting a unit of work."
            )
        if self._session_factory is None:
            self._session_factory = sessionmaker(bind=self._engine, expire_on_commit=False)
        return self._session_factory


_STATE = _AdapterState()


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> None:
    """Initialise the SQLAlchemy engine, schema, and session factory."""

    if _STATE.engine is not None and not force:
        raise StartupError(
            "SQLAlchemy adapter already initialised. Pass force=True to reconfigure."
        )

    resolved_engine = engine or create_engine(database_uri or get_database_uri())
    start_mappers()
    create_all_tables(resolved_engine)
    log.debug("SQLAlchemy adapter started on %s", resolved_engine.url)

    _STATE.engine = resolved_engine


def configured_engine() -> Engine | None:
    """Return the engine currently managed by the adapter (if any)."""

    return _STATE.engine


def is_started() -> bool:
    return _STATE.engine is not None


def shutdown() -> None:
    """Dispose the managed engine and reset state (primarily for tests)."""

    if _STATE.engine is not None:
        _STATE.engine.dispose()
    _STATE.engine = None


class SqlAlchemyScholarshipUnitOfWork:
    """One session and transaction over scholarships, reference terms and both work queues.

    Leaving the block without committing discards the work; an exception rolls back
    explicitly before the session is closed.
    """

    def __init__(self) -> None:
        self.session_factory: sessionmaker[Session] = _STATE.session_factory
        self._session: Session | None = None
        self._repositories: ScholarshipRepositories | None = None

    def __enter__(self) -> SqlAlchemyScholarshipUnitOfWork:
        if self._session is not None:
            raise StartupError("Unit of work session already initialised")
        session = self.session_factory()
        self._session = session
        self._repositories = ScholarshipRepositories(
            scholarships=SqlAlchemyScholarshipRepository(session),
            terms=SqlAlchemyReferenceTermRepository(session),
            import_queue=SqlAlchemyWorkQueue(session, IMPORT_QUEUE),
            archive_queue=SqlAlchemyWorkQueue(session, ARCHIVE_QUEUE),
        )
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        session = self.session
        if exc_type is not None:
            session.rollback()
        session.close()
        self._session = None
        self._repositories = None
        return False

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work session not initialised")
        return self._session

    @property
    def repositories(self) -> ScholarshipRepositories:
        if self._repositories is None:
            raise StartupError("Unit of work session not initialised")
        return self._repositories

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


if TYPE_CHECKING:
    from scholarsync.domain.ports.unit_of_work import ScholarshipUnitOfWork

    _uow_check: ScholarshipUnitOfWork = SqlAlchemyScholarshipUnitOfWork()
