"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, cast

from sqlalchemy import select

from scholarsync.adapters.sqlalchemy.mappings import reference_term_table
from scholarsync.domain.model import ReferenceTerm, Scholarship

if TYPE_CHECKING:
    from collections.abc import Collection, Sequence

    from sqlalchemy.orm import Session

log = getLogger(__name__)


class SqlAlchemyDocumentRepository[TEntity: (Scholarship, ReferenceTerm)]:
    """Equality-filtered lookups over one mapped entity class."""

    def __init__(self, session: Session, entity_cls: type[TEntity]) -> None:
        self.session = session
        self._entity_cls = entity_cls

    def find_one(self, **filters: object) -> TEntity | None:
        stmt = select(self._entity_cls).filter_by(**filters).limit(1)
        return self.session.execute(stmt).scalars().first()

    def query(self, **filters: object) -> Sequence[TEntity]:
        stmt = select(self._entity_cls).filter_by(**filters)
        return self.session.execute(stmt).scalars().all()

    def upsert(self, entity: TEntity) -> None:
        self.session.add(entity)


class SqlAlchemyScholarshipRepository(SqlAlchemyDocumentRepository[Scholarship]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, Scholarship)

    def published_outside(self, api_hashes: Collection[str]) -> Sequence[Scholarship]:
        known = set(api_hashes)
        return [
            scholarship
            for scholarship in self.query(published=True)
            if scholarship.api_hash not in known
        ]


class SqlAlchemyReferenceTermRepository(SqlAlchemyDocumentRepository[ReferenceTerm]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, ReferenceTerm)

    def add_if_absent(self, term: ReferenceTerm) -> ReferenceTerm:
        stmt = (
            reference_term_table.insert()
            .prefix_with("OR IGNORE")
            .values(
                id=term.id,
                vocabulary=term.vocabulary,
                key=term.key,
                name=term.name,
                code=term.code,
                school_ids=term.school_ids,
            )
        )
        self.session.execute(stmt)
        stored = self.find_one(vocabulary=term.vocabulary, key=term.key)
        if stored is None:
            msg = f"Reference term {term.vocabulary}:{term.key} vanished after insert"
            raise LookupError(msg)
        if stored.id != term.id:
            log.debug("Reference term %s:%s already stored", term.vocabulary, term.key)
        return stored


if TYPE_CHECKING:
    from scholarsync.domain.ports.persistence import (
        ReferenceTermRepository,
        ScholarshipRepository,
    )

    _session_stub = cast("Session", object())
    _scholarship_repo: ScholarshipRepository = SqlAlchemyScholarshipRepository(_session_stub)
    _term_repo: ReferenceTermRepository = SqlAlchemyReferenceTermRepository(_session_stub)
