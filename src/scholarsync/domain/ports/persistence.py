"""Ports for persisting domain aggregates."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from scholarsync.domain.model import ReferenceTerm, Scholarship

if TYPE_CHECKING:
    from collections.abc import Collection, Sequence


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal document-store contract: filters are equality matches on stored fields."""

    def find_one(self, **filters: object) -> TEntity | None: ...

    def query(self, **filters: object) -> Sequence[TEntity]: ...

    def upsert(self, entity: TEntity) -> None: ...


@runtime_checkable
class ScholarshipRepository(Repository[Scholarship], Protocol):
    """Persistence contract for scholarships."""

    def published_outside(self, api_hashes: Collection[str]) -> Sequence[Scholarship]: ...


@runtime_checkable
class ReferenceTermRepository(Repository[ReferenceTerm], Protocol):
    """Persistence contract for reference terms.

    ``add_if_absent`` must be safe under concurrent writers: when another writer
    already stored a term with the same vocabulary and natural key, the stored
    term is returned and ``term`` is discarded.
    """

    def add_if_absent(self, term: ReferenceTerm) -> ReferenceTerm: ...
