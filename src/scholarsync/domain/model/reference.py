"""Reusable reference terms (home state, school, major)."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from scholarsync.domain.model.entity import Entity
from scholarsync.domain.model.enums import Vocabulary

if TYPE_CHECKING:
    from collections.abc import Iterable
    from uuid import UUID


def natural_key(vocabulary: Vocabulary, *, name: str, code: str | None = None) -> str:
    """Serialise the natural key that identifies a term within its vocabulary.

    Locations are keyed by their full name, schools by banner code, and majors by
    the ``(major code, major name)`` pair.
    """

    match vocabulary:
        case Vocabulary.LOCATION:
            parts: tuple[str | None, ...] = (name,)
        case Vocabulary.SCHOOLS:
            if not code:
                raise ValueError("School terms require a banner code")
            parts = (code,)
        case Vocabulary.SCHOLARSHIP_MAJOR:
            parts = (code, name)
    return json.dumps(parts, separators=(",", ":"))


@dataclass(eq=False, kw_only=True)
class ReferenceTerm(Entity):
    vocabulary: Vocabulary
    name: str
    code: str | None = None
    # major -> school association; append-only, only used by major terms
    school_ids: list[UUID] = field(default_factory=list["UUID"])
    key: str = field(init=False)

    def __post_init__(self) -> None:
        self.key = natural_key(self.vocabulary, name=self.name, code=self.code)

    def attach_schools(self, school_ids: Iterable[UUID]) -> list[UUID]:
        """Append unseen school ids and return the ones that were added."""

        added: list[UUID] = []
        for school_id in school_ids:
            if school_id not in self.school_ids and school_id not in added:
                added.append(school_id)
        if added:
            self.school_ids = [*self.school_ids, *added]
        return added
