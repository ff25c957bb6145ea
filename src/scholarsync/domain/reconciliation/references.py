"""Get-or-create resolution of reference terms and major/school association."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from scholarsync.domain.model import ReferenceTerm, Vocabulary

if TYPE_CHECKING:
    from collections.abc import Iterable
    from uuid import UUID

    from scholarsync.domain.ports.persistence import ReferenceTermRepository

log = getLogger(__name__)


class ReferenceResolver:
    """Owns creation of reference terms and of major-to-school associations."""

    def __init__(self, terms: ReferenceTermRepository) -> None:
        self.terms = terms

    def resolve(
        self,
        vocabulary: Vocabulary | str,
        name: str,
        *,
        code: str | None = None,
    ) -> ReferenceTerm:
        """Return the term for a natural key, creating it when it does not exist yet.

        Schools are keyed by banner code; when no code is given the name is used as
        the code.
        """

        vocabulary = Vocabulary(vocabulary)
        if vocabulary is Vocabulary.SCHOOLS and code is None:
            code = name
        candidate = ReferenceTerm(vocabulary=vocabulary, name=name, code=code)

        existing = self.terms.find_one(vocabulary=vocabulary, key=candidate.key)
        if existing is not None:
            return existing

        term = self.terms.add_if_absent(candidate)
        if term.id == candidate.id:
            log.info("Created %s term %s (%s)", vocabulary, name, term.id)
        return term

    def resolve_state(self, state_name: str) -> ReferenceTerm:
        return self.resolve(Vocabulary.LOCATION, state_name)

    def resolve_school(self, banner_code: str) -> ReferenceTerm:
        return self.resolve(Vocabulary.SCHOOLS, banner_code, code=banner_code)

    def resolve_major(self, major_code: str | None, major_name: str) -> ReferenceTerm:
        return self.resolve(Vocabulary.SCHOLARSHIP_MAJOR, major_name, code=major_code)

    def add_school_association(self, major: ReferenceTerm, school_ids: Iterable[UUID]) -> None:
        """Append unseen schools to a major and persist it once if anything changed."""

        added = major.attach_schools(school_ids)
        if not added:
            return
        self.terms.upsert(major)
        log.debug("Associated major %s with schools %s", major.id, added)
