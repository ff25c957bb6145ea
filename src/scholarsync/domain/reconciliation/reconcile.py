"""Decide whether an incoming scholarship is new, changed or unchanged, and map it."""

from __future__ import annotations

import html
import time
from collections.abc import Mapping
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from scholarsync.domain.model import (
    ImportOutcome,
    MajorPayload,
    RawScholarship,
    Scholarship,
    ensure_raw_scholarship,
)
from scholarsync.domain.ports.locking import NullEditLock

from .fingerprint import fingerprint
from .mapping import (
    INTERNATIONAL_YES,
    class_levels_for,
    home_state_names,
    needs_update,
    normalize_college_code,
    parse_timestamp,
    population_for,
)

if TYPE_CHECKING:
    from collections.abc import Callable
    from uuid import UUID

    from scholarsync.domain.ports.fetching import RawRecord
    from scholarsync.domain.ports.locking import EditLock
    from scholarsync.domain.ports.persistence import ScholarshipRepository

    from .references import ReferenceResolver

log = getLogger(__name__)


class InvalidScholarshipError(ValueError):
    """Raised when a record without a code or name reaches the reconciler."""


def _has_text(value: object) -> bool:
    if isinstance(value, int) and not isinstance(value, bool):
        return value != 0
    return isinstance(value, str) and bool(value.strip())


def is_importable(record: object) -> bool:
    """Return whether a raw record carries the non-blank code and name needed to import it."""

    if not isinstance(record, Mapping):
        return False
    fields: Mapping[str, object] = record  # pyright: ignore[reportUnknownVariableType]
    return _has_text(fields.get("code")) and _has_text(fields.get("name"))


@dataclass(slots=True, frozen=True)
class ReconcileResult:
    outcome: ImportOutcome
    scholarship: Scholarship


class ScholarshipReconciler:
    """Turn one raw record into a create, an update, or a skip of a stored scholarship."""

    def __init__(
        self,
        scholarships: ScholarshipRepository,
        resolver: ReferenceResolver,
        *,
        edit_lock: EditLock | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.scholarships = scholarships
        self.resolver = resolver
        self.edit_lock = edit_lock or NullEditLock()
        self.clock = clock

    def reconcile(self, record: RawRecord) -> ReconcileResult:
        if not is_importable(record):
            raise InvalidScholarshipError("Scholarship records require a code and a name")

        payload = ensure_raw_scholarship(record)
        api_hash = fingerprint(record)
        incoming_last_update = parse_timestamp(payload.last_updated)

        is_new = False
        scholarship = self.scholarships.find_one(code=payload.code, api_hash=api_hash)
        if scholarship is not None:
            # same content: rewrite only when unpublished or its stamps were cleared
            if scholarship.published and scholarship.import_stamp is not None:
                log.info(
                    "Skipped scholarship %s (code %s): already imported and nothing changed",
                    scholarship.id,
                    payload.code,
                )
                return ReconcileResult(outcome=ImportOutcome.SKIPPED, scholarship=scholarship)
        else:
            # content changed since the last import: fall back to the durable identity
            scholarship = self._latest_for_code(payload.code)
            if scholarship is None:
                scholarship = Scholarship(code=payload.code, title=html.unescape(payload.name))
                is_new = True
            elif not needs_update(scholarship.last_update, incoming_last_update):
                log.warning(
                    "Scholarship %s (code %s) changed but its lastUpdated did not advance",
                    scholarship.id,
                    payload.code,
                )

        if not is_new:
            self.edit_lock.release(scholarship.id)

        self._apply(
            scholarship,
            payload,
            api_hash=api_hash,
            last_update=incoming_last_update,
        )
        scholarship.publish()
        self.scholarships.upsert(scholarship)

        outcome = ImportOutcome.CREATED if is_new else ImportOutcome.UPDATED
        log.info("Imported scholarship %s (code %s): %s", scholarship.id, payload.code, outcome)
        return ReconcileResult(outcome=outcome, scholarship=scholarship)

    def _latest_for_code(self, code: str) -> Scholarship | None:
        candidates = self.scholarships.query(code=code)
        if not candidates:
            return None
        return max(candidates, key=lambda item: item.last_update or 0)

    def _apply(
        self,
        scholarship: Scholarship,
        payload: RawScholarship,
        *,
        api_hash: str,
        last_update: int | None,
    ) -> None:
        scholarship.import_stamp = int(self.clock())
        scholarship.last_update = last_update
        scholarship.api_hash = api_hash
        scholarship.title = html.unescape(payload.name)
        scholarship.code = payload.code

        # every mapped field is rewritten so nothing from an earlier payload survives
        scholarship.description = payload.description or None
        scholarship.class_levels = class_levels_for(payload.levels)
        merit = payload.merit[0] if payload.merit else None
        scholarship.kind = merit.merit_type.lower() if merit and merit.merit_type else None
        scholarship.minimum_gpa = merit.minimum_gpa if merit else None
        scholarship.minimum_age = payload.minimum_age
        scholarship.race_codes = [race_code.id for race_code in payload.race_codes]
        scholarship.international = [INTERNATIONAL_YES] if payload.international else []
        scholarship.population = population_for(payload)

        states = home_state_names(payload.states)
        scholarship.home_state_ids = [
            self.resolver.resolve_state(name).id for name in states.values()
        ]

        schools_by_code: dict[str, UUID] = {}
        for college in payload.colleges:
            if not college.college_code:
                continue
            code = normalize_college_code(college.college_code)
            schools_by_code[code] = self.resolver.resolve_school(code).id
        scholarship.school_ids = list(schools_by_code.values())

        major_ids: list[UUID] = []
        for major in payload.majors:
            major_name = major.major or major.major_code
            if not major_name:
                log.warning(
                    "Ignoring a major without code or name on scholarship %s", payload.code
                )
                continue
            term = self.resolver.resolve_major(major.major_code, major_name)
            if term.id not in major_ids:
                major_ids.append(term.id)
            targets = _school_targets(major, schools_by_code)
            if targets:
                self.resolver.add_school_association(term, targets)
        scholarship.major_ids = major_ids


def _school_targets(major: MajorPayload, schools_by_code: dict[str, UUID]) -> list[UUID]:
    """Pick the school(s) a major belongs to within one scholarship.

    A single school on the scholarship claims every major. With several schools the
    major's own college code decides; anything else is ambiguous and yields nothing.
    """

    if len(schools_by_code) == 1:
        return list(schools_by_code.values())
    if len(schools_by_code) > 1 and major.college_code:
        school_id = schools_by_code.get(normalize_college_code(major.college_code))
        if school_id is not None:
            return [school_id]
    return []
