"""Deactivate stored scholarships that the latest import batch no longer contains."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from scholarsync.domain.ports.locking import NullEditLock

if TYPE_CHECKING:
    from collections.abc import Collection

    from scholarsync.domain.ports.locking import EditLock
    from scholarsync.domain.ports.persistence import ScholarshipRepository

log = getLogger(__name__)

DEFAULT_MIN_BATCH_SIZE = 10
BATCH_TOO_SMALL = "batch too small to trust for archival"


@dataclass(slots=True, frozen=True)
class ArchiveReport:
    archived_count: int = 0
    skipped_reason: str | None = None


class ScholarshipArchiver:
    """Archive published scholarships whose fingerprint is absent from an import batch.

    Archival only touches ``published`` and ``moderation_state``; field content is
    left as it was.
    """

    def __init__(
        self,
        scholarships: ScholarshipRepository,
        *,
        edit_lock: EditLock | None = None,
    ) -> None:
        self.scholarships = scholarships
        self.edit_lock = edit_lock or NullEditLock()

    def archive(
        self,
        imported_fingerprints: Collection[str],
        *,
        min_batch_size: int = DEFAULT_MIN_BATCH_SIZE,
    ) -> ArchiveReport:
        fingerprints = set(imported_fingerprints)
        if len(fingerprints) <= min_batch_size:
            # a degraded or partial fetch must not wipe the catalogue
            log.info(
                "Archive skipped: only %s scholarships were imported (minimum is more than %s)",
                len(fingerprints),
                min_batch_size,
            )
            return ArchiveReport(skipped_reason=BATCH_TOO_SMALL)

        stale = self.scholarships.published_outside(fingerprints)
        if not stale:
            log.info("Archive finished: no scholarships to archive")
            return ArchiveReport()

        for scholarship in stale:
            self.edit_lock.release(scholarship.id)
            scholarship.archive()
            self.scholarships.upsert(scholarship)
            log.info("Archived scholarship %s (%s)", scholarship.id, scholarship.title)

        log.info("Archive finished: archived=%s", len(stale))
        return ArchiveReport(archived_count=len(stale))
