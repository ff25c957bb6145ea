"""Application services for queueing, importing and archiving scholarships."""

from __future__ import annotations

import json
import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from pydantic import ValidationError

from scholarsync.domain.model import ImportOutcome
from scholarsync.domain.reconciliation import (
    DEFAULT_MIN_BATCH_SIZE,
    InvalidScholarshipError,
    ReferenceResolver,
    ScholarshipArchiver,
    ScholarshipReconciler,
    fingerprint,
    is_importable,
)

DEFAULT_LEASE_SECONDS = 300.0

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from scholarsync.domain.ports.fetching import RawRecord, ScholarshipFetcher
    from scholarsync.domain.ports.locking import EditLock
    from scholarsync.domain.ports.queue import QueueItem, WorkQueue
    from scholarsync.domain.ports.unit_of_work import (
        ScholarshipRepositories,
        ScholarshipUnitOfWork,
    )

    UnitOfWorkFactory = Callable[[], ScholarshipUnitOfWork]

log = getLogger(__name__)


@dataclass(slots=True)
class EnqueueResult:
    """Outcome of handing one batch of raw records to the import queue."""

    received: int = 0
    enqueued: int = 0
    fingerprints: list[str] = field(default_factory=list[str])
    archive_item_id: int | None = None


@dataclass(slots=True)
class ProcessResult:
    """Outcome of draining the import and archive queues."""

    created: int = 0
    updated: int = 0
    skipped: int = 0
    invalid: int = 0
    failed: int = 0
    archived: int = 0
    archive_batches: int = 0
    archive_skipped_reason: str | None = None
    archive_deferred: bool = False

    def count(self, outcome: ImportOutcome) -> None:
        match outcome:
            case ImportOutcome.CREATED:
                self.created += 1
            case ImportOutcome.UPDATED:
                self.updated += 1
            case ImportOutcome.SKIPPED:
                self.skipped += 1


def parse_manual_json(text: str) -> list[RawRecord]:
    """Return the importable records of operator-supplied JSON.

    A JSON array yields its valid items; a single object yields itself when it is
    valid. Malformed JSON yields nothing.
    """

    try:
        data: object = json.loads(text)
    except json.JSONDecodeError as exc:
        log.warning("Manual import JSON could not be parsed: %s", exc)
        return []

    if isinstance(data, Mapping):
        return [data] if is_importable(data) else []  # pyright: ignore[reportUnknownVariableType]
    if isinstance(data, list):
        items: list[object] = list(data)  # pyright: ignore[reportUnknownArgumentType]
        return [item for item in items if is_importable(item)]  # pyright: ignore[reportReturnType]
    return []


def enqueue_scholarships(
    records: Iterable[object],
    queue: WorkQueue,
    archive_queue: WorkQueue | None = None,
) -> EnqueueResult:
    """Put every valid record on ``queue`` and the batch's fingerprints on ``archive_queue``.

    Records without a code or name are dropped here and never reach the queue. An
    empty batch enqueues nothing, not even an archive batch.
    """

    received = list(records)
    valid: list[RawRecord] = [
        record  # pyright: ignore[reportAssignmentType]
        for record in received
        if is_importable(record)
    ]
    fingerprints = list(dict.fromkeys(fingerprint(record) for record in valid))
    result = EnqueueResult(received=len(received), fingerprints=fingerprints)
    if not received:
        return result

    for record in valid:
        queue.put(dict(record))
    result.enqueued = len(valid)
    if archive_queue is not None:
        result.archive_item_id = archive_queue.put(fingerprints)
    return result


def queue_scholarships(
    records: Iterable[object],
    *,
    unit_of_work_factory: UnitOfWorkFactory,
    queue_archive: bool = True,
) -> EnqueueResult:
    """Enqueue a batch in one transaction, optionally with its archive batch."""

    with unit_of_work_factory() as uow:
        repositories = uow.repositories
        result = enqueue_scholarships(
            records,
            repositories.import_queue,
            repositories.archive_queue if queue_archive else None,
        )
        uow.commit()

    log.info(
        "Queued scholarships: enqueued=%s, received=%s, archive_batch=%s",
        result.enqueued,
        result.received,
        result.archive_item_id,
    )
    return result


def queue_api_scholarships(
    *,
    fetcher: ScholarshipFetcher,
    unit_of_work_factory: UnitOfWorkFactory,
) -> EnqueueResult:
    """Fetch the catalogue once and enqueue it, with its batch queued for archival.

    A failed fetch counts as a cycle with no scholarships: nothing is enqueued.
    """

    fetched = fetcher()
    if not fetched.ok:
        log.error("No scholarships available this cycle: %s", fetched.error)
        return EnqueueResult()
    if not fetched.records:
        log.error("The scholarship API responded but returned no scholarships")
        return EnqueueResult()
    return queue_scholarships(fetched.records, unit_of_work_factory=unit_of_work_factory)


def process_queues(
    *,
    unit_of_work_factory: UnitOfWorkFactory,
    edit_lock: EditLock | None = None,
    min_archive_batch_size: int = DEFAULT_MIN_BATCH_SIZE,
    lease_seconds: float = DEFAULT_LEASE_SECONDS,
    max_items: int | None = None,
    clock: Callable[[], float] = time.time,
) -> ProcessResult:
    """Drain the import queue, then apply the newest pending archive batch.

    Archival waits while any import item is still queued, so it never runs against
    a cycle that has not been fully imported.
    """

    result = ProcessResult()
    processed = 0
    while max_items is None or processed < max_items:
        item = _claim(unit_of_work_factory, _import_queue, lease_seconds=lease_seconds)
        if item is None:
            break
        processed += 1
        _process_import_item(
            item,
            result,
            unit_of_work_factory=unit_of_work_factory,
            edit_lock=edit_lock,
            clock=clock,
        )

    with unit_of_work_factory() as uow:
        pending = uow.repositories.import_queue.count()
    if pending:
        result.archive_deferred = True
        log.info("Archive deferred: %s import items are still queued", pending)
    else:
        _process_archive_batches(
            result,
            unit_of_work_factory=unit_of_work_factory,
            edit_lock=edit_lock,
            min_batch_size=min_archive_batch_size,
            lease_seconds=lease_seconds,
        )

    log.info(
        "Processed queues: created=%s, updated=%s, skipped=%s, invalid=%s, failed=%s, "
        "archived=%s",
        result.created,
        result.updated,
        result.skipped,
        result.invalid,
        result.failed,
        result.archived,
    )
    return result


def clear_import_stamps(
    *,
    unit_of_work_factory: UnitOfWorkFactory,
    code: str | None = None,
) -> int:
    """Remove the import and API update stamps from all scholarships, or from one code.

    A scholarship without stamps is written again the next time its record is
    imported, even when the content is unchanged.
    """

    cleared = 0
    with unit_of_work_factory() as uow:
        repository = uow.repositories.scholarships
        targets = repository.query(code=code) if code else repository.query()
        for scholarship in targets:
            if scholarship.import_stamp is None and scholarship.last_update is None:
                continue
            scholarship.import_stamp = None
            scholarship.last_update = None
            repository.upsert(scholarship)
            cleared += 1
        uow.commit()
    log.info("Removed import stamps: cleared=%s, code=%s", cleared, code or "*")
    return cleared


def _import_queue(repositories: ScholarshipRepositories) -> WorkQueue:
    return repositories.import_queue


def _claim(
    unit_of_work_factory: UnitOfWorkFactory,
    select_queue: Callable[[ScholarshipRepositories], WorkQueue],
    *,
    lease_seconds: float,
) -> QueueItem | None:
    with unit_of_work_factory() as uow:
        item = select_queue(uow.repositories).claim(lease_seconds=lease_seconds)
        uow.commit()
    return item


def _process_import_item(
    item: QueueItem,
    result: ProcessResult,
    *,
    unit_of_work_factory: UnitOfWorkFactory,
    edit_lock: EditLock | None,
    clock: Callable[[], float],
) -> None:
    try:
        with unit_of_work_factory() as uow:
            repositories = uow.repositories
            reconciler = ScholarshipReconciler(
                repositories.scholarships,
                ReferenceResolver(repositories.terms),
                edit_lock=edit_lock,
                clock=clock,
            )
            outcome = reconciler.reconcile(item.payload).outcome
            repositories.import_queue.delete(item)
            uow.commit()
    except (InvalidScholarshipError, ValidationError) as exc:
        log.warning("Dropping invalid import item %s: %s", item.id, exc)
        with unit_of_work_factory() as uow:
            uow.repositories.import_queue.delete(item)
            uow.commit()
        result.invalid += 1
        return
    except Exception:
        # the lease is kept so the item is redelivered once it expires
        log.exception("Failed to import queue item %s", item.id)
        result.failed += 1
        return
    result.count(outcome)


def _process_archive_batches(
    result: ProcessResult,
    *,
    unit_of_work_factory: UnitOfWorkFactory,
    edit_lock: EditLock | None,
    min_batch_size: int,
    lease_seconds: float,
) -> None:
    with unit_of_work_factory() as uow:
        queue = uow.repositories.archive_queue
        batches: list[QueueItem] = []
        while (item := queue.claim(lease_seconds=lease_seconds)) is not None:
            batches.append(item)
        if not batches:
            uow.commit()
            return

        # batches of older cycles are superseded by the newest one
        latest = max(batches, key=lambda batch: batch.id)
        if len(batches) > 1:
            log.info(
                "Archive: %s older batches superseded by batch %s",
                len(batches) - 1,
                latest.id,
            )

        archiver = ScholarshipArchiver(uow.repositories.scholarships, edit_lock=edit_lock)
        report = archiver.archive(latest.payload, min_batch_size=min_batch_size)
        for batch in batches:
            queue.delete(batch)
        uow.commit()

    result.archive_batches = len(batches)
    result.archived = report.archived_count
    result.archive_skipped_reason = report.skipped_reason
