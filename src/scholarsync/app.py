"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING

from scholarsync.adapters.scholarship_api import ScholarshipApiFetcher
from scholarsync.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyScholarshipUnitOfWork,
    is_started,
    startup,
)
from scholarsync.config import (
    get_storage_config,
    get_sync_config,
    save_scholarship_api_settings,
)
from scholarsync.domain import data_integration
from scholarsync.domain.ports.unit_of_work import ScholarshipUnitOfWork

if TYPE_CHECKING:
    from pathlib import Path

    from scholarsync.domain.data_integration import EnqueueResult, ProcessResult
    from scholarsync.domain.ports.fetching import FetchResult, ScholarshipFetcher
    from scholarsync.domain.ports.locking import EditLock

UnitOfWorkFactory = Callable[[], ScholarshipUnitOfWork]


log = getLogger(__name__)


def _unit_of_work_factory(factory: UnitOfWorkFactory | None) -> UnitOfWorkFactory:
    if factory is not None:
        return factory
    if not is_started():
        startup()
    return SqlAlchemyScholarshipUnitOfWork


def queue_api_import(
    *,
    source: ScholarshipFetcher | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> EnqueueResult:
    """Fetch the scholarship catalogue and queue it for import and archival."""

    effective_uow = _unit_of_work_factory(unit_of_work_factory)
    effective_source = source or ScholarshipApiFetcher()
    log.info("Starting scholarship API import")
    return data_integration.queue_api_scholarships(
        fetcher=effective_source,
        unit_of_work_factory=effective_uow,
    )


def queue_manual_import(
    text: str,
    *,
    archive_missing: bool = False,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> EnqueueResult:
    """Queue scholarships pasted or piped in by an operator."""

    effective_uow = _unit_of_work_factory(unit_of_work_factory)
    records = data_integration.parse_manual_json(text)
    if not records:
        log.warning("No valid scholarships found in the manual import")
        return data_integration.EnqueueResult()
    return data_integration.queue_scholarships(
        records,
        unit_of_work_factory=effective_uow,
        queue_archive=archive_missing,
    )


def process_queues(
    *,
    max_items: int | None = None,
    min_archive_batch_size: int | None = None,
    edit_lock: EditLock | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> ProcessResult:
    """Import queued scholarships, then archive those missing from the latest batch."""

    effective_uow = _unit_of_work_factory(unit_of_work_factory)
    sync_config = get_sync_config()
    batch_size = (
        min_archive_batch_size
        if min_archive_batch_size is not None
        else sync_config.min_archive_batch_size
    )
    return data_integration.process_queues(
        unit_of_work_factory=effective_uow,
        edit_lock=edit_lock,
        min_archive_batch_size=batch_size,
        lease_seconds=sync_config.lease_seconds,
        max_items=max_items if max_items is not None else sync_config.max_items,
    )


def run_cycle(
    *,
    source: ScholarshipFetcher | None = None,
    max_items: int | None = None,
    min_archive_batch_size: int | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> ProcessResult:
    """One scheduled cycle: fetch and queue, then drain the queues."""

    effective_uow = _unit_of_work_factory(unit_of_work_factory)
    queue_api_import(source=source, unit_of_work_factory=effective_uow)
    return process_queues(
        max_items=max_items,
        min_archive_batch_size=min_archive_batch_size,
        unit_of_work_factory=effective_uow,
    )


def test_api(*, source: ScholarshipFetcher | None = None) -> FetchResult:
    """Fetch once and report how many scholarships the API returned."""

    result = (source or ScholarshipApiFetcher())()
    if result.ok:
        log.info("Scholarship API returned %s items", len(result.records))
    else:
        log.error("Scholarship API test failed: %s", result.error)
    return result


def configure_settings(
    *,
    api_url: str | None = None,
    client_id: str | None = None,
    client_secret: str | None = None,
    settings_path: Path | None = None,
) -> list[str]:
    """Persist API settings to the settings file in the data directory."""

    if settings_path is None:
        settings_path = get_storage_config().settings_path()
    written = save_scholarship_api_settings(
        settings_path,
        api_url=api_url,
        client_id=client_id,
        client_secret=client_secret,
    )
    log.info("Saved settings %s to %s", ", ".join(written) or "(none)", settings_path)
    return written


def remove_timestamps(
    *,
    code: str | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> int:
    """Clear import stamps so the next import rewrites the affected scholarships."""

    effective_uow = _unit_of_work_factory(unit_of_work_factory)
    return data_integration.clear_import_stamps(unit_of_work_factory=effective_uow, code=code)
