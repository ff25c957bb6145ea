"""Synchronisation settings for the import and archive queues."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from scholarsync.domain.data_integration import DEFAULT_LEASE_SECONDS
from scholarsync.domain.reconciliation import DEFAULT_MIN_BATCH_SIZE

from .env import optional_env_var
from .errors import ConfigurationError

if TYPE_CHECKING:
    from collections.abc import Callable

DEFAULT_MIN_ARCHIVE_BATCH_SIZE = DEFAULT_MIN_BATCH_SIZE

IMPORT_QUEUE = "scholarship_import"
ARCHIVE_QUEUE = "scholarship_archive"

MIN_ARCHIVE_BATCH_VAR = "SCHOLARSYNC_MIN_ARCHIVE_BATCH"
LEASE_SECONDS_VAR = "SCHOLARSYNC_LEASE_SECONDS"
MAX_ITEMS_VAR = "SCHOLARSYNC_MAX_ITEMS"


@dataclass(frozen=True, slots=True)
class SyncConfig:
    min_archive_batch_size: int = DEFAULT_MIN_ARCHIVE_BATCH_SIZE
    lease_seconds: float = DEFAULT_LEASE_SECONDS
    max_items: int | None = None


def _number_env_var[TNumber: (int, float)](
    name: str,
    parse: Callable[[str], TNumber],
    *,
    minimum: TNumber,
) -> TNumber | None:
    raw = optional_env_var(name)
    if raw is None:
        return None
    try:
        value = parse(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from exc
    if value < minimum:
        raise ConfigurationError(f"{name} must be at least {minimum}, got {raw!r}")
    return value


def get_sync_config() -> SyncConfig:
    """Read queue settings from the environment, falling back to the defaults."""

    min_batch = _number_env_var(MIN_ARCHIVE_BATCH_VAR, int, minimum=0)
    lease_seconds = _number_env_var(LEASE_SECONDS_VAR, float, minimum=1.0)
    return SyncConfig(
        min_archive_batch_size=(
            min_batch if min_batch is not None else DEFAULT_MIN_ARCHIVE_BATCH_SIZE
        ),
        lease_seconds=lease_seconds if lease_seconds is not None else DEFAULT_LEASE_SECONDS,
        max_items=_number_env_var(MAX_ITEMS_VAR, int, minimum=1),
    )
