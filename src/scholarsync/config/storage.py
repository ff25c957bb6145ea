"""Where scholarsync keeps its database and persisted API settings."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .env import optional_env_var

DATA_DIR_VAR: Final[str] = "SCHOLARSYNC_DATA_DIR"
DATABASE_URI_VAR: Final[str] = "DATABASE_URI"
DATABASE_FILENAME: Final[str] = "scholarsync.db"
SETTINGS_FILENAME: Final[str] = "settings.env"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    """Files under one data directory; ``ensure`` creates the directory first."""

    data_dir: Path

    def _base(self, *, ensure: bool) -> Path:
        base = self.data_dir.expanduser().resolve()
        if ensure:
            base.mkdir(parents=True, exist_ok=True)
        return base

    def database_path(self, *, ensure: bool = True) -> Path:
        return self._base(ensure=ensure) / DATABASE_FILENAME

    def settings_path(self, *, ensure: bool = True) -> Path:
        return self._base(ensure=ensure) / SETTINGS_FILENAME


def get_storage_config() -> StorageConfig:
    configured = optional_env_var(DATA_DIR_VAR)
    if configured:
        return StorageConfig(data_dir=Path(configured))
    xdg_data_home = optional_env_var("XDG_DATA_HOME")
    base = Path(xdg_data_home) if xdg_data_home else Path.home() / ".local" / "share"
    return StorageConfig(data_dir=base / "scholarsync")


def get_database_uri(*, storage: StorageConfig | None = None) -> str:
    """Return ``DATABASE_URI`` when set, otherwise a SQLite file in the data directory."""

    configured = optional_env_var(DATABASE_URI_VAR)
    if configured:
        return configured
    database_path = (storage or get_storage_config()).database_path()
    return f"sqlite+pysqlite:///{database_path}"
