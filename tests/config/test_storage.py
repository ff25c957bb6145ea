from __future__ import annotations

from pathlib import Path  # noqa: TC003

import pytest
from dotenv import dotenv_values

from scholarsync.config import (
    ConfigurationError,
    get_database_uri,
    get_storage_config,
    get_sync_config,
    save_scholarship_api_settings,
)
from scholarsync.config.storage import DATABASE_FILENAME, SETTINGS_FILENAME


def test_storage_prefers_explicit_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    custom = tmp_path / "custom-data"
    monkeypatch.setenv("SCHOLARSYNC_DATA_DIR", str(custom))

    storage = get_storage_config()

    assert storage.settings_path() == custom.resolve() / SETTINGS_FILENAME
    assert custom.exists()


def test_database_uri_uses_env_override(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URI", "sqlite:///override.db")

    assert get_database_uri() == "sqlite:///override.db"


def test_database_uri_defaults_to_data_dir(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
) -> None:
    monkeypatch.delenv("DATABASE_URI", raising=False)
    monkeypatch.setenv("SCHOLARSYNC_DATA_DIR", str(tmp_path / "data-dir"))

    uri = get_database_uri()

    expected_path = (tmp_path / "data-dir" / DATABASE_FILENAME).resolve()
    assert uri == f"sqlite+pysqlite:///{expected_path}"
    assert expected_path.parent.exists()


def test_sync_config_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "SCHOLARSYNC_MIN_ARCHIVE_BATCH",
        "SCHOLARSYNC_LEASE_SECONDS",
        "SCHOLARSYNC_MAX_ITEMS",
    ):
        monkeypatch.delenv(name, raising=False)

    config = get_sync_config()

    assert config.min_archive_batch_size == 10
    assert config.lease_seconds == 300.0
    assert config.max_items is None


def test_sync_config_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SCHOLARSYNC_MIN_ARCHIVE_BATCH", "25")
    monkeypatch.setenv("SCHOLARSYNC_LEASE_SECONDS", " 60.5 ")
    monkeypatch.setenv("SCHOLARSYNC_MAX_ITEMS", "100")

    config = get_sync_config()

    assert config.min_archive_batch_size == 25
    assert config.lease_seconds == 60.5
    assert config.max_items == 100


@pytest.mark.parametrize(
    ("name", "value"),
    [
        ("SCHOLARSYNC_MIN_ARCHIVE_BATCH", "ten"),
        ("SCHOLARSYNC_MIN_ARCHIVE_BATCH", "-1"),
        ("SCHOLARSYNC_MAX_ITEMS", "0"),
        ("SCHOLARSYNC_LEASE_SECONDS", "soon"),
    ],
)
def test_sync_config_rejects_bad_values(
    monkeypatch: pytest.MonkeyPatch,
    name: str,
    value: str,
) -> None:
    monkeypatch.setenv(name, value)

    with pytest.raises(ConfigurationError, match=name):
        get_sync_config()


def test_save_settings_writes_only_given_values(tmp_path: Path) -> None:
    settings = tmp_path / "settings.env"

    written = save_scholarship_api_settings(
        settings,
        api_url=" https://api.example.edu/scholarships ",
        client_secret="s3cret",
    )
    save_scholarship_api_settings(settings, client_id="id-1")

    assert written == ["SCHOLARSHIP_API_URL", "SCHOLARSHIP_CLIENT_SECRET"]
    assert dotenv_values(settings) == {
        "SCHOLARSHIP_API_URL": "https://api.example.edu/scholarships",
        "SCHOLARSHIP_CLIENT_SECRET": "s3cret",
        "SCHOLARSHIP_CLIENT_ID": "id-1",
    }
