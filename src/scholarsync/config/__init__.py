"""Application configuration helpers."""

from __future__ import annotations

from .env import optional_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .scholarship_api import (
    ScholarshipApiConfig,
    get_scholarship_api_config,
    save_scholarship_api_settings,
)
from .storage import StorageConfig, get_database_uri, get_storage_config
from .sync import ARCHIVE_QUEUE, IMPORT_QUEUE, SyncConfig, get_sync_config

__all__ = [
    "ARCHIVE_QUEUE",
    "IMPORT_QUEUE",
    "ConfigurationError",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "ScholarshipApiConfig",
    "StorageConfig",
    "SyncConfig",
    "configure_logging",
    "get_database_uri",
    "get_scholarship_api_config",
    "get_storage_config",
    "get_sync_config",
    "optional_env_var",
    "require_env_vars",
    "save_scholarship_api_settings",
]
