"""Scholarship API configuration values."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from dotenv import set_key

from .env import optional_env_var, require_env_vars
from .http_resilience import RateLimit, ResilienceConfig

if TYPE_CHECKING:
    from pathlib import Path

API_URL_VAR = "SCHOLARSHIP_API_URL"
CLIENT_ID_VAR = "SCHOLARSHIP_CLIENT_ID"
CLIENT_SECRET_VAR = "SCHOLARSHIP_CLIENT_SECRET"  # noqa: S105

SCHOLARSHIP_API_TIMEOUT_SECONDS = 60.0


@dataclass(frozen=True)
class ScholarshipApiConfig:
    """Holds the scholarship endpoint and its optional client credentials."""

    api_url: str
    client_id: str | None
    client_secret: str | None
    resilience: ResilienceConfig

    @property
    def has_credentials(self) -> bool:
        return bool(self.client_id and self.client_secret)


def default_resilience_config() -> ResilienceConfig:
    return ResilienceConfig(
        name="scholarship-api",
        timeout_seconds=SCHOLARSHIP_API_TIMEOUT_SECONDS,
        ratelimit=RateLimit(max_calls=2, per_seconds=1.0),
        default_headers={"Accept": "application/json"},
    )


def get_scholarship_api_config(
    *,
    resilience: ResilienceConfig | None = None,
) -> ScholarshipApiConfig:
    values = require_env_vars((API_URL_VAR,))
    return ScholarshipApiConfig(
        api_url=values[API_URL_VAR],
        client_id=optional_env_var(CLIENT_ID_VAR),
        client_secret=optional_env_var(CLIENT_SECRET_VAR),
        resilience=resilience or default_resilience_config(),
    )


def save_scholarship_api_settings(
    settings_path: Path,
    *,
    api_url: str | None = None,
    client_id: str | None = None,
    client_secret: str | None = None,
) -> list[str]:
    """Persist the given settings to a dotenv file and return the keys written."""

    updates = {
        API_URL_VAR: api_url,
        CLIENT_ID_VAR: client_id,
        CLIENT_SECRET_VAR: client_secret,
    }
    written: list[str] = []
    settings_path.touch(exist_ok=True)
    for key, value in updates.items():
        if value is None:
            continue
        set_key(settings_path, key, value.strip())
        written.append(key)
    return written
