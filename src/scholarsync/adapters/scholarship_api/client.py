"""HTTP client for the scholarship catalogue API."""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Any, cast

import httpx

from scholarsync.adapters.http_resilience import ResilientClient
from scholarsync.config.scholarship_api import ScholarshipApiConfig, get_scholarship_api_config
from scholarsync.domain.ports.fetching import (
    FetchError,
    FetchResult,
    RawRecord,
    ScholarshipFetcher,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from scholarsync.config.http_resilience import ResilienceConfig

log = getLogger(__name__)


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


def records_from_payload(payload: object) -> list[RawRecord]:
    """Return the scholarship records of a decoded response body.

    The API answers with a JSON array of scholarships; a single object carrying a
    ``code`` is accepted as a one-item catalogue.
    """

    if isinstance(payload, list):
        items = cast(list[object], payload)
        return [cast(RawRecord, item) for item in items if isinstance(item, Mapping)]
    if isinstance(payload, Mapping) and "code" in payload:
        return [cast(RawRecord, payload)]
    raise FetchError("Unexpected scholarship API response payload")


@dataclass(slots=True)
class ScholarshipApiFetcher:
    config: ScholarshipApiConfig = field(default_factory=get_scholarship_api_config)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )

    def __call__(self) -> FetchResult:
        return asyncio.run(self._fetch_async())

    def _params(self) -> httpx.QueryParams:
        params: dict[str, str] = {}
        if self.config.has_credentials:
            params["client_id"] = cast(str, self.config.client_id)
            params["client_secret"] = cast(str, self.config.client_secret)
            params["public"] = "true"
        return httpx.QueryParams(params)

    async def _fetch_async(self) -> FetchResult:
        url = self.config.api_url
        try:
            async with self.client_factory(self.config.resilience) as client:
                response = await client.get(url, params=self._params())
        except httpx.HTTPError as exc:
            log.error("Scholarship API request to %s failed: %s", url, exc)
            return FetchResult(error=FetchError(f"Request failed: {exc}"))

        if response.status_code != httpx.codes.OK:
            log.error(
                "Scholarship API request to %s returned HTTP %s", url, response.status_code
            )
            return FetchResult(
                error=FetchError(
                    f"Unexpected HTTP status {response.status_code}",
                    status_code=response.status_code,
                )
            )

        try:
            payload: Any = response.json()
            records = records_from_payload(payload)
        except ValueError as exc:
            log.error("Scholarship API response from %s could not be decoded: %s", url, exc)
            return FetchResult(
                error=FetchError("Response body is not valid JSON", status_code=200)
            )
        except FetchError as exc:
            log.error("Scholarship API response from %s: %s", url, exc)
            exc.status_code = response.status_code
            return FetchResult(error=exc)

        log.info("Fetched %s scholarships from %s", len(records), url)
        return FetchResult(records=records)


if TYPE_CHECKING:
    _fetcher_check: ScholarshipFetcher = ScholarshipApiFetcher()
