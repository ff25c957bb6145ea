"""Ports for fetching scholarships from the remote API."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

RawRecord = Mapping[str, Any]


class FetchError(RuntimeError):
    """A fetch cycle that produced no usable data."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass(slots=True)
class FetchResult:
    """Records of one fetch cycle, or the error that made it empty."""

    records: Sequence[RawRecord] = field(default_factory=tuple[RawRecord, ...])
    error: FetchError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@runtime_checkable
class ScholarshipFetcher(Protocol):
    """Callable port returning the current scholarship catalogue."""

    def __call__(self) -> FetchResult: ...


__all__ = ["FetchError", "FetchResult", "RawRecord", "ScholarshipFetcher"]
