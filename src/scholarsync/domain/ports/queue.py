"""Ports for the at-least-once work queue."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable


@dataclass(slots=True, frozen=True)
class QueueItem:
    id: int
    queue: str
    payload: Any
    created: float


@runtime_checkable
class WorkQueue(Protocol):
    """A named queue with leased claims.

    A claimed item stays invisible until it is deleted or its lease runs out, so an
    item whose processing failed is delivered again later.
    """

    @property
    def name(self) -> str: ...

    def put(self, payload: Any) -> int: ...

    def claim(self, *, lease_seconds: float) -> QueueItem | None: ...

    def delete(self, item: QueueItem) -> None: ...

    def release(self, item: QueueItem) -> None: ...

    def count(self) -> int: ...
