"""Advisory edit locks held by editors on stored content."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from uuid import UUID


@runtime_checkable
class EditLock(Protocol):
    def release(self, entity_id: UUID) -> None: ...


class NullEditLock:
    """Used when no edit-lock service is configured."""

    def release(self, entity_id: UUID) -> None:
        _ = entity_id
