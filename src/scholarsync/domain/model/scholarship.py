"""The stored, normalised scholarship."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from scholarsync.domain.model.entity import Entity
from scholarsync.domain.model.enums import ModerationState

if TYPE_CHECKING:
    from uuid import UUID


@dataclass(eq=False, kw_only=True)
class Scholarship(Entity):
    """A scholarship as persisted locally.

    ``code`` is the durable business identity. ``api_hash`` is the fingerprint of the
    payload that was last imported into this record and is what archival compares
    against. List-valued fields are replaced wholesale, never mutated in place.
    """

    code: str
    title: str = ""
    api_hash: str | None = None
    last_update: int | None = None
    import_stamp: int | None = None
    description: str | None = None
    class_levels: list[str] = field(default_factory=list[str])
    kind: str | None = None
    minimum_gpa: float | None = None
    minimum_age: int | None = None
    race_codes: list[str] = field(default_factory=list[str])
    international: list[str] = field(default_factory=list[str])
    population: list[str] = field(default_factory=list[str])
    home_state_ids: list[UUID] = field(default_factory=list["UUID"])
    school_ids: list[UUID] = field(default_factory=list["UUID"])
    major_ids: list[UUID] = field(default_factory=list["UUID"])
    published: bool = False
    moderation_state: ModerationState = ModerationState.DRAFT

    def publish(self) -> None:
        self.published = True
        self.moderation_state = ModerationState.PUBLISHED

    def archive(self) -> None:
        self.published = False
        self.moderation_state = ModerationState.ARCHIVED
