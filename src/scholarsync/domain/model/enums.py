"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class ModerationState(StrEnum):
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class Vocabulary(StrEnum):
    """Namespaces of reusable reference terms."""

    LOCATION = "location"
    SCHOOLS = "schools"
    SCHOLARSHIP_MAJOR = "scholarship_major"


class ImportOutcome(StrEnum):
    CREATED = "created"
    UPDATED = "updated"
    SKIPPED = "skipped"
