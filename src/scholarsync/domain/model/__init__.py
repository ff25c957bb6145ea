"""Public domain model surface."""

from __future__ import annotations

from scholarsync.domain.model.entity import Entity, new_id
from scholarsync.domain.model.enums import ImportOutcome, ModerationState, Vocabulary
from scholarsync.domain.model.payload import (
    CollegePayload,
    MajorPayload,
    MeritPayload,
    RaceCodePayload,
    RawScholarship,
    RawScholarshipInput,
    ensure_raw_scholarship,
)
from scholarsync.domain.model.reference import ReferenceTerm, natural_key
from scholarsync.domain.model.scholarship import Scholarship

__all__ = [
    "CollegePayload",
    "Entity",
    "ImportOutcome",
    "MajorPayload",
    "MeritPayload",
    "ModerationState",
    "RaceCodePayload",
    "RawScholarship",
    "RawScholarshipInput",
    "ReferenceTerm",
    "Scholarship",
    "Vocabulary",
    "ensure_raw_scholarship",
    "natural_key",
    "new_id",
]
