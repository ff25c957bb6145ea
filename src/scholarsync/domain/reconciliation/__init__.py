"""Scholarship reconciliation: fingerprints, mapping rules, references and archival."""

from __future__ import annotations

from .archive import BATCH_TOO_SMALL, DEFAULT_MIN_BATCH_SIZE, ArchiveReport, ScholarshipArchiver
from .fingerprint import canonical_json, fingerprint
from .mapping import (
    class_levels_for,
    home_state_names,
    needs_update,
    normalize_college_code,
    parse_timestamp,
    population_for,
)
from .reconcile import (
    InvalidScholarshipError,
    ReconcileResult,
    ScholarshipReconciler,
    is_importable,
)
from .references import ReferenceResolver

__all__ = [
    "BATCH_TOO_SMALL",
    "DEFAULT_MIN_BATCH_SIZE",
    "ArchiveReport",
    "InvalidScholarshipError",
    "ReconcileResult",
    "ReferenceResolver",
    "ScholarshipArchiver",
    "ScholarshipReconciler",
    "canonical_json",
    "class_levels_for",
    "fingerprint",
    "home_state_names",
    "is_importable",
    "needs_update",
    "normalize_college_code",
    "parse_timestamp",
    "population_for",
]
