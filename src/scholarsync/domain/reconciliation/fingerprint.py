"""Content fingerprints used for change detection and archival membership."""

from __future__ import annotations

import hashlib
import json
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from scholarsync.domain.ports.fetching import RawRecord


def canonical_json(record: RawRecord) -> str:
    """Serialise a raw record so that key order does not matter."""

    return json.dumps(
        record,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        default=str,
    )


def fingerprint(record: RawRecord) -> str:
    """Return the SHA-256 hex digest of the record's canonical serialisation."""

    return hashlib.sha256(canonical_json(record).encode("utf-8")).hexdigest()
