from __future__ import annotations

from scholarsync.domain.reconciliation import canonical_json, fingerprint
from tests.helpers.scholarships import make_payload


def test_fingerprint_ignores_key_order() -> None:
    first = {"code": "A", "name": "Alpha", "states": ["MI", "OH"]}
    second = {"states": ["MI", "OH"], "name": "Alpha", "code": "A"}

    assert fingerprint(first) == fingerprint(second)


def test_fingerprint_changes_with_any_field() -> None:
    record = make_payload()
    changed = make_payload(description="Something new")

    assert fingerprint(record) != fingerprint(changed)


def test_fingerprint_covers_unknown_fields() -> None:
    record = make_payload()
    extended = make_payload(sponsor="ACME")

    assert fingerprint(record) != fingerprint(extended)


def test_fingerprint_is_sensitive_to_list_order() -> None:
    assert fingerprint({"code": "A", "states": ["MI", "OH"]}) != fingerprint(
        {"code": "A", "states": ["OH", "MI"]}
    )


def test_fingerprint_is_sha256_hex() -> None:
    digest = fingerprint(make_payload())

    assert len(digest) == 64
    assert all(char in "0123456789abcdef" for char in digest)


def test_canonical_json_keeps_non_ascii_text() -> None:
    assert canonical_json({"name": "Beca Peña"}) == '{"name":"Beca Peña"}'
