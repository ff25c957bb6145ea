from __future__ import annotations

from sqlalchemy.orm import Session  # noqa: TC002

from scholarsync.adapters.sqlalchemy.queue import SqlAlchemyWorkQueue


class _Clock:
    def __init__(self, now: float = 1_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def test_put_and_claim_in_order(sqlite_session: Session) -> None:
    queue = SqlAlchemyWorkQueue(sqlite_session, "import", clock=_Clock())
    first_id = queue.put({"code": "A"})
    queue.put({"code": "B"})

    first = queue.claim(lease_seconds=60)
    second = queue.claim(lease_seconds=60)

    assert first is not None
    assert second is not None
    assert first.id == first_id
    assert first.payload == {"code": "A"}
    assert second.payload == {"code": "B"}
    assert queue.claim(lease_seconds=60) is None
    assert queue.count() == 2


def test_queues_are_isolated_by_name(sqlite_session: Session) -> None:
    imports = SqlAlchemyWorkQueue(sqlite_session, "import")
    archive = SqlAlchemyWorkQueue(sqlite_session, "archive")
    archive.put(["h1", "h2"])

    assert imports.claim(lease_seconds=60) is None
    assert imports.count() == 0
    claimed = archive.claim(lease_seconds=60)
    assert claimed is not None
    assert claimed.payload == ["h1", "h2"]


def test_expired_lease_is_redelivered(sqlite_session: Session) -> None:
    clock = _Clock()
    queue = SqlAlchemyWorkQueue(sqlite_session, "import", clock=clock)
    queue.put({"code": "A"})
    claimed = queue.claim(lease_seconds=60)
    assert claimed is not None

    clock.now += 30
    assert queue.claim(lease_seconds=60) is None

    clock.now += 31
    again = queue.claim(lease_seconds=60)
    assert again is not None
    assert again.id == claimed.id


def test_release_and_delete(sqlite_session: Session) -> None:
    queue = SqlAlchemyWorkQueue(sqlite_session, "import")
    queue.put({"code": "A"})
    claimed = queue.claim(lease_seconds=300)
    assert claimed is not None

    queue.release(claimed)
    reclaimed = queue.claim(lease_seconds=300)
    assert reclaimed is not None

    queue.delete(reclaimed)
    assert queue.count() == 0
