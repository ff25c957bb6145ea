"""Persistent work queue stored in the ``queue_item`` table."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any

from sqlalchemy import delete, func, or_, select, update

from scholarsync.adapters.sqlalchemy.mappings import queue_item_table
from scholarsync.domain.ports.queue import QueueItem

if TYPE_CHECKING:
    from collections.abc import Callable

    from sqlalchemy.orm import Session


class SqlAlchemyWorkQueue:
    """Named queue with leased claims.

    ``claim`` only takes an item if its lease is still the one it read, so two
    workers racing for the same row cannot both win it.
    """

    def __init__(
        self,
        session: Session,
        name: str,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.session = session
        self._name = name
        self._clock = clock

    @property
    def name(self) -> str:
        return self._name

    def put(self, payload: Any) -> int:
        stmt = queue_item_table.insert().values(
            name=self._name,
            payload=payload,
            created=self._clock(),
            expire=0.0,
        )
        result = self.session.execute(stmt)
        return int(result.inserted_primary_key[0])  # pyright: ignore[reportOptionalSubscript]

    def claim(self, *, lease_seconds: float) -> QueueItem | None:
        table = queue_item_table
        while True:
            now = self._clock()
            stmt = (
                select(table.c.id, table.c.payload, table.c.created, table.c.expire)
                .where(table.c.name == self._name)
                .where(or_(table.c.expire == 0, table.c.expire < now))
                .order_by(table.c.created, table.c.id)
                .limit(1)
            )
            row = self.session.execute(stmt).first()
            if row is None:
                return None

            claimed = self.session.execute(
                update(table)
                .where(table.c.id == row.id)
                .where(table.c.expire == row.expire)
                .values(expire=now + lease_seconds)
            )
            if claimed.rowcount == 1:  # pyright: ignore[reportAttributeAccessIssue]
                return QueueItem(
                    id=row.id,
                    queue=self._name,
                    payload=row.payload,
                    created=row.created,
                )

    def delete(self, item: QueueItem) -> None:
        self.session.execute(delete(queue_item_table).where(queue_item_table.c.id == item.id))

    def release(self, item: QueueItem) -> None:
        self.session.execute(
            update(queue_item_table)
            .where(queue_item_table.c.id == item.id)
            .values(expire=0.0)
        )

    def count(self) -> int:
        stmt = (
            select(func.count())
            .select_from(queue_item_table)
            .where(queue_item_table.c.name == self._name)
        )
        return int(self.session.execute(stmt).scalar_one())


if TYPE_CHECKING:
    from typing import cast

    from scholarsync.domain.ports.queue import WorkQueue

    _queue_check: WorkQueue = SqlAlchemyWorkQueue(cast("Session", object()), "check")
