"""Process-local storage backend.

Entities are kept as column snapshots, so every load returns a fresh,
detached instance and a caller mutating a loaded entity never affects the
store until it calls ``save``. Used by the test-suite and selectable with
``STORAGE_BACKEND=memory`` for local demos.
"""

import copy
import logging
import operator
import uuid
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import inspect as sa_inspect

from globalstay.exceptions import BookingConflictError, StaleEntityError
from globalstay.models import Booking, Listing, Review, User
from globalstay.models.booking import BOOKING_STATUSES
from globalstay.repositories.base import AnyOf, Condition, Filter, ModelT, Repositories, Repository, Storage
from globalstay.services.availability import StayRange, overlaps

logger = logging.getLogger(__name__)

Row = dict[str, Any]
Table = dict[uuid.UUID, Row]


def _icontains(actual: Any, expected: Any) -> bool:
    return str(expected).lower() in str(actual).lower()


_COMPARATORS: dict[str, Callable[[Any, Any], bool]] = {
    "eq": operator.eq,
    "ne": operator.ne,
    "lt": operator.lt,
    "le": operator.le,
    "gt": operator.gt,
    "ge": operator.ge,
    "in": lambda actual, expected: actual in expected,
    "not_in": lambda actual, expected: actual not in expected,
    "icontains": _icontains,
}


def _matches(row: Row, condition: Condition) -> bool:
    if isinstance(condition, AnyOf):
        return any(_matches(row, f) for f in condition.filters)
    if condition.field not in row:
        raise ValueError(f"Unknown field {condition.field!r}")
    actual = row[condition.field]
    # SQL semantics: NULL never satisfies a comparison.
    if actual is None:
        return False
    return _COMPARATORS[condition.op](actual, condition.value)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UndoLog:
    """Prior row images written during one unit of work."""

    def __init__(self) -> None:
        self._entries: list[tuple[Table, uuid.UUID, Row | None]] = []

    def record(self, table: Table, key: uuid.UUID) -> None:
        previous = table.get(key)
        self._entries.append((table, key, copy.deepcopy(previous)))

    def rollback(self) -> None:
        for table, key, previous in reversed(self._entries):
            if previous is None:
                table.pop(key, None)
            else:
                table[key] = previous
        self._entries.clear()


class InMemoryRepository(Repository[ModelT]):
    def __init__(self, model: type[ModelT], table: Table, undo: UndoLog):
        self.model = model
        self._table = table
        self._undo = undo
        self._columns = {attr.key: attr.columns[0] for attr in sa_inspect(model).column_attrs}

    def _snapshot(self, entity: ModelT) -> Row:
        return {key: copy.deepcopy(getattr(entity, key)) for key in self._columns}

    def _restore(self, row: Row) -> ModelT:
        return self.model(**copy.deepcopy(row))

    def _apply_defaults(self, entity: ModelT) -> None:
        for key, column in self._columns.items():
            if getattr(entity, key) is not None or column.default is None:
                continue
            default = column.default
            if default.is_scalar:
                setattr(entity, key, copy.deepcopy(default.arg))
            elif default.is_callable:
                setattr(entity, key, default.arg(None))

    def _guard(self, entity: ModelT) -> None:
        """Storage-level integrity checks run right before a write."""

    async def find_by_id(self, entity_id: uuid.UUID) -> ModelT | None:
        row = self._table.get(entity_id)
        return self._restore(row) if row is not None else None

    async def find(
        self,
        *conditions: Condition,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[ModelT]:
        rows = [row for row in self._table.values() if all(_matches(row, c) for c in conditions)]
        if order_by is not None:
            rows.sort(key=lambda row: (row[order_by] is None, row[order_by]), reverse=descending)
        if limit is not None:
            rows = rows[:limit]
        return [self._restore(row) for row in rows]

    async def save(self, entity: ModelT) -> ModelT:
        # No suspension point from here on: the check-then-write is atomic
        # with respect to other coroutines on the event loop.
        stored = self._table.get(entity.id) if entity.id is not None else None
        if stored is not None and stored["version_id"] != entity.version_id:
            logger.warning(
                "Stale %s %s: loaded revision %s, stored revision %s",
                self.model.__name__,
                entity.id,
                entity.version_id,
                stored["version_id"],
            )
            raise StaleEntityError(f"{self.model.__name__} was modified by another request. Please try again.")

        self._apply_defaults(entity)
        self._guard(entity)

        now = _utcnow()
        if stored is None:
            entity.version_id = 1
            if getattr(entity, "created_at", None) is None:
                entity.created_at = now
        else:
            entity.version_id = stored["version_id"] + 1
        entity.updated_at = now

        self._undo.record(self._table, entity.id)
        self._table[entity.id] = self._snapshot(entity)
        return entity

    async def delete_by_id(self, entity_id: uuid.UUID) -> bool:
        if entity_id not in self._table:
            return False
        self._undo.record(self._table, entity_id)
        del self._table[entity_id]
        return True


class InMemoryBookingRepository(InMemoryRepository[Booking]):
    """Booking store that refuses overlapping confirmed stays on write."""

    def _guard(self, entity: Booking) -> None:
        if entity.status not in BOOKING_STATUSES:
            raise ValueError(f"Invalid booking status {entity.status!r}")
        if entity.status != "confirmed":
            return
        candidate = StayRange(entity.check_in, entity.check_out)
        for row in self._table.values():
            if row["id"] == entity.id or row["listing_id"] != entity.listing_id or row["status"] != "confirmed":
                continue
            if overlaps(StayRange(row["check_in"], row["check_out"]), candidate):
                logger.warning("Refusing overlapping confirmed booking on listing %s", entity.listing_id)
                raise BookingConflictError("Selected dates are not available.")


class InMemoryStorage(Storage):
    def __init__(self) -> None:
        self._tables: dict[type, Table] = {User: {}, Listing: {}, Booking: {}, Review: {}}

    def repositories(self, undo: UndoLog | None = None) -> Repositories:
        undo = undo or UndoLog()
        return Repositories(
            users=InMemoryRepository(User, self._tables[User], undo),
            listings=InMemoryRepository(Listing, self._tables[Listing], undo),
            bookings=InMemoryBookingRepository(Booking, self._tables[Booking], undo),
            reviews=InMemoryRepository(Review, self._tables[Review], undo),
        )

    @asynccontextmanager
    async def session(self) -> AsyncIterator[Repositories]:
        undo = UndoLog()
        try:
            yield self.repositories(undo)
        except Exception:
            undo.rollback()
            raise

    def clear(self) -> None:
        for table in self._tables.values():
            table.clear()
