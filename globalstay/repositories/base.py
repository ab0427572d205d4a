"""Persistence adapter interface.

Services depend only on ``Repository`` and ``Repositories``; the concrete
store (SQLAlchemy or in-memory) is picked once at process startup and
handed out per request through ``Storage.session()``.
"""

import uuid
from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from globalstay.database import Base
from globalstay.models import Booking, Listing, Review, User

ModelT = TypeVar("ModelT", bound=Base)

OPERATORS = frozenset({"eq", "ne", "lt", "le", "gt", "ge", "in", "not_in", "icontains"})


@dataclass(frozen=True)
class Filter:
    """A single ``field <op> value`` predicate on an entity attribute."""

    field: str
    op: str
    value: Any

    def __post_init__(self) -> None:
        if self.op not in OPERATORS:
            raise ValueError(f"Unsupported filter operator {self.op!r}")


@dataclass(frozen=True)
class AnyOf:
    """Disjunction of filters; matches when at least one filter matches."""

    filters: tuple[Filter, ...]


Condition = Filter | AnyOf


def eq(field: str, value: Any) -> Filter:
    return Filter(field, "eq", value)


def ne(field: str, value: Any) -> Filter:
    return Filter(field, "ne", value)


def lt(field: str, value: Any) -> Filter:
    return Filter(field, "lt", value)


def le(field: str, value: Any) -> Filter:
    return Filter(field, "le", value)


def gt(field: str, value: Any) -> Filter:
    return Filter(field, "gt", value)


def ge(field: str, value: Any) -> Filter:
    return Filter(field, "ge", value)


def in_(field: str, values: Any) -> Filter:
    return Filter(field, "in", tuple(values))


def not_in(field: str, values: Any) -> Filter:
    return Filter(field, "not_in", tuple(values))


def icontains(field: str, value: str) -> Filter:
    """Case-insensitive substring match."""
    return Filter(field, "icontains", value)


def any_of(*filters: Filter) -> AnyOf:
    return AnyOf(tuple(filters))


class Repository(ABC, Generic[ModelT]):
    """CRUD contract for one entity type."""

    model: type[ModelT]

    @abstractmethod
    async def find_by_id(self, entity_id: uuid.UUID) -> ModelT | None:
        """Return the entity with ``entity_id`` or ``None``."""

    @abstractmethod
    async def find(
        self,
        *conditions: Condition,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[ModelT]:
        """Return all entities matching every condition."""

    @abstractmethod
    async def save(self, entity: ModelT) -> ModelT:
        """Insert or update ``entity``.

        Assigns identity and revision on first save. Raises
        ``StaleEntityError`` when the stored revision moved on since the
        entity was loaded.
        """

    @abstractmethod
    async def delete_by_id(self, entity_id: uuid.UUID) -> bool:
        """Delete the entity; return ``False`` when it did not exist."""

    async def find_one(self, *conditions: Condition) -> ModelT | None:
        found = await self.find(*conditions, limit=1)
        return found[0] if found else None

    async def exists(self, *conditions: Condition) -> bool:
        return await self.find_one(*conditions) is not None


@dataclass
class Repositories:
    """Per-request bundle of repositories sharing one unit of work."""

    users: Repository[User]
    listings: Repository[Listing]
    bookings: Repository[Booking]
    reviews: Repository[Review]


class Storage(ABC):
    """Process-wide storage backend handed to the app at startup."""

    @abstractmethod
    def session(self) -> AbstractAsyncContextManager[Repositories]:
        """Open a unit of work; commit on clean exit, roll back on error."""

    async def dispose(self) -> None:
        """Release backend resources on shutdown."""
        return None
