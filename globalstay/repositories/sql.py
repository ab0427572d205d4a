"""PostgreSQL storage backend built on the async SQLAlchemy ORM."""

import logging
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy import ColumnElement, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from globalstay.database import create_session_factory
from globalstay.exceptions import BookingConflictError, StaleEntityError
from globalstay.models import Booking, Listing, Review, User
from globalstay.models.booking import CONFIRMED_OVERLAP_CONSTRAINT
from globalstay.repositories.base import AnyOf, Condition, Filter, ModelT, Repositories, Repository, Storage

logger = logging.getLogger(__name__)


class SqlAlchemyRepository(Repository[ModelT]):
    def __init__(self, session: AsyncSession, model: type[ModelT]):
        self.model = model
        self._session = session

    def _column(self, field: str):
        try:
            return getattr(self.model, field)
        except AttributeError:
            raise ValueError(f"Unknown field {field!r}") from None

    def _condition(self, condition: Condition) -> ColumnElement[bool]:
        if isinstance(condition, AnyOf):
            return or_(*(self._condition(f) for f in condition.filters))
        return self._filter(condition)

    def _filter(self, f: Filter) -> ColumnElement[bool]:
        column = self._column(f.field)
        match f.op:
            case "eq":
                return column == f.value
            case "ne":
                return column != f.value
            case "lt":
                return column < f.value
            case "le":
                return column <= f.value
            case "gt":
                return column > f.value
            case "ge":
                return column >= f.value
            case "in":
                return column.in_(f.value)
            case "not_in":
                return column.not_in(f.value)
            case "icontains":
                return column.icontains(f.value, autoescape=True)
        raise ValueError(f"Unsupported filter operator {f.op!r}")

    async def find_by_id(self, entity_id: uuid.UUID) -> ModelT | None:
        return await self._session.get(self.model, entity_id)

    async def find(
        self,
        *conditions: Condition,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[ModelT]:
        query = select(self.model).where(*(self._condition(c) for c in conditions))
        if order_by is not None:
            column = self._column(order_by)
            query = query.order_by(column.desc() if descending else column.asc())
        if limit is not None:
            query = query.limit(limit)
        result = await self._session.execute(query)
        return list(result.scalars().all())

    async def save(self, entity: ModelT) -> ModelT:
        self._session.add(entity)
        try:
            await self._session.flush()
        except StaleDataError:
            logger.warning("Stale %s %s rejected on flush", self.model.__name__, entity.id)
            raise StaleEntityError(f"{self.model.__name__} was modified by another request. Please try again.") from None
        except IntegrityError as exc:
            if CONFIRMED_OVERLAP_CONSTRAINT in str(exc.orig):
                logger.warning("Exclusion constraint refused overlapping booking %s", entity.id)
                raise BookingConflictError("Selected dates are not available.") from None
            raise
        await self._session.refresh(entity)
        return entity

    async def delete_by_id(self, entity_id: uuid.UUID) -> bool:
        entity = await self.find_by_id(entity_id)
        if entity is None:
            return False
        await self._session.delete(entity)
        await self._session.flush()
        return True


class SqlAlchemyStorage(Storage):
    def __init__(self, engine: AsyncEngine):
        self._engine = engine
        self._session_factory = create_session_factory(engine)

    @asynccontextmanager
    async def session(self) -> AsyncIterator[Repositories]:
        async with self._session_factory() as session:
            try:
                yield Repositories(
                    users=SqlAlchemyRepository(session, User),
                    listings=SqlAlchemyRepository(session, Listing),
                    bookings=SqlAlchemyRepository(session, Booking),
                    reviews=SqlAlchemyRepository(session, Review),
                )
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def dispose(self) -> None:
        await self._engine.dispose()
