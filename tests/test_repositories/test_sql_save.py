"""Tests for how the SQLAlchemy backend maps flush failures (no database needed)."""

import uuid

import pytest
from sqlalchemy import CheckConstraint
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm.exc import StaleDataError

from globalstay.exceptions import BookingConflictError, StaleEntityError
from globalstay.models import Booking, User
from globalstay.repositories.sql import SqlAlchemyRepository


class FailingSession:
    """Stands in for an AsyncSession whose flush raises ``error``."""

    def __init__(self, error: Exception):
        self.error = error
        self.added = []
        self.refreshed = False

    def add(self, entity) -> None:
        self.added.append(entity)

    async def flush(self) -> None:
        raise self.error

    async def refresh(self, entity) -> None:
        self.refreshed = True


def _integrity_error(message: str) -> IntegrityError:
    return IntegrityError("INSERT INTO bookings ...", {}, Exception(message))


async def test_stale_flush_becomes_stale_entity_error():
    session = FailingSession(StaleDataError("UPDATE statement on table 'users' expected to update 1 row(s)"))
    repo = SqlAlchemyRepository(session, User)

    with pytest.raises(StaleEntityError):
        await repo.save(User(id=uuid.uuid4(), email="a@example.com", username="A"))
    assert not session.refreshed


async def test_overlap_exclusion_becomes_booking_conflict():
    session = FailingSession(
        _integrity_error('conflicting key value violates exclusion constraint "ex_bookings_confirmed_overlap"')
    )
    repo = SqlAlchemyRepository(session, Booking)

    with pytest.raises(BookingConflictError):
        await repo.save(Booking(status="confirmed"))


async def test_other_integrity_errors_propagate():
    session = FailingSession(_integrity_error('new row violates check constraint "ck_bookings_status"'))
    repo = SqlAlchemyRepository(session, Booking)

    with pytest.raises(IntegrityError):
        await repo.save(Booking(status="completed"))


def test_booking_status_check_constraint():
    checks = {c.name: str(c.sqltext) for c in Booking.__table__.constraints if isinstance(c, CheckConstraint)}

    assert "ck_bookings_status" in checks
    for status in ("pending", "confirmed", "canceled"):
        assert f"'{status}'" in checks["ck_bookings_status"]
    assert "completed" not in checks["ck_bookings_status"]
