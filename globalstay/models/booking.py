"""Booking model: a guest's reservation of a listing for a date range."""

import uuid
from datetime import date
from decimal import Decimal

from sqlalchemy import CheckConstraint, Date, ForeignKey, Index, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from globalstay.database import Base, TimestampMixin, UUIDPrimaryKeyMixin, VersionedMixin

# Persisted status values. "completed" is derived at read time and never stored.
BOOKING_STATUSES = ("pending", "confirmed", "canceled")

# Name of the PostgreSQL exclusion constraint that forbids overlapping
# confirmed stays on one listing (see the initial Alembic migration).
CONFIRMED_OVERLAP_CONSTRAINT = "ex_bookings_confirmed_overlap"


class Booking(UUIDPrimaryKeyMixin, TimestampMixin, VersionedMixin, Base):
    """A reservation over the half-open interval ``[check_in, check_out)``."""

    __tablename__ = "bookings"

    listing_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("listings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    check_in: Mapped[date] = mapped_column(Date, nullable=False)
    check_out: Mapped[date] = mapped_column(Date, nullable=False)
    guests: Mapped[int] = mapped_column(Integer, nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="confirmed",
        index=True,
    )  # pending, confirmed, canceled

    __table_args__ = (
        CheckConstraint("status IN ('pending', 'confirmed', 'canceled')", name="ck_bookings_status"),
        Index("ix_bookings_listing_dates", "listing_id", "check_in", "check_out"),
    )

    def __repr__(self) -> str:
        return f"<Booking(id={self.id}, listing_id={self.listing_id}, user_id={self.user_id}, status={self.status})>"
