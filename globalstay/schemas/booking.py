"""Pydantic v2 request/response schemas for booking endpoints."""

import uuid
from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from globalstay.services.dates import to_stay_date

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class BookingRequest(BaseModel):
    """Stay details submitted to create or edit a booking.

    Date presence and ordering are deliberately not enforced here; they are
    checked by the booking rules after the ownership gate.
    """

    check_in: date | None = None
    check_out: date | None = None
    guests: int
    total_amount: Decimal = Field(..., ge=0)

    @field_validator("check_in", "check_out", mode="before")
    @classmethod
    def _parse_stay_date(cls, value: object) -> object:
        if value is None or value == "":
            return None
        if isinstance(value, (str, date, datetime)):
            return to_stay_date(value)
        return value


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class BookingResponse(BaseModel):
    """Stored booking as written by create/update/cancel."""

    id: uuid.UUID
    listing_id: uuid.UUID
    user_id: uuid.UUID
    check_in: date
    check_out: date
    guests: int
    total_amount: Decimal
    status: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class BookingView(BaseModel):
    """Read-only booking projection for guest and host dashboards.

    ``display_status`` is ``completed`` for confirmed stays whose check-out
    date has passed; it is never written back.
    """

    id: uuid.UUID
    listing_id: uuid.UUID
    listing_title: str | None = None
    guest_id: uuid.UUID
    guest_name: str | None = None
    check_in: date
    check_out: date
    nights: int
    guests: int
    total_amount: Decimal
    status: str
    display_status: str
    created_at: datetime


class MyBookingsResponse(BaseModel):
    """A guest's bookings split around today."""

    current: list[BookingView]
    past: list[BookingView]


class BookedDateRange(BaseModel):
    start: date
    end: date
