"""Ordered admission rules for creating or editing a booking.

The gates run strictly one after another and the first failure wins, so the
order below decides which error a user sees when a request breaks several
rules at once:

    owner -> dates -> guests -> availability -> price

No gate writes anything. A request that passes every gate yields an
``AcceptedBooking`` carrying the normalised values the caller persists.
"""

import logging
import uuid
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from globalstay.exceptions import BookingConflictError, DateRangeError, GlobalStayError, OwnershipError
from globalstay.models.booking import Booking
from globalstay.models.listing import Listing
from globalstay.repositories import Repository
from globalstay.schemas.booking import BookingRequest
from globalstay.services.availability import find_conflicting_booking
from globalstay.services.dates import utc_today
from globalstay.services.guests import validate_guest_count
from globalstay.services.pricing import count_nights, ensure_total_matches, expected_total

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AcceptedBooking:
    check_in: date
    check_out: date
    guests: int
    total_amount: Decimal
    nights: int


@dataclass
class RuleContext:
    """State threaded through the gates for one request."""

    listing: Listing
    user_id: uuid.UUID
    request: BookingRequest
    bookings: Repository[Booking]
    today: date
    exclude_booking_id: uuid.UUID | None = None

    # Filled in as gates pass
    check_in: date | None = None
    check_out: date | None = None
    guests: int | None = None
    total_amount: Decimal | None = None


Gate = Callable[[RuleContext], Awaitable[None]]


async def check_not_owner(ctx: RuleContext) -> None:
    if ctx.listing.owner_id == ctx.user_id:
        raise OwnershipError("You cannot book your own listing.", code="self_booking")


async def check_dates(ctx: RuleContext) -> None:
    check_in, check_out = ctx.request.check_in, ctx.request.check_out
    if check_in is None or check_out is None:
        raise DateRangeError("Both check-in and check-out dates are required.", code="dates_required")
    if check_in < ctx.today:
        raise DateRangeError("Check-in date cannot be in the past.", code="check_in_in_past")
    if check_out == check_in:
        raise DateRangeError("Check-in and check-out cannot be on the same day.", code="same_day_range")
    if check_out < check_in:
        raise DateRangeError("Check-out date must be after check-in date.", code="check_out_before_check_in")
    ctx.check_in, ctx.check_out = check_in, check_out


async def check_guest_count(ctx: RuleContext) -> None:
    # Capacity comes from the listing loaded for this request, not from any
    # earlier stage.
    ctx.guests = validate_guest_count(ctx.request.guests, ctx.listing.guests)


async def check_availability(ctx: RuleContext) -> None:
    conflict = await find_conflicting_booking(
        ctx.bookings,
        ctx.listing.id,
        ctx.check_in,
        ctx.check_out,
        exclude_booking_id=ctx.exclude_booking_id,
    )
    if conflict is not None:
        raise BookingConflictError("Selected dates are not available.")


async def check_price(ctx: RuleContext) -> None:
    expected = expected_total(ctx.listing.price, ctx.check_in, ctx.check_out)
    ensure_total_matches(ctx.request.total_amount, expected)
    ctx.total_amount = expected


BOOKING_GATES: tuple[tuple[str, Gate], ...] = (
    ("owner", check_not_owner),
    ("dates", check_dates),
    ("guests", check_guest_count),
    ("availability", check_availability),
    ("price", check_price),
)


async def run_booking_rules(
    listing: Listing,
    user_id: uuid.UUID,
    request: BookingRequest,
    bookings: Repository[Booking],
    *,
    exclude_booking_id: uuid.UUID | None = None,
    today: date | None = None,
) -> AcceptedBooking:
    """Run every gate in order and return the accepted stay.

    Raises the first gate's ``GlobalStayError`` subclass on rejection.
    """
    ctx = RuleContext(
        listing=listing,
        user_id=user_id,
        request=request,
        bookings=bookings,
        today=today or utc_today(),
        exclude_booking_id=exclude_booking_id,
    )
    for name, gate in BOOKING_GATES:
        try:
            await gate(ctx)
        except GlobalStayError as exc:
            logger.info("Booking for listing %s rejected at %s gate (%s)", listing.id, name, exc.code)
            raise

    return AcceptedBooking(
        check_in=ctx.check_in,
        check_out=ctx.check_out,
        guests=ctx.guests,
        total_amount=ctx.total_amount,
        nights=count_nights(ctx.check_in, ctx.check_out),
    )
