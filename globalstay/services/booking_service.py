"""Booking lifecycle: create, edit, cancel, and dashboard views."""

import logging
import uuid
from datetime import date, datetime

from globalstay.exceptions import InvalidTransitionError, NotFoundError, OwnershipError
from globalstay.models.booking import Booking
from globalstay.models.listing import Listing
from globalstay.models.user import User
from globalstay.repositories import Repositories, eq, in_
from globalstay.schemas.booking import BookingRequest, BookingView, MyBookingsResponse
from globalstay.services.booking_rules import run_booking_rules
from globalstay.services.dates import start_of_day_utc, utc_now, utc_today
from globalstay.services.pricing import count_nights

logger = logging.getLogger(__name__)


async def _get_listing(repos: Repositories, listing_id: uuid.UUID) -> Listing:
    listing = await repos.listings.find_by_id(listing_id)
    if listing is None:
        raise NotFoundError("Listing not found")
    return listing


async def create_booking(
    repos: Repositories,
    listing_id: uuid.UUID,
    user: User,
    request: BookingRequest,
    today: date | None = None,
) -> Booking:
    """Admit a new stay through the booking rules and store it as confirmed."""
    listing = await _get_listing(repos, listing_id)
    accepted = await run_booking_rules(listing, user.id, request, repos.bookings, today=today)

    booking = Booking(
        listing_id=listing.id,
        user_id=user.id,
        check_in=accepted.check_in,
        check_out=accepted.check_out,
        guests=accepted.guests,
        total_amount=accepted.total_amount,
        status="confirmed",
    )
    booking = await repos.bookings.save(booking)
    logger.info(
        "Booking %s confirmed: listing=%s user=%s %s..%s (%d nights)",
        booking.id,
        listing.id,
        user.id,
        booking.check_in,
        booking.check_out,
        accepted.nights,
    )
    return booking


async def update_booking(
    repos: Repositories,
    listing_id: uuid.UUID,
    booking_id: uuid.UUID,
    user: User,
    request: BookingRequest,
    today: date | None = None,
) -> Booking:
    """Re-run the booking rules for new stay details and rewrite the booking.

    Only ``check_in``, ``check_out``, ``guests`` and ``total_amount`` change;
    the booking's own prior dates are excluded from the availability check.
    """
    booking = await repos.bookings.find_by_id(booking_id)
    if booking is None or booking.listing_id != listing_id:
        raise NotFoundError("Booking not found")
    listing = await _get_listing(repos, booking.listing_id)

    if booking.user_id != user.id:
        raise OwnershipError("You are not authorized to manage this booking!")
    if booking.status == "canceled":
        raise InvalidTransitionError("This booking has already been canceled!", code="already_canceled")

    accepted = await run_booking_rules(
        listing,
        user.id,
        request,
        repos.bookings,
        exclude_booking_id=booking.id,
        today=today,
    )

    booking.check_in = accepted.check_in
    booking.check_out = accepted.check_out
    booking.guests = accepted.guests
    booking.total_amount = accepted.total_amount
    booking = await repos.bookings.save(booking)
    logger.info("Booking %s updated: %s..%s guests=%d", booking.id, booking.check_in, booking.check_out, booking.guests)
    return booking


def ensure_cancellable(booking: Booking | None, user_id: uuid.UUID, now: datetime) -> Booking:
    """Check that ``user_id`` may cancel ``booking`` at instant ``now``.

    Unlike the booking date rules this compares full timestamps: a stay is
    considered started from midnight UTC of its check-in day.
    """
    if booking is None:
        raise NotFoundError("The requested booking does not exist!")
    if booking.user_id != user_id:
        raise OwnershipError("You are not authorized to manage this booking!")
    if booking.status == "canceled":
        raise InvalidTransitionError("This booking has already been canceled!", code="already_canceled")
    if booking.status != "confirmed":
        raise InvalidTransitionError("Only confirmed bookings can be canceled.", code="not_confirmed")
    if start_of_day_utc(booking.check_in) <= now:
        raise InvalidTransitionError("You cannot cancel a booking that has already started!", code="already_started")
    return booking


async def cancel_booking(
    repos: Repositories,
    listing_id: uuid.UUID,
    booking_id: uuid.UUID,
    user: User,
    now: datetime | None = None,
) -> Booking:
    booking = await repos.bookings.find_by_id(booking_id)
    if booking is not None and booking.listing_id != listing_id:
        booking = None
    booking = ensure_cancellable(booking, user.id, now or utc_now())

    booking.status = "canceled"
    booking = await repos.bookings.save(booking)
    logger.info("Booking %s canceled by user %s", booking.id, user.id)
    return booking


# ---------------------------------------------------------------------------
# Views
# ---------------------------------------------------------------------------


def display_status(booking: Booking, today: date) -> str:
    """Presentation status; ``completed`` is derived and never persisted."""
    if booking.status == "confirmed" and booking.check_out < today:
        return "completed"
    return booking.status


async def build_booking_views(
    repos: Repositories,
    bookings: list[Booking],
    today: date | None = None,
) -> list[BookingView]:
    """Project bookings into read-only views with listing title and guest name."""
    today = today or utc_today()
    listing_ids = {b.listing_id for b in bookings}
    user_ids = {b.user_id for b in bookings}
    listings = {lst.id: lst for lst in await repos.listings.find(in_("id", listing_ids))} if listing_ids else {}
    users = {u.id: u for u in await repos.users.find(in_("id", user_ids))} if user_ids else {}

    views = []
    for booking in bookings:
        listing = listings.get(booking.listing_id)
        guest = users.get(booking.user_id)
        views.append(
            BookingView(
                id=booking.id,
                listing_id=booking.listing_id,
                listing_title=listing.title if listing else None,
                guest_id=booking.user_id,
                guest_name=guest.username if guest else None,
                check_in=booking.check_in,
                check_out=booking.check_out,
                nights=count_nights(booking.check_in, booking.check_out),
                guests=booking.guests,
                total_amount=booking.total_amount,
                status=booking.status,
                display_status=display_status(booking, today),
                created_at=booking.created_at,
            )
        )
    return views


async def list_my_bookings(repos: Repositories, user: User, today: date | None = None) -> MyBookingsResponse:
    """Split the user's bookings into upcoming/ongoing and past stays."""
    today = today or utc_today()
    bookings = await repos.bookings.find(eq("user_id", user.id))
    current = sorted((b for b in bookings if b.check_out >= today), key=lambda b: b.check_in)
    past = sorted((b for b in bookings if b.check_out < today), key=lambda b: b.check_in, reverse=True)
    return MyBookingsResponse(
        current=await build_booking_views(repos, current, today),
        past=await build_booking_views(repos, past, today),
    )


async def list_listing_bookings(
    repos: Repositories,
    listing_id: uuid.UUID,
    user: User,
    today: date | None = None,
) -> list[BookingView]:
    """All bookings on a listing, for its owner."""
    listing = await _get_listing(repos, listing_id)
    if listing.owner_id != user.id:
        raise OwnershipError("You are not the owner of this listing.")
    bookings = await repos.bookings.find(eq("listing_id", listing.id), order_by="check_in")
    return await build_booking_views(repos, bookings, today)
