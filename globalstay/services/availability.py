"""Date-range overlap detection against confirmed bookings.

Stays are half-open intervals ``[check_in, check_out)``: a guest checking
out on day N never conflicts with another guest checking in on day N.
"""

import logging
import uuid
from datetime import date
from typing import NamedTuple, Protocol

from globalstay.models.booking import Booking
from globalstay.repositories import Repository, eq, gt, lt, ne

logger = logging.getLogger(__name__)


class Stay(Protocol):
    check_in: date
    check_out: date


class StayRange(NamedTuple):
    check_in: date
    check_out: date


def overlaps(existing: Stay, candidate: Stay) -> bool:
    """Return True when two half-open stays share at least one night."""
    return existing.check_in < candidate.check_out and candidate.check_in < existing.check_out


def _confirmed_overlap_filters(listing_id: uuid.UUID | None, check_in: date, check_out: date) -> list:
    filters = [
        eq("status", "confirmed"),
        lt("check_in", check_out),
        gt("check_out", check_in),
    ]
    if listing_id is not None:
        filters.insert(0, eq("listing_id", listing_id))
    return filters


async def find_conflicting_booking(
    bookings: Repository[Booking],
    listing_id: uuid.UUID,
    check_in: date,
    check_out: date,
    exclude_booking_id: uuid.UUID | None = None,
) -> Booking | None:
    """Return a confirmed booking on ``listing_id`` overlapping the stay, if any.

    ``exclude_booking_id`` removes the booking being edited from the
    candidate set so an update never conflicts with its own prior dates.
    """
    filters = _confirmed_overlap_filters(listing_id, check_in, check_out)
    if exclude_booking_id is not None:
        filters.append(ne("id", exclude_booking_id))
    conflict = await bookings.find_one(*filters)
    if conflict is not None:
        logger.debug("Stay %s..%s on listing %s overlaps booking %s", check_in, check_out, listing_id, conflict.id)
    return conflict


async def unavailable_listing_ids(
    bookings: Repository[Booking],
    check_in: date,
    check_out: date,
) -> set[uuid.UUID]:
    """Listings with at least one confirmed booking overlapping the stay."""
    found = await bookings.find(*_confirmed_overlap_filters(None, check_in, check_out))
    return {b.listing_id for b in found}


async def booked_ranges(
    bookings: Repository[Booking],
    listing_id: uuid.UUID,
    exclude_booking_id: uuid.UUID | None = None,
) -> list[StayRange]:
    """Confirmed stays on a listing, ordered by check-in."""
    filters = [eq("listing_id", listing_id), eq("status", "confirmed")]
    if exclude_booking_id is not None:
        filters.append(ne("id", exclude_booking_id))
    found = await bookings.find(*filters, order_by="check_in")
    return [StayRange(b.check_in, b.check_out) for b in found]
