"""Booking API routes.

Guests create, edit, and cancel their own stays under a listing. Hosts see
every booking on the listings they own.
"""

import uuid

from fastapi import APIRouter, Depends, status

from globalstay.api.deps import get_current_active_user, get_repositories
from globalstay.models.user import User
from globalstay.repositories import Repositories
from globalstay.schemas.booking import BookingRequest, BookingResponse, BookingView, MyBookingsResponse
from globalstay.services import booking_service

router = APIRouter(prefix="/api/v1", tags=["bookings"])


@router.post(
    "/listings/{listing_id}/bookings",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Book a stay",
)
async def create_booking(
    listing_id: uuid.UUID,
    body: BookingRequest,
    repos: Repositories = Depends(get_repositories),
    current_user: User = Depends(get_current_active_user),
) -> BookingResponse:
    """Run the booking rules and store the stay as confirmed."""
    booking = await booking_service.create_booking(repos, listing_id, current_user, body)
    return BookingResponse.model_validate(booking)


@router.put(
    "/listings/{listing_id}/bookings/{booking_id}",
    response_model=BookingResponse,
    summary="Change a booking's stay",
)
async def update_booking(
    listing_id: uuid.UUID,
    booking_id: uuid.UUID,
    body: BookingRequest,
    repos: Repositories = Depends(get_repositories),
    current_user: User = Depends(get_current_active_user),
) -> BookingResponse:
    booking = await booking_service.update_booking(repos, listing_id, booking_id, current_user, body)
    return BookingResponse.model_validate(booking)


@router.post(
    "/listings/{listing_id}/bookings/{booking_id}/cancel",
    response_model=BookingResponse,
    summary="Cancel a booking before check-in",
)
async def cancel_booking(
    listing_id: uuid.UUID,
    booking_id: uuid.UUID,
    repos: Repositories = Depends(get_repositories),
    current_user: User = Depends(get_current_active_user),
) -> BookingResponse:
    booking = await booking_service.cancel_booking(repos, listing_id, booking_id, current_user)
    return BookingResponse.model_validate(booking)


@router.get(
    "/listings/{listing_id}/bookings",
    response_model=list[BookingView],
    summary="Bookings on a listing (owner only)",
)
async def listing_bookings(
    listing_id: uuid.UUID,
    repos: Repositories = Depends(get_repositories),
    current_user: User = Depends(get_current_active_user),
) -> list[BookingView]:
    return await booking_service.list_listing_bookings(repos, listing_id, current_user)


@router.get("/bookings/mine", response_model=MyBookingsResponse, summary="The current user's trips")
async def my_bookings(
    repos: Repositories = Depends(get_repositories),
    current_user: User = Depends(get_current_active_user),
) -> MyBookingsResponse:
    """Upcoming and ongoing stays first, then past stays most recent first."""
    return await booking_service.list_my_bookings(repos, current_user)
