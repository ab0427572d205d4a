"""Listing API routes: public browsing and search, owner-scoped management."""

import uuid
from datetime import date

from fastapi import APIRouter, Depends, Query, status

from globalstay.api.deps import get_current_active_user, get_geocoder, get_repositories
from globalstay.models.user import User
from globalstay.repositories import Repositories
from globalstay.schemas.auth import MessageResponse
from globalstay.schemas.booking import BookedDateRange
from globalstay.schemas.listing import (
    ListingCreate,
    ListingDetailResponse,
    ListingListResponse,
    ListingResponse,
    ListingSearchResponse,
    ListingUpdate,
    MyListingsResponse,
)
from globalstay.services import listing_service
from globalstay.services.geocoding import Geocoder

router = APIRouter(prefix="/api/v1/listings", tags=["listings"])


@router.post(
    "",
    response_model=ListingResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new listing",
)
async def create_listing(
    body: ListingCreate,
    repos: Repositories = Depends(get_repositories),
    geocoder: Geocoder | None = Depends(get_geocoder),
    current_user: User = Depends(get_current_active_user),
) -> ListingResponse:
    """Create a listing owned by the authenticated user, geocoding its address."""
    listing = await listing_service.create_listing(repos, current_user, body, geocoder)
    return ListingResponse.from_model(listing)


@router.get("", response_model=ListingListResponse, summary="List available listings")
async def list_listings(repos: Repositories = Depends(get_repositories)) -> ListingListResponse:
    listings = await listing_service.list_available_listings(repos)
    return ListingListResponse(items=[ListingResponse.from_model(lst) for lst in listings], total=len(listings))


@router.get("/search", response_model=ListingSearchResponse, summary="Search available listings")
async def search_listings(
    destination: str | None = Query(None),
    check_in: date | None = Query(None),
    check_out: date | None = Query(None),
    guests: int | None = Query(None, ge=1),
    min_price: float | None = Query(None, ge=0),
    max_price: float | None = Query(None, ge=0),
    bedrooms: int | None = Query(None, ge=0),
    bathrooms: int | None = Query(None, ge=0),
    type_of_place: str | None = Query(None),
    property_type: str | None = Query(None),
    amenities: list[str] | None = Query(None),
    repos: Repositories = Depends(get_repositories),
) -> ListingSearchResponse:
    """Filter available listings by destination, stay, capacity, price, and features."""
    return await listing_service.search_listings(
        repos,
        destination=destination,
        check_in=check_in,
        check_out=check_out,
        guests=guests,
        min_price=min_price,
        max_price=max_price,
        bedrooms=bedrooms,
        bathrooms=bathrooms,
        type_of_place=type_of_place,
        property_type=property_type,
        amenities=amenities,
    )


@router.get("/mine", response_model=MyListingsResponse, summary="Listings owned by the current user")
async def my_listings(
    repos: Repositories = Depends(get_repositories),
    current_user: User = Depends(get_current_active_user),
) -> MyListingsResponse:
    return await listing_service.list_my_listings(repos, current_user)


@router.get("/{listing_id}", response_model=ListingDetailResponse, summary="Get a listing by ID")
async def get_listing(
    listing_id: uuid.UUID,
    repos: Repositories = Depends(get_repositories),
) -> ListingDetailResponse:
    """Listing with its reviews, confirmed stays, and host details."""
    return await listing_service.get_listing_detail(repos, listing_id)


@router.get(
    "/{listing_id}/booked-dates",
    response_model=list[BookedDateRange],
    summary="Confirmed stays on a listing",
)
async def booked_dates(
    listing_id: uuid.UUID,
    exclude_booking_id: uuid.UUID | None = Query(None),
    repos: Repositories = Depends(get_repositories),
) -> list[BookedDateRange]:
    """Date ranges a calendar should block; pass ``exclude_booking_id`` when editing."""
    return await listing_service.get_booked_dates(repos, listing_id, exclude_booking_id)


@router.put("/{listing_id}", response_model=ListingResponse, summary="Update a listing")
async def update_listing(
    listing_id: uuid.UUID,
    body: ListingUpdate,
    repos: Repositories = Depends(get_repositories),
    geocoder: Geocoder | None = Depends(get_geocoder),
    current_user: User = Depends(get_current_active_user),
) -> ListingResponse:
    """Partially update a listing. Only explicitly set fields are changed."""
    listing = await listing_service.update_listing(repos, listing_id, current_user, body, geocoder)
    return ListingResponse.from_model(listing)


@router.post("/{listing_id}/toggle-status", response_model=ListingResponse, summary="Toggle listing availability")
async def toggle_status(
    listing_id: uuid.UUID,
    repos: Repositories = Depends(get_repositories),
    current_user: User = Depends(get_current_active_user),
) -> ListingResponse:
    listing = await listing_service.toggle_listing_status(repos, listing_id, current_user)
    return ListingResponse.from_model(listing)


@router.delete("/{listing_id}", response_model=MessageResponse, summary="Delete a listing")
async def delete_listing(
    listing_id: uuid.UUID,
    repos: Repositories = Depends(get_repositories),
    current_user: User = Depends(get_current_active_user),
) -> MessageResponse:
    """Delete a listing along with its reviews and bookings."""
    await listing_service.delete_listing(repos, listing_id, current_user)
    return MessageResponse(message="Listing deleted")
