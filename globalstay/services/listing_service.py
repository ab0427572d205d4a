"""Listing management, search, and the public detail view."""

import logging
import uuid
from datetime import date, datetime

from globalstay.exceptions import DateRangeError, NotFoundError, OwnershipError, RequestValidationFailed
from globalstay.models.listing import PROPERTY_TYPES, TYPES_OF_PLACE, Listing
from globalstay.models.user import User
from globalstay.repositories import Condition, Repositories, any_of, eq, ge, icontains, in_, le, not_in
from globalstay.schemas.booking import BookedDateRange
from globalstay.schemas.listing import (
    ListingCreate,
    ListingDetailResponse,
    ListingResponse,
    ListingSearchResponse,
    ListingUpdate,
    MyListingsResponse,
)
from globalstay.schemas.review import ReviewView
from globalstay.services.availability import booked_ranges, unavailable_listing_ids
from globalstay.services.dates import utc_now
from globalstay.services.geocoding import Geocoder
from globalstay.services.pricing import count_nights

logger = logging.getLogger(__name__)


async def get_owned_listing(repos: Repositories, listing_id: uuid.UUID, user: User) -> Listing:
    """Load a listing and verify ``user`` owns it."""
    listing = await repos.listings.find_by_id(listing_id)
    if listing is None:
        raise NotFoundError("Listing not found")
    if listing.owner_id != user.id:
        raise OwnershipError("You are not the owner of this listing.")
    return listing


async def _locate(geocoder: Geocoder | None, address) -> tuple[float | None, float | None]:
    if geocoder is None:
        return None, None
    point = await geocoder.geocode(address)
    if point is None:
        raise RequestValidationFailed(
            "Address not found. Please check your address and try again.",
            code="address_not_found",
        )
    return point.latitude, point.longitude


async def create_listing(
    repos: Repositories,
    owner: User,
    body: ListingCreate,
    geocoder: Geocoder | None = None,
) -> Listing:
    """Geocode the address and store a new available listing for ``owner``."""
    latitude, longitude = await _locate(geocoder, body.address)
    data = body.model_dump(exclude={"address"})
    listing = Listing(
        owner_id=owner.id,
        **data,
        **body.address.model_dump(),
        latitude=latitude,
        longitude=longitude,
        status="available",
        review_ids=[],
        review_count=0,
    )
    listing = await repos.listings.save(listing)
    logger.info("Listing %s created by %s", listing.id, owner.id)
    return listing


async def update_listing(
    repos: Repositories,
    listing_id: uuid.UUID,
    user: User,
    body: ListingUpdate,
    geocoder: Geocoder | None = None,
) -> Listing:
    """Partially update a listing. Only explicitly set fields are changed."""
    listing = await get_owned_listing(repos, listing_id, user)

    update_data = body.model_dump(exclude_unset=True, exclude={"address"})
    for field, value in update_data.items():
        if value is not None:
            setattr(listing, field, value)

    if body.address is not None:
        latitude, longitude = await _locate(geocoder, body.address)
        for field, value in body.address.model_dump().items():
            setattr(listing, field, value)
        if geocoder is not None:
            listing.latitude, listing.longitude = latitude, longitude

    return await repos.listings.save(listing)


async def delete_listing(repos: Repositories, listing_id: uuid.UUID, user: User) -> None:
    """Delete a listing together with its reviews and bookings."""
    listing = await get_owned_listing(repos, listing_id, user)

    for review in await repos.reviews.find(eq("listing_id", listing.id)):
        await repos.reviews.delete_by_id(review.id)
    for booking in await repos.bookings.find(eq("listing_id", listing.id)):
        await repos.bookings.delete_by_id(booking.id)
    await repos.listings.delete_by_id(listing.id)
    logger.info("Listing %s deleted by %s", listing.id, user.id)


async def toggle_listing_status(repos: Repositories, listing_id: uuid.UUID, user: User) -> Listing:
    listing = await get_owned_listing(repos, listing_id, user)
    listing.status = "unavailable" if listing.status == "available" else "available"
    listing = await repos.listings.save(listing)
    logger.info("Listing %s status updated to %s", listing.id, listing.status)
    return listing


async def list_available_listings(repos: Repositories) -> list[Listing]:
    return await repos.listings.find(eq("status", "available"), order_by="created_at", descending=True)


async def list_my_listings(repos: Repositories, user: User) -> MyListingsResponse:
    listings = await repos.listings.find(eq("owner_id", user.id), order_by="created_at", descending=True)
    return MyListingsResponse(
        active=[ListingResponse.from_model(lst) for lst in listings if lst.status == "available"],
        inactive=[ListingResponse.from_model(lst) for lst in listings if lst.status == "unavailable"],
    )


async def user_is_host(repos: Repositories, user: User) -> bool:
    return await repos.listings.exists(eq("owner_id", user.id))


async def get_booked_dates(
    repos: Repositories,
    listing_id: uuid.UUID,
    exclude_booking_id: uuid.UUID | None = None,
) -> list[BookedDateRange]:
    """Confirmed stays on a listing, optionally without the booking being edited."""
    ranges = await booked_ranges(repos.bookings, listing_id, exclude_booking_id)
    return [BookedDateRange(start=r.check_in, end=r.check_out) for r in ranges]


async def get_listing_detail(
    repos: Repositories,
    listing_id: uuid.UUID,
    now: datetime | None = None,
) -> ListingDetailResponse:
    """Assemble the public listing page: reviews with authors, booked stays, host."""
    listing = await repos.listings.find_by_id(listing_id)
    if listing is None:
        raise NotFoundError("The listing you are looking for does not exist.")
    now = now or utc_now()

    reviews = []
    for review_id in listing.review_ids:
        review = await repos.reviews.find_by_id(uuid.UUID(review_id))
        if review is not None:
            reviews.append(review)
    author_ids = {r.author_id for r in reviews}
    authors = {u.id: u for u in await repos.users.find(in_("id", author_ids))} if author_ids else {}

    owner = await repos.users.find_by_id(listing.owner_id)
    host_years = now.year - owner.created_at.year if owner is not None and owner.created_at else 0

    return ListingDetailResponse(
        listing=ListingResponse.from_model(listing),
        reviews=[
            ReviewView(
                id=r.id,
                listing_id=r.listing_id,
                author_id=r.author_id,
                author_name=authors[r.author_id].username if r.author_id in authors else None,
                rating=r.rating,
                comment=r.comment,
                created_at=r.created_at,
            )
            for r in reviews
        ],
        booked_dates=await get_booked_dates(repos, listing.id),
        host_name=owner.username if owner is not None else None,
        host_years=host_years,
    )


# ---------------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------------


def _canonical_choice(value: str, choices: tuple[str, ...], field: str) -> str:
    """Match ``entire_home`` / ``ENTIRE HOME`` style input to a stored choice."""
    wanted = value.replace("_", " ").strip().lower()
    for choice in choices:
        if choice.lower() == wanted:
            return choice
    raise RequestValidationFailed(f"Unknown {field} {value!r}. Expected one of: {', '.join(choices)}.")


def _has_amenities(listing: Listing, wanted: list[str]) -> bool:
    have = [a.lower() for a in listing.amenities or []]
    return all(any(w.lower() in a for a in have) for w in wanted)


async def search_listings(
    repos: Repositories,
    *,
    destination: str | None = None,
    check_in: date | None = None,
    check_out: date | None = None,
    guests: int | None = None,
    min_price: float | None = None,
    max_price: float | None = None,
    bedrooms: int | None = None,
    bathrooms: int | None = None,
    type_of_place: str | None = None,
    property_type: str | None = None,
    amenities: list[str] | None = None,
) -> ListingSearchResponse:
    """Find available listings matching every supplied criterion.

    With both dates given, listings holding a confirmed booking that
    overlaps the stay are excluded.
    """
    conditions: list[Condition] = [eq("status", "available")]
    nights = 1

    if check_in is not None and check_out is not None:
        if check_out <= check_in:
            raise DateRangeError("Check-out date must be after check-in date.", code="check_out_before_check_in")
        nights = max(count_nights(check_in, check_out), 1)
        taken = await unavailable_listing_ids(repos.bookings, check_in, check_out)
        if taken:
            conditions.append(not_in("id", taken))

    if destination:
        conditions.append(
            any_of(
                icontains("city", destination),
                icontains("state", destination),
                icontains("country", destination),
            )
        )
    if guests is not None:
        conditions.append(ge("guests", guests))
    if min_price is not None:
        conditions.append(ge("price", min_price))
    if max_price is not None:
        conditions.append(le("price", max_price))
    if bedrooms is not None:
        conditions.append(ge("bedrooms", bedrooms))
    if bathrooms is not None:
        conditions.append(ge("bathrooms", bathrooms))
    if type_of_place and type_of_place != "any":
        conditions.append(eq("type_of_place", _canonical_choice(type_of_place, TYPES_OF_PLACE, "type of place")))
    if property_type:
        conditions.append(eq("property_type", _canonical_choice(property_type, PROPERTY_TYPES, "property type")))

    listings = await repos.listings.find(*conditions, order_by="created_at", descending=True)
    if amenities:
        listings = [lst for lst in listings if _has_amenities(lst, amenities)]

    return ListingSearchResponse(
        items=[ListingResponse.from_model(lst) for lst in listings],
        total=len(listings),
        nights=nights,
    )
