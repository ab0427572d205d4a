"""Pydantic v2 request/response schemas for listing endpoints."""

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from globalstay.models.listing import Listing
from globalstay.schemas.booking import BookedDateRange
from globalstay.schemas.review import ReviewView

_TYPE_OF_PLACE_PATTERN = "^(Entire home|Room)$"
_PROPERTY_TYPE_PATTERN = "^(House|Flat|Guest house|Hotel)$"

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class Address(BaseModel):
    house_number: str = Field(..., min_length=1, max_length=50)
    building_name: str = Field(..., min_length=1, max_length=255)
    street: str = Field(..., min_length=1, max_length=255)
    city: str = Field(..., min_length=1, max_length=255)
    state: str = Field(..., min_length=1, max_length=255)
    postal_code: str = Field(..., min_length=1, max_length=50)
    country: str = Field(..., min_length=1, max_length=255)


class ListingCreate(BaseModel):
    """Schema for creating a new listing."""

    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    price: Decimal = Field(..., ge=0)
    guests: int = Field(..., ge=1)
    bedrooms: int = Field(..., ge=1)
    bathrooms: int = Field(..., ge=1)
    type_of_place: str = Field(..., pattern=_TYPE_OF_PLACE_PATTERN)
    property_type: str = Field(..., pattern=_PROPERTY_TYPE_PATTERN)
    amenities: list[str] = Field(default_factory=list)
    address: Address


class ListingUpdate(BaseModel):
    """Schema for partially updating a listing. All fields optional.

    Rating aggregates and status are not editable here.
    """

    title: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = Field(None, min_length=1)
    price: Decimal | None = Field(None, ge=0)
    guests: int | None = Field(None, ge=1)
    bedrooms: int | None = Field(None, ge=1)
    bathrooms: int | None = Field(None, ge=1)
    type_of_place: str | None = Field(None, pattern=_TYPE_OF_PLACE_PATTERN)
    property_type: str | None = Field(None, pattern=_PROPERTY_TYPE_PATTERN)
    amenities: list[str] | None = None
    address: Address | None = None


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class ListingResponse(BaseModel):
    """Public listing information returned from the API."""

    id: uuid.UUID
    owner_id: uuid.UUID
    title: str
    description: str
    price: Decimal
    guests: int
    bedrooms: int
    bathrooms: int
    type_of_place: str
    property_type: str
    amenities: list[str]
    address: Address
    latitude: float | None = None
    longitude: float | None = None
    status: str
    avg_rating: Decimal
    review_count: int
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_model(cls, listing: Listing) -> "ListingResponse":
        return cls(
            id=listing.id,
            owner_id=listing.owner_id,
            title=listing.title,
            description=listing.description,
            price=listing.price,
            guests=listing.guests,
            bedrooms=listing.bedrooms,
            bathrooms=listing.bathrooms,
            type_of_place=listing.type_of_place,
            property_type=listing.property_type,
            amenities=list(listing.amenities or []),
            address=Address(
                house_number=listing.house_number,
                building_name=listing.building_name,
                street=listing.street,
                city=listing.city,
                state=listing.state,
                postal_code=listing.postal_code,
                country=listing.country,
            ),
            latitude=listing.latitude,
            longitude=listing.longitude,
            status=listing.status,
            avg_rating=listing.avg_rating,
            review_count=listing.review_count,
            created_at=listing.created_at,
            updated_at=listing.updated_at,
        )


class ListingDetailResponse(BaseModel):
    """Listing with populated reviews, booked stays, and host info."""

    listing: ListingResponse
    reviews: list[ReviewView]
    booked_dates: list[BookedDateRange]
    host_name: str | None = None
    host_years: int = 0


class ListingListResponse(BaseModel):
    items: list[ListingResponse]
    total: int


class ListingSearchResponse(ListingListResponse):
    """Search results; ``nights`` echoes the searched stay length (min 1)."""

    nights: int = 1


class MyListingsResponse(BaseModel):
    active: list[ListingResponse]
    inactive: list[ListingResponse]
