"""Builders for users, listings, and request payloads used across tests."""

import uuid
from datetime import timedelta
from decimal import Decimal

from globalstay.auth.jwt import create_token_pair
from globalstay.auth.passwords import hash_password
from globalstay.models import Booking, Listing, User
from globalstay.repositories import Repositories
from globalstay.services.dates import utc_today
from globalstay.services.geocoding import GeoPoint

TEST_PASSWORD = "testpass123"


class FakeGeocoder:
    """Resolves every address except those in the city ``Nowhere``."""

    def __init__(self) -> None:
        self.calls: list[str] = []

    async def geocode(self, address) -> GeoPoint | None:
        self.calls.append(address.city)
        if address.city == "Nowhere":
            return None
        return GeoPoint(latitude=38.72, longitude=-9.14)


def future_stay(offset: int = 30, nights: int = 3) -> tuple[str, str]:
    """Return a (check_in, check_out) pair in the future as ISO strings."""
    check_in = utc_today() + timedelta(days=offset)
    return check_in.isoformat(), (check_in + timedelta(days=nights)).isoformat()


def address_payload(**overrides) -> dict:
    data = {
        "house_number": "12",
        "building_name": "Casa do Largo",
        "street": "Rua de São Miguel",
        "city": "Lisbon",
        "state": "Lisbon",
        "postal_code": "1100-544",
        "country": "Portugal",
    }
    data.update(overrides)
    return data


def listing_payload(**overrides) -> dict:
    data = {
        "title": "Sunny Alfama flat",
        "description": "Two bedrooms near the tram.",
        "price": "100.00",
        "guests": 4,
        "bedrooms": 2,
        "bathrooms": 1,
        "type_of_place": "Entire home",
        "property_type": "Flat",
        "amenities": ["Wifi", "Kitchen"],
        "address": address_payload(),
    }
    data.update(overrides)
    return data


def headers_for(user: User) -> dict[str, str]:
    tokens = create_token_pair(str(user.id))
    return {"Authorization": f"Bearer {tokens['access_token']}"}


async def make_user(repos: Repositories, username: str, **overrides) -> User:
    unique = uuid.uuid4().hex[:8]
    fields = {
        "email": f"{username.lower()}-{unique}@test.com",
        "username": username,
        "hashed_password": hash_password(TEST_PASSWORD),
        "is_active": True,
    }
    fields.update(overrides)
    return await repos.users.save(User(**fields))


async def make_listing(repos: Repositories, owner: User, **overrides) -> Listing:
    fields = {
        "owner_id": owner.id,
        "title": "Sunny Alfama flat",
        "description": "Two bedrooms near the tram.",
        "price": Decimal("100.00"),
        "guests": 4,
        "bedrooms": 2,
        "bathrooms": 1,
        "type_of_place": "Entire home",
        "property_type": "Flat",
        "amenities": ["Wifi", "Kitchen"],
        "status": "available",
        "review_ids": [],
        **address_payload(),
    }
    fields.update(overrides)
    return await repos.listings.save(Listing(**fields))


async def make_booking(
    repos: Repositories,
    listing: Listing,
    user: User,
    offset: int,
    nights: int,
    status: str = "confirmed",
    guests: int = 2,
) -> Booking:
    """Store a booking directly, bypassing the booking rules (past stays allowed)."""
    check_in = utc_today() + timedelta(days=offset)
    check_out = check_in + timedelta(days=nights)
    return await repos.bookings.save(
        Booking(
            listing_id=listing.id,
            user_id=user.id,
            check_in=check_in,
            check_out=check_out,
            guests=guests,
            total_amount=listing.price * nights,
            status=status,
        )
    )
