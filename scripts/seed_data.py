"""Seed the database with sample hosts, listings, stays, and reviews.

Idempotent: the demo accounts and everything they own are removed and
recreated on every run.

Run from the repository root:
    python -m scripts.seed_data
"""

import asyncio
from datetime import timedelta
from decimal import Decimal

from globalstay.auth.passwords import hash_password
from globalstay.config import settings
from globalstay.database import create_engine
from globalstay.models import Booking, Listing, User
from globalstay.repositories import Repositories, eq, in_
from globalstay.repositories.sql import SqlAlchemyStorage
from globalstay.services.dates import utc_today
from globalstay.services.pricing import expected_total
from globalstay.services.review_service import add_review

# ---------------------------------------------------------------------------
# Seed data definitions
# ---------------------------------------------------------------------------

DEMO_PASSWORD = "demo1234"

HOSTS = [
    {"email": "host.lisbon@globalstay.dev", "username": "Marta"},
    {"email": "host.kyoto@globalstay.dev", "username": "Haruki"},
]

GUESTS = [
    {"email": "guest.ana@globalstay.dev", "username": "Ana"},
    {"email": "guest.tom@globalstay.dev", "username": "Tom"},
]

LISTINGS = [
    {
        "host": 0,
        "title": "Sunny Alfama flat with river view",
        "description": "Two-bedroom flat on a quiet lane, five minutes from the tram 28 stop.",
        "price": Decimal("95.00"),
        "guests": 4,
        "bedrooms": 2,
        "bathrooms": 1,
        "type_of_place": "Entire home",
        "property_type": "Flat",
        "amenities": ["Wifi", "Kitchen", "Washer", "Air conditioning"],
        "house_number": "12",
        "building_name": "Casa do Largo",
        "street": "Rua de São Miguel",
        "city": "Lisbon",
        "state": "Lisbon",
        "postal_code": "1100-544",
        "country": "Portugal",
        "latitude": 38.7115,
        "longitude": -9.1290,
    },
    {
        "host": 0,
        "title": "Private room near Príncipe Real garden",
        "description": "Bright double room in a shared townhouse with a rooftop terrace.",
        "price": Decimal("48.50"),
        "guests": 2,
        "bedrooms": 1,
        "bathrooms": 1,
        "type_of_place": "Room",
        "property_type": "House",
        "amenities": ["Wifi", "Heating"],
        "house_number": "3",
        "building_name": "Townhouse",
        "street": "Rua da Escola Politécnica",
        "city": "Lisbon",
        "state": "Lisbon",
        "postal_code": "1250-100",
        "country": "Portugal",
        "latitude": 38.7170,
        "longitude": -9.1490,
    },
    {
        "host": 1,
        "title": "Machiya guest house in Higashiyama",
        "description": "Restored wooden townhouse with tatami rooms and a small garden.",
        "price": Decimal("180.00"),
        "guests": 6,
        "bedrooms": 3,
        "bathrooms": 2,
        "type_of_place": "Entire home",
        "property_type": "Guest house",
        "amenities": ["Wifi", "Kitchen", "Free parking", "Garden"],
        "house_number": "8",
        "building_name": "Ishibe Machiya",
        "street": "Shimokawara-cho",
        "city": "Kyoto",
        "state": "Kyoto",
        "postal_code": "605-0825",
        "country": "Japan",
        "latitude": 34.9987,
        "longitude": 135.7790,
    },
]

# (listing index, guest index, start offset from today in days, nights, status)
STAYS = [
    (0, 0, -30, 4, "confirmed"),
    (0, 1, 10, 3, "confirmed"),
    (0, 0, 20, 2, "canceled"),
    (1, 1, -12, 2, "confirmed"),
    (2, 0, 45, 5, "confirmed"),
]

# (listing index, guest index, rating, comment)
REVIEWS = [
    (0, 0, 5, "Spotless flat and the view at sunset is unbeatable."),
    (0, 1, 4, "Great location, a bit noisy on Saturday night."),
    (1, 1, 4, "Lovely host, comfortable bed."),
]


async def _clear_demo_data(repos: Repositories) -> None:
    emails = [u["email"] for u in HOSTS + GUESTS]
    users = await repos.users.find(in_("email", emails))
    user_ids = {u.id for u in users}
    if not user_ids:
        return
    print(f"⚠️  Found {len(users)} demo accounts. Deleting and re-seeding...")

    listings = await repos.listings.find(in_("owner_id", user_ids))
    listing_ids = {lst.id for lst in listings}
    for review in await repos.reviews.find(in_("author_id", user_ids)):
        await repos.reviews.delete_by_id(review.id)
    for booking in await repos.bookings.find(in_("user_id", user_ids)):
        await repos.bookings.delete_by_id(booking.id)
    for listing_id in listing_ids:
        for review in await repos.reviews.find(eq("listing_id", listing_id)):
            await repos.reviews.delete_by_id(review.id)
        for booking in await repos.bookings.find(eq("listing_id", listing_id)):
            await repos.bookings.delete_by_id(booking.id)
        await repos.listings.delete_by_id(listing_id)
    for user_id in user_ids:
        await repos.users.delete_by_id(user_id)


async def seed() -> None:
    """Populate the database with sample marketplace data."""
    storage = SqlAlchemyStorage(create_engine(settings.async_database_url))
    try:
        async with storage.session() as repos:
            await _clear_demo_data(repos)

            password_hash = hash_password(DEMO_PASSWORD)
            hosts = [
                await repos.users.save(User(hashed_password=password_hash, is_active=True, **data)) for data in HOSTS
            ]
            guests = [
                await repos.users.save(User(hashed_password=password_hash, is_active=True, **data)) for data in GUESTS
            ]
            print(f"✅ Created {len(hosts)} hosts and {len(guests)} guests")

            listings: list[Listing] = []
            for data in LISTINGS:
                fields = {k: v for k, v in data.items() if k != "host"}
                listing = await repos.listings.save(
                    Listing(owner_id=hosts[data["host"]].id, status="available", review_ids=[], **fields)
                )
                listings.append(listing)
                print(f"   🏠 {listing.title} ({listing.city}, ${listing.price}/night)")

            # Written directly so past stays can be seeded.
            today = utc_today()
            for listing_idx, guest_idx, offset, nights, status in STAYS:
                listing = listings[listing_idx]
                check_in = today + timedelta(days=offset)
                check_out = check_in + timedelta(days=nights)
                await repos.bookings.save(
                    Booking(
                        listing_id=listing.id,
                        user_id=guests[guest_idx].id,
                        check_in=check_in,
                        check_out=check_out,
                        guests=min(2, listing.guests),
                        total_amount=expected_total(listing.price, check_in, check_out),
                        status=status,
                    )
                )
            print(f"✅ Created {len(STAYS)} bookings")

            for listing_idx, guest_idx, rating, comment in REVIEWS:
                await add_review(repos, listings[listing_idx].id, guests[guest_idx], rating, comment)
            print(f"✅ Created {len(REVIEWS)} reviews")
    finally:
        await storage.dispose()

    print()
    print("=" * 60)
    print(f"   Password for every demo account: {DEMO_PASSWORD}")
    print("=" * 60)
    print("🎉 Done! You can now log in at /api/v1/auth/login")


if __name__ == "__main__":
    asyncio.run(seed())
