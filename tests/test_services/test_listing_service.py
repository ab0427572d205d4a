"""Tests for listing management, the detail view, and search."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from factories import FakeGeocoder, listing_payload, make_booking, make_listing

from globalstay.exceptions import DateRangeError, OwnershipError, RequestValidationFailed
from globalstay.schemas.listing import ListingCreate, ListingUpdate
from globalstay.services import listing_service
from globalstay.services.dates import utc_today
from globalstay.services.review_service import add_review


class TestCreateListing:
    async def test_geocoded_and_available(self, repos, host):
        geocoder = FakeGeocoder()
        listing = await listing_service.create_listing(repos, host, ListingCreate(**listing_payload()), geocoder)

        assert listing.status == "available"
        assert (listing.latitude, listing.longitude) == (38.72, -9.14)
        assert listing.avg_rating == Decimal("0")
        assert listing.review_count == 0
        assert geocoder.calls == ["Lisbon"]

    async def test_unknown_address_rejected(self, repos, host):
        body = ListingCreate(**listing_payload(address={**listing_payload()["address"], "city": "Nowhere"}))
        with pytest.raises(RequestValidationFailed) as exc_info:
            await listing_service.create_listing(repos, host, body, FakeGeocoder())
        assert exc_info.value.code == "address_not_found"
        assert await repos.listings.find() == []

    async def test_without_geocoder_has_no_coordinates(self, repos, host):
        listing = await listing_service.create_listing(repos, host, ListingCreate(**listing_payload()), None)
        assert listing.latitude is None


class TestManageListing:
    async def test_update_only_set_fields(self, repos, listing, host):
        updated = await listing_service.update_listing(
            repos, listing.id, host, ListingUpdate(price=Decimal("120.00"))
        )
        assert updated.price == Decimal("120.00")
        assert updated.title == listing.title

    async def test_non_owner_cannot_update(self, repos, listing, guest):
        with pytest.raises(OwnershipError):
            await listing_service.update_listing(repos, listing.id, guest, ListingUpdate(title="Mine now"))

    async def test_toggle_status(self, repos, listing, host):
        paused = await listing_service.toggle_listing_status(repos, listing.id, host)
        assert paused.status == "unavailable"
        resumed = await listing_service.toggle_listing_status(repos, listing.id, host)
        assert resumed.status == "available"

    async def test_delete_removes_reviews_and_bookings(self, repos, listing, host, guest):
        await make_booking(repos, listing, guest, offset=5, nights=2)
        await add_review(repos, listing.id, guest, 5, "Great")

        await listing_service.delete_listing(repos, listing.id, host)

        assert await repos.listings.find_by_id(listing.id) is None
        assert await repos.bookings.find() == []
        assert await repos.reviews.find() == []

    async def test_my_listings_split(self, repos, host):
        active = await make_listing(repos, host, title="Active")
        inactive = await make_listing(repos, host, title="Inactive", status="unavailable")

        result = await listing_service.list_my_listings(repos, host)

        assert [lst.id for lst in result.active] == [active.id]
        assert [lst.id for lst in result.inactive] == [inactive.id]

    async def test_user_is_host(self, repos, listing, host, guest):
        assert await listing_service.user_is_host(repos, host)
        assert not await listing_service.user_is_host(repos, guest)


class TestListingDetail:
    async def test_detail_view(self, repos, listing, host, guest):
        booking = await make_booking(repos, listing, guest, offset=5, nights=2)
        await make_booking(repos, listing, guest, offset=15, nights=2, status="canceled")
        await add_review(repos, listing.id, guest, 4, "Nice")

        now = datetime.now(timezone.utc) + timedelta(days=800)
        detail = await listing_service.get_listing_detail(repos, listing.id, now=now)

        assert detail.listing.id == listing.id
        assert detail.listing.review_count == 1
        assert [r.author_name for r in detail.reviews] == [guest.username]
        assert [(d.start, d.end) for d in detail.booked_dates] == [(booking.check_in, booking.check_out)]
        assert detail.host_name == host.username
        assert detail.host_years == now.year - host.created_at.year

    async def test_booked_dates_exclude(self, repos, listing, guest):
        booking = await make_booking(repos, listing, guest, offset=5, nights=2)
        assert await listing_service.get_booked_dates(repos, listing.id, exclude_booking_id=booking.id) == []


class TestSearch:
    async def test_only_available_listings(self, repos, host):
        shown = await make_listing(repos, host, title="Shown")
        await make_listing(repos, host, title="Hidden", status="unavailable")

        result = await listing_service.search_listings(repos)

        assert [lst.id for lst in result.items] == [shown.id]
        assert result.total == 1
        assert result.nights == 1

    async def test_destination_matches_city_state_or_country(self, repos, host):
        lisbon = await make_listing(repos, host)
        kyoto = await make_listing(repos, host, city="Kyoto", state="Kyoto", country="Japan")

        assert [lst.id for lst in (await listing_service.search_listings(repos, destination="lis")).items] == [lisbon.id]
        assert [lst.id for lst in (await listing_service.search_listings(repos, destination="JAPAN")).items] == [kyoto.id]

    async def test_booked_listing_excluded_for_overlapping_stay(self, repos, host, guest):
        busy = await make_listing(repos, host, title="Busy")
        free = await make_listing(repos, host, title="Free")
        booking = await make_booking(repos, busy, guest, offset=10, nights=4)

        result = await listing_service.search_listings(
            repos, check_in=booking.check_in + timedelta(days=1), check_out=booking.check_out + timedelta(days=2)
        )

        assert [lst.id for lst in result.items] == [free.id]
        assert result.nights == 5

    async def test_back_to_back_stay_not_excluded(self, repos, host, guest):
        listing = await make_listing(repos, host)
        booking = await make_booking(repos, listing, guest, offset=10, nights=4)

        result = await listing_service.search_listings(
            repos, check_in=booking.check_out, check_out=booking.check_out + timedelta(days=1)
        )

        assert [lst.id for lst in result.items] == [listing.id]

    async def test_inverted_dates_rejected(self, repos):
        today = utc_today()
        with pytest.raises(DateRangeError):
            await listing_service.search_listings(repos, check_in=today + timedelta(days=3), check_out=today)

    async def test_capacity_and_price_filters(self, repos, host):
        small = await make_listing(repos, host, guests=2, price=Decimal("60.00"), bedrooms=1, bathrooms=1)
        big = await make_listing(repos, host, guests=8, price=Decimal("250.00"), bedrooms=4, bathrooms=3)

        assert [lst.id for lst in (await listing_service.search_listings(repos, guests=3)).items] == [big.id]
        assert [lst.id for lst in (await listing_service.search_listings(repos, max_price=100)).items] == [small.id]
        assert [lst.id for lst in (await listing_service.search_listings(repos, min_price=100, bedrooms=2)).items] == [
            big.id
        ]

    async def test_type_filters_accept_underscored_values(self, repos, host):
        guest_house = await make_listing(repos, host, type_of_place="Entire home", property_type="Guest house")
        await make_listing(repos, host, type_of_place="Room", property_type="Flat")

        result = await listing_service.search_listings(
            repos, type_of_place="entire_home", property_type="guest_house"
        )

        assert [lst.id for lst in result.items] == [guest_house.id]

    async def test_unknown_property_type(self, repos):
        with pytest.raises(RequestValidationFailed):
            await listing_service.search_listings(repos, property_type="castle")

    async def test_amenities_must_all_match(self, repos, host):
        equipped = await make_listing(repos, host, amenities=["Wifi", "Kitchen", "Free parking"])
        await make_listing(repos, host, amenities=["Wifi"])

        result = await listing_service.search_listings(repos, amenities=["wifi", "parking"])

        assert [lst.id for lst in result.items] == [equipped.id]
