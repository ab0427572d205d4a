import httpx
import pytest
import respx
from httpx import Response

from globalstay.exceptions import GeocodingError
from globalstay.schemas.listing import Address
from globalstay.services.geocoding import GeoPoint, NominatimGeocoder, build_city_query, build_full_query

SEARCH_URL = "https://nominatim.test/search"
USER_AGENT = "globalstay-tests (ops@example.com)"

ADDRESS = Address(
    house_number="12",
    building_name="Casa do Largo",
    street="Rua de São Miguel",
    city="Lisbon",
    state="Lisbon",
    postal_code="1100-544",
    country="Portugal",
)


def test_build_full_query():
    assert build_full_query(ADDRESS) == "Rua de São Miguel, Lisbon, Lisbon, 1100-544 Portugal"


def test_build_city_query_drops_street():
    assert build_city_query(ADDRESS) == "Lisbon, Lisbon, 1100-544 Portugal"


@respx.mock
async def test_geocode_full_address():
    route = respx.get(SEARCH_URL).mock(return_value=Response(200, json=[{"lat": "38.7115", "lon": "-9.1290"}]))

    async with httpx.AsyncClient() as client:
        point = await NominatimGeocoder(client, SEARCH_URL, USER_AGENT).geocode(ADDRESS)

    assert point == GeoPoint(latitude=38.7115, longitude=-9.129)
    request = route.calls.last.request
    assert request.url.params["format"] == "json"
    assert request.url.params["q"] == build_full_query(ADDRESS)
    assert request.headers["User-Agent"] == USER_AGENT


@respx.mock
async def test_geocode_falls_back_to_city():
    def _respond(request: httpx.Request) -> Response:
        if request.url.params["q"] == build_full_query(ADDRESS):
            return Response(200, json=[])
        return Response(200, json=[{"lat": "38.72", "lon": "-9.14"}])

    route = respx.get(SEARCH_URL).mock(side_effect=_respond)

    async with httpx.AsyncClient() as client:
        point = await NominatimGeocoder(client, SEARCH_URL, USER_AGENT).geocode(ADDRESS)

    assert point == GeoPoint(latitude=38.72, longitude=-9.14)
    assert route.call_count == 2
    assert route.calls.last.request.url.params["q"] == build_city_query(ADDRESS)


@respx.mock
async def test_geocode_nothing_found():
    respx.get(SEARCH_URL).mock(return_value=Response(200, json=[]))

    async with httpx.AsyncClient() as client:
        assert await NominatimGeocoder(client, SEARCH_URL, USER_AGENT).geocode(ADDRESS) is None


@respx.mock
async def test_geocode_upstream_error():
    respx.get(SEARCH_URL).mock(return_value=Response(503, text="overloaded"))

    async with httpx.AsyncClient() as client:
        with pytest.raises(GeocodingError):
            await NominatimGeocoder(client, SEARCH_URL, USER_AGENT).geocode(ADDRESS)


@respx.mock
async def test_geocode_network_failure():
    respx.get(SEARCH_URL).mock(side_effect=httpx.ConnectTimeout("timed out"))

    async with httpx.AsyncClient() as client:
        with pytest.raises(GeocodingError) as exc_info:
            await NominatimGeocoder(client, SEARCH_URL, USER_AGENT).search("anything")
    assert exc_info.value.status_code == 502
