"""Address geocoding through OpenStreetMap Nominatim."""

import logging
from dataclasses import dataclass
from typing import Protocol

import httpx

from globalstay.exceptions import GeocodingError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GeoPoint:
    latitude: float
    longitude: float


class AddressLike(Protocol):
    street: str
    city: str
    state: str
    postal_code: str
    country: str


class Geocoder(Protocol):
    async def geocode(self, address: AddressLike) -> GeoPoint | None: ...


def build_full_query(address: AddressLike) -> str:
    return f"{address.street}, {address.city}, {address.state}, {address.postal_code} {address.country}"


def build_city_query(address: AddressLike) -> str:
    return f"{address.city}, {address.state}, {address.postal_code} {address.country}"


class NominatimGeocoder:
    def __init__(self, client: httpx.AsyncClient, search_url: str, user_agent: str):
        self._client = client
        self._search_url = search_url
        self._user_agent = user_agent

    async def search(self, query: str) -> GeoPoint | None:
        try:
            resp = await self._client.get(
                self._search_url,
                params={"format": "json", "q": query},
                headers={"User-Agent": self._user_agent},
            )
        except httpx.HTTPError as exc:
            logger.warning("Geocoding request failed for %r: %s", query, exc)
            raise GeocodingError(str(exc)) from exc

        if resp.status_code >= 400:
            logger.warning("Geocoding returned HTTP %s for %r", resp.status_code, query)
            raise GeocodingError(f"Nominatim returned {resp.status_code}: {resp.text[:200]}")

        results = resp.json()
        if not results:
            logger.info("No geocoding results for query: %s", query)
            return None

        first = results[0]
        return GeoPoint(latitude=float(first["lat"]), longitude=float(first["lon"]))

    async def geocode(self, address: AddressLike) -> GeoPoint | None:
        """Locate ``address``, falling back to a city-level query."""
        point = await self.search(build_full_query(address))
        if point is None:
            point = await self.search(build_city_query(address))
        return point
