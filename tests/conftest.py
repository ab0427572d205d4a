"""Shared test configuration and fixtures.

Every test gets a fresh in-memory storage backend wired into the app, so no
database is needed. The address geocoder is replaced by ``FakeGeocoder``.
"""

from collections.abc import AsyncGenerator

import pytest_asyncio
from factories import FakeGeocoder, headers_for, make_listing, make_user
from httpx import ASGITransport, AsyncClient

from globalstay.main import app
from globalstay.models import Listing, User
from globalstay.repositories import Repositories
from globalstay.repositories.memory import InMemoryStorage

# ---------------------------------------------------------------------------
# Storage and client
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def storage() -> AsyncGenerator[InMemoryStorage, None]:
    store = InMemoryStorage()
    app.state.storage = store
    app.state.geocoder = FakeGeocoder()
    yield store
    store.clear()


@pytest_asyncio.fixture
async def repos(storage: InMemoryStorage) -> Repositories:
    """Repositories writing straight into the test storage (no rollback)."""
    return storage.repositories()


@pytest_asyncio.fixture
async def geocoder(storage: InMemoryStorage) -> FakeGeocoder:
    return app.state.geocoder


@pytest_asyncio.fixture
async def client(storage: InMemoryStorage) -> AsyncGenerator[AsyncClient, None]:
    """Provide an httpx AsyncClient wired to the in-memory app state."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac


# ---------------------------------------------------------------------------
# Convenience fixtures: users and a listing
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def host(repos: Repositories) -> User:
    return await make_user(repos, "Host")


@pytest_asyncio.fixture
async def guest(repos: Repositories) -> User:
    return await make_user(repos, "Guest")


@pytest_asyncio.fixture
async def other_guest(repos: Repositories) -> User:
    return await make_user(repos, "Other")


@pytest_asyncio.fixture
async def host_headers(host: User) -> dict[str, str]:
    return headers_for(host)


@pytest_asyncio.fixture
async def guest_headers(guest: User) -> dict[str, str]:
    return headers_for(guest)


@pytest_asyncio.fixture
async def other_headers(other_guest: User) -> dict[str, str]:
    return headers_for(other_guest)


@pytest_asyncio.fixture
async def listing(repos: Repositories, host: User) -> Listing:
    """A four-guest listing at 100.00 per night owned by ``host``."""
    return await make_listing(repos, host)
