"""Shared API dependencies, single import point for all routers::

    from globalstay.api.deps import get_repositories, get_current_active_user
"""

from fastapi import Request

from globalstay.auth.dependencies import (
    get_current_active_user,
    get_current_user,
    get_repositories,
)
from globalstay.services.geocoding import Geocoder


def get_geocoder(request: Request) -> Geocoder | None:
    """The address geocoder built at startup, or ``None`` when disabled."""
    return request.app.state.geocoder


__all__ = [
    "get_repositories",
    "get_geocoder",
    "get_current_user",
    "get_current_active_user",
]
