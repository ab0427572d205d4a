"""Guest-count bounds against listing capacity."""

from typing import Any

from globalstay.exceptions import CapacityError


def _as_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def validate_guest_count(requested: Any, capacity: int) -> int:
    """Return ``requested`` as an int if it lies within ``1..capacity``.

    Raises:
        CapacityError: If the value is not a positive integer or exceeds
            the listing's capacity.
    """
    guests = _as_int(requested)
    if guests is None or guests < 1 or guests > capacity:
        raise CapacityError(f"Guests must be between 1 and {capacity}.")
    return guests
