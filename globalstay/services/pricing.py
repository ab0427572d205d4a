"""Server-side price computation.

Client-submitted totals are never trusted; the total is always recomputed
from the listing's nightly price and compared for exact equality. The only
arithmetic is an integer-night multiplication, so no currency rounding is
applied.
"""

import math
from datetime import date, datetime, timedelta
from decimal import Decimal

from globalstay.exceptions import PriceMismatchError

_ONE_DAY = timedelta(days=1)


def _as_decimal(value: Decimal | int | float | str) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # str() first so that floats keep their shortest decimal representation
    return Decimal(str(value))


def count_nights(check_in: date | datetime, check_out: date | datetime) -> int:
    """Whole nights between two stay boundaries, rounding partial days up."""
    return math.ceil((check_out - check_in) / _ONE_DAY)


def expected_total(
    nightly_price: Decimal | int | float | str,
    check_in: date | datetime,
    check_out: date | datetime,
) -> Decimal:
    """Authoritative total for a stay: ``nightly_price * nights``."""
    return _as_decimal(nightly_price) * count_nights(check_in, check_out)


def verify_total(submitted: Decimal | int | float | str, expected: Decimal) -> bool:
    return _as_decimal(submitted) == expected


def ensure_total_matches(submitted: Decimal | int | float | str, expected: Decimal) -> None:
    """Raise ``PriceMismatchError`` unless the submitted total is exact."""
    if not verify_total(submitted, expected):
        raise PriceMismatchError("Price mismatch. Please try again.")
