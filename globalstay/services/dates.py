"""Date helpers shared by the booking rules and views.

Stay dates are calendar dates. Inputs may be ISO-8601 dates or date-times;
date-times are normalised to UTC and truncated to midnight. Naive
date-times are taken to be UTC already.
"""

from datetime import date, datetime, time, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def utc_today() -> date:
    return utc_now().date()


def start_of_day_utc(day: date) -> datetime:
    """Midnight UTC at the start of ``day``."""
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


def to_stay_date(value: str | date | datetime) -> date:
    """Parse an ISO-8601 date or date-time into a UTC calendar date.

    Raises:
        ValueError: If ``value`` is not a recognisable ISO-8601 string.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ValueError(f"Expected an ISO-8601 date, got {type(value).__name__}")

    text = value.strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return to_stay_date(datetime.fromisoformat(text))
    except ValueError:
        raise ValueError(f"Invalid ISO-8601 date: {value!r}") from None
