"""Domain error taxonomy.

Every rejection raised by the booking, review and listing services derives
from ``GlobalStayError`` and carries a machine-readable ``code`` next to the
human message. HTTP status codes live on the classes so the exception
handlers stay generic.
"""


class GlobalStayError(Exception):
    status_code: int = 400
    default_code: str = "error"

    def __init__(self, message: str, code: str | None = None):
        self.message = message
        self.code = code or self.default_code
        super().__init__(message)


class RequestValidationFailed(GlobalStayError):
    """Malformed or missing input that passed schema parsing."""

    status_code = 422
    default_code = "validation_error"


class OwnershipError(GlobalStayError):
    status_code = 403
    default_code = "forbidden"


class DateRangeError(GlobalStayError):
    default_code = "invalid_dates"


class CapacityError(GlobalStayError):
    default_code = "invalid_guest_count"


class PriceMismatchError(GlobalStayError):
    default_code = "price_mismatch"


class NotFoundError(GlobalStayError):
    status_code = 404
    default_code = "not_found"


class ConflictError(GlobalStayError):
    status_code = 409
    default_code = "conflict"


class BookingConflictError(ConflictError):
    """The requested stay overlaps another confirmed booking."""

    default_code = "dates_unavailable"


class StaleEntityError(ConflictError):
    """The entity changed in storage after it was loaded."""

    default_code = "stale_entity"


class InvalidTransitionError(ConflictError):
    default_code = "invalid_transition"


class GeocodingError(GlobalStayError):
    status_code = 502
    default_code = "geocoding_unavailable"
