from .custom import (
    BookingConflictError,
    CapacityError,
    ConflictError,
    DateRangeError,
    GeocodingError,
    GlobalStayError,
    InvalidTransitionError,
    NotFoundError,
    OwnershipError,
    PriceMismatchError,
    RequestValidationFailed,
    StaleEntityError,
)

__all__ = [
    "BookingConflictError",
    "CapacityError",
    "ConflictError",
    "DateRangeError",
    "GeocodingError",
    "GlobalStayError",
    "InvalidTransitionError",
    "NotFoundError",
    "OwnershipError",
    "PriceMismatchError",
    "RequestValidationFailed",
    "StaleEntityError",
]
