"""SQLAlchemy models for GlobalStay.

All models are imported here so that Alembic's autogenerate can discover
them via Base.metadata. If you add a new model, import it in this file.
"""

from globalstay.models.booking import Booking
from globalstay.models.listing import Listing
from globalstay.models.review import Review
from globalstay.models.user import User

__all__ = [
    "Booking",
    "Listing",
    "Review",
    "User",
]
