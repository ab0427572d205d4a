"""Listing model: a bookable property with nightly pricing and capacity."""

import uuid
from decimal import Decimal

from sqlalchemy import JSON, Float, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from globalstay.database import Base, TimestampMixin, UUIDPrimaryKeyMixin, VersionedMixin

LISTING_STATUSES = ("available", "unavailable")
TYPES_OF_PLACE = ("Entire home", "Room")
PROPERTY_TYPES = ("House", "Flat", "Guest house", "Hotel")


class Listing(UUIDPrimaryKeyMixin, TimestampMixin, VersionedMixin, Base):
    """A property offered by its owner.

    ``avg_rating`` and ``review_count`` are caches of the current review set
    and are only ever written by the review aggregation service.
    """

    __tablename__ = "listings"

    owner_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    # Capacity
    guests: Mapped[int] = mapped_column(Integer, nullable=False)
    bedrooms: Mapped[int] = mapped_column(Integer, nullable=False)
    bathrooms: Mapped[int] = mapped_column(Integer, nullable=False)

    type_of_place: Mapped[str] = mapped_column(String(50), nullable=False)  # Entire home, Room
    property_type: Mapped[str] = mapped_column(String(50), nullable=False)  # House, Flat, Guest house, Hotel
    amenities: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    # Address
    house_number: Mapped[str] = mapped_column(String(50), nullable=False)
    building_name: Mapped[str] = mapped_column(String(255), nullable=False)
    street: Mapped[str] = mapped_column(String(255), nullable=False)
    city: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    state: Mapped[str] = mapped_column(String(255), nullable=False)
    postal_code: Mapped[str] = mapped_column(String(50), nullable=False)
    country: Mapped[str] = mapped_column(String(255), nullable=False)
    latitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    longitude: Mapped[float | None] = mapped_column(Float, nullable=True)

    status: Mapped[str] = mapped_column(String(50), nullable=False, default="available", index=True)

    # Review aggregates (denormalised)
    avg_rating: Mapped[Decimal] = mapped_column(Numeric(2, 1), nullable=False, default=Decimal("0"))
    review_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    review_ids: Mapped[list] = mapped_column(JSON, nullable=False, default=list)  # ordered review UUID strings

    def __repr__(self) -> str:
        return f"<Listing(id={self.id}, title={self.title!r}, status={self.status!r})>"
