"""User model: guests and hosts share one account type."""

from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from globalstay.database import Base, TimestampMixin, UUIDPrimaryKeyMixin, VersionedMixin


class User(UUIDPrimaryKeyMixin, TimestampMixin, VersionedMixin, Base):
    """Marketplace account. A user becomes a host by owning a listing."""

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    username: Mapped[str] = mapped_column(String(255), nullable=False)
    hashed_password: Mapped[str | None] = mapped_column(String(255), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email!r}>"
