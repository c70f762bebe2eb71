"""Login session model."""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models.base import Base, ensure_utc

if TYPE_CHECKING:
    from src.models.user import User


class Session(Base):
    """Server-side session row.

    The primary key is the SHA-256 digest of the cookie token, never the
    token itself, so a leaked table cannot be replayed as cookies.
    """

    __tablename__ = "sessions"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    expires_at: Mapped[datetime]

    user: Mapped["User"] = relationship("User", back_populates="sessions")

    @property
    def expires_at_utc(self) -> datetime:
        return ensure_utc(self.expires_at)

    def __repr__(self) -> str:
        return f"<Session(user_id={self.user_id}, expires_at={self.expires_at})>"
