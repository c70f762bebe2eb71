"""User model."""

import enum
import uuid
from typing import TYPE_CHECKING

from sqlalchemy import JSON, Enum, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from src.models.comment import Comment
    from src.models.session import Session


class UserRole(str, enum.Enum):
    """Capabilities granted to an account."""

    USER = "user"
    ADMIN = "admin"


def new_user_id() -> str:
    """Generate an opaque, immutable user id."""
    return str(uuid.uuid4())


class User(Base, TimestampMixin):
    """Local account that one to three OAuth identities can sign into."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_user_id)

    # Active display identity (copied from a provider or edited by hand)
    username: Mapped[str] = mapped_column(String(255))
    avatar: Mapped[str | None] = mapped_column(String(2000), nullable=True)
    bio: Mapped[str | None] = mapped_column(Text, nullable=True)
    social_links: Mapped[dict | None] = mapped_column(JSON, nullable=True)

    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole, values_callable=lambda e: [m.value for m in e]),
        default=UserRole.USER,
    )

    # OAuth provider IDs (nullable - user has at least one)
    github_id: Mapped[str | None] = mapped_column(String(255), unique=True, index=True, nullable=True)
    google_id: Mapped[str | None] = mapped_column(String(255), unique=True, index=True, nullable=True)
    discord_id: Mapped[str | None] = mapped_column(String(255), unique=True, index=True, nullable=True)

    # Provider profile cache, refreshed whenever the provider is (re)linked
    github_username: Mapped[str | None] = mapped_column(String(255), nullable=True)
    github_avatar: Mapped[str | None] = mapped_column(String(2000), nullable=True)
    google_username: Mapped[str | None] = mapped_column(String(255), nullable=True)
    google_avatar: Mapped[str | None] = mapped_column(String(2000), nullable=True)
    discord_username: Mapped[str | None] = mapped_column(String(255), nullable=True)
    discord_avatar: Mapped[str | None] = mapped_column(String(2000), nullable=True)

    sessions: Mapped[list["Session"]] = relationship(
        "Session",
        back_populates="user",
        cascade="all, delete-orphan",
        lazy="select",
    )
    comments: Mapped[list["Comment"]] = relationship(
        "Comment",
        back_populates="user",
        lazy="select",
    )

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def linked_providers(self) -> list[str]:
        """Names of the providers currently linked to this account."""
        return [
            name
            for name in ("github", "google", "discord")
            if getattr(self, f"{name}_id") is not None
        ]

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username={self.username})>"
