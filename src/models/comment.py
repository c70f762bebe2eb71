"""Comment and like models."""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models.base import Base, utcnow

if TYPE_CHECKING:
    from src.models.user import User


class Comment(Base):
    """Reader comment on a post; ``parent_id`` makes it a reply."""

    __tablename__ = "comments"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id"), index=True)
    post_id: Mapped[str] = mapped_column(ForeignKey("posts.id"), index=True)
    content: Mapped[str] = mapped_column(Text)
    parent_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    created_at: Mapped[datetime] = mapped_column(default=utcnow)

    user: Mapped["User"] = relationship("User", back_populates="comments", lazy="joined")

    def __repr__(self) -> str:
        return f"<Comment(id={self.id}, post_id={self.post_id})>"


class Like(Base):
    """Up or down vote cast by a user on a comment."""

    __tablename__ = "likes"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id"), index=True)
    comment_id: Mapped[str] = mapped_column(ForeignKey("comments.id"), index=True)
    value: Mapped[int]

    __table_args__ = (
        UniqueConstraint("user_id", "comment_id", name="uq_like_user_comment"),
        CheckConstraint("value IN (-1, 1)", name="ck_like_value"),
    )
