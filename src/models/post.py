"""Blog post and search index models."""

import uuid
from datetime import datetime

from sqlalchemy import JSON, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from src.models.base import Base, utcnow


class Post(Base):
    """Canonical blog post. ``published_at`` is None while a post is a draft."""

    __tablename__ = "posts"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title: Mapped[str] = mapped_column(String(500))
    slug: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    content: Mapped[str] = mapped_column(Text)
    published_at: Mapped[datetime | None] = mapped_column(nullable=True)
    created_at: Mapped[datetime] = mapped_column(default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(default=utcnow)

    __table_args__ = (
        Index("ix_posts_published_at", "published_at"),
    )

    def __repr__(self) -> str:
        return f"<Post(id={self.id}, slug={self.slug})>"


class PostEmbedding(Base):
    """Vector index entry for a post.

    Kept free of foreign keys: the index is maintained best-effort and may
    briefly lag or outlive the post it describes.
    """

    __tablename__ = "post_embeddings"

    post_id: Mapped[str] = mapped_column(String(36), primary_key=True)
    vector: Mapped[list] = mapped_column(JSON)
    meta: Mapped[dict] = mapped_column(JSON, default=dict)
    updated_at: Mapped[datetime] = mapped_column(default=utcnow, onupdate=utcnow)

    def __repr__(self) -> str:
        return f"<PostEmbedding(post_id={self.post_id})>"
