"""Pydantic schemas for API validation and serialization.

JSON bodies use camelCase keys, matching what the blog frontend expects.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base schema serialized with camelCase aliases."""

    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_json(self) -> dict:
        """Dump to a JSON-compatible dict using the camelCase aliases."""
        return self.model_dump(mode="json", by_alias=True)


# Post schemas
class PostRead(CamelModel):
    """Post read schema (also the cached representation)."""

    id: str
    title: str
    slug: str
    content: str
    published_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class PostStatusUpdate(BaseModel):
    """Publish or unpublish a post."""

    action: Literal["publish", "unpublish"]


# Music schemas
class MusicTrackRead(CamelModel):
    """Music track read schema."""

    id: str
    title: str
    artist: str
    url: str
    cover: str | None = None
    created_at: datetime


# Comment schemas
class CommentCreate(CamelModel):
    """Comment creation schema."""

    content: str = Field(min_length=1, max_length=5000)
    parent_id: str | None = None


class CommentAuthor(CamelModel):
    """Public view of a comment's author."""

    id: str
    username: str
    avatar: str | None = None


class CommentRead(CamelModel):
    """Comment read schema."""

    id: str
    post_id: str
    content: str
    parent_id: str | None = None
    created_at: datetime
    user: CommentAuthor
    score: int = 0


class LikeCreate(BaseModel):
    """Vote on a comment."""

    value: Literal[1, -1]


# Profile schemas
class ProviderProfile(CamelModel):
    """Cached profile of one linked provider."""

    username: str | None = None
    avatar: str | None = None


class UserProfile(CamelModel):
    """Signed-in user's own profile."""

    id: str
    username: str
    avatar: str | None = None
    bio: str | None = None
    social_links: dict | None = None
    role: str
    linked_providers: list[str]
    providers: dict[str, ProviderProfile]


class ProfileUpdate(CamelModel):
    """Manual ("custom") profile edit."""

    username: str | None = Field(default=None, min_length=1, max_length=255)
    avatar: str | None = None
    bio: str | None = None
    social_links: dict[str, str] | None = None


class UseProviderInfo(BaseModel):
    """Choose which provider supplies the display identity."""

    provider: Literal["github", "google", "discord", "custom"]


# Search schemas
class SearchMetadata(BaseModel):
    """Metadata stored alongside each indexed post."""

    title: str
    slug: str


class SearchHit(BaseModel):
    """One semantic search match."""

    score: float
    metadata: SearchMetadata
