"""SQLAlchemy models."""

from src.models.base import Base
from src.models.comment import Comment, Like
from src.models.music import MusicTrack
from src.models.post import Post, PostEmbedding
from src.models.session import Session
from src.models.user import User, UserRole

__all__ = [
    "Base",
    "User",
    "UserRole",
    "Session",
    "Post",
    "PostEmbedding",
    "MusicTrack",
    "Comment",
    "Like",
]
