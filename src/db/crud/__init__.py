"""CRUD operations module."""

from src.db.crud.comments import create_comment, get_comment, list_comments, set_vote
from src.db.crud.music import create_track, list_tracks
from src.db.crud.posts import (
    delete_post,
    get_post,
    get_post_by_slug,
    list_published_posts,
    set_post_published,
    upsert_post,
)
from src.db.crud.users import (
    create_user,
    delete_all_users,
    get_user,
    get_user_by_provider_id,
    update_user_fields,
)

__all__ = [
    "create_comment",
    "create_track",
    "create_user",
    "delete_all_users",
    "delete_post",
    "get_comment",
    "get_post",
    "get_post_by_slug",
    "get_user",
    "get_user_by_provider_id",
    "list_comments",
    "list_published_posts",
    "list_tracks",
    "set_post_published",
    "set_vote",
    "update_user_fields",
    "upsert_post",
]
