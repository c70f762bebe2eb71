"""Main API router.

Every ``/api`` endpoint is listed once in ``API_ROUTES`` and registered on
``api_router`` at import time.
"""

from collections.abc import Callable
from typing import Any, NamedTuple

from fastapi import APIRouter

from src.api import admin, comments, music, posts, profile, search


class Route(NamedTuple):
    method: str
    path: str
    endpoint: Callable[..., Any]
    status_code: int = 200
    tag: str = "api"


API_ROUTES: tuple[Route, ...] = (
    # Posts
    Route("POST", "/posts", posts.save_post, tag="posts"),
    Route("GET", "/posts", posts.list_posts, tag="posts"),
    Route("GET", "/posts/{slug}", posts.read_post, tag="posts"),
    Route("PATCH", "/posts/{slug}/status", posts.update_post_status, tag="posts"),
    Route("DELETE", "/posts/{slug}", posts.remove_post, tag="posts"),
    # Comments
    Route("GET", "/posts/{slug}/comments", comments.get_post_comments, tag="comments"),
    Route("POST", "/posts/{slug}/comments", comments.add_comment, 201, tag="comments"),
    Route("POST", "/comments/{comment_id}/like", comments.like_comment, tag="comments"),
    # Music
    Route("POST", "/music", music.add_track, tag="music"),
    Route("GET", "/music", music.get_tracks, tag="music"),
    # Search
    Route("GET", "/search", search.search_posts, tag="search"),
    # Profile
    Route("GET", "/profile", profile.get_profile, tag="profile"),
    Route("PATCH", "/profile", profile.update_profile, tag="profile"),
    Route("POST", "/profile/use-provider-info", profile.select_provider_info, tag="profile"),
    # Admin
    Route("POST", "/admin/reset-users", admin.reset_users, tag="admin"),
)


def build_router(routes: tuple[Route, ...]) -> APIRouter:
    router = APIRouter(prefix="/api")
    for route in routes:
        router.add_api_route(
            route.path,
            route.endpoint,
            methods=[route.method],
            status_code=route.status_code,
            tags=[route.tag],
            response_model=None,
        )
    return router


api_router = build_router(API_ROUTES)
