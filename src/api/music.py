"""Music API endpoints."""

from typing import Annotated

from fastapi import Depends, Form
from sqlalchemy.ext.asyncio import AsyncSession

from src.auth import require_caller_id
from src.db import get_db
from src.db.crud import create_track, list_tracks
from src.models.schemas import MusicTrackRead
from src.utils.logging import get_logger

logger = get_logger(__name__)


async def add_track(
    caller_id: Annotated[str, Depends(require_caller_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
    title: Annotated[str, Form(min_length=1)],
    artist: Annotated[str, Form(min_length=1)],
    url: Annotated[str, Form(min_length=1)],
    cover: Annotated[str | None, Form()] = None,
) -> dict:
    """Add a track to the music page."""
    track = await create_track(db, title=title, artist=artist, url=url, cover=cover or None)
    logger.info(f"Track {track.id} added by {caller_id}")
    return {"success": True, "id": track.id}


async def get_tracks(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> list[dict]:
    tracks = await list_tracks(db)
    return [MusicTrackRead.model_validate(track).to_json() for track in tracks]
