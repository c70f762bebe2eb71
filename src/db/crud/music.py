"""CRUD operations for music tracks."""

from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.models.music import MusicTrack


async def create_track(
    db: AsyncSession,
    title: str,
    artist: str,
    url: str,
    cover: str | None = None,
) -> MusicTrack:
    """Add a track."""
    track = MusicTrack(title=title, artist=artist, url=url, cover=cover)
    db.add(track)
    await db.flush()
    return track


async def list_tracks(db: AsyncSession) -> Sequence[MusicTrack]:
    """All tracks, newest first."""
    result = await db.execute(select(MusicTrack).order_by(MusicTrack.created_at.desc()))
    return result.scalars().all()
