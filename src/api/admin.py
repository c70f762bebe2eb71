"""Admin API endpoints."""

from typing import Annotated

from fastapi import Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from src.auth import require_admin
from src.auth.cookies import delete_session_cookie
from src.db import get_db
from src.db.crud import delete_all_users
from src.models.user import User
from src.utils.logging import get_logger

logger = get_logger(__name__)


async def reset_users(
    admin: Annotated[User, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> JSONResponse:
    """Delete every user with their sessions, comments and likes."""
    logger.warning(f"User reset requested by admin {admin.id}")
    await delete_all_users(db)
    await db.commit()

    response = JSONResponse(
        {"success": True, "message": "All users, sessions and comments have been deleted"}
    )
    delete_session_cookie(response)
    return response
