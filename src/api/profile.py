"""Profile API endpoints."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.auth import PROVIDERS, get_current_user
from src.auth.linking import CUSTOM_IDENTITY, use_provider_info
from src.db import get_db
from src.db.crud import update_user_fields
from src.models.schemas import ProfileUpdate, ProviderProfile, UseProviderInfo, UserProfile
from src.models.user import User, UserRole


def _profile(user: User) -> dict:
    providers = {
        name: ProviderProfile(
            username=getattr(user, provider.username_field),
            avatar=getattr(user, provider.avatar_field),
        )
        for name, provider in PROVIDERS.items()
        if getattr(user, provider.id_field) is not None
    }
    return UserProfile(
        id=user.id,
        username=user.username,
        avatar=user.avatar,
        bio=user.bio,
        social_links=user.social_links,
        role=UserRole(user.role).value,
        linked_providers=user.linked_providers,
        providers=providers,
    ).to_json()


async def get_profile(
    user: Annotated[User, Depends(get_current_user)],
) -> dict:
    """Signed-in user's profile with every linked provider."""
    return _profile(user)


async def update_profile(
    data: ProfileUpdate,
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    """Edit the profile by hand. Only fields present in the body change."""
    fields = data.model_dump(exclude_unset=True)
    if fields.get("username") is None:
        fields.pop("username", None)
    await update_user_fields(db, user, **fields)
    await db.commit()
    return _profile(user)


async def select_provider_info(
    data: UseProviderInfo,
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    """Show a linked provider's username and avatar, or keep the custom ones."""
    updated = await use_provider_info(db, user.id, data.provider)
    await db.commit()
    body = {"success": True, "username": updated.username, "avatar": updated.avatar}
    if data.provider == CUSTOM_IDENTITY:
        body["message"] = "Keeping custom profile"
    return body
