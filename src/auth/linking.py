"""Account linking: reconcile a provider identity with local users.

One algorithm serves every provider. Given the identity a provider just
asserted and the id of the user already signed in on this browser (if any):

1. Look up the user already linked to that identity.
2. Signed in, and the identity belongs to someone else -> refuse.
3. Signed in otherwise -> link the identity to the signed-in user
   (relinking the same identity just refreshes the cached profile).
4. Signed out, identity known -> log in as its owner, nothing written.
5. Signed out, identity unknown -> create a user from the provider profile.
"""

import enum
from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.auth.oauth import PROVIDERS, IdentityProvider, ProviderAssertion
from src.db.crud.users import (
    create_user,
    get_user,
    get_user_by_provider_id,
    update_user_fields,
)
from src.errors import ProviderAlreadyLinked, ProviderNotLinked, UserNotFound
from src.models.user import User
from src.utils.logging import LogContext, get_logger

logger = get_logger(__name__)

# Values accepted by use_provider_info besides provider names
CUSTOM_IDENTITY = "custom"


class LinkAction(str, enum.Enum):
    """What the orchestrator did with the asserted identity."""

    CREATED = "created"
    LINKED = "linked"
    LOGGED_IN = "logged_in"


@dataclass(frozen=True)
class LinkOutcome:
    """User the new session belongs to, and how we got there."""

    user_id: str
    action: LinkAction


def _provider_fields(provider: IdentityProvider, assertion: ProviderAssertion) -> dict[str, str | None]:
    return {
        provider.id_field: assertion.external_id,
        provider.username_field: assertion.display_name,
        provider.avatar_field: assertion.avatar_url,
    }


async def link_provider_identity(
    db: AsyncSession,
    provider: IdentityProvider,
    assertion: ProviderAssertion,
    current_user_id: str | None = None,
) -> LinkOutcome:
    """Decide which local user a completed provider login belongs to.

    Args:
        db: Request database session (not committed here)
        provider: Provider that produced the assertion
        assertion: Identity returned by the provider
        current_user_id: User of a valid session present before the login began

    Returns:
        LinkOutcome naming the session owner

    Raises:
        ProviderAlreadyLinked: The identity belongs to a different user than
            ``current_user_id``. Nothing is written.
    """
    log = LogContext(logger, provider=provider.name)
    existing_user = await get_user_by_provider_id(db, provider.id_field, assertion.external_id)

    if current_user_id:
        if existing_user is not None and existing_user.id != current_user_id:
            log.warning(
                f"Refusing to link identity owned by {existing_user.id} to {current_user_id}"
            )
            raise ProviderAlreadyLinked(provider.label)

        current_user = existing_user or await get_user(db, current_user_id)
        if current_user is None:
            raise UserNotFound(current_user_id)

        await update_user_fields(db, current_user, **_provider_fields(provider, assertion))
        log.info(f"Linked account to existing user {current_user.id}")
        return LinkOutcome(user_id=current_user.id, action=LinkAction.LINKED)

    if existing_user is not None:
        log.info(f"Logging in as existing user {existing_user.id}")
        return LinkOutcome(user_id=existing_user.id, action=LinkAction.LOGGED_IN)

    try:
        user = await create_user(
            db,
            username=assertion.display_name,
            avatar=assertion.avatar_url,
            **_provider_fields(provider, assertion),
        )
    except IntegrityError:
        # A concurrent callback for the same identity committed first
        await db.rollback()
        existing_user = await get_user_by_provider_id(db, provider.id_field, assertion.external_id)
        if existing_user is None:
            raise
        log.info(f"Lost creation race, logging in as {existing_user.id}")
        return LinkOutcome(user_id=existing_user.id, action=LinkAction.LOGGED_IN)

    log.info(f"Created new user {user.id}")
    return LinkOutcome(user_id=user.id, action=LinkAction.CREATED)


async def use_provider_info(db: AsyncSession, user_id: str, provider_name: str) -> User:
    """Make a linked provider's cached profile the account's display identity.

    ``"custom"`` keeps whatever the user last set by hand and writes nothing.

    Raises:
        UserNotFound: No such user
        ProviderNotLinked: The provider has no cached username for this user
    """
    user = await get_user(db, user_id)
    if user is None:
        raise UserNotFound(user_id)

    if provider_name == CUSTOM_IDENTITY:
        return user

    provider = PROVIDERS[provider_name]
    username = getattr(user, provider.username_field)
    if not username:
        raise ProviderNotLinked(provider.label)

    return await update_user_fields(
        db,
        user,
        username=username,
        avatar=getattr(user, provider.avatar_field),
    )
