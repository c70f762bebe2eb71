"""Tests for account linking and display identity selection."""

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.auth.linking import LinkAction, LinkOutcome, link_provider_identity, use_provider_info
from src.auth.oauth import PROVIDERS, ProviderAssertion
from src.errors import ProviderAlreadyLinked, ProviderNotLinked, UserNotFound
from src.models.user import User

DISCORD = PROVIDERS["discord"]
GITHUB = PROVIDERS["github"]


async def _user_count(db: AsyncSession) -> int:
    return await db.scalar(select(func.count()).select_from(User))


class TestLinkProviderIdentity:
    """Tests for the linking decision table."""

    @pytest.mark.asyncio
    async def test_unknown_identity_creates_user(self, db_session: AsyncSession):
        assertion = ProviderAssertion("999", "disco", "https://cdn.example.com/a.png")

        outcome = await link_provider_identity(db_session, DISCORD, assertion)

        assert outcome.action == LinkAction.CREATED
        user = await db_session.get(User, outcome.user_id)
        assert user.username == "disco"
        assert user.avatar == "https://cdn.example.com/a.png"
        assert user.discord_id == "999"
        assert user.discord_username == "disco"
        assert user.github_id is None

    @pytest.mark.asyncio
    async def test_known_identity_logs_in_without_writing(
        self, db_session: AsyncSession, other_user: User
    ):
        assertion = ProviderAssertion("67890", "renamed", None)

        outcome = await link_provider_identity(db_session, DISCORD, assertion)

        assert outcome == LinkOutcome(other_user.id, LinkAction.LOGGED_IN)
        assert other_user.discord_username == "other"
        assert await _user_count(db_session) == 1

    @pytest.mark.asyncio
    async def test_link_new_provider_to_signed_in_user(
        self, db_session: AsyncSession, test_user: User
    ):
        assertion = ProviderAssertion("999", "disco", None)

        outcome = await link_provider_identity(db_session, DISCORD, assertion, test_user.id)

        assert outcome.action == LinkAction.LINKED
        assert outcome.user_id == test_user.id
        assert test_user.discord_id == "999"
        assert test_user.github_id == "12345"
        assert test_user.linked_providers == ["github", "discord"]
        # Display identity is untouched by linking
        assert test_user.username == "testuser"

    @pytest.mark.asyncio
    async def test_relink_same_identity_is_idempotent(
        self, db_session: AsyncSession, test_user: User
    ):
        assertion = ProviderAssertion("12345", "testuser-renamed", "https://new.example.com/a.png")

        first = await link_provider_identity(db_session, GITHUB, assertion, test_user.id)
        second = await link_provider_identity(db_session, GITHUB, assertion, test_user.id)

        assert first == second
        assert first.user_id == test_user.id
        assert test_user.github_username == "testuser-renamed"
        assert test_user.github_avatar == "https://new.example.com/a.png"
        assert await _user_count(db_session) == 1

    @pytest.mark.asyncio
    async def test_identity_owned_by_another_user_is_refused(
        self, db_session: AsyncSession, test_user: User, other_user: User
    ):
        assertion = ProviderAssertion("67890", "intruder", None)

        with pytest.raises(ProviderAlreadyLinked) as exc_info:
            await link_provider_identity(db_session, DISCORD, assertion, test_user.id)

        assert exc_info.value.status_code == 400
        assert "Discord" in exc_info.value.message
        assert test_user.discord_id is None
        assert other_user.discord_id == "67890"
        assert other_user.discord_username == "other"

    @pytest.mark.asyncio
    async def test_signed_in_user_missing(self, db_session: AsyncSession):
        assertion = ProviderAssertion("999", "disco", None)

        with pytest.raises(UserNotFound):
            await link_provider_identity(db_session, DISCORD, assertion, "no-such-user")


class TestUseProviderInfo:
    """Tests for choosing the display identity."""

    @pytest.mark.asyncio
    async def test_copies_linked_provider_profile(
        self, db_session: AsyncSession, test_user: User
    ):
        test_user.username = "custom-name"
        test_user.avatar = None
        await db_session.flush()

        user = await use_provider_info(db_session, test_user.id, "github")

        assert user.username == "testuser"
        assert user.avatar == "https://avatars.example.com/testuser.png"

    @pytest.mark.asyncio
    async def test_unlinked_provider_raises_without_write(
        self, db_session: AsyncSession, test_user: User
    ):
        with pytest.raises(ProviderNotLinked) as exc_info:
            await use_provider_info(db_session, test_user.id, "discord")

        assert exc_info.value.message == "Discord account not linked"
        assert test_user.username == "testuser"
        assert test_user.avatar is None

    @pytest.mark.asyncio
    async def test_custom_keeps_current_profile(self, db_session: AsyncSession, test_user: User):
        test_user.username = "hand-picked"
        await db_session.flush()

        user = await use_provider_info(db_session, test_user.id, "custom")

        assert user.username == "hand-picked"

    @pytest.mark.asyncio
    async def test_unknown_user(self, db_session: AsyncSession):
        with pytest.raises(UserNotFound):
            await use_provider_info(db_session, "missing", "github")
