"""OAuth identity providers built on Authlib's httpx client.

Each provider is a small descriptor (endpoints, scopes, which ``User``
columns it owns, how to read its profile payload). Authlib handles the
authorization URL, PKCE challenge and code-for-token exchange; we only
fetch the profile and normalize it into a ``ProviderAssertion``.
"""

from dataclasses import dataclass
from typing import Any

from authlib.common.security import generate_token
from authlib.integrations.httpx_client import AsyncOAuth2Client

from src.config import get_settings
from src.constants import (
    DISCORD_AUTHORIZE_URL,
    DISCORD_CDN_URL,
    DISCORD_TOKEN_URL,
    DISCORD_USER_URL,
    ERROR_BODY_MAX_CHARS,
    GITHUB_AUTHORIZE_URL,
    GITHUB_TOKEN_URL,
    GITHUB_USER_URL,
    GOOGLE_AUTHORIZE_URL,
    GOOGLE_TOKEN_URL,
    GOOGLE_USER_URL,
    HTTPX_TIMEOUT,
)
from src.errors import ProviderNotConfigured, ProviderRequestError
from src.utils.http_client import get_general_client
from src.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ProviderAssertion:
    """Identity asserted by a provider after a successful token exchange."""

    external_id: str
    display_name: str
    avatar_url: str | None = None


class IdentityProvider:
    """Base OAuth 2 identity provider.

    Subclasses set the endpoints and implement ``parse_profile``.
    """

    name: str
    label: str
    authorize_url: str
    token_url: str
    user_url: str
    scopes: tuple[str, ...] = ()
    uses_pkce: bool = False
    authorize_params: dict[str, str] = {}

    @property
    def id_field(self) -> str:
        return f"{self.name}_id"

    @property
    def username_field(self) -> str:
        return f"{self.name}_username"

    @property
    def avatar_field(self) -> str:
        return f"{self.name}_avatar"

    @property
    def state_cookie(self) -> str:
        return f"{self.name}_oauth_state"

    @property
    def verifier_cookie(self) -> str:
        return f"{self.name}_code_verifier"

    def is_configured(self) -> bool:
        client_id, client_secret, _ = get_settings().oauth_credentials(self.name)
        return bool(client_id and client_secret)

    def _client(self) -> AsyncOAuth2Client:
        client_id, client_secret, redirect_uri = get_settings().oauth_credentials(self.name)
        if not client_id or not client_secret:
            raise ProviderNotConfigured(self.label)

        return AsyncOAuth2Client(
            client_id=client_id,
            client_secret=client_secret,
            redirect_uri=redirect_uri,
            scope=" ".join(self.scopes),
            token_endpoint_auth_method="client_secret_post",
            code_challenge_method="S256" if self.uses_pkce else None,
            timeout=HTTPX_TIMEOUT,
        )

    def generate_code_verifier(self) -> str | None:
        """New PKCE verifier, or None for providers without PKCE."""
        return generate_token(48) if self.uses_pkce else None

    async def create_authorization_url(self, state: str, code_verifier: str | None = None) -> str:
        """Build the URL the browser is sent to for consent."""
        async with self._client() as client:
            url, _ = client.create_authorization_url(
                self.authorize_url,
                state=state,
                code_verifier=code_verifier,
                **self.authorize_params,
            )
        return url

    async def exchange_code(self, code: str, code_verifier: str | None = None) -> str:
        """Exchange an authorization code for an access token."""
        extra: dict[str, str] = {}
        if code_verifier:
            extra["code_verifier"] = code_verifier

        async with self._client() as client:
            token = await client.fetch_token(self.token_url, code=code, **extra)

        access_token = token.get("access_token")
        if not access_token:
            raise ProviderRequestError(self.label, 200, "No access token received")
        return access_token.strip()

    async def fetch_assertion(self, access_token: str) -> ProviderAssertion:
        """Fetch the signed-in user's profile from the provider."""
        client = get_general_client()
        response = await client.get(
            self.user_url,
            headers={
                "Authorization": f"Bearer {access_token}",
                "Accept": "application/json",
            },
        )
        if response.status_code != 200:
            raise ProviderRequestError(
                self.label, response.status_code, response.text[:ERROR_BODY_MAX_CHARS]
            )
        return self.parse_profile(response.json())

    def parse_profile(self, data: dict[str, Any]) -> ProviderAssertion:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"<{type(self).__name__}(name={self.name})>"


class GitHubProvider(IdentityProvider):
    name = "github"
    label = "GitHub"
    authorize_url = GITHUB_AUTHORIZE_URL
    token_url = GITHUB_TOKEN_URL
    user_url = GITHUB_USER_URL
    scopes = ("read:user",)

    def parse_profile(self, data: dict[str, Any]) -> ProviderAssertion:
        # GitHub ids are integers; store them as strings like the others
        return ProviderAssertion(
            external_id=str(data["id"]),
            display_name=data["login"],
            avatar_url=data.get("avatar_url"),
        )


class GoogleProvider(IdentityProvider):
    name = "google"
    label = "Google"
    authorize_url = GOOGLE_AUTHORIZE_URL
    token_url = GOOGLE_TOKEN_URL
    user_url = GOOGLE_USER_URL
    scopes = ("openid", "profile", "email")
    uses_pkce = True
    authorize_params = {"prompt": "select_account"}

    def parse_profile(self, data: dict[str, Any]) -> ProviderAssertion:
        name = data.get("name") or (data.get("email") or "").split("@")[0] or "user"
        return ProviderAssertion(
            external_id=str(data["sub"]),
            display_name=name,
            avatar_url=data.get("picture"),
        )


class DiscordProvider(IdentityProvider):
    name = "discord"
    label = "Discord"
    authorize_url = DISCORD_AUTHORIZE_URL
    token_url = DISCORD_TOKEN_URL
    user_url = DISCORD_USER_URL
    scopes = ("identify",)
    uses_pkce = True

    def parse_profile(self, data: dict[str, Any]) -> ProviderAssertion:
        user_id = str(data["id"])
        avatar_hash = data.get("avatar")
        avatar_url = f"{DISCORD_CDN_URL}/avatars/{user_id}/{avatar_hash}.png" if avatar_hash else None
        return ProviderAssertion(
            external_id=user_id,
            display_name=data["username"],
            avatar_url=avatar_url,
        )


# Registry of supported providers, keyed by URL segment
PROVIDERS: dict[str, IdentityProvider] = {
    provider.name: provider
    for provider in (GitHubProvider(), GoogleProvider(), DiscordProvider())
}


def get_provider(name: str) -> IdentityProvider | None:
    """Look up a provider by name."""
    return PROVIDERS.get(name)
