"""Domain exceptions and their HTTP rendering."""

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException


class BlogError(Exception):
    """Base class for errors that map onto an HTTP status."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ProviderAlreadyLinked(BlogError):
    """The provider identity already belongs to a different local account."""

    status_code = 400

    def __init__(self, provider: str) -> None:
        super().__init__(f"This {provider} account is already linked to another user account.")
        self.provider = provider


class ProviderNotLinked(BlogError):
    """The user has no cached profile for the requested provider."""

    status_code = 400

    def __init__(self, provider: str) -> None:
        super().__init__(f"{provider} account not linked")
        self.provider = provider


class UserNotFound(BlogError):
    """No user row exists for the given id."""

    status_code = 404

    def __init__(self, user_id: str) -> None:
        super().__init__("User not found")
        self.user_id = user_id


class ProviderNotConfigured(BlogError):
    """Client credentials for a provider are missing."""

    status_code = 501

    def __init__(self, provider: str) -> None:
        super().__init__(f"{provider} OAuth not configured")
        self.provider = provider


class ProviderRequestError(BlogError):
    """An identity provider answered with a non-OK response."""

    status_code = 502

    def __init__(self, provider: str, status: int, body: str) -> None:
        super().__init__(f"Failed to fetch {provider} user: HTTP {status}: {body}")
        self.provider = provider
        self.status = status


async def blog_error_handler(request: Request, exc: BlogError) -> JSONResponse:
    """Render domain errors as ``{"error": message}``."""
    return JSONResponse({"error": exc.message}, status_code=exc.status_code)


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render HTTP errors with the same body shape as domain errors."""
    return JSONResponse(
        {"error": exc.detail},
        status_code=exc.status_code,
        headers=getattr(exc, "headers", None),
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Reject malformed payloads with a 400 and the list of issues."""
    return JSONResponse(
        {"error": "Invalid request", "issues": jsonable_encoder(exc.errors())},
        status_code=400,
    )
