"""Authentication module."""

from src.auth.dependencies import (
    get_current_user,
    get_optional_user,
    require_admin,
    require_caller_id,
    resolve_caller_identity,
)
from src.auth.oauth import PROVIDERS, get_provider

__all__ = [
    "PROVIDERS",
    "get_current_user",
    "get_optional_user",
    "get_provider",
    "require_admin",
    "require_caller_id",
    "resolve_caller_identity",
]
