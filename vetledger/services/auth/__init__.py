"""Authentication services package."""

from vetledger.services.auth.interface import (
    AuthError,
    AuthProviderInterface,
    InvalidCredentialsError,
    NotAuthenticatedError,
    require_owner,
)
from vetledger.services.auth.local import LocalAuthProvider

__all__ = [
    "AuthError",
    "AuthProviderInterface",
    "InvalidCredentialsError",
    "LocalAuthProvider",
    "NotAuthenticatedError",
    "require_owner",
]
