"""
Abstract Authentication Interface

The ledger never talks to an identity backend itself. It receives a
UserSession from whichever provider the outer surface uses and only reads
`session.user_id` to scope storage calls.
"""

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from vetledger.models.auth import UserSession


class AuthProviderInterface(ABC):
    """
    Abstract interface for session issuance.

    Implementations raise AuthError subclasses on failure.
    """

    @abstractmethod
    async def get_session(self) -> Optional[UserSession]:
        """
        Return the current session, or None if nobody is signed in
        (or the session has expired).
        """
        pass

    @abstractmethod
    async def sign_up(self, email: str, password: str) -> UserSession:
        """
        Register a new user and sign them in.

        Raises:
            AuthError: If the email is taken or the credentials are unusable
        """
        pass

    @abstractmethod
    async def sign_in(self, email: str, password: str) -> UserSession:
        """
        Sign in an existing user.

        Raises:
            InvalidCredentialsError: If the email/password pair is wrong
        """
        pass

    @abstractmethod
    async def sign_out(self) -> None:
        """End the current session. Signing out twice is not an error."""
        pass


def require_owner(session: Optional[UserSession]) -> UUID:
    """
    Owner id for a scoped call.

    Raises:
        NotAuthenticatedError: If there is no session or it has expired
    """
    if session is None:
        raise NotAuthenticatedError("User not authenticated")
    if session.is_expired:
        raise NotAuthenticatedError("Session expired")
    return session.user_id


class AuthError(Exception):
    """Base exception for authentication operations."""
    pass


class NotAuthenticatedError(AuthError):
    """An owner-scoped operation was invoked without a valid session."""
    pass


class InvalidCredentialsError(AuthError):
    """Email/password pair did not match a registered user."""
    pass
