"""
Local Authentication Provider

An in-process user registry for a single-operator install and for tests.
Passwords are stored as bcrypt hashes (passlib); sessions carry a random
access token and expire after the configured TTL.
"""

import secrets
from datetime import datetime, timedelta
from typing import Optional
from uuid import UUID, uuid4

from passlib.context import CryptContext

from vetledger.config import get_settings
from vetledger.events import LedgerLogger
from vetledger.models.auth import UserSession
from vetledger.models.events import LedgerEventBuilder, LedgerEventType
from vetledger.services.auth.interface import (
    AuthError,
    AuthProviderInterface,
    InvalidCredentialsError,
)


MIN_PASSWORD_LENGTH = 6

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class LocalAuthProvider(AuthProviderInterface):
    """In-memory implementation of the authentication provider."""

    def __init__(
        self,
        session_ttl: Optional[timedelta] = None,
        logger: Optional[LedgerLogger] = None,
    ):
        if session_ttl is None:
            session_ttl = timedelta(
                minutes=get_settings().app.session_ttl_minutes
            )
        self._session_ttl = session_ttl
        self._logger = logger

        # email -> (user_id, password_hash)
        self._users: dict[str, tuple[UUID, str]] = {}
        self._session: Optional[UserSession] = None

    def _normalize_email(self, email: str) -> str:
        email = email.strip().lower()
        local, _, domain = email.partition("@")
        if not local or "." not in domain:
            raise AuthError(f"Invalid email address: {email}")
        return email

    def _issue_session(self, user_id: UUID, email: str) -> UserSession:
        now = datetime.utcnow()
        self._session = UserSession(
            user_id=user_id,
            email=email,
            access_token=secrets.token_urlsafe(32),
            issued_at=now,
            expires_at=now + self._session_ttl,
        )
        return self._session

    async def _log_session_event(
        self,
        event_type: LedgerEventType,
        email: str,
        user_id: Optional[UUID] = None,
        error_message: Optional[str] = None,
    ) -> None:
        if self._logger:
            await self._logger.log(
                LedgerEventBuilder.session_event(
                    event_type=event_type,
                    email=email,
                    user_id=user_id,
                    error_message=error_message,
                )
            )

    async def get_session(self) -> Optional[UserSession]:
        if self._session is not None and self._session.is_expired:
            self._session = None
        return self._session

    async def sign_up(self, email: str, password: str) -> UserSession:
        email = self._normalize_email(email)

        if email in self._users:
            await self._log_session_event(
                LedgerEventType.AUTH_FAILED, email, error_message="already registered"
            )
            raise AuthError(f"User already registered: {email}")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise AuthError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
            )

        user_id = uuid4()
        self._users[email] = (user_id, pwd_context.hash(password))

        await self._log_session_event(LedgerEventType.SIGNED_UP, email, user_id)
        return self._issue_session(user_id, email)

    async def sign_in(self, email: str, password: str) -> UserSession:
        email = self._normalize_email(email)
        entry = self._users.get(email)

        if entry is None or not pwd_context.verify(password, entry[1]):
            await self._log_session_event(
                LedgerEventType.AUTH_FAILED, email, error_message="invalid credentials"
            )
            raise InvalidCredentialsError("Invalid login credentials")

        await self._log_session_event(LedgerEventType.SIGNED_IN, email, entry[0])
        return self._issue_session(entry[0], email)

    async def sign_out(self) -> None:
        if self._session is not None:
            await self._log_session_event(
                LedgerEventType.SIGNED_OUT,
                self._session.email,
                self._session.user_id,
            )
        self._session = None
