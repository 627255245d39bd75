"""Registration, login and profile lookup for user accounts."""

from __future__ import annotations

import logging
import uuid
from contextlib import contextmanager
from typing import Iterator, List, Optional

import anyio

from .errors import (
    AccountError,
    AuthenticationError,
    ConflictError,
    DuplicateEmailError,
    InfrastructureError,
    ValidationError,
)
from .models import IssuedToken, User
from .passwords import CredentialManager
from .repository import UserRepository, normalize_email
from .tokens import Clock, SessionIssuer, utc_now

logger = logging.getLogger("accounts.service")

MISSING_REGISTRATION_FIELDS = "Please provide all required fields"
MISSING_LOGIN_FIELDS = "Please provide both email and password"
UNSUPPORTED_PASSWORD = "Password contains unsupported characters"
USER_ALREADY_EXISTS = "User already exists"
INVALID_CREDENTIALS = "Invalid credentials"
INVALID_TOKEN = "Invalid or expired token"


def _missing_fields(**values: Optional[str]) -> List[str]:
    # Passwords are kept verbatim, so only an empty one counts as missing.
    missing: List[str] = []
    for name, value in values.items():
        if value is None or value == "":
            missing.append(name)
        elif name != "password" and not value.strip():
            missing.append(name)
    return missing


@contextmanager
def _failures_logged(action: str) -> Iterator[None]:
    """Log infrastructure failures and turn anything unexpected into one."""

    try:
        yield
    except InfrastructureError:
        logger.exception("Error %s", action)
        raise
    except AccountError:
        raise
    except Exception as exc:
        logger.exception("Error %s", action)
        raise InfrastructureError(f"Unexpected failure while {action}") from exc


class AccountService:
    """Coordinate the repository, credential manager and session issuer.

    The synchronous methods block while bcrypt and storage work runs; the
    ``*_async`` variants push that work onto a worker thread so concurrent
    requests are never serialised behind a slow hash.
    """

    def __init__(
        self,
        repository: UserRepository,
        credentials: CredentialManager,
        issuer: SessionIssuer,
        *,
        clock: Clock = utc_now,
    ) -> None:
        self._repository = repository
        self._credentials = credentials
        self._issuer = issuer
        self._clock = clock

    @property
    def repository(self) -> UserRepository:
        return self._repository

    @property
    def issuer(self) -> SessionIssuer:
        return self._issuer

    def register(
        self,
        name: Optional[str],
        email: Optional[str],
        password: Optional[str],
    ) -> User:
        """Create a new account. No session token is issued here."""

        missing = _missing_fields(name=name, email=email, password=password)
        if missing:
            raise ValidationError(MISSING_REGISTRATION_FIELDS, missing)

        normalized_email = normalize_email(email)
        with _failures_logged("registering user"):
            if self._repository.find_by_email(normalized_email) is not None:
                raise ConflictError(USER_ALREADY_EXISTS)

            try:
                password_hash = self._credentials.hash(password)
            except ValueError as exc:
                raise ValidationError(UNSUPPORTED_PASSWORD, ["password"]) from exc

            user = User(
                id=uuid.uuid4().hex,
                name=name.strip(),
                email=normalized_email,
                password_hash=password_hash,
                created_at=self._clock(),
            )
            try:
                stored = self._repository.save(user)
            except DuplicateEmailError as exc:
                raise ConflictError(USER_ALREADY_EXISTS) from exc

        logger.info("Registered user %s", stored.id)
        return stored

    def login(self, email: Optional[str], password: Optional[str]) -> IssuedToken:
        """Exchange valid credentials for a signed session token.

        Unknown emails and wrong passwords raise the same
        :class:`AuthenticationError` so callers cannot probe for accounts.
        """

        missing = _missing_fields(email=email, password=password)
        if missing:
            raise ValidationError(MISSING_LOGIN_FIELDS, missing)

        with _failures_logged("logging in user"):
            user = self._repository.find_by_email(email)
            if user is None:
                self._credentials.dummy_verify(password)
                logger.info("Rejected login attempt")
                raise AuthenticationError(INVALID_CREDENTIALS)

            if not self._credentials.verify(password, user.password_hash):
                logger.info("Rejected login attempt")
                raise AuthenticationError(INVALID_CREDENTIALS)

            if self._credentials.needs_rehash(user.password_hash):
                logger.info("Password hash for user %s uses outdated settings", user.id)

            issued = self._issuer.issue(user.id)

        logger.info("Login: user %s", user.id)
        return issued

    def authenticate(self, token: Optional[str]) -> User:
        """Resolve a session token to the account it was issued for."""

        subject = self._issuer.validate(token) if token else None
        if subject is None:
            raise AuthenticationError(INVALID_TOKEN)

        with _failures_logged(f"loading user {subject}"):
            user = self._repository.get(subject)

        if user is None:
            raise AuthenticationError(INVALID_TOKEN)
        return user

    async def register_async(
        self,
        name: Optional[str],
        email: Optional[str],
        password: Optional[str],
    ) -> User:
        return await anyio.to_thread.run_sync(self.register, name, email, password)

    async def login_async(self, email: Optional[str], password: Optional[str]) -> IssuedToken:
        return await anyio.to_thread.run_sync(self.login, email, password)

    async def authenticate_async(self, token: Optional[str]) -> User:
        return await anyio.to_thread.run_sync(self.authenticate, token)


__all__ = [
    "AccountService",
    "INVALID_CREDENTIALS",
    "INVALID_TOKEN",
    "MISSING_LOGIN_FIELDS",
    "MISSING_REGISTRATION_FIELDS",
    "UNSUPPORTED_PASSWORD",
    "USER_ALREADY_EXISTS",
]
