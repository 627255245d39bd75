"""Signed, time-limited session tokens."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

import jwt

from .errors import InfrastructureError
from .models import IssuedToken

logger = logging.getLogger("accounts.tokens")

Clock = Callable[[], datetime]

DEFAULT_TOKEN_TTL = timedelta(hours=1)
_ALGORITHM = "HS256"
_REQUIRED_CLAIMS = ["sub", "iat", "exp"]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SessionIssuer:
    """Mint and validate HMAC-signed JWTs asserting a user identity.

    Tokens are not recorded anywhere; a token stays valid until the injected
    clock passes its ``exp`` claim.
    """

    def __init__(
        self,
        secret: bytes,
        *,
        ttl: timedelta = DEFAULT_TOKEN_TTL,
        clock: Clock = utc_now,
    ) -> None:
        if not secret:
            raise ValueError("Token signing secret must not be empty")
        if ttl <= timedelta(0):
            raise ValueError("Token lifetime must be positive")
        self._secret = bytes(secret)
        self._ttl = ttl
        self._clock = clock

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    def issue(self, subject: str) -> IssuedToken:
        issued_at = self._clock().replace(microsecond=0)
        expires_at = issued_at + self._ttl
        claims = {
            "sub": subject,
            "iat": int(issued_at.timestamp()),
            "exp": int(expires_at.timestamp()),
        }
        try:
            token = jwt.encode(claims, self._secret, algorithm=_ALGORITHM)
        except (jwt.PyJWTError, TypeError, ValueError) as exc:
            raise InfrastructureError("Failed to sign session token") from exc
        return IssuedToken(
            token=token,
            subject=subject,
            issued_at=issued_at,
            expires_at=expires_at,
        )

    def validate(self, token: str) -> Optional[str]:
        """Return the token's subject, or ``None`` when it is not valid."""

        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[_ALGORITHM],
                options={
                    "require": _REQUIRED_CLAIMS,
                    "verify_exp": False,
                    "verify_iat": False,
                },
            )
            expires_at = datetime.fromtimestamp(int(claims["exp"]), tz=timezone.utc)
        except (jwt.PyJWTError, TypeError, ValueError, OverflowError) as exc:
            logger.debug("Rejected session token: %s", exc)
            return None

        if self._clock() >= expires_at:
            logger.debug("Rejected session token: expired at %s", expires_at.isoformat())
            return None

        subject = claims.get("sub")
        if not isinstance(subject, str) or not subject:
            logger.debug("Rejected session token: missing subject")
            return None
        return subject


__all__ = ["Clock", "DEFAULT_TOKEN_TTL", "SessionIssuer", "utc_now"]
