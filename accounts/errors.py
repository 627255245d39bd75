"""Error taxonomy shared by the account service and its adapters."""

from __future__ import annotations

from typing import Iterable, Tuple


class AccountError(Exception):
    """Base class for failures surfaced by the account service."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(AccountError):
    """A required field was missing or blank."""

    def __init__(self, message: str, fields: Iterable[str] = ()) -> None:
        super().__init__(message)
        self.fields: Tuple[str, ...] = tuple(fields)


class ConflictError(AccountError):
    """A user with the requested email already exists."""


class DuplicateEmailError(ConflictError):
    """Raised by repositories when a save would violate email uniqueness."""


class AuthenticationError(AccountError):
    """Credentials or a session token were rejected."""


class InfrastructureError(AccountError):
    """Storage or signing failed; never shown verbatim to callers."""


__all__ = [
    "AccountError",
    "AuthenticationError",
    "ConflictError",
    "DuplicateEmailError",
    "InfrastructureError",
    "ValidationError",
]
