"""Domain models for the account service."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class User:
    """Represents a registered account as stored by a repository."""

    id: str
    name: str
    email: str
    password_hash: str
    created_at: datetime


@dataclass(frozen=True)
class IssuedToken:
    """A freshly minted session token together with its validity window."""

    token: str
    subject: str
    issued_at: datetime
    expires_at: datetime


__all__ = ["IssuedToken", "User"]
