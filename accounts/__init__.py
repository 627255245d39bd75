"""Core utilities for the account service."""

from __future__ import annotations

from typing import Any

from .database import Database, resolve_database_path
from .errors import (
    AccountError,
    AuthenticationError,
    ConflictError,
    InfrastructureError,
    ValidationError,
)
from .passwords import CredentialManager
from .repository import InMemoryUserRepository
from .tokens import SessionIssuer


def create_app(*args: Any, **kwargs: Any):
    """Factory function that returns the HTTP application built from the environment."""

    from .application import create_application as _create_application

    return _create_application(*args, **kwargs)


__all__ = [
    "AccountError",
    "AuthenticationError",
    "ConflictError",
    "CredentialManager",
    "Database",
    "InMemoryUserRepository",
    "InfrastructureError",
    "SessionIssuer",
    "ValidationError",
    "create_app",
    "resolve_database_path",
]
