"""Application factory wiring settings, storage and the HTTP API."""
from __future__ import annotations

import os
from typing import Optional

from fastapi import FastAPI

from .api import create_app as create_api_app
from .config import Settings, load_settings, resolve_config_path
from .database import Database
from .passwords import CredentialManager
from .service import AccountService
from .tokens import SessionIssuer


def build_service(settings: Settings, *, database: Optional[Database] = None) -> AccountService:
    """Assemble an :class:`AccountService` backed by the SQLite repository."""

    db = database or Database(settings.database_path)
    db.initialize()
    credentials = CredentialManager(rounds=settings.bcrypt_rounds)
    issuer = SessionIssuer(settings.token_secret, ttl=settings.token_ttl)
    return AccountService(db, credentials, issuer)


def create_application(*, settings: Optional[Settings] = None) -> FastAPI:
    """Create the ASGI application from the environment."""

    resolved = settings or load_settings(resolve_config_path(os.getenv("ACCOUNTS_CONFIG")))
    app = create_api_app(service=build_service(resolved))
    app.state.settings = resolved
    return app


__all__ = ["build_service", "create_application"]
