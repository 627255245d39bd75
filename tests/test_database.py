from __future__ import annotations

import sqlite3
from datetime import datetime, timezone
from pathlib import Path

import pytest

from accounts.database import Database, resolve_database_path
from accounts.errors import DuplicateEmailError, InfrastructureError
from accounts.models import User


@pytest.fixture()
def database(tmp_path: Path) -> Database:
    db_path = tmp_path / "accounts.sqlite3"
    db = Database(db_path)
    db.initialize()
    return db


def _user(user_id: str, email: str, name: str = "Agent Owner") -> User:
    return User(
        id=user_id,
        name=name,
        email=email,
        password_hash="$2b$04$placeholderplaceholderplaceholderplaceholderpla",
        created_at=datetime(2024, 5, 1, 9, 30, tzinfo=timezone.utc),
    )


def test_save_and_find_user(database: Database) -> None:
    saved = database.save(_user("abc123", "Owner@Example.com "))

    assert saved.email == "owner@example.com"
    assert saved.created_at == datetime(2024, 5, 1, 9, 30, tzinfo=timezone.utc)
    assert database.get("abc123") == saved
    assert database.find_by_email("OWNER@example.com") == saved
    assert database.find_by_email("nobody@example.com") is None
    assert database.get("missing") is None


def test_duplicate_email_raises(database: Database) -> None:
    database.save(_user("first", "owner@example.com"))
    with pytest.raises(DuplicateEmailError):
        database.save(_user("second", "owner@example.com"))

    assert [user.id for user in database.list_users()] == ["first"]


def test_initialize_is_idempotent(database: Database) -> None:
    database.save(_user("abc123", "owner@example.com"))
    database.initialize()
    assert database.get("abc123") is not None


def test_storage_failure_is_reported_as_infrastructure_error(tmp_path: Path) -> None:
    db_path = tmp_path / "broken.sqlite3"
    db_path.write_bytes(b"this is not a sqlite database" * 64)
    database = Database(db_path)

    with pytest.raises(InfrastructureError):
        database.find_by_email("owner@example.com")


def test_password_hash_is_stored_not_plaintext(database: Database) -> None:
    database.save(_user("abc123", "owner@example.com"))
    with sqlite3.connect(database.path) as conn:
        stored = conn.execute("SELECT password_hash FROM users").fetchone()[0]
    assert stored.startswith("$2b$")


def test_resolve_database_path_prefers_env(tmp_path: Path) -> None:
    target = tmp_path / "custom.sqlite3"
    assert resolve_database_path(str(target)) == target.resolve()
    assert resolve_database_path(None).name == "accounts.sqlite3"
