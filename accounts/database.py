"""SQLite-backed persistence for user accounts."""
from __future__ import annotations

import sqlite3
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from .errors import DuplicateEmailError, InfrastructureError
from .models import User
from .repository import normalize_email


def _ensure_directory(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def resolve_database_path(env_value: Optional[str]) -> Path:
    """Resolve the on-disk path for the account database."""

    if env_value:
        return Path(env_value).expanduser().resolve(strict=False)
    base_dir = Path(__file__).resolve().parent.parent / "data"
    return (base_dir / "accounts.sqlite3").resolve(strict=False)


def _serialize_datetime(value: datetime) -> str:
    return value.isoformat()


def _parse_datetime(value: str) -> datetime:
    return datetime.fromisoformat(value)


class Database:
    """User repository stored in a single SQLite file.

    Email uniqueness is enforced by a ``UNIQUE`` constraint, which makes
    :meth:`save` an atomic insert-if-absent even across processes.
    """

    def __init__(self, path: Path) -> None:
        _ensure_directory(path)
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        return conn

    def initialize(self) -> None:
        """Create the required tables if they do not already exist."""

        try:
            with self._connect() as conn:
                conn.executescript(
                    """
                    CREATE TABLE IF NOT EXISTS users (
                        id TEXT PRIMARY KEY,
                        name TEXT NOT NULL,
                        email TEXT NOT NULL UNIQUE,
                        password_hash TEXT NOT NULL,
                        created_at TEXT NOT NULL
                    );
                    """
                )
        except sqlite3.DatabaseError as exc:
            raise InfrastructureError(f"Failed to initialise database at {self._path}") from exc

    # ------------------------------------------------------------------
    # User management
    # ------------------------------------------------------------------
    def save(self, user: User) -> User:
        """Insert ``user``; raise :class:`DuplicateEmailError` if the email is taken."""

        normalized_email = normalize_email(user.email)
        try:
            with self._connect() as conn:
                conn.execute(
                    """
                    INSERT INTO users (id, name, email, password_hash, created_at)
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    (
                        user.id,
                        user.name,
                        normalized_email,
                        user.password_hash,
                        _serialize_datetime(user.created_at),
                    ),
                )
        except sqlite3.IntegrityError as exc:
            raise DuplicateEmailError("A user with that email already exists") from exc
        except sqlite3.DatabaseError as exc:
            raise InfrastructureError(f"Failed to persist user {user.id}") from exc

        stored = self.get(user.id)
        if stored is None:
            raise InfrastructureError(f"Failed to load user {user.id} after creation")
        return stored

    def get(self, user_id: str) -> Optional[User]:
        row = self._fetch_one("SELECT * FROM users WHERE id = ?", (user_id,))
        if row is None:
            return None
        return self._row_to_user(row)

    def find_by_email(self, email: str) -> Optional[User]:
        row = self._fetch_one("SELECT * FROM users WHERE email = ?", (normalize_email(email),))
        if row is None:
            return None
        return self._row_to_user(row)

    def list_users(self) -> List[User]:
        try:
            with self._connect() as conn:
                rows = conn.execute("SELECT * FROM users ORDER BY created_at").fetchall()
        except sqlite3.DatabaseError as exc:
            raise InfrastructureError("Failed to list users") from exc
        return [self._row_to_user(row) for row in rows]

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _fetch_one(self, query: str, params: tuple) -> Optional[sqlite3.Row]:
        try:
            with self._connect() as conn:
                return conn.execute(query, params).fetchone()
        except sqlite3.DatabaseError as exc:
            raise InfrastructureError("User lookup failed") from exc

    def _row_to_user(self, row: sqlite3.Row) -> User:
        return User(
            id=str(row["id"]),
            name=str(row["name"]),
            email=str(row["email"]),
            password_hash=str(row["password_hash"]),
            created_at=_parse_datetime(str(row["created_at"])),
        )


__all__ = ["Database", "resolve_database_path"]
