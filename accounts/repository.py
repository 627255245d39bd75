"""User repository contract and an in-memory implementation."""

from __future__ import annotations

import threading
from typing import Dict, Optional, Protocol

from .errors import DuplicateEmailError
from .models import User


def normalize_email(email: str) -> str:
    return email.strip().lower()


class UserRepository(Protocol):
    """Storage contract consumed by :class:`~accounts.service.AccountService`.

    ``save`` must behave as an atomic insert-if-absent keyed on the email
    address: of two concurrent saves for the same email exactly one succeeds
    and the other raises :class:`DuplicateEmailError`. Storage failures are
    reported as :class:`~accounts.errors.InfrastructureError`.
    """

    def find_by_email(self, email: str) -> Optional[User]:
        ...

    def get(self, user_id: str) -> Optional[User]:
        ...

    def save(self, user: User) -> User:
        ...


class InMemoryUserRepository:
    """Thread-safe dictionary-backed repository."""

    def __init__(self) -> None:
        self._by_id: Dict[str, User] = {}
        self._id_by_email: Dict[str, str] = {}
        self._lock = threading.Lock()

    def find_by_email(self, email: str) -> Optional[User]:
        with self._lock:
            user_id = self._id_by_email.get(normalize_email(email))
            if user_id is None:
                return None
            return self._by_id[user_id]

    def get(self, user_id: str) -> Optional[User]:
        with self._lock:
            return self._by_id.get(user_id)

    def save(self, user: User) -> User:
        key = normalize_email(user.email)
        with self._lock:
            if key in self._id_by_email:
                raise DuplicateEmailError("A user with that email already exists")
            if user.id in self._by_id:
                raise ValueError(f"User id {user.id} is already taken")
            self._by_id[user.id] = user
            self._id_by_email[key] = user.id
        return user

    def __len__(self) -> int:
        with self._lock:
            return len(self._by_id)


__all__ = ["InMemoryUserRepository", "UserRepository", "normalize_email"]
