"""Password hashing and verification backed by passlib's bcrypt handler."""

from __future__ import annotations

import secrets
import threading
from typing import Optional

from passlib.context import CryptContext

DEFAULT_BCRYPT_ROUNDS = 10


class CredentialManager:
    """Hash plaintext passwords for storage and verify them later.

    Hashes are salted bcrypt strings that embed both the salt and the cost
    factor, so verification needs nothing but the stored value.
    """

    def __init__(self, *, rounds: int = DEFAULT_BCRYPT_ROUNDS) -> None:
        self._rounds = rounds
        self._context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__default_rounds=rounds,
            bcrypt__min_rounds=rounds,
            bcrypt__max_rounds=rounds,
        )
        self._dummy_hash: Optional[str] = None
        self._dummy_lock = threading.Lock()

    @property
    def rounds(self) -> int:
        return self._rounds

    def hash(self, plaintext: str) -> str:
        return self._context.hash(plaintext)

    def verify(self, plaintext: str, password_hash: Optional[str]) -> bool:
        """Return ``True`` only when ``plaintext`` matches ``password_hash``."""

        if not password_hash:
            return False
        try:
            return self._context.verify(plaintext, password_hash)
        except (ValueError, TypeError):
            return False

    def needs_rehash(self, password_hash: str) -> bool:
        """Report whether ``password_hash`` was produced with different settings."""

        try:
            return self._context.needs_update(password_hash)
        except (ValueError, TypeError):
            return True

    def dummy_verify(self, plaintext: str) -> bool:
        """Spend the same work as a real check against a throwaway hash.

        Used when no stored hash exists so that an unknown account costs the
        caller as much time as a wrong password.
        """

        with self._dummy_lock:
            if self._dummy_hash is None:
                self._dummy_hash = self._context.hash(secrets.token_urlsafe(16))
            dummy_hash = self._dummy_hash
        self.verify(plaintext, dummy_hash)
        return False


__all__ = ["CredentialManager", "DEFAULT_BCRYPT_ROUNDS"]
