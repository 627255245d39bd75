from __future__ import annotations

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from accounts.passwords import CredentialManager
from accounts.repository import InMemoryUserRepository
from accounts.service import AccountService
from accounts.tokens import SessionIssuer

TEST_SECRET = b"tests-signing-secret-0123456789abcdef"
FAST_ROUNDS = 4


class FakeClock:
    """Mutable clock used to move tokens through their validity window."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now = self.now + delta


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def credentials() -> CredentialManager:
    return CredentialManager(rounds=FAST_ROUNDS)


@pytest.fixture()
def issuer(clock: FakeClock) -> SessionIssuer:
    return SessionIssuer(TEST_SECRET, clock=clock)


@pytest.fixture()
def repository() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture()
def service(
    repository: InMemoryUserRepository,
    credentials: CredentialManager,
    issuer: SessionIssuer,
    clock: FakeClock,
) -> AccountService:
    return AccountService(repository, credentials, issuer, clock=clock)
