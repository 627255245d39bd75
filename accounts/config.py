"""Configuration management for the account service."""
from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import Dict, Mapping, Optional

import yaml

from .database import resolve_database_path
from .passwords import DEFAULT_BCRYPT_ROUNDS
from .tokens import DEFAULT_TOKEN_TTL

_MIN_BCRYPT_ROUNDS = 4
_MAX_BCRYPT_ROUNDS = 31


@dataclass(frozen=True)
class Settings:
    """Runtime settings. ``token_secret`` is read once and never changes."""

    token_secret: bytes
    database_path: Path
    token_ttl: timedelta = DEFAULT_TOKEN_TTL
    bcrypt_rounds: int = DEFAULT_BCRYPT_ROUNDS
    log_level: str = "INFO"

    def __repr__(self) -> str:
        return (
            f"Settings(token_secret=<redacted>, database_path={self.database_path!r}, "
            f"token_ttl={self.token_ttl!r}, bcrypt_rounds={self.bcrypt_rounds!r}, "
            f"log_level={self.log_level!r})"
        )

    @staticmethod
    def from_dict(data: Mapping[str, object], base_path: Path | None = None) -> "Settings":
        """Create :class:`Settings` from raw dictionary data."""

        raw_secret = data.get("token_secret")
        if raw_secret is None and data.get("token_secret_file"):
            secret_path = _resolve_path(str(data["token_secret_file"]), base_path)
            raw_secret = secret_path.read_text(encoding="utf-8").strip()
        if not raw_secret:
            raise ValueError(
                "A token signing secret is required. Set ACCOUNTS_TOKEN_SECRET or "
                "token_secret in the configuration file."
            )
        secret = raw_secret if isinstance(raw_secret, bytes) else str(raw_secret).encode("utf-8")

        ttl_seconds = int(data.get("token_ttl_seconds", int(DEFAULT_TOKEN_TTL.total_seconds())))
        if ttl_seconds <= 0:
            raise ValueError("token_ttl_seconds must be positive")

        rounds = int(data.get("bcrypt_rounds", DEFAULT_BCRYPT_ROUNDS))
        if not _MIN_BCRYPT_ROUNDS <= rounds <= _MAX_BCRYPT_ROUNDS:
            raise ValueError(
                f"bcrypt_rounds must be between {_MIN_BCRYPT_ROUNDS} and {_MAX_BCRYPT_ROUNDS}"
            )

        raw_db_path = data.get("database_path")
        if raw_db_path:
            database_path = _resolve_path(str(raw_db_path), base_path)
        else:
            database_path = resolve_database_path(None)

        return Settings(
            token_secret=secret,
            database_path=database_path,
            token_ttl=timedelta(seconds=ttl_seconds),
            bcrypt_rounds=rounds,
            log_level=str(data.get("log_level", "INFO")).upper(),
        )


def _resolve_path(raw: str, base_path: Path | None) -> Path:
    candidate = Path(raw).expanduser()
    if not candidate.is_absolute() and base_path is not None:
        candidate = base_path / candidate
    return candidate.resolve(strict=False)


_ENV_OVERRIDES: Dict[str, str] = {
    "ACCOUNTS_TOKEN_SECRET": "token_secret",
    "ACCOUNTS_TOKEN_SECRET_FILE": "token_secret_file",
    "ACCOUNTS_TOKEN_TTL_SECONDS": "token_ttl_seconds",
    "ACCOUNTS_BCRYPT_ROUNDS": "bcrypt_rounds",
    "ACCOUNTS_DB_PATH": "database_path",
    "ACCOUNTS_LOG_LEVEL": "log_level",
}


def load_settings(
    config_path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Settings:
    """Load settings from an optional YAML file overlaid by environment variables."""

    env = os.environ if environ is None else environ
    raw: Dict[str, object] = {}
    base_path: Path | None = None

    if config_path is not None and config_path.exists():
        with config_path.open("r", encoding="utf-8") as handle:
            loaded = yaml.safe_load(handle) or {}
        if not isinstance(loaded, dict):
            raise ValueError(f"Configuration file {config_path} must contain a mapping")
        raw.update(loaded)
        base_path = config_path.parent

    for env_name, key in _ENV_OVERRIDES.items():
        value = env.get(env_name)
        if value:
            raw[key] = value
    if env.get("ACCOUNTS_TOKEN_SECRET_FILE") and not env.get("ACCOUNTS_TOKEN_SECRET"):
        raw.pop("token_secret", None)
    if env.get("ACCOUNTS_DB_PATH"):
        raw["database_path"] = str(resolve_database_path(env["ACCOUNTS_DB_PATH"]))

    return Settings.from_dict(raw, base_path=base_path)


def resolve_config_path(env_value: Optional[str]) -> Path:
    """Resolve the path to the configuration file."""
    if env_value:
        candidate = Path(env_value).expanduser().resolve(strict=False)
    else:
        candidate = (Path(__file__).resolve().parent.parent / "config" / "accounts.yaml").resolve(strict=False)
    return candidate


__all__ = ["Settings", "load_settings", "resolve_config_path"]
