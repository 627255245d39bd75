from pathlib import Path

import pytest

from main import _parse_args, main


def test_default_command_invokes_serve() -> None:
    args = _parse_args([])
    assert args.command == "serve"


def test_default_command_accepts_options_without_subcommand() -> None:
    args = _parse_args(["--host", "0.0.0.0", "--port", "8080"])
    assert args.command == "serve"
    assert args.host == "0.0.0.0"
    assert args.port == 8080


def test_global_options_precede_subcommand() -> None:
    args = _parse_args(["--config", "accounts.yaml", "--log-level", "debug", "init-db"])
    assert args.command == "init-db"
    assert args.config == "accounts.yaml"
    assert args.log_level == "debug"


def test_list_users_subcommand_available() -> None:
    args = _parse_args(["list-users"])
    assert args.command == "list-users"


def test_init_db_creates_database(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys) -> None:
    db_path = tmp_path / "accounts.sqlite3"
    monkeypatch.setenv("ACCOUNTS_TOKEN_SECRET", "cli-secret")
    monkeypatch.setenv("ACCOUNTS_DB_PATH", str(db_path))
    monkeypatch.setenv("ACCOUNTS_CONFIG", str(tmp_path / "absent.yaml"))

    main(["init-db"])
    assert db_path.exists()
    assert "Database initialisation complete." in capsys.readouterr().out

    main(["list-users"])
    assert "No users are currently registered." in capsys.readouterr().out


def test_missing_secret_exits(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("ACCOUNTS_TOKEN_SECRET", raising=False)
    monkeypatch.delenv("ACCOUNTS_TOKEN_SECRET_FILE", raising=False)
    monkeypatch.setenv("ACCOUNTS_CONFIG", str(tmp_path / "absent.yaml"))

    with pytest.raises(SystemExit):
        main(["init-db"])
