"""Command-line interface for the account service."""

from __future__ import annotations
import argparse
import logging
import os
import sys
from typing import Sequence

from accounts.config import Settings, load_settings, resolve_config_path
from accounts.database import Database

logger = logging.getLogger("accounts.main")

_KNOWN_COMMANDS = {"serve", "init-db", "list-users"}


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Account service utilities")
    parser.add_argument(
        "--config",
        default=None,
        help="Path to the YAML configuration file (defaults to ACCOUNTS_CONFIG or config/accounts.yaml)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Override the configured log level (e.g. DEBUG, INFO)",
    )
    subparsers = parser.add_subparsers(dest="command")

    parser.set_defaults(command="serve")

    subparsers.add_parser("init-db", help="Initialise the account database")
    subparsers.add_parser("list-users", help="List registered accounts")

    serve_parser = subparsers.add_parser("serve", help="Start the HTTP account service")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind address for the API")
    serve_parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Port for the HTTP API (default: 8000)",
    )

    args_list = list(argv) if argv is not None else sys.argv[1:]

    # Top-level options must stay ahead of the (possibly implied) subcommand.
    global_options = []
    while args_list and args_list[0] in ("--config", "--log-level") and len(args_list) > 1:
        global_options.extend(args_list[:2])
        args_list = args_list[2:]

    if not args_list:
        args_list = ["serve"]
    else:
        first = args_list[0]
        if first in ("-h", "--help"):
            return parser.parse_args([*global_options, *args_list])
        if first not in _KNOWN_COMMANDS:  # bare options belong to ``serve``
            args_list = ["serve", *args_list]

    return parser.parse_args([*global_options, *args_list])


def _load_settings(config: str | None) -> Settings:
    config_path = resolve_config_path(config or os.getenv("ACCOUNTS_CONFIG"))
    try:
        return load_settings(config_path)
    except ValueError as exc:
        raise SystemExit(f"Invalid configuration: {exc}") from exc


def _initialise_database(settings: Settings) -> Database:
    database = Database(settings.database_path)
    database.initialize()
    logger.info("Database initialised at %s", settings.database_path)
    return database


def _serve(*, settings: Settings, database: Database, host: str, port: int) -> None:
    from accounts.api import create_app
    from accounts.application import build_service
    import uvicorn

    logger.info("Starting account API on http://%s:%s", host, port)

    app = create_app(service=build_service(settings, database=database))
    app.state.settings = settings
    uvicorn.run(
        app,
        host=host,
        port=port,
        log_level=settings.log_level.lower(),
    )


def _list_users(database: Database) -> None:
    users = database.list_users()
    if not users:
        print("No users are currently registered.")
        return

    print(f"{len(users)} user(s) found:")
    print(f"{'ID':<32}  {'Name':<24}  {'Email':<32}  Created")
    print("-" * 110)
    for user in users:
        created = user.created_at.strftime("%Y-%m-%d %H:%M:%S %Z")
        print(f"{user.id:<32}  {user.name:<24}  {user.email:<32}  {created}")


def main(argv: Sequence[str] | None = None) -> None:
    """Entry point for CLI usage."""

    args = _parse_args(argv)
    settings = _load_settings(args.config)

    log_level = (args.log_level or settings.log_level).upper()
    logging.basicConfig(level=log_level, format="%(asctime)s [%(levelname)s] %(message)s")

    database = _initialise_database(settings)

    if args.command == "serve":
        _serve(settings=settings, database=database, host=args.host, port=args.port)
    elif args.command == "list-users":
        _list_users(database)
    elif args.command == "init-db":
        print("Database initialisation complete.")


if __name__ == "__main__":
    main()
