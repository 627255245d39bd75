
import argparse
import getpass
import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from accounts.application import build_service
from accounts.config import load_settings, resolve_config_path
from accounts.errors import ConflictError, InfrastructureError, ValidationError


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create an account service user")
    parser.add_argument("name", help="Display name for the user")
    parser.add_argument("email", help="Unique email address for login")
    parser.add_argument(
        "--config",
        dest="config_path",
        default=None,
        help="Path to the YAML configuration file (defaults to ACCOUNTS_CONFIG or config/accounts.yaml)",
    )
    return parser.parse_args()


def prompt_for_password() -> str:
    for _ in range(3):
        password = getpass.getpass("Password: ")
        confirm = getpass.getpass("Confirm password: ")
        if password != confirm:
            print("Passwords do not match. Try again.", file=sys.stderr)
            continue
        if not password.strip():
            print("Password must not be empty.", file=sys.stderr)
            continue
        return password
    raise SystemExit("Failed to set password after three attempts.")


def main() -> int:
    args = parse_args()
    password = prompt_for_password()

    config_path = resolve_config_path(args.config_path or os.getenv("ACCOUNTS_CONFIG"))
    service = build_service(load_settings(config_path))

    try:
        user = service.register(args.name, args.email, password)
    except (ValidationError, ConflictError) as exc:
        print(f"Error: {exc.message}", file=sys.stderr)
        return 1
    except InfrastructureError:
        print("Error: the account database is unavailable.", file=sys.stderr)
        return 1

    print(f"Created user {user.id}: {user.name} <{user.email}>")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
