#!/usr/bin/env python3
"""
SessionGate -- password login and server-side sessions.

Usage:
  python main.py serve
  python main.py serve --host 0.0.0.0 --port 8080
  python main.py serve --reload
  python main.py create-user alice alice@example.com

Environment variables (see core/config.py for the full list):
  SECRET_KEY     Signs bearer tokens. Required unless DEBUG=true.
  DATABASE_URL   SQLAlchemy URL for the account database.
  BCRYPT_ROUNDS  bcrypt cost factor (default 12).
"""

import argparse
import getpass
import sys

from auth.errors import AuthError
from auth.models import NewUser
from auth.passwords import PasswordHasher
from auth.signup import SignupService
from auth.store import UserStore
from core.config import get_settings


def _serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run("api.main:app", host=args.host, port=args.port, reload=args.reload)
    return 0


def _create_user(args: argparse.Namespace) -> int:
    """Create an account from the terminal, prompting for the password twice."""
    password = getpass.getpass("Password: ")
    if password != getpass.getpass("Repeat password: "):
        print("  [!] Passwords do not match.")
        return 1

    settings = get_settings()
    store = UserStore(settings.database_url)
    try:
        service = SignupService(
            store,
            PasswordHasher(rounds=settings.bcrypt_rounds),
            min_password_length=settings.min_password_length,
        )
        user = service.sign_up(NewUser(username=args.username, email=args.email, password=password))
    except AuthError as exc:
        print(f"  [!] {exc.message}")
        return 1
    finally:
        store.close()

    print(f"  Created {user.username} ({user.id})")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="SessionGate -- password login and server-side sessions.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP API with uvicorn")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)
    serve.add_argument("--reload", action="store_true", help="Restart on code changes (development only)")
    serve.set_defaults(func=_serve)

    create = sub.add_parser("create-user", help="Create an account without going through POST /signup")
    create.add_argument("username")
    create.add_argument("email")
    create.set_defaults(func=_create_user)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
