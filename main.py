#!/usr/bin/env python3
"""
User Auth API -- management commands.

Usage:
  python main.py init-db
  python main.py seed
  python main.py create-user --email alice@example.com --name "Alice" --password s3cretpass
  python main.py purge-sessions
  python main.py serve --host 127.0.0.1 --port 8000 --reload

All commands read configuration from the environment / .env (see core/config.py).
DATABASE_URL selects the database; BCRYPT_ROUNDS sets the hashing cost.
"""

import argparse
import sys
from datetime import timedelta

from auth.service import AuthService
from auth.store import SessionStore
from core.config import get_settings
from core.errors import AppError
from db.database import create_database
from db.seed import seed_database
from users.service import UserService
from users.store import UserStore


def _cmd_init_db(args: argparse.Namespace) -> int:
    settings = get_settings()
    db = create_database(settings.database_url)
    db.close()
    print(f"  [+] Schema ready at {settings.database_url}")
    return 0


def _cmd_seed(args: argparse.Namespace) -> int:
    settings = get_settings()
    db = create_database(settings.database_url)
    try:
        inserted = seed_database(db, bcrypt_rounds=settings.bcrypt_rounds)
    finally:
        db.close()
    if inserted:
        print(f"  [+] Inserted {inserted} demo user(s).")
    else:
        print("  [=] Users already present -- nothing seeded.")
    return 0


def _cmd_create_user(args: argparse.Namespace) -> int:
    settings = get_settings()
    db = create_database(settings.database_url)
    try:
        service = UserService(UserStore(db), SessionStore(db), bcrypt_rounds=settings.bcrypt_rounds)
        user = service.create_user(email=args.email.strip().lower(), name=args.name, password=args.password)
    except AppError as exc:
        print(f"  [!] {exc.message}")
        return 1
    finally:
        db.close()
    print(f"  [+] Created user {user.id} <{user.email}>")
    return 0


def _cmd_purge_sessions(args: argparse.Namespace) -> int:
    settings = get_settings()
    db = create_database(settings.database_url)
    try:
        auth = AuthService(
            UserStore(db),
            SessionStore(db),
            session_ttl=timedelta(seconds=settings.session_ttl_seconds),
            bcrypt_rounds=settings.bcrypt_rounds,
        )
        removed = auth.purge_expired()
    finally:
        db.close()
    print(f"  [+] Removed {removed} expired session(s).")
    return 0


def _cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run("asgi:app", host=args.host, port=args.port, reload=args.reload)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="main.py",
        description="User Auth API -- database and server management.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("init-db", help="Create the database file and tables")
    p.set_defaults(func=_cmd_init_db)

    p = sub.add_parser("seed", help="Insert demo users into an empty database")
    p.set_defaults(func=_cmd_seed)

    p = sub.add_parser("create-user", help="Create a user account")
    p.add_argument("--email", required=True)
    p.add_argument("--name", required=True)
    p.add_argument("--password", required=True)
    p.set_defaults(func=_cmd_create_user)

    p = sub.add_parser("purge-sessions", help="Delete expired sessions")
    p.set_defaults(func=_cmd_purge_sessions)

    p = sub.add_parser("serve", help="Run the API with uvicorn")
    p.add_argument("--host", default="127.0.0.1")
    p.add_argument("--port", type=int, default=8000)
    p.add_argument("--reload", action="store_true", help="Reload on code changes (development)")
    p.set_defaults(func=_cmd_serve)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
