#!/usr/bin/env python3
"""
Administrative command line for the Event Manager database.

Usage:
    event-manager init-db [--db ./event_manager.db]
    event-manager reset-password --email admin@example.com [--password "NewStrongPass!234"]
    event-manager create-token --email admin@example.com [--minutes 525600]

``reset-password`` never reads or reveals the existing password; it
simply stores a new hash.  If ``--password`` is omitted you will be
prompted for it.  ``create-token`` prints a signed access token for
an existing user, e.g. for scripts calling the API.
"""

import argparse
import asyncio
import getpass
import sys
from datetime import timedelta
from typing import List, Optional

from event_manager_api.app.core.config import Settings, settings as default_settings
from event_manager_api.app.core.db import Database, get_database_path
from event_manager_api.app.core.errors import NotFound
from event_manager_api.app.core.security import create_user_token
from event_manager_api.app.services.user_service import UserService


def _database(args: argparse.Namespace) -> Database:
    path = get_database_path(args.db) if args.db else get_database_path(default_settings.database_url)
    return Database(path, timeout=default_settings.database_timeout)


def cmd_init_db(args: argparse.Namespace) -> int:
    database = _database(args)
    database.init_db()
    print(f"[+] Database ready: {database.path}")
    return 0


def cmd_reset_password(args: argparse.Namespace) -> int:
    new_password = args.password or getpass.getpass("Enter NEW password: ")
    if len(new_password) < 6:
        print("[!] Password must be at least 6 characters long.", file=sys.stderr)
        return 1
    database = _database(args)
    with database.connection() as conn:
        updated = asyncio.run(UserService.set_password(conn, args.email, new_password))
    if not updated:
        print(f"[!] No user found with email: {args.email}", file=sys.stderr)
        return 2
    print(f"[+] Password updated for user: {args.email}")
    return 0


def cmd_create_token(args: argparse.Namespace, settings: Settings = default_settings) -> int:
    if args.minutes is not None and args.minutes <= 0:
        print("[!] --minutes must be positive.", file=sys.stderr)
        return 1
    database = _database(args)
    with database.connection() as conn:
        try:
            user = asyncio.run(UserService.get_user_by_email(conn, args.email))
        except NotFound:
            print(f"[!] No user found with email: {args.email}", file=sys.stderr)
            return 2
    expires = timedelta(minutes=args.minutes) if args.minutes else None
    print(create_user_token(user, settings, expires))
    return 0


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="event-manager", description="Event Manager administration.")
    ap.add_argument("--db", help="Path to SQLite DB file (defaults to DATABASE_URL)")
    sub = ap.add_subparsers(dest="command", required=True)

    sub.add_parser("init-db", help="Create the database and apply migrations")

    reset = sub.add_parser("reset-password", help="Set a new password for a user")
    reset.add_argument("--email", required=True, help="User email to update")
    reset.add_argument("--password", help="New password. If omitted, you'll be prompted securely.")

    token = sub.add_parser("create-token", help="Print an access token for a user")
    token.add_argument("--email", required=True, help="User email the token is issued for")
    token.add_argument("--minutes", type=int, help="Token lifetime in minutes")
    return ap


COMMANDS = {
    "init-db": cmd_init_db,
    "reset-password": cmd_reset_password,
    "create-token": cmd_create_token,
}


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    return COMMANDS[args.command](args)


if __name__ == "__main__":
    sys.exit(main())
