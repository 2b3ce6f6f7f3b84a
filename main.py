#!/usr/bin/env python3
"""
Gatekeeper -- command-line access to the auth core.

Talks to the credential store directly (no HTTP server needed). Useful for
seeding accounts and checking tokens during development.

Usage:
  python main.py register alice@example.org
  python main.py login alice@example.org
  python main.py whoami eyJhbGciOiJIUzI1NiIs...

Environment variables:
  JWT_SECRET     Token signing secret. Falls back to an insecure development
                 default when unset (a warning is printed).
  DATABASE_URL   SQLAlchemy URL of the user database (default: SQLite file).
"""

import argparse
import getpass
import sys
from typing import Optional

from auth.errors import AuthError
from auth.service import MIN_PASSWORD_LENGTH, AuthConfig, AuthService
from auth.store import UserStore
from auth.tokens import MAX_PASSWORD_BYTES
from core.config import get_settings


def _read_password(confirm: bool) -> Optional[str]:
    """Prompt for a password without echo. Returns None if the entries differ."""
    password = getpass.getpass("  Password: ")
    if confirm and getpass.getpass("  Confirm password: ") != password:
        print("  [!] Passwords do not match.")
        return None
    return password


def _cmd_register(service: AuthService, args: argparse.Namespace) -> int:
    password = _read_password(confirm=True)
    if password is None:
        return 1
    if len(password) < MIN_PASSWORD_LENGTH:
        print(f"  [!] Password must be at least {MIN_PASSWORD_LENGTH} characters.")
        return 1
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        print(f"  [!] Password must be at most {MAX_PASSWORD_BYTES} bytes.")
        return 1
    user = service.register(args.email, password)
    print(f"  Registered {user.email} (id={user.id}).")
    return 0


def _cmd_login(service: AuthService, args: argparse.Namespace) -> int:
    password = _read_password(confirm=False)
    if password is None:
        return 1
    print(service.login(args.email, password))
    return 0


def _cmd_whoami(service: AuthService, args: argparse.Namespace) -> int:
    claims = service.parse_claims(args.token)
    user = service.get_user_by_id(claims.subject)
    print(f"  id:      {user.id}")
    print(f"  email:   {user.email}")
    print(f"  expires: {claims.expires_at.isoformat()}")
    return 0


_COMMANDS = {
    "register": _cmd_register,
    "login": _cmd_login,
    "whoami": _cmd_whoami,
}


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="gatekeeper",
        description="Register users, log in, and inspect session tokens.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py register alice@example.org
  python main.py login alice@example.org
  TOKEN=$(python main.py login alice@example.org) && python main.py whoami "$TOKEN"
        """,
    )
    sub = parser.add_subparsers(dest="command", metavar="COMMAND")

    p_register = sub.add_parser("register", help="Create a user (prompts for a password)")
    p_register.add_argument("email", help="Login email for the new user")

    p_login = sub.add_parser("login", help="Verify a password and print a session token")
    p_login.add_argument("email", help="Login email")

    p_whoami = sub.add_parser("whoami", help="Resolve a session token to its user")
    p_whoami.add_argument("token", help="Encoded session token")

    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        return 1

    settings = get_settings()
    store = UserStore(settings.database_url)
    service = AuthService(store, AuthConfig.from_settings(settings))
    try:
        return _COMMANDS[args.command](service, args)
    except AuthError as exc:
        print(f"  [!] {exc}", file=sys.stderr)
        return 1
    finally:
        store.close()


if __name__ == "__main__":
    sys.exit(main())
