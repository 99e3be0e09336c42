#!/usr/bin/env python3
"""
Reset a user's password in the Chat API SQLite database.

This script DOES NOT read or reveal any existing passwords.  It stores
the new password through the same credential scheme the API uses
(``PASSWORD_SCHEME``) for the specified username.

Usage:
    python reset_password.py --db ./chat_api/chat.db --username user1 --password "NewStrongPass!234"

If --password is omitted, you will be prompted to enter it securely.
"""

import argparse
import asyncio
import getpass
import os
import sys

from chat_api.app.core.config import settings
from chat_api.app.core.errors import NotFoundError, ServiceError
from chat_api.app.core.security import get_credential_verifier
from chat_api.app.core.store import user_collection
from chat_api.app.services.user_service import UserService


def main(argv=None) -> int:
    ap = argparse.ArgumentParser(description="Reset a Chat API user's password (SQLite).")
    ap.add_argument("--db", required=True, help="Path to SQLite DB file (e.g., ./chat_api/chat.db)")
    ap.add_argument("--username", required=True, help="Username to update")
    ap.add_argument("--password", help="New password. If omitted, you'll be prompted securely.")
    ap.add_argument("--scheme", default=settings.password_scheme, help="Password scheme: plain or pbkdf2")
    args = ap.parse_args(argv)

    if not os.path.exists(args.db):
        print(f"[!] DB not found: {args.db}", file=sys.stderr)
        return 1

    new_password = args.password or getpass.getpass("Enter NEW password: ")
    if not new_password:
        print("[!] Empty password is not allowed.", file=sys.stderr)
        return 1

    service = UserService(user_collection(os.path.abspath(args.db)), get_credential_verifier(args.scheme))
    try:
        asyncio.run(service.update_user(args.username, {"password": new_password}))
    except NotFoundError:
        print(f"[!] No user found with username: {args.username}", file=sys.stderr)
        return 2
    except ServiceError as exc:
        print(f"[!] {exc.message}", file=sys.stderr)
        return 1
    print(f"[+] Password updated for user: {args.username}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
