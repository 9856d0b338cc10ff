#!/usr/bin/env python3
"""
Register a new account directly in the database.

Usage:
  python scripts/create_user.py --username alice [--password secret1] [--display-name "Alice"]
"""
from __future__ import annotations

import argparse
import getpass
import sys

from accounts_api.core.errors import ServiceError
from accounts_api.db.create_tables import create_all
from accounts_api.services.account_service import AccountService


def main() -> None:
    ap = argparse.ArgumentParser(description="Register an account")
    ap.add_argument("--username", required=True, help="Login name (unique)")
    ap.add_argument("--password", help="Password (prompted when omitted)")
    ap.add_argument("--display-name", help="Optional display name")
    ap.add_argument("--bio", help="Optional bio")
    args = ap.parse_args()

    password = args.password or getpass.getpass("Password: ")
    profile = {}
    if args.display_name:
        profile["display_name"] = args.display_name
    if args.bio:
        profile["bio"] = args.bio

    create_all()
    user = AccountService().register(args.username, password, profile)
    print("OK: account created")
    print(f"  ID: {user.id}")
    print(f"  Username: {user.username}")


if __name__ == "__main__":
    try:
        main()
    except ServiceError as exc:  # pragma: no cover - CLI usage
        sys.stderr.write(f"Error: {exc.message}\n")
        raise SystemExit(1)
