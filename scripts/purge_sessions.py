#!/usr/bin/env python3
"""
Remove expired session tokens.

Usage:
  python scripts/purge_sessions.py
"""
from __future__ import annotations

import sys

from accounts_api.core.errors import ServiceError
from accounts_api.services.credential_service import CredentialManager


def main() -> None:
    removed = CredentialManager().purge_expired_tokens()
    print(f"OK: {removed} expired session(s) removed")


if __name__ == "__main__":
    try:
        main()
    except ServiceError as exc:  # pragma: no cover - CLI usage
        sys.stderr.write(f"Error: {exc.message}\n")
        raise SystemExit(1)
