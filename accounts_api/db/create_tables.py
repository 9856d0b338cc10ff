"""Create (or reset) the accounts schema.

Run as ``python -m accounts_api.db.create_tables [--reset]``.
"""
from __future__ import annotations

import argparse
import logging

from sqlalchemy.exc import SQLAlchemyError

from .session import Base, get_engine
from . import models  # noqa: F401  # registers users/sessions on the metadata

logger = logging.getLogger(__name__)


def create_all() -> None:
    Base.metadata.create_all(bind=get_engine())


def reset_all() -> None:
    """Drop and recreate every table. Destroys all accounts and sessions."""
    engine = get_engine()
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    logger.warning("Accounts schema reset on %s", engine.url.render_as_string(hide_password=True))


def main() -> None:
    ap = argparse.ArgumentParser(description="Create the accounts tables")
    ap.add_argument("--reset", action="store_true", help="Drop existing tables first")
    args = ap.parse_args()
    try:
        if args.reset:
            reset_all()
        else:
            create_all()
    except SQLAlchemyError as exc:
        raise SystemExit(f"Failed to create tables: {exc}") from exc
    print("Accounts tables ready.")


if __name__ == "__main__":
    main()
