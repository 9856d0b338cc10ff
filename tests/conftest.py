from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Make the accounts_api package importable when running from a checkout
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from accounts_api.core import config as core_config  # noqa: E402
from accounts_api.core.rate_limiter import reset_limits  # noqa: E402
from accounts_api.db import session as db_session  # noqa: E402
from accounts_api.db.create_tables import reset_all  # noqa: E402
from accounts_api.db.session import Base  # noqa: E402


def _clear_caches() -> None:
    core_config.get_settings.cache_clear()
    db_session.get_engine.cache_clear()
    db_session._get_sessionmaker.cache_clear()  # type: ignore[attr-defined]


@pytest.fixture()
def db_env(tmp_path, monkeypatch):
    """Point DATABASE_URL at a temporary SQLite file and reset settings/engine caches."""
    db_file = tmp_path / "test.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{db_file}")
    _clear_caches()
    reset_limits()

    reset_all()
    engine = db_session.get_engine()

    yield db_file

    Base.metadata.drop_all(bind=engine)
    engine.dispose()
    _clear_caches()
