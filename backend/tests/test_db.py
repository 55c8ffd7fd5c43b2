from __future__ import annotations

from offboarding.config import Settings
from offboarding.db import _engine_options


def test_postgres_engine_is_pooled_from_settings() -> None:
    settings = Settings(database_url="postgresql+asyncpg://u:p@localhost/db", db_pool_size=3, db_max_overflow=0)
    options = _engine_options(settings)
    assert options["pool_size"] == 3
    assert options["max_overflow"] == 0
    assert options["pool_pre_ping"] is True


def test_sqlite_engine_skips_pool_sizing() -> None:
    options = _engine_options(Settings(database_url="sqlite+aiosqlite:///./offboarding.db", debug=True))
    assert options == {"echo": True}
