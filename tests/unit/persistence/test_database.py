"""Unit tests for the database manager."""

from pathlib import Path

from gridbase.core.config import Settings
from gridbase.infrastructure.persistence.database import DatabaseManager


def _manager(url: str) -> DatabaseManager:
    return DatabaseManager(Settings(_env_file=None, database_url=url))


class TestDatabaseManager:

    def test_sqlite_file_path(self):
        db = _manager("sqlite+aiosqlite:///./gb_data/gridbase.db")
        assert db.is_sqlite
        assert db.sqlite_path() == Path("./gb_data/gridbase.db")

    def test_in_memory_has_no_path(self):
        assert _manager("sqlite+aiosqlite:///:memory:").sqlite_path() is None

    def test_postgres_pool_options(self):
        db = _manager("postgresql+asyncpg://u:p@localhost/gridbase")
        assert not db.is_sqlite
        assert db.sqlite_path() is None
        options = db._engine_options()
        assert options["pool_pre_ping"] is True
        assert options["pool_size"] == 5

    def test_sqlite_options_skip_pooling(self):
        options = _manager("sqlite+aiosqlite:///./x.db")._engine_options()
        assert options == {"connect_args": {"check_same_thread": False}}
