"""
Pytest configuration and fixtures for campaigndb tests.
"""

import pytest
import sys
from datetime import datetime
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from campaigndb.config.config import MonitoringConfig
from campaigndb.infrastructure.database.connection import open_connection
from campaigndb.infrastructure.database.migrations.migration_manager import MigrationRunner
from campaigndb.infrastructure.database.migrations.registry import build_registry, load_registry
from campaigndb.infrastructure.database.migrations.sql_migration import sql_migration
from campaigndb.infrastructure.database.seeds.registry import default_seeds
from campaigndb.infrastructure.database.seeds.seed_runner import SeedRunner

# Fixed timestamp for deterministic monitor tests
FIXED_NOW = datetime(2026, 3, 16, 10, 30, 0).timestamp()


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: float = FIXED_NOW):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


@pytest.fixture
def db_path(tmp_path):
    """Temporary database path for testing."""
    return tmp_path / "data" / "campaigns.db"


@pytest.fixture
def conn(db_path):
    """Fresh file-backed connection, closed after the test."""
    connection = open_connection(db_path)
    yield connection
    connection.close()


@pytest.fixture
def registry():
    """The shipped migration registry."""
    return load_registry()


@pytest.fixture
def migrated_conn(conn, registry):
    """Connection with every shipped migration applied."""
    MigrationRunner(conn).migrate_up(registry)
    return conn


@pytest.fixture
def seeded_conn(migrated_conn):
    """Migrated connection with every shipped seed loaded."""
    SeedRunner(migrated_conn).run_all(default_seeds())
    return migrated_conn


@pytest.fixture
def synthetic_registry():
    """Three small migrations, each creating one table."""
    return build_registry([
        sql_migration(1, "Create t1", "CREATE TABLE t1 (id INTEGER PRIMARY KEY);", "DROP TABLE t1;"),
        sql_migration(
            2,
            "Create t2",
            "CREATE TABLE t2 (id INTEGER PRIMARY KEY, t1_id INTEGER REFERENCES t1(id));",
            "DROP TABLE t2;",
        ),
        sql_migration(3, "Create t3", "CREATE TABLE t3 (id INTEGER PRIMARY KEY, label TEXT);", "DROP TABLE t3;"),
    ])


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def monitoring_config(tmp_path):
    """Monitoring thresholds small enough to cross in tests."""
    return MonitoringConfig(
        log_dir=tmp_path / "logs",
        slow_query_threshold_ms=100.0,
        critical_query_threshold_ms=500.0,
        wal_frame_threshold=1000,
        log_retention_days=30,
    )


def table_names(conn):
    rows = conn.execute(
        "SELECT name FROM sqlite_master WHERE type = 'table' AND name NOT LIKE 'sqlite_%' ORDER BY name"
    ).fetchall()
    return [row[0] for row in rows]


def row_count(conn, table):
    return conn.execute(f'SELECT COUNT(*) FROM "{table}"').fetchone()[0]
