"""
Unit tests for the seed runner.

Tests:
- Shipped seeds load and are idempotent
- Named seed lookup
- Failure atomicity per seed
- Clearing all data (foreign-key order, control table untouched)
- Clearing named tables in foreign-key order, rejecting unknown names and the control table
"""

import pytest

from campaigndb.domain.errors import (
    ConfirmationRequired,
    SeedFailure,
    SeedNotFound,
    UnknownTableError,
)
from campaigndb.domain.types import Seed
from campaigndb.infrastructure.database.migrations.migration_manager import MigrationRunner
from campaigndb.infrastructure.database.seeds.registry import default_seeds
from campaigndb.infrastructure.database.seeds.seed_runner import SeedRunner

from conftest import row_count, table_names

EXPECTED_COUNTS = {
    "agencies": 3,
    "users": 4,
    "workspaces": 5,
    "resources": 9,
    "templates": 6,
    "campaigns": 5,
    "campaign_resources": 9,
    "campaign_templates": 6,
    "publications": 6,
}


def data_counts(conn):
    return {t: row_count(conn, t) for t in table_names(conn) if t != "migrations"}


# ============================================================================
# Running seeds
# ============================================================================


class TestRunSeeds:

    def test_run_all_loads_expected_rows(self, migrated_conn):
        completed = SeedRunner(migrated_conn).run_all(default_seeds())

        assert completed == ["basic_data", "campaign_data"]
        for table, expected in EXPECTED_COUNTS.items():
            assert row_count(migrated_conn, table) == expected, table

    def test_run_all_twice_is_idempotent(self, migrated_conn):
        runner = SeedRunner(migrated_conn)
        runner.run_all(default_seeds())
        first = data_counts(migrated_conn)

        runner.run_all(default_seeds())
        assert data_counts(migrated_conn) == first

    def test_rerun_keeps_dependent_rows(self, seeded_conn):
        """Re-running basic_data must not cascade-delete campaigns."""
        SeedRunner(seeded_conn).run_one(default_seeds(), "basic_data")
        assert row_count(seeded_conn, "campaigns") == EXPECTED_COUNTS["campaigns"]
        assert row_count(seeded_conn, "publications") == EXPECTED_COUNTS["publications"]

    def test_run_one_by_name(self, migrated_conn):
        SeedRunner(migrated_conn).run_one(default_seeds(), "basic_data")
        assert row_count(migrated_conn, "agencies") == 3
        assert row_count(migrated_conn, "campaigns") == 0

    def test_run_one_unknown_name(self, migrated_conn):
        with pytest.raises(SeedNotFound) as exc_info:
            SeedRunner(migrated_conn).run_one(default_seeds(), "nope")
        assert "basic_data" in exc_info.value.context["available"]

    def test_failing_seed_rolls_back_alone(self, migrated_conn):
        def half_then_fail(conn):
            conn.execute(
                "INSERT INTO agencies (id, name, email) VALUES ('agency-x', 'X', 'x@example.com')"
            )
            raise RuntimeError("seed exploded")

        seeds = [default_seeds()[0], Seed("broken", "Fails halfway", half_then_fail)]

        with pytest.raises(SeedFailure) as exc_info:
            SeedRunner(migrated_conn).run_all(seeds)

        assert exc_info.value.name == "broken"
        assert row_count(migrated_conn, "agencies") == 3
        assert migrated_conn.execute(
            "SELECT COUNT(*) FROM agencies WHERE id = 'agency-x'"
        ).fetchone()[0] == 0

    def test_campaign_data_needs_basic_data(self, migrated_conn):
        """Foreign keys are enforced while seeding."""
        with pytest.raises(SeedFailure):
            SeedRunner(migrated_conn).run_one(default_seeds(), "campaign_data")
        assert row_count(migrated_conn, "campaigns") == 0


# ============================================================================
# Clearing data
# ============================================================================


class TestClearData:

    def test_clear_all_requires_force(self, seeded_conn):
        with pytest.raises(ConfirmationRequired):
            SeedRunner(seeded_conn).clear_all_data()
        assert row_count(seeded_conn, "campaigns") == 5

    def test_clear_all_empties_every_table(self, seeded_conn):
        cleared = SeedRunner(seeded_conn).clear_all_data(force=True)

        assert "migrations" not in cleared
        assert all(count == 0 for count in data_counts(seeded_conn).values())
        assert row_count(seeded_conn, "migrations") > 0

    def test_clear_all_deletes_children_first(self, seeded_conn):
        order = SeedRunner(seeded_conn).clear_all_data(force=True)

        assert order.index("publications") < order.index("campaigns")
        assert order.index("campaign_resources") < order.index("resources")
        assert order.index("users") < order.index("agencies")
        assert order.index("workspaces") < order.index("agencies")

    def test_foreign_keys_restored_after_clear(self, seeded_conn):
        SeedRunner(seeded_conn).clear_all_data(force=True)
        assert seeded_conn.execute("PRAGMA foreign_keys").fetchone()[0] == 1

    def test_clear_named_tables(self, seeded_conn):
        cleared = SeedRunner(seeded_conn).clear_tables(["publications"], force=True)

        assert cleared == ["publications"]
        assert row_count(seeded_conn, "publications") == 0
        assert row_count(seeded_conn, "campaigns") == 5

    def test_clear_unknown_table_deletes_nothing(self, seeded_conn):
        with pytest.raises(UnknownTableError):
            SeedRunner(seeded_conn).clear_tables(["publications", "not_a_table"], force=True)
        assert row_count(seeded_conn, "publications") == 6

    def test_clear_named_tables_children_first(self, seeded_conn):
        cleared = SeedRunner(seeded_conn).clear_tables(
            ["campaigns", "publications", "campaign_resources", "campaign_templates"], force=True
        )

        assert cleared.index("publications") < cleared.index("campaigns")
        assert cleared.index("campaign_resources") < cleared.index("campaigns")
        assert cleared.index("campaign_templates") < cleared.index("campaigns")
        assert row_count(seeded_conn, "campaigns") == 0
        assert row_count(seeded_conn, "workspaces") == 5

    def test_clear_tables_refuses_control_table(self, seeded_conn, registry):
        runner = MigrationRunner(seeded_conn)
        version = runner.current_version()

        with pytest.raises(UnknownTableError):
            SeedRunner(seeded_conn).clear_tables(["migrations"], force=True)

        assert runner.current_version() == version
        assert runner.migrate_up(registry) == []

    def test_clear_tables_requires_force(self, seeded_conn):
        with pytest.raises(ConfirmationRequired):
            SeedRunner(seeded_conn).clear_tables(["publications"])

    def test_reset_reloads_seeds(self, seeded_conn):
        seeded_conn.execute("DELETE FROM publications")
        completed = SeedRunner(seeded_conn).reset(default_seeds(), force=True)

        assert completed == ["basic_data", "campaign_data"]
        for table, expected in EXPECTED_COUNTS.items():
            assert row_count(seeded_conn, table) == expected, table
