"""
Migration runner for database schema versioning.

Applies and reverts registry descriptors against a live connection and
tracks what has been applied in the ``migrations`` control table.

Overview:
    Each descriptor runs in its own transaction: apply (or revert), then
    write (or delete) the control row, then commit. A failure rolls back
    that descriptor only and aborts the run. Descriptors committed earlier
    in the same run stay applied, so after a failure the store sits at
    the last good version and a later ``migrate_up`` resumes from there.

Usage:
    conn = open_connection(Path("data/campaigns.db"))
    runner = MigrationRunner(conn)
    runner.migrate_up(load_registry())       # apply all pending
    runner.migrate_down(load_registry(), 1)  # back to version 1
    runner.status(load_registry())
"""

import logging
import sqlite3
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from campaigndb.domain.errors import ConfirmationRequired, InvalidTarget, MigrationFailure
from campaigndb.domain.types import AppliedMigration, Migration, MigrationStatus
from campaigndb.infrastructure.database.connection import transaction
from campaigndb.infrastructure.database.migrations.registry import latest_version
from campaigndb.infrastructure.database.schema import CONTROL_TABLE, table_exists

logger = logging.getLogger(__name__)


class MigrationRunner:
    """
    Applies, reverts and reports on schema migrations.

    The runner owns the control table and creates it on the first apply,
    so reading the version or status never writes to the store. The
    connection is owned by the caller and is never closed here.
    """

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def _ensure_control_table(self):
        self.conn.execute(f"""
            CREATE TABLE IF NOT EXISTS {CONTROL_TABLE} (
                version INTEGER PRIMARY KEY,
                description TEXT NOT NULL,
                applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

    def current_version(self) -> int:
        """
        Get current schema version.

        Returns:
            Highest applied version, or 0 if nothing is applied
        """
        if not table_exists(self.conn, CONTROL_TABLE):
            return 0
        row =self.conn.execute(f"SELECT MAX(version) FROM {CONTROL_TABLE}").fetchone()
        return row[0] if row[0] is not None else 0

    def applied_migrations(self) -> List[AppliedMigration]:
        if not table_exists(self.conn, CONTROL_TABLE):
            return []
        rows =self.conn.execute(
            f"SELECT version, description, applied_at FROM {CONTROL_TABLE} ORDER BY version"
        ).fetchall()
        return [
            AppliedMigration(version=row[0], description=row[1], applied_at=str(row[2]))
            for row in rows
        ]

    def migrate_up(
        self,
        registry: Sequence[Migration],
        target_version: Optional[int] = None,
    ) -> List[Migration]:
        """
        Apply pending migrations up to target version.

        Args:
            registry: Ordered migration descriptors
            target_version: Version to migrate to (None = latest in registry)

        Returns:
            Migrations applied, in order

        Raises:
            MigrationFailure: If a migration or its control row fails
        """
        current = self.current_version()
        target = latest_version(registry) if target_version is None else target_version
        pending = [m for m in registry if current < m.version <= target]

        if not pending:
            logger.info(f"Database at version {current}, no migrations needed")
            return []

        logger.info(f"Applying {len(pending)} migration(s) from version {current}...")
        self._ensure_control_table()

        applied = []
        for migration in pending:
            try:
                self._apply(migration)
            except Exception as e:
                logger.error(f"✗ Failed to apply migration {migration.version}: {migration.description}")
                raise MigrationFailure(migration.version, e) from e
            applied.append(migration)
            logger.info(f"✓ Applied migration {migration.version}: {migration.description}")

        logger.info(f"Successfully applied {len(applied)} migration(s)")
        return applied

    def _apply(self, migration: Migration):
        with transaction(self.conn):
            migration.apply(self.conn)
            self.conn.execute(
                f"INSERT INTO {CONTROL_TABLE} (version, description, applied_at) VALUES (?, ?, ?)",
                (migration.version, migration.description, datetime.now().isoformat(timespec="seconds")),
            )

    def migrate_down(self, registry: Sequence[Migration], target_version: int) -> List[Migration]:
        """
        Revert applied migrations above target version, newest first.

        Args:
            registry: Ordered migration descriptors
            target_version: Version to roll back to (0 = empty schema)

        Returns:
            Migrations reverted, in the order they were reverted

        Raises:
            InvalidTarget: If target is negative or not below the current version
            MigrationFailure: If a revert fails, or an applied version has no descriptor
        """
        current = self.current_version()
        if target_version < 0 or target_version >= current:
            raise InvalidTarget(target_version, current)

        by_version: Dict[int, Migration] = {m.version: m for m in registry}
        versions = sorted(
            (r.version for r in self.applied_migrations() if r.version > target_version),
            reverse=True,
        )

        # Resolve every descriptor before touching the schema.
        missing = [v for v in versions if v not in by_version]
        if missing:
            raise MigrationFailure(
                missing[0], LookupError(f"no registered migration for version {missing[0]}")
            )
        to_revert = [by_version[v] for v in versions]

        logger.warning(f"Rolling back {len(to_revert)} migration(s) to version {target_version}...")

        reverted = []
        for migration in to_revert:
            try:
                self._revert(migration)
            except Exception as e:
                logger.error(f"✗ Failed to roll back migration {migration.version}: {migration.description}")
                raise MigrationFailure(migration.version, e) from e
            reverted.append(migration)
            logger.info(f"✓ Rolled back migration {migration.version}: {migration.description}")

        logger.info(f"Successfully rolled back {len(reverted)} migration(s)")
        return reverted

    def _revert(self, migration: Migration):
        with transaction(self.conn):
            migration.revert(self.conn)
            self.conn.execute(f"DELETE FROM {CONTROL_TABLE} WHERE version = ?", (migration.version,))

    def status(self, registry: Sequence[Migration]) -> MigrationStatus:
        """Current version, applied records and pending descriptors."""
        applied = self.applied_migrations()
        applied_versions = {r.version for r in applied}
        return MigrationStatus(
            current=self.current_version(),
            applied=applied,
            pending=[m for m in registry if m.version not in applied_versions],
        )

    def reset(self, registry: Sequence[Migration], force: bool = False) -> List[Migration]:
        """
        Revert every applied migration.

        Raises:
            ConfirmationRequired: Unless force is True
        """
        if not force:
            raise ConfirmationRequired("migration reset")
        if self.current_version() == 0:
            logger.info("Nothing to reset, no migrations applied")
            return []
        return self.migrate_down(registry, 0)
