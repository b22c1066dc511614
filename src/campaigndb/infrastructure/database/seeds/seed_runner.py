"""
Seed runner: transactional data population and bulk clearing.

Seeds are not version-tracked. Each one must be safe to run again on a
store that already holds its rows.

Usage:
    runner = SeedRunner(conn)
    runner.run_all(default_seeds())
    runner.run_one(default_seeds(), "basic_data")
    runner.clear_all_data(force=True)
"""

import logging
import sqlite3
from typing import Iterable, List, Sequence

from campaigndb.domain.errors import ConfirmationRequired, SeedFailure, SeedNotFound
from campaigndb.domain.types import Seed
from campaigndb.infrastructure.database.connection import quote_identifier, transaction
from campaigndb.infrastructure.database.schema import deletion_order, list_tables, validate_tables

logger = logging.getLogger(__name__)


class SeedRunner:
    """Runs seeds one transaction each and clears table data."""

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def run_all(self, seeds: Sequence[Seed]) -> List[str]:
        """
        Run every seed in list order.

        A failure stops the run. Seeds that already committed stay.

        Returns:
            Names of the seeds that ran

        Raises:
            SeedFailure: If a seed raises
        """
        logger.info(f"Running {len(seeds)} seed(s)...")
        completed = []
        for seed in seeds:
            self._run(seed)
            completed.append(seed.name)
        logger.info("All seeds completed successfully")
        return completed

    def run_one(self, seeds: Sequence[Seed], name: str) -> None:
        """
        Run exactly one named seed.

        Raises:
            SeedNotFound: If no seed has that name
            SeedFailure: If the seed raises
        """
        for seed in seeds:
            if seed.name == name:
                self._run(seed)
                return
        raise SeedNotFound(name, [s.name for s in seeds])

    def _run(self, seed: Seed):
        logger.info(f"Running seed: {seed.name} - {seed.description}")
        try:
            with transaction(self.conn):
                seed.run(self.conn)
        except Exception as e:
            logger.error(f"✗ Seed {seed.name} failed: {e}")
            raise SeedFailure(seed.name, e) from e
        logger.info(f"✓ Seed {seed.name} completed successfully")

    def clear_all_data(self, force: bool = False) -> List[str]:
        """
        Delete every row from every user table except the control table.

        Tables are emptied children-first, in the order derived from the
        schema's foreign keys.

        Returns:
            Tables cleared, in deletion order

        Raises:
            ConfirmationRequired: Unless force is True
        """
        if not force:
            raise ConfirmationRequired("clear all data")
        tables = deletion_order(self.conn, list_tables(self.conn))
        self._delete_from(tables)
        logger.info(f"✓ Cleared {len(tables)} table(s)")
        return tables

    def clear_tables(self, names: Iterable[str], force: bool = False) -> List[str]:
        """
        Delete every row from the named tables, children before parents.

        Returns:
            Tables cleared, in deletion order

        Raises:
            ConfirmationRequired: Unless force is True
            UnknownTableError: If a name is not a user table (the control
                table included)
        """
        if not force:
            raise ConfirmationRequired("clear tables")
        tables = deletion_order(self.conn, validate_tables(self.conn, names))
        self._delete_from(tables)
        logger.info(f"✓ Cleared table(s): {', '.join(tables)}")
        return tables

    def reset(self, seeds: Sequence[Seed], force: bool = False) -> List[str]:
        """Clear all data, then run every seed."""
        self.clear_all_data(force=force)
        return self.run_all(seeds)

    def _delete_from(self, tables: List[str]):
        # foreign_keys cannot change inside a transaction
        self.conn.execute("PRAGMA foreign_keys=OFF")
        try:
            with transaction(self.conn):
                for table in tables:
                    self.conn.execute(f"DELETE FROM {quote_identifier(table)}")
                    logger.debug(f"Cleared {table}")
        finally:
            self.conn.execute("PRAGMA foreign_keys=ON")
