"""Build Migration descriptors from plain SQL scripts."""

import sqlite3

from campaigndb.domain.types import Migration
from campaigndb.infrastructure.database.connection import execute_statements


def sql_migration(version: int, description: str, sql_up: str, sql_down: str) -> Migration:
    """
    Wrap forward/backward SQL scripts as a Migration.

    Example:
        sql_migration(
            version=4,
            description="Add campaign budget",
            sql_up="ALTER TABLE campaigns ADD COLUMN budget INTEGER;",
            sql_down="ALTER TABLE campaigns DROP COLUMN budget;",
        )

    Statements run one at a time so they stay inside the runner's
    transaction.
    """

    def apply(conn: sqlite3.Connection) -> None:
        execute_statements(conn, sql_up)

    def revert(conn: sqlite3.Connection) -> None:
        execute_statements(conn, sql_down)

    return Migration(version=version, description=description, apply=apply, revert=revert)
