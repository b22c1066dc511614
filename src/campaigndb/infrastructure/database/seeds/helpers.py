"""Row insertion helper shared by the shipped seeds."""

import sqlite3
from typing import Sequence

from campaigndb.infrastructure.database.connection import quote_identifier


def insert_rows(
    conn: sqlite3.Connection,
    table: str,
    columns: Sequence[str],
    rows: Sequence[tuple],
) -> int:
    """
    Insert rows keyed by fixed primary keys, skipping ones already present.

    INSERT OR IGNORE (rather than OR REPLACE) keeps re-runs from firing
    ON DELETE CASCADE on rows that depend on the seeded ones.

    Returns:
        Number of rows actually inserted
    """
    column_list = ", ".join(quote_identifier(c) for c in columns)
    placeholders = ", ".join("?" for _ in columns)
    before = conn.total_changes
    conn.executemany(
        f"INSERT OR IGNORE INTO {quote_identifier(table)} ({column_list}) VALUES ({placeholders})",
        rows,
    )
    return conn.total_changes - before
