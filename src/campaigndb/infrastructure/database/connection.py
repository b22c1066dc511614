"""
Connection helpers for the campaign store.

Connections are opened in autocommit mode (isolation_level=None) so every
transaction boundary in the toolkit is explicit. Callers own the handle:
open it, pass it into the components that need it, close it.

Usage:
    conn = open_connection(Path("data/campaigns.db"))
    with transaction(conn):
        execute_statements(conn, "CREATE TABLE a (id INTEGER); CREATE TABLE b (id INTEGER);")
    conn.close()
"""

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Union

from campaigndb.utils.logging import SQL_LOGGER_NAME

logger = logging.getLogger(__name__)
sql_logger = logging.getLogger(SQL_LOGGER_NAME)

MEMORY_PATH = ":memory:"


def open_connection(
    path: Union[str, Path],
    timeout: int = 30,
    verbose: bool = False,
) -> sqlite3.Connection:
    """
    Open a connection configured the way every toolkit component expects.

    Args:
        path: Database file path, or ":memory:"
        timeout: Seconds to wait on a locked database
        verbose: Log every executed statement on the campaigndb.sql logger

    Returns:
        Connection with foreign keys on, WAL journaling and sqlite3.Row rows
    """
    target = str(path)
    if target != MEMORY_PATH:
        Path(target).parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(target, timeout=timeout, isolation_level=None)
    conn.row_factory = sqlite3.Row

    if verbose:
        conn.set_trace_callback(sql_logger.info)

    conn.execute("PRAGMA foreign_keys=ON")
    if target != MEMORY_PATH:
        conn.execute("PRAGMA journal_mode=WAL")

    logger.debug(f"Opened connection to {target}")
    return conn


@contextmanager
def transaction(conn: sqlite3.Connection) -> Iterator[sqlite3.Connection]:
    """
    Run the enclosed block inside BEGIN/COMMIT, rolling back on any error.

    Raises:
        Whatever the block raised, after the rollback
    """
    conn.execute("BEGIN")
    try:
        yield conn
    except BaseException:
        conn.rollback()
        raise
    else:
        conn.commit()


def _is_blank(chunk: str) -> bool:
    for line in chunk.splitlines():
        stripped = line.strip()
        if stripped and not stripped.startswith("--"):
            return False
    return True


def split_statements(sql: str) -> List[str]:
    """
    Split a script into complete statements.

    Trigger bodies and string literals containing ';' stay intact because
    a chunk is only cut once sqlite3.complete_statement accepts it.
    """
    statements = []
    buffer = []
    for char in sql:
        buffer.append(char)
        if char == ";":
            candidate = "".join(buffer)
            if sqlite3.complete_statement(candidate):
                if not _is_blank(candidate.rstrip(";")):
                    statements.append(candidate.strip())
                buffer = []

    remainder = "".join(buffer)
    if not _is_blank(remainder):
        statements.append(remainder.strip())
    return statements


def execute_statements(conn: sqlite3.Connection, sql: str) -> int:
    """
    Execute a multi-statement script inside the caller's transaction.

    Returns:
        Number of statements executed
    """
    statements = split_statements(sql)
    for statement in statements:
        conn.execute(statement)
    return len(statements)


def quote_identifier(name: str) -> str:
    """Quote an SQL identifier, doubling any embedded quotes."""
    return '"' + name.replace('"', '""') + '"'
