"""
Schema introspection: table allow-list and foreign-key ordering.

Table names read here are the only ones other modules splice into SQL,
and only after passing through quote_identifier.
"""

import logging
import sqlite3
from graphlib import CycleError, TopologicalSorter
from typing import Dict, Iterable, List, Set

from campaigndb.domain.errors import UnknownTableError
from campaigndb.infrastructure.database.connection import quote_identifier

logger = logging.getLogger(__name__)

CONTROL_TABLE = "migrations"


def list_tables(conn: sqlite3.Connection, include_control: bool = False) -> List[str]:
    """User tables in name order, excluding sqlite internals."""
    rows = conn.execute(
        "SELECT name FROM sqlite_master "
        "WHERE type = 'table' AND name NOT LIKE 'sqlite_%' ORDER BY name"
    ).fetchall()
    tables = [row[0] for row in rows]
    if not include_control:
        tables = [t for t in tables if t != CONTROL_TABLE]
    return tables


def table_exists(conn: sqlite3.Connection, name: str) -> bool:
    row = conn.execute(
        "SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = ?", (name,)
    ).fetchone()
    return row is not None


def validate_tables(conn: sqlite3.Connection, names: Iterable[str]) -> List[str]:
    """
    Check names against the schema allow-list.

    The migrations control table is not on the list; only the migration
    runner writes to it.

    Raises:
        UnknownTableError: If any name is not a user table
    """
    names = list(names)
    known = set(list_tables(conn))
    unknown = [n for n in names if n not in known]
    if unknown:
        raise UnknownTableError(unknown)
    return names


def foreign_key_parents(conn: sqlite3.Connection, table: str) -> Set[str]:
    """Tables referenced by ``table``'s foreign keys."""
    rows = conn.execute(f"PRAGMA foreign_key_list({quote_identifier(table)})").fetchall()
    return {row[2] for row in rows if row[2] != table}


def deletion_order(conn: sqlite3.Connection, tables: Iterable[str]) -> List[str]:
    """
    Order tables so referencing (child) tables come before their parents.

    Only edges between the given tables are considered. If the foreign-key
    graph has a cycle the tables are returned in name order.
    """
    selected = sorted(set(tables))
    selected_set = set(selected)

    # parent -> children that must be emptied first
    graph: Dict[str, Set[str]] = {name: set() for name in selected}
    for child in selected:
        for parent in foreign_key_parents(conn, child):
            if parent in selected_set:
                graph[parent].add(child)

    try:
        return list(TopologicalSorter(graph).static_order())
    except CycleError as e:
        logger.warning(f"Foreign key cycle detected, using name order: {e.args[1]}")
        return selected
