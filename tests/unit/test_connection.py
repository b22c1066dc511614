"""
Unit tests for connection helpers and schema introspection.

Tests:
- Connection pragmas (foreign keys, WAL, row factory)
- Explicit transactions commit and roll back
- Statement splitting with triggers, literals and comments
- Identifier quoting and table allow-list
- Foreign-key deletion order
"""

import pytest
import sqlite3

from campaigndb.domain.errors import UnknownTableError
from campaigndb.infrastructure.database.connection import (
    MEMORY_PATH,
    execute_statements,
    open_connection,
    quote_identifier,
    split_statements,
    transaction,
)
from campaigndb.infrastructure.database.schema import (
    deletion_order,
    foreign_key_parents,
    list_tables,
    table_exists,
    validate_tables,
)


# ============================================================================
# open_connection / transaction
# ============================================================================


class TestOpenConnection:

    def test_file_database_uses_wal_and_foreign_keys(self, conn):
        assert conn.execute("PRAGMA journal_mode").fetchone()[0] == "wal"
        assert conn.execute("PRAGMA foreign_keys").fetchone()[0] == 1

    def test_creates_parent_directory(self, tmp_path):
        path = tmp_path / "nested" / "dir" / "store.db"
        connection = open_connection(path)
        try:
            assert path.parent.is_dir()
        finally:
            connection.close()

    def test_rows_are_addressable_by_name(self):
        connection = open_connection(MEMORY_PATH)
        try:
            row = connection.execute("SELECT 1 AS answer").fetchone()
            assert row["answer"] == 1
        finally:
            connection.close()

    def test_verbose_traces_statements(self, tmp_path, caplog):
        connection = open_connection(tmp_path / "traced.db", verbose=True)
        try:
            with caplog.at_level("INFO", logger="campaigndb.sql"):
                connection.execute("SELECT 42")
        finally:
            connection.close()
        assert any("SELECT 42" in record.getMessage() for record in caplog.records)


class TestTransaction:

    def test_commits_on_success(self, conn):
        conn.execute("CREATE TABLE items (id INTEGER PRIMARY KEY)")
        with transaction(conn):
            conn.execute("INSERT INTO items (id) VALUES (1)")
        assert conn.execute("SELECT COUNT(*) FROM items").fetchone()[0] == 1
        assert not conn.in_transaction

    def test_rolls_back_on_error(self, conn):
        """DDL and DML inside a failed block are both undone."""
        with pytest.raises(RuntimeError):
            with transaction(conn):
                conn.execute("CREATE TABLE items (id INTEGER PRIMARY KEY)")
                conn.execute("INSERT INTO items (id) VALUES (1)")
                raise RuntimeError("boom")
        assert not table_exists(conn, "items")
        assert not conn.in_transaction


# ============================================================================
# Statement splitting
# ============================================================================


class TestSplitStatements:

    def test_splits_simple_statements(self):
        sql = "CREATE TABLE a (id INTEGER);\nCREATE TABLE b (id INTEGER);"
        assert split_statements(sql) == ["CREATE TABLE a (id INTEGER);", "CREATE TABLE b (id INTEGER);"]

    def test_keeps_trigger_body_together(self):
        sql = """
        CREATE TABLE a (id INTEGER PRIMARY KEY, updated_at TEXT);
        CREATE TRIGGER touch_a AFTER UPDATE ON a
        FOR EACH ROW
        BEGIN
            UPDATE a SET updated_at = CURRENT_TIMESTAMP WHERE id = NEW.id;
        END;
        """
        statements = split_statements(sql)
        assert len(statements) == 2
        assert statements[1].startswith("CREATE TRIGGER")
        assert statements[1].endswith("END;")

    def test_semicolon_inside_literal(self):
        statements = split_statements("INSERT INTO t VALUES ('a;b');")
        assert statements == ["INSERT INTO t VALUES ('a;b');"]

    def test_comment_only_script_is_empty(self):
        assert split_statements("-- nothing to do here;\n-- still nothing\n") == []

    def test_trailing_statement_without_semicolon(self):
        assert split_statements("SELECT 1;\nSELECT 2") == ["SELECT 1;", "SELECT 2"]

    def test_execute_statements_runs_inside_open_transaction(self, conn):
        """Unlike executescript, nothing is committed before the block ends."""
        with pytest.raises(sqlite3.OperationalError):
            with transaction(conn):
                execute_statements(conn, "CREATE TABLE a (id INTEGER); INSERT INTO missing VALUES (1);")
        assert not table_exists(conn, "a")


# ============================================================================
# Identifiers / schema
# ============================================================================


class TestSchema:

    @pytest.fixture
    def family(self, conn):
        execute_statements(conn, """
            CREATE TABLE parents (id INTEGER PRIMARY KEY);
            CREATE TABLE children (id INTEGER PRIMARY KEY, parent_id INTEGER REFERENCES parents(id));
            CREATE TABLE grandchildren (id INTEGER PRIMARY KEY, child_id INTEGER REFERENCES children(id));
            CREATE TABLE migrations (version INTEGER PRIMARY KEY, description TEXT);
        """)
        return conn

    def test_quote_identifier_doubles_quotes(self):
        assert quote_identifier("plain") == '"plain"'
        assert quote_identifier('we"ird') == '"we""ird"'

    def test_list_tables_excludes_control_table(self, family):
        assert list_tables(family) == ["children", "grandchildren", "parents"]
        assert "migrations" in list_tables(family, include_control=True)

    def test_validate_tables_rejects_unknown(self, family):
        with pytest.raises(UnknownTableError) as exc_info:
            validate_tables(family, ["parents", "users; DROP TABLE parents"])
        assert exc_info.value.names == ["users; DROP TABLE parents"]

    def test_foreign_key_parents(self, family):
        assert foreign_key_parents(family, "children") == {"parents"}
        assert foreign_key_parents(family, "parents") == set()

    def test_deletion_order_children_first(self, family):
        order = deletion_order(family, ["parents", "children", "grandchildren"])
        assert order.index("grandchildren") < order.index("children") < order.index("parents")

    def test_deletion_order_cycle_falls_back_to_name_order(self, conn):
        execute_statements(conn, """
            CREATE TABLE b_side (id INTEGER PRIMARY KEY, a_id INTEGER REFERENCES a_side(id));
            CREATE TABLE a_side (id INTEGER PRIMARY KEY, b_id INTEGER REFERENCES b_side(id));
        """)
        assert deletion_order(conn, ["b_side", "a_side"]) == ["a_side", "b_side"]
