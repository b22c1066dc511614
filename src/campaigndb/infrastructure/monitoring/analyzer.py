"""
Database analyzer: query plans, index coverage, integrity and size.

Read-only. Every method returns dataclasses; rendering is left to the
caller (see cli.main).

Usage:
    analyzer = DatabaseAnalyzer(conn)
    issues = analyzer.check_data_integrity()
    report = analyzer.run_complete_analysis()
"""

import json
import logging
import sqlite3
from dataclasses import dataclass
from typing import Dict, List, Tuple

from campaigndb.domain.enums import IntegrityIssueType, Severity
from campaigndb.domain.types import (
    CompleteAnalysis,
    IndexInfo,
    IndexSuggestion,
    IndexUsageReport,
    IntegrityIssue,
    PerformanceAnalysis,
    QueryPlan,
    SizeReport,
    TableSize,
)
from campaigndb.infrastructure.database.connection import quote_identifier
from campaigndb.infrastructure.database.schema import list_tables, table_exists

logger = logging.getLogger(__name__)

ROW_SAMPLE_SIZE = 100


@dataclass(frozen=True)
class RepresentativeQuery:
    name: str
    sql: str
    parameters: Tuple


REPRESENTATIVE_QUERIES = [
    RepresentativeQuery(
        name="Campaign listing by workspace",
        sql="SELECT * FROM campaigns WHERE workspace_id = ? ORDER BY created_at DESC",
        parameters=("workspace-001",),
    ),
    RepresentativeQuery(
        name="Publication calendar view",
        sql="SELECT * FROM publications WHERE scheduled_date BETWEEN ? AND ? ORDER BY scheduled_date",
        parameters=("2025-01-01", "2025-01-31"),
    ),
    RepresentativeQuery(
        name="Resource search",
        sql="SELECT * FROM resources WHERE workspace_id = ? AND name LIKE ?",
        parameters=("workspace-001", "%a%"),
    ),
    RepresentativeQuery(
        name="Dashboard metrics",
        sql="SELECT COUNT(*) FROM campaigns c JOIN workspaces w ON c.workspace_id = w.id WHERE w.agency_id = ?",
        parameters=("agency-demo-001",),
    ),
]

RECOMMENDED_INDEXES = [
    IndexSuggestion("publications", ("campaign_id", "status"), "Frequently filtered by campaign and status"),
    IndexSuggestion("publications", ("scheduled_date", "social_network"), "Calendar views filter by date and network"),
    IndexSuggestion("resources", ("workspace_id", "type", "created_at"), "Resource listing with type filter and sorting"),
    IndexSuggestion("campaigns", ("workspace_id", "status", "start_date"), "Dashboard queries filter by workspace, status and date"),
]

# (join table, [(column, referenced table)])
JOIN_TABLES = [
    ("campaign_resources", [("campaign_id", "campaigns"), ("resource_id", "resources")]),
    ("campaign_templates", [("campaign_id", "campaigns"), ("template_id", "templates")]),
]


class DatabaseAnalyzer:
    """Inspects a live store without modifying it."""

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    # ------------------------------------------------------------------
    # Performance & indexes
    # ------------------------------------------------------------------

    def analyze_performance(self) -> PerformanceAnalysis:
        """EXPLAIN QUERY PLAN for each representative query, plus missing indexes."""
        plans = []
        for query in REPRESENTATIVE_QUERIES:
            try:
                rows = self.conn.execute(
                    f"EXPLAIN QUERY PLAN {query.sql}", query.parameters
                ).fetchall()
                # rows are (id, parent, notused, detail)
                plans.append(QueryPlan(name=query.name, sql=query.sql, steps=[row[3] for row in rows]))
            except sqlite3.Error as e:
                logger.warning(f"Could not explain '{query.name}': {e}")
                plans.append(QueryPlan(name=query.name, sql=query.sql, steps=[], error=str(e)))
        return PerformanceAnalysis(plans=plans, suggestions=self.suggest_indexes())

    def suggest_indexes(self) -> List[IndexSuggestion]:
        """Recommended indexes whose name is not already in the schema."""
        existing = {index.name for index in self._indexes()}
        return [s for s in RECOMMENDED_INDEXES if s.name not in existing]

    def analyze_index_usage(self) -> IndexUsageReport:
        by_table: Dict[str, List[IndexInfo]] = {}
        for index in self._indexes():
            by_table.setdefault(index.table, []).append(index)
        return IndexUsageReport(indexes_by_table=by_table, missing=self.suggest_indexes())

    def _indexes(self) -> List[IndexInfo]:
        rows = self.conn.execute(
            "SELECT name, tbl_name, sql FROM sqlite_master "
            "WHERE type = 'index' AND name NOT LIKE 'sqlite_%' ORDER BY tbl_name, name"
        ).fetchall()
        return [IndexInfo(name=row[0], table=row[1], sql=row[2]) for row in rows]

    # ------------------------------------------------------------------
    # Integrity
    # ------------------------------------------------------------------

    def check_data_integrity(self) -> List[IntegrityIssue]:
        """
        Run all four integrity passes and concatenate their findings.

        Passes: engine structure check, foreign key scan, business rules,
        orphaned join rows. Findings never stop later passes.
        """
        issues: List[IntegrityIssue] = []
        issues += self._check_structure()
        issues += self._check_foreign_keys()
        issues += self._check_business_rules()
        issues += self._check_orphans()

        if issues:
            logger.warning(f"Integrity check found {len(issues)} issue(s)")
        else:
            logger.info("✓ No integrity issues found")
        return issues

    def _check_structure(self) -> List[IntegrityIssue]:
        rows = self.conn.execute("PRAGMA integrity_check").fetchall()
        messages = [str(row[0]) for row in rows]
        if messages == ["ok"]:
            return []
        return [IntegrityIssue(
            type=IntegrityIssueType.CONSTRAINT,
            table="database",
            description="; ".join(messages),
            severity=Severity.CRITICAL,
            suggestion="Restore from the most recent verified backup",
        )]

    def _check_foreign_keys(self) -> List[IntegrityIssue]:
        # rows are (table, rowid, parent, fkid)
        rows = self.conn.execute("PRAGMA foreign_key_check").fetchall()
        return [
            IntegrityIssue(
                type=IntegrityIssueType.FOREIGN_KEY,
                table=row[0],
                description=f"Foreign key violation in row {row[1]} (parent table {row[2]})",
                severity=Severity.HIGH,
                suggestion="Check referenced records exist",
            )
            for row in rows
        ]

    def _check_business_rules(self) -> List[IntegrityIssue]:
        issues = []
        if not table_exists(self.conn, "campaigns"):
            return issues

        invalid_campaigns = self.conn.execute(
            "SELECT id, name, start_date, end_date FROM campaigns WHERE start_date >= end_date"
        ).fetchall()
        for row in invalid_campaigns:
            issues.append(IntegrityIssue(
                type=IntegrityIssueType.DATA_INCONSISTENCY,
                table="campaigns",
                description=f'Campaign "{row[1]}" has start_date {row[2]} >= end_date {row[3]}',
                severity=Severity.MEDIUM,
                suggestion="Fix campaign date ranges",
            ))

        if table_exists(self.conn, "publications"):
            outside = self.conn.execute("""
                SELECT COUNT(*)
                FROM publications p
                JOIN campaigns c ON p.campaign_id = c.id
                WHERE date(p.scheduled_date) < date(c.start_date)
                   OR date(p.scheduled_date) > date(c.end_date)
            """).fetchone()[0]
            if outside:
                issues.append(IntegrityIssue(
                    type=IntegrityIssueType.DATA_INCONSISTENCY,
                    table="publications",
                    description=f"{outside} publication(s) scheduled outside their campaign date range",
                    severity=Severity.MEDIUM,
                    suggestion="Reschedule publications within campaign dates",
                ))
        return issues

    def _check_orphans(self) -> List[IntegrityIssue]:
        issues = []
        for join_table, references in JOIN_TABLES:
            tables = [join_table] + [parent for _, parent in references]
            if not all(table_exists(self.conn, t) for t in tables):
                continue

            joins = []
            missing = []
            for i, (column, parent) in enumerate(references):
                alias = f"p{i}"
                joins.append(
                    f"LEFT JOIN {quote_identifier(parent)} {alias} "
                    f"ON j.{quote_identifier(column)} = {alias}.id"
                )
                missing.append(f"{alias}.id IS NULL")

            count = self.conn.execute(
                f"SELECT COUNT(*) FROM {quote_identifier(join_table)} j "
                f"{' '.join(joins)} WHERE {' OR '.join(missing)}"
            ).fetchone()[0]
            if count:
                issues.append(IntegrityIssue(
                    type=IntegrityIssueType.ORPHANED_RECORD,
                    table=join_table,
                    description=f"{count} orphaned {join_table.replace('_', '-')} relationship(s)",
                    severity=Severity.LOW,
                    suggestion="Clean up orphaned relationships",
                ))
        return issues

    # ------------------------------------------------------------------
    # Size
    # ------------------------------------------------------------------

    def analyze_database_size(self) -> SizeReport:
        """
        Page-based total size plus per-table row counts.

        Average row size is estimated from the JSON length of up to
        ROW_SAMPLE_SIZE rows, so it is approximate.
        """
        page_count = self.conn.execute("PRAGMA page_count").fetchone()[0]
        page_size = self.conn.execute("PRAGMA page_size").fetchone()[0]

        tables = []
        for name in list_tables(self.conn, include_control=True):
            quoted = quote_identifier(name)
            row_count = self.conn.execute(f"SELECT COUNT(*) FROM {quoted}").fetchone()[0]

            cursor = self.conn.execute(f"SELECT * FROM {quoted} LIMIT {ROW_SAMPLE_SIZE}")
            columns = [d[0] for d in cursor.description]
            sample = cursor.fetchall()
            average = 0.0
            if sample:
                total = sum(len(json.dumps(dict(zip(columns, row)), default=str)) for row in sample)
                average = total / len(sample)

            tables.append(TableSize(name=name, row_count=row_count, average_row_bytes=average))

        return SizeReport(page_count=page_count, page_size=page_size, tables=tables)

    def run_complete_analysis(self) -> CompleteAnalysis:
        """Size, then index usage, then performance, then integrity."""
        size = self.analyze_database_size()
        indexes = self.analyze_index_usage()
        performance = self.analyze_performance()
        integrity = self.check_data_integrity()
        return CompleteAnalysis(size=size, indexes=indexes, performance=performance, integrity=integrity)
