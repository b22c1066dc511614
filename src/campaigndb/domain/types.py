"""
Domain types for the campaign database toolkit.

Descriptors and records are frozen dataclasses. Records that are persisted
as JSON (backup metadata, alerts, performance entries) carry to_dict and
from_dict so the on-disk keys stay stable.
"""

import sqlite3
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

from campaigndb.domain.enums import AlertType, IntegrityIssueType, Severity

ChangeFn = Callable[[sqlite3.Connection], None]


# ============================================================================
# Migrations & Seeds
# ============================================================================


@dataclass(frozen=True)
class Migration:
    """
    A versioned pair of forward/backward changes.

    ``revert`` is expected to undo exactly what ``apply`` did. Nothing
    checks this at runtime; it is a contract on whoever writes the
    migration.
    """

    version: int
    description: str
    apply: ChangeFn
    revert: ChangeFn

    def __post_init__(self):
        if self.version <= 0:
            raise ValueError(f"Migration version must be positive: {self.version}")


@dataclass(frozen=True)
class AppliedMigration:
    """A row of the migrations control table."""

    version: int
    description: str
    applied_at: str


@dataclass(frozen=True)
class MigrationStatus:
    current: int
    applied: List[AppliedMigration]
    pending: List[Migration]

    @property
    def is_up_to_date(self) -> bool:
        return not self.pending


@dataclass(frozen=True)
class Seed:
    """An idempotent data-population routine."""

    name: str
    description: str
    run: ChangeFn


# ============================================================================
# Backups
# ============================================================================


@dataclass(frozen=True)
class BackupMetadata:
    """Sidecar metadata written next to every backup copy."""

    name: str
    created: str  # ISO-8601
    original_path: str
    size: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "created": self.created,
            "originalPath": self.original_path,
            "size": self.size,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BackupMetadata":
        return cls(
            name=data["name"],
            created=data["created"],
            original_path=data.get("originalPath", ""),
            size=int(data.get("size", 0)),
        )


@dataclass(frozen=True)
class BackupInfo:
    name: str
    path: Path
    size: int
    created: datetime
    metadata: Optional[BackupMetadata] = None


# ============================================================================
# Monitoring
# ============================================================================


@dataclass(frozen=True)
class AlertRecord:
    type: AlertType
    severity: Severity
    message: str
    timestamp: float  # epoch seconds
    details: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "severity": self.severity.value,
            "message": self.message,
            "timestamp": self.timestamp,
            "details": self.details,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AlertRecord":
        return cls(
            type=AlertType(data["type"]),
            severity=Severity(data["severity"]),
            message=data["message"],
            timestamp=float(data["timestamp"]),
            details=data.get("details") or {},
        )


@dataclass(frozen=True)
class PerformanceLogEntry:
    timestamp: float  # epoch seconds
    query: str  # truncated query text
    execution_time_ms: float
    rows_affected: int
    parameters: Optional[List[Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "timestamp": self.timestamp,
            "query": self.query,
            "executionTimeMs": self.execution_time_ms,
            "rowsAffected": self.rows_affected,
        }
        if self.parameters is not None:
            data["parameters"] = self.parameters
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PerformanceLogEntry":
        return cls(
            timestamp=float(data["timestamp"]),
            query=data["query"],
            execution_time_ms=float(data["executionTimeMs"]),
            rows_affected=int(data.get("rowsAffected", 0)),
            parameters=data.get("parameters"),
        )


@dataclass(frozen=True)
class QueryPattern:
    fingerprint: str
    count: int
    average_ms: float


@dataclass(frozen=True)
class PerformanceSummary:
    """Aggregated view of recorded queries over a time window."""

    days: int
    total_queries: int
    average_ms: float
    slow_queries: int
    slowest: List[PerformanceLogEntry]
    patterns: List[QueryPattern]
    alerts_by_severity: Dict[str, int]
    recent_alerts: List[AlertRecord]

    @property
    def slow_ratio(self) -> float:
        if self.total_queries == 0:
            return 0.0
        return self.slow_queries / self.total_queries


@dataclass(frozen=True)
class HealthReport:
    integrity_ok: bool
    integrity_result: str
    wal_frames: int
    wal_checkpointed: int
    size_bytes: int
    recent_queries: int
    recent_average_ms: float
    recent_slow_queries: int
    alerts: List[AlertRecord] = field(default_factory=list)


# ============================================================================
# Analysis
# ============================================================================


@dataclass(frozen=True)
class IntegrityIssue:
    type: IntegrityIssueType
    table: str
    description: str
    severity: Severity
    suggestion: Optional[str] = None


@dataclass(frozen=True)
class QueryPlan:
    name: str
    sql: str
    steps: List[str]
    error: Optional[str] = None


@dataclass(frozen=True)
class IndexInfo:
    name: str
    table: str
    sql: Optional[str]


@dataclass(frozen=True)
class IndexSuggestion:
    table: str
    columns: Tuple[str, ...]
    reason: str

    @property
    def name(self) -> str:
        return f"idx_{self.table}_{'_'.join(self.columns)}"

    @property
    def create_sql(self) -> str:
        return f"CREATE INDEX {self.name} ON {self.table}({', '.join(self.columns)})"


@dataclass(frozen=True)
class IndexUsageReport:
    indexes_by_table: Dict[str, List[IndexInfo]]
    missing: List[IndexSuggestion]


@dataclass(frozen=True)
class PerformanceAnalysis:
    plans: List[QueryPlan]
    suggestions: List[IndexSuggestion]


@dataclass(frozen=True)
class TableSize:
    name: str
    row_count: int
    average_row_bytes: float  # estimated from a sample

    @property
    def estimated_bytes(self) -> int:
        return int(self.row_count * self.average_row_bytes)


@dataclass(frozen=True)
class SizeReport:
    page_count: int
    page_size: int
    tables: List[TableSize]

    @property
    def total_bytes(self) -> int:
        return self.page_count * self.page_size

    def largest(self, limit: int = 5) -> List[TableSize]:
        return sorted(self.tables, key=lambda t: t.estimated_bytes, reverse=True)[:limit]


@dataclass(frozen=True)
class CompleteAnalysis:
    size: SizeReport
    indexes: IndexUsageReport
    performance: PerformanceAnalysis
    integrity: List[IntegrityIssue]
