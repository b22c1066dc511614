"""
Database monitor: query latency samples, health checks and alerts.

Samples are kept in memory for the last 24 hours and persisted as one JSON
file per day (``performance_YYYY-MM-DD.json``). Alerts are kept for 7 days
in ``alerts.json``. Both live in the monitor's log directory, which no
other component writes to.

Usage:
    monitor = DatabaseMonitor(conn, config.monitoring)
    rows = monitor.monitor_query("SELECT * FROM campaigns WHERE status = ?", ["active"])
    report = monitor.monitor_health()
    print(monitor.generate_performance_report(days=7))
"""

import json
import logging
import re
import sqlite3
import time
from collections import Counter
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

from campaigndb.config.config import MonitoringConfig
from campaigndb.domain.enums import AlertType, Severity
from campaigndb.domain.types import (
    AlertRecord,
    HealthReport,
    PerformanceLogEntry,
    PerformanceSummary,
    QueryPattern,
)
from campaigndb.utils.formatting import format_bytes, truncate

logger = logging.getLogger(__name__)

LOG_FILE_PREFIX = "performance_"
ALERTS_FILE = "alerts.json"
TOP_N = 5
SECONDS_PER_DAY = 24 * 60 * 60

_NUMBER = re.compile(r"\b\d+\b")
_STRING = re.compile(r"'[^']*'")
_WHITESPACE = re.compile(r"\s+")


def fingerprint_query(query: str) -> str:
    """Replace literals with ``?`` and collapse whitespace so similar queries group."""
    pattern = _NUMBER.sub("?", query)
    pattern = _STRING.sub("?", pattern)
    return _WHITESPACE.sub(" ", pattern).strip()


def _log_file_date(path: Path) -> Optional[date]:
    stem = path.stem
    if not stem.startswith(LOG_FILE_PREFIX):
        return None
    try:
        return date.fromisoformat(stem[len(LOG_FILE_PREFIX):])
    except ValueError:
        return None


class DatabaseMonitor:
    """
    Records query performance and raises threshold alerts.

    Features:
    - Wall-clock timing of wrapped statements, failures included
    - slow_query alerts above the critical threshold (2x is critical)
    - WAL backlog and integrity health checks
    - Per-day persisted logs with retention cleanup
    """

    def __init__(
        self,
        conn: sqlite3.Connection,
        config: Optional[MonitoringConfig] = None,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize monitor and load today's samples and stored alerts.

        Args:
            conn: Connection whose queries and health are monitored
            config: Thresholds and retention (defaults if omitted)
            clock: Source of epoch seconds, replaceable in tests
        """
        self.conn = conn
        self.config = config or MonitoringConfig()
        self.clock = clock
        self.log_dir = Path(self.config.log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)

        self._entries: List[PerformanceLogEntry] = self._read_log_file(
            self._log_path(self._today())
        )
        self._alerts: List[AlertRecord] = self._read_alerts()

    # ------------------------------------------------------------------
    # Query monitoring
    # ------------------------------------------------------------------

    def monitor_query(self, query: str, parameters: Sequence[Any] = ()) -> List[sqlite3.Row]:
        """
        Execute a statement and record how long it took.

        Failed statements are recorded with zero rows and the original
        exception is re-raised unchanged.

        Returns:
            Fetched rows (empty for statements that return none)
        """
        start = time.perf_counter()
        try:
            cursor = self.conn.execute(query, parameters)
            rows = cursor.fetchall()
        except Exception:
            self.record_query(query, (time.perf_counter() - start) * 1000, 0, parameters)
            raise

        elapsed_ms = (time.perf_counter() - start) * 1000
        rows_affected = cursor.rowcount if cursor.rowcount >= 0 else len(rows)
        self.record_query(query, elapsed_ms, rows_affected, parameters)
        return rows

    def record_query(
        self,
        query: str,
        execution_time_ms: float,
        rows_affected: int,
        parameters: Optional[Sequence[Any]] = None,
    ) -> Optional[AlertRecord]:
        """
        Record one query sample and alert if it crossed the critical threshold.

        Returns:
            The slow_query alert raised, if any
        """
        now = self.clock()
        params = None
        if self.config.include_query_parameters and parameters:
            params = list(parameters)

        entry = PerformanceLogEntry(
            timestamp=now,
            query=truncate(query, self.config.truncate_query_length),
            execution_time_ms=execution_time_ms,
            rows_affected=rows_affected,
            parameters=params,
        )
        self._entries.append(entry)

        cutoff = now - self.config.buffer_window_hours * 3600
        self._entries = [e for e in self._entries if e.timestamp > cutoff]
        self._persist_today()

        if execution_time_ms > self.config.slow_query_threshold_ms:
            logger.warning(
                f"SLOW: query took {execution_time_ms:.1f}ms "
                f"(threshold: {self.config.slow_query_threshold_ms}ms)"
            )

        critical = self.config.critical_query_threshold_ms
        if execution_time_ms <= critical:
            return None

        severity = Severity.CRITICAL if execution_time_ms > 2 * critical else Severity.HIGH
        return self._raise_alert(
            AlertType.SLOW_QUERY,
            severity,
            f"Slow query detected: {execution_time_ms:.0f}ms",
            {"query": entry.query, "executionTimeMs": execution_time_ms, "parameters": params},
        )

    # ------------------------------------------------------------------
    # Health
    # ------------------------------------------------------------------

    def monitor_health(self) -> HealthReport:
        """
        Check integrity, WAL backlog, file size and last-hour activity.

        Never raises: a failure inside the check becomes a high-severity
        integrity_issue alert and a report with integrity_ok=False.
        """
        raised: List[AlertRecord] = []
        try:
            rows = self.conn.execute("PRAGMA integrity_check").fetchall()
            integrity_result = "; ".join(str(row[0]) for row in rows)
            integrity_ok = integrity_result == "ok"
            if not integrity_ok:
                raised.append(self._raise_alert(
                    AlertType.INTEGRITY_ISSUE,
                    Severity.CRITICAL,
                    "Database integrity check failed",
                    {"result": integrity_result},
                ))

            # (busy, log frames, checkpointed frames); -1 when not in WAL mode
            busy, wal_frames, checkpointed = self.conn.execute(
                "PRAGMA wal_checkpoint(PASSIVE)"
            ).fetchone()
            wal_frames = max(wal_frames, 0)
            checkpointed = max(checkpointed, 0)
            if wal_frames > self.config.wal_frame_threshold:
                raised.append(self._raise_alert(
                    AlertType.HIGH_MEMORY,
                    Severity.MEDIUM,
                    f"Large WAL file: {wal_frames} frames",
                    {"busy": busy, "log": wal_frames, "checkpointed": checkpointed},
                ))

            page_count = self.conn.execute("PRAGMA page_count").fetchone()[0]
            page_size = self.conn.execute("PRAGMA page_size").fetchone()[0]

            hour_ago = self.clock() - 3600
            recent = [e for e in self._entries if e.timestamp > hour_ago]
            recent_avg = (
                sum(e.execution_time_ms for e in recent) / len(recent) if recent else 0.0
            )
            recent_slow = sum(
                1 for e in recent if e.execution_time_ms > self.config.slow_query_threshold_ms
            )
        except Exception as e:
            logger.error(f"✗ Health check failed: {e}")
            raised.append(self._raise_alert(
                AlertType.INTEGRITY_ISSUE,
                Severity.HIGH,
                f"Health check failed: {e}",
                {"error": str(e)},
            ))
            return HealthReport(
                integrity_ok=False,
                integrity_result=f"error: {e}",
                wal_frames=0,
                wal_checkpointed=0,
                size_bytes=0,
                recent_queries=0,
                recent_average_ms=0.0,
                recent_slow_queries=0,
                alerts=raised,
            )

        logger.info(
            f"Health: integrity={integrity_result}, wal_frames={wal_frames}, "
            f"size={format_bytes(page_count * page_size)}"
        )
        return HealthReport(
            integrity_ok=integrity_ok,
            integrity_result=integrity_result,
            wal_frames=wal_frames,
            wal_checkpointed=checkpointed,
            size_bytes=page_count * page_size,
            recent_queries=len(recent),
            recent_average_ms=recent_avg,
            recent_slow_queries=recent_slow,
            alerts=raised,
        )

    # ------------------------------------------------------------------
    # Reports
    # ------------------------------------------------------------------

    def summarize_performance(self, days: int = 7) -> PerformanceSummary:
        """Aggregate samples and alerts recorded in the last ``days`` days."""
        now = self.clock()
        cutoff = now - days * SECONDS_PER_DAY
        entries = [e for e in self._entries_in_window(days) if e.timestamp > cutoff]

        total = len(entries)
        average = sum(e.execution_time_ms for e in entries) / total if total else 0.0
        slow = sum(1 for e in entries if e.execution_time_ms > self.config.slow_query_threshold_ms)
        slowest = sorted(entries, key=lambda e: e.execution_time_ms, reverse=True)[:TOP_N]

        counts: Counter = Counter()
        totals: Dict[str, float] = {}
        for entry in entries:
            pattern = fingerprint_query(entry.query)
            counts[pattern] += 1
            totals[pattern] = totals.get(pattern, 0.0) + entry.execution_time_ms
        patterns = [
            QueryPattern(fingerprint=p, count=c, average_ms=totals[p] / c)
            for p, c in counts.most_common(TOP_N)
        ]

        alerts = [a for a in self._alerts if a.timestamp > cutoff]
        by_severity = Counter(a.severity.value for a in alerts)
        recent_alerts = sorted(alerts, key=lambda a: a.timestamp, reverse=True)[:TOP_N]

        return PerformanceSummary(
            days=days,
            total_queries=total,
            average_ms=average,
            slow_queries=slow,
            slowest=slowest,
            patterns=patterns,
            alerts_by_severity=dict(by_severity),
            recent_alerts=recent_alerts,
        )

    def generate_performance_report(self, days: int = 7) -> str:
        """Render summarize_performance() as plain text."""
        summary = self.summarize_performance(days)
        lines = [f"Performance Report (last {days} days)", "=" * 50]

        if summary.total_queries == 0:
            lines.append("No performance data available for the specified period.")
        else:
            threshold = self.config.slow_query_threshold_ms
            lines += [
                "",
                "Query Statistics:",
                f"  Total queries: {summary.total_queries:,}",
                f"  Average execution time: {summary.average_ms:.0f}ms",
                f"  Slow queries (>{threshold:g}ms): {summary.slow_queries} "
                f"({summary.slow_ratio * 100:.1f}%)",
                "",
                "Slowest Queries:",
            ]
            for i, entry in enumerate(summary.slowest, 1):
                lines.append(f"  {i}. {entry.execution_time_ms:.0f}ms - {entry.query}")
            lines += ["", "Query Patterns:"]
            for i, pattern in enumerate(summary.patterns, 1):
                lines.append(
                    f"  {i}. {pattern.count} executions, {pattern.average_ms:.0f}ms avg - "
                    f"{pattern.fingerprint}"
                )

        lines += ["", "Alerts:"]
        if not summary.recent_alerts:
            lines.append("  No alerts in the specified period.")
        else:
            for severity in Severity:
                count = summary.alerts_by_severity.get(severity.value)
                if count:
                    lines.append(f"  {severity.value}: {count}")
            lines += ["", "  Latest alerts:"]
            for alert in summary.recent_alerts:
                when = datetime.fromtimestamp(alert.timestamp).strftime("%Y-%m-%d %H:%M:%S")
                lines.append(f"    {when} - {alert.message}")

        return "\n".join(lines)

    # ------------------------------------------------------------------
    # Alerts & retention
    # ------------------------------------------------------------------

    def get_alerts(self, severity: Optional[Union[Severity, str]] = None) -> List[AlertRecord]:
        """Stored alerts, newest first, optionally filtered by severity."""
        alerts = list(self._alerts)
        if severity is not None:
            wanted = Severity(severity) if isinstance(severity, str) else severity
            alerts = [a for a in alerts if a.severity == wanted]
        return sorted(alerts, key=lambda a: a.timestamp, reverse=True)

    def clear_alerts(self) -> None:
        self._alerts = []
        self._persist_alerts()
        logger.info("✓ All alerts cleared")

    def clean_old_logs(self) -> int:
        """
        Delete daily log files older than the retention window and drop
        expired alerts from the alert file.

        Returns:
            Number of log files deleted
        """
        retention = self.config.log_retention_days
        oldest_kept = self._today() - timedelta(days=retention)

        deleted = 0
        for path in self.log_dir.glob(f"{LOG_FILE_PREFIX}*.json"):
            file_date = _log_file_date(path)
            if file_date is not None and file_date < oldest_kept:
                path.unlink()
                deleted += 1

        cutoff = self.clock() - retention * SECONDS_PER_DAY
        kept = [a for a in self._alerts if a.timestamp > cutoff]
        if len(kept) != len(self._alerts):
            self._alerts = kept
            self._persist_alerts()

        logger.info(f"Cleaned {deleted} old log file(s)")
        return deleted

    def _raise_alert(
        self,
        alert_type: AlertType,
        severity: Severity,
        message: str,
        details: Dict[str, Any],
    ) -> AlertRecord:
        now = self.clock()
        alert = AlertRecord(
            type=alert_type,
            severity=severity,
            message=message,
            timestamp=now,
            details=details,
        )
        self._alerts.append(alert)
        logger.warning(f"Database alert [{severity.value.upper()}]: {message}")

        cutoff = now - self.config.alert_retention_days * SECONDS_PER_DAY
        self._alerts = [a for a in self._alerts if a.timestamp > cutoff]
        self._persist_alerts()
        return alert

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _today(self) -> date:
        return datetime.fromtimestamp(self.clock()).date()

    def _log_path(self, day: date) -> Path:
        return self.log_dir / f"{LOG_FILE_PREFIX}{day.isoformat()}.json"

    def _entries_in_window(self, days: int) -> List[PerformanceLogEntry]:
        today = self._today()
        entries = []
        for path in sorted(self.log_dir.glob(f"{LOG_FILE_PREFIX}*.json")):
            file_date = _log_file_date(path)
            if file_date is None or file_date == today:
                continue
            if file_date >= today - timedelta(days=days):
                entries.extend(self._read_log_file(path))
        return entries + [
            e for e in self._entries if datetime.fromtimestamp(e.timestamp).date() == today
        ]

    def _read_log_file(self, path: Path) -> List[PerformanceLogEntry]:
        if not path.exists():
            return []
        try:
            with open(path) as f:
                return [PerformanceLogEntry.from_dict(item) for item in json.load(f)]
        except (OSError, ValueError, KeyError) as e:
            logger.warning(f"Could not load performance log {path.name}: {e}")
            return []

    def _read_alerts(self) -> List[AlertRecord]:
        path = self.log_dir / ALERTS_FILE
        if not path.exists():
            return []
        try:
            with open(path) as f:
                return [AlertRecord.from_dict(item) for item in json.load(f)]
        except (OSError, ValueError, KeyError) as e:
            logger.warning(f"Could not load alerts: {e}")
            return []

    def _persist_today(self) -> None:
        today = self._today()
        todays = [e for e in self._entries if datetime.fromtimestamp(e.timestamp).date() == today]
        self._write_json(self._log_path(today), [e.to_dict() for e in todays])

    def _persist_alerts(self) -> None:
        self._write_json(self.log_dir / ALERTS_FILE, [a.to_dict() for a in self._alerts])

    def _write_json(self, path: Path, data: list) -> None:
        try:
            with open(path, "w") as f:
                json.dump(data, f, indent=2, default=str)
        except OSError as e:
            logger.error(f"Failed to persist {path.name}: {e}")
