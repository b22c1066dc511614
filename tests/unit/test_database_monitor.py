"""
Unit tests for the database monitor.

Tests:
- Slow query thresholds and alert severities
- monitor_query timing, failures recorded and re-raised
- Query fingerprinting and performance report
- Persistence of daily logs and alerts
- Health checks (integrity, WAL backlog, internal failure)
- Log retention cleanup
"""

import json
import pytest
import sqlite3
from datetime import datetime, timedelta
from unittest.mock import patch

from campaigndb.domain.enums import AlertType, Severity
from campaigndb.infrastructure.database.connection import open_connection
from campaigndb.infrastructure.monitoring.database_monitor import (
    ALERTS_FILE,
    DatabaseMonitor,
    fingerprint_query,
)

from conftest import FIXED_NOW

DAY = 24 * 60 * 60


@pytest.fixture
def monitor(conn, monitoring_config, clock):
    return DatabaseMonitor(conn, monitoring_config, clock=clock)


def log_file_for(config, when: float):
    day = datetime.fromtimestamp(when).date().isoformat()
    return config.log_dir / f"performance_{day}.json"


# ============================================================================
# Thresholds / alerts
# ============================================================================


class TestSlowQueryAlerts:

    def test_fast_query_raises_nothing(self, monitor):
        assert monitor.record_query("SELECT 1", 50, 1) is None
        assert monitor.get_alerts() == []

    def test_slow_query_logs_warning_without_alert(self, monitor, caplog):
        with caplog.at_level("WARNING"):
            assert monitor.record_query("SELECT 1", 200, 1) is None
        assert "SLOW" in caplog.text
        assert monitor.get_alerts() == []

    def test_above_critical_threshold_is_high(self, monitor):
        alert = monitor.record_query("SELECT 1", 600, 1)
        assert alert.type == AlertType.SLOW_QUERY
        assert alert.severity == Severity.HIGH

    def test_twice_critical_threshold_is_critical(self, monitor):
        alert = monitor.record_query("SELECT * FROM campaigns", 1200, 5, ["x"])

        alerts = monitor.get_alerts()
        assert len(alerts) == 1
        assert alert.severity == Severity.CRITICAL
        assert alerts[0].details["query"] == "SELECT * FROM campaigns"
        assert alerts[0].details["parameters"] == ["x"]

    def test_get_alerts_filters_by_severity(self, monitor, clock):
        monitor.record_query("SELECT 1", 600, 1)
        clock.advance(1)
        monitor.record_query("SELECT 2", 1200, 1)

        assert [a.severity for a in monitor.get_alerts()] == [Severity.CRITICAL, Severity.HIGH]
        assert len(monitor.get_alerts("high")) == 1
        assert len(monitor.get_alerts(Severity.CRITICAL)) == 1

    def test_clear_alerts(self, monitor, monitoring_config):
        monitor.record_query("SELECT 1", 1200, 1)
        monitor.clear_alerts()

        assert monitor.get_alerts() == []
        assert json.loads((monitoring_config.log_dir / ALERTS_FILE).read_text()) == []

    def test_alerts_expire_after_retention(self, monitor, clock):
        monitor.record_query("SELECT 1", 1200, 1)
        clock.advance(8 * DAY)
        monitor.record_query("SELECT 2", 1200, 1)

        alerts = monitor.get_alerts()
        assert len(alerts) == 1
        assert "1200" in alerts[0].message


# ============================================================================
# monitor_query
# ============================================================================


class TestMonitorQuery:

    def test_returns_rows_and_records_sample(self, monitor, conn):
        conn.execute("CREATE TABLE items (id INTEGER)")
        conn.execute("INSERT INTO items VALUES (1), (2)")

        rows = monitor.monitor_query("SELECT * FROM items WHERE id > ?", [0])

        assert len(rows) == 2
        summary = monitor.summarize_performance(days=1)
        assert summary.total_queries == 1
        assert summary.slowest[0].rows_affected == 2

    def test_failure_recorded_and_reraised(self, monitor, monitoring_config, clock):
        with pytest.raises(sqlite3.OperationalError):
            monitor.monitor_query("SELECT * FROM no_such_table")

        entries = json.loads(log_file_for(monitoring_config, clock()).read_text())
        assert len(entries) == 1
        assert entries[0]["rowsAffected"] == 0
        assert entries[0]["query"] == "SELECT * FROM no_such_table"

    def test_slow_statement_alerts(self, monitor, conn):
        # perf_counter: start, end
        with patch(
            "campaigndb.infrastructure.monitoring.database_monitor.time.perf_counter",
            side_effect=[0.0, 1.5],
        ):
            monitor.monitor_query("SELECT 1")
        alerts = monitor.get_alerts()
        assert len(alerts) == 1
        assert alerts[0].severity == Severity.CRITICAL

    def test_long_queries_truncated(self, conn, tmp_path, clock):
        from campaigndb.config.config import MonitoringConfig

        config = MonitoringConfig(log_dir=tmp_path / "logs", truncate_query_length=20)
        monitor = DatabaseMonitor(conn, config, clock=clock)
        monitor.record_query("SELECT " + "x, " * 50 + "y FROM t", 1, 0)
        assert len(monitor.summarize_performance(1).slowest[0].query) == 20

    def test_parameters_omitted_when_disabled(self, conn, tmp_path, clock):
        from campaigndb.config.config import MonitoringConfig

        config = MonitoringConfig(log_dir=tmp_path / "logs", include_query_parameters=False)
        monitor = DatabaseMonitor(conn, config, clock=clock)
        monitor.record_query("SELECT ?", 1, 0, ["secret"])
        assert monitor.summarize_performance(1).slowest[0].parameters is None


# ============================================================================
# Reports
# ============================================================================


class TestReports:

    def test_fingerprint_replaces_literals(self):
        query = "SELECT *  FROM t\n WHERE id = 42 AND name = 'bob'"
        assert fingerprint_query(query) == "SELECT * FROM t WHERE id = ? AND name = ?"

    def test_fingerprint_keeps_identifiers_with_digits(self):
        assert fingerprint_query("SELECT col1 FROM t2") == "SELECT col1 FROM t2"

    def test_patterns_group_similar_queries(self, monitor):
        monitor.record_query("SELECT * FROM campaigns WHERE id = 1", 10, 1)
        monitor.record_query("SELECT * FROM campaigns WHERE id = 2", 30, 1)
        monitor.record_query("SELECT COUNT(*) FROM publications", 5, 1)

        summary = monitor.summarize_performance(days=7)
        top = summary.patterns[0]
        assert top.fingerprint == "SELECT * FROM campaigns WHERE id = ?"
        assert top.count == 2
        assert top.average_ms == pytest.approx(20.0)

    def test_summary_statistics(self, monitor):
        for ms in (50, 150, 250):
            monitor.record_query("SELECT 1", ms, 1)

        summary = monitor.summarize_performance(days=7)
        assert summary.total_queries == 3
        assert summary.average_ms == pytest.approx(150.0)
        assert summary.slow_queries == 2
        assert summary.slow_ratio == pytest.approx(2 / 3)
        assert [e.execution_time_ms for e in summary.slowest] == [250, 150, 50]

    def test_report_without_data(self, monitor):
        report = monitor.generate_performance_report(days=7)
        assert "Performance Report (last 7 days)" in report
        assert "No performance data available" in report

    def test_report_with_data_and_alerts(self, monitor):
        monitor.record_query("SELECT * FROM campaigns WHERE id = 7", 1200, 1)
        monitor.record_query("SELECT 1", 20, 1)

        report = monitor.generate_performance_report(days=7)
        assert "Total queries: 2" in report
        assert "Slowest Queries:" in report
        assert "1200ms - SELECT * FROM campaigns WHERE id = 7" in report
        assert "critical: 1" in report

    def test_report_reads_previous_daily_files(self, monitor, monitoring_config, clock):
        yesterday = clock() - DAY - 60
        log_file_for(monitoring_config, yesterday).write_text(json.dumps([
            {"timestamp": yesterday, "query": "SELECT 1", "executionTimeMs": 40, "rowsAffected": 1},
        ]))
        monitor.record_query("SELECT 2", 60, 1)

        assert monitor.summarize_performance(days=7).total_queries == 2
        assert monitor.summarize_performance(days=1).total_queries == 1


# ============================================================================
# Persistence / retention
# ============================================================================


class TestPersistence:

    def test_state_survives_new_instance(self, conn, monitoring_config, clock):
        first = DatabaseMonitor(conn, monitoring_config, clock=clock)
        first.record_query("SELECT 1", 1200, 1)

        second = DatabaseMonitor(conn, monitoring_config, clock=clock)
        assert second.summarize_performance(days=1).total_queries == 1
        assert len(second.get_alerts()) == 1

    def test_corrupt_log_file_is_ignored(self, conn, monitoring_config, clock):
        monitoring_config.log_dir.mkdir(parents=True)
        log_file_for(monitoring_config, clock()).write_text("{not json")
        monitor = DatabaseMonitor(conn, monitoring_config, clock=clock)
        assert monitor.summarize_performance(days=1).total_queries == 0

    def test_clean_old_logs(self, monitor, monitoring_config, clock):
        old = log_file_for(monitoring_config, clock() - 40 * DAY)
        recent = log_file_for(monitoring_config, clock() - 2 * DAY)
        old.write_text("[]")
        recent.write_text("[]")
        (monitoring_config.log_dir / "notes.json").write_text("[]")

        assert monitor.clean_old_logs() == 1
        assert not old.exists()
        assert recent.exists()
        assert (monitoring_config.log_dir / "notes.json").exists()

    def test_clean_old_logs_prunes_alerts(self, conn, monitoring_config, clock):
        monitoring_config.log_dir.mkdir(parents=True)
        (monitoring_config.log_dir / ALERTS_FILE).write_text(json.dumps([
            {"type": "slow_query", "severity": "high", "message": "old",
             "timestamp": clock() - 40 * DAY, "details": {}},
            {"type": "slow_query", "severity": "high", "message": "new",
             "timestamp": clock() - DAY, "details": {}},
        ]))
        monitor = DatabaseMonitor(conn, monitoring_config, clock=clock)

        monitor.clean_old_logs()
        assert [a.message for a in monitor.get_alerts()] == ["new"]


# ============================================================================
# Health
# ============================================================================


class TestHealth:

    def test_healthy_store(self, migrated_conn, monitoring_config, clock):
        report = DatabaseMonitor(migrated_conn, monitoring_config, clock=clock).monitor_health()

        assert report.integrity_ok
        assert report.integrity_result == "ok"
        assert report.size_bytes > 0
        assert report.alerts == []

    def test_large_wal_raises_medium_alert(self, conn, tmp_path, clock):
        from campaigndb.config.config import MonitoringConfig

        config = MonitoringConfig(log_dir=tmp_path / "logs", wal_frame_threshold=1)
        conn.execute("CREATE TABLE items (id INTEGER, payload TEXT)")
        conn.executemany("INSERT INTO items VALUES (?, ?)", [(i, "x" * 500) for i in range(200)])

        report = DatabaseMonitor(conn, config, clock=clock).monitor_health()

        assert report.wal_frames > 1
        wal_alerts = [a for a in report.alerts if a.type == AlertType.HIGH_MEMORY]
        assert len(wal_alerts) == 1
        assert wal_alerts[0].severity == Severity.MEDIUM

    def test_memory_store_reports_no_wal(self, tmp_path, clock, monitoring_config):
        conn = open_connection(":memory:")
        try:
            report = DatabaseMonitor(conn, monitoring_config, clock=clock).monitor_health()
        finally:
            conn.close()
        assert report.wal_frames == 0
        assert report.integrity_ok

    def test_recent_activity_counts_last_hour(self, monitor, clock):
        monitor.record_query("SELECT 1", 300, 1)
        clock.advance(2 * 3600)
        monitor.record_query("SELECT 2", 50, 1)
        monitor.record_query("SELECT 3", 150, 1)

        report = monitor.monitor_health()
        assert report.recent_queries == 2
        assert report.recent_average_ms == pytest.approx(100.0)
        assert report.recent_slow_queries == 1

    def test_internal_failure_becomes_alert(self, db_path, monitoring_config, clock):
        conn = open_connection(db_path)
        monitor = DatabaseMonitor(conn, monitoring_config, clock=clock)
        conn.close()

        report = monitor.monitor_health()

        assert not report.integrity_ok
        assert len(report.alerts) == 1
        assert report.alerts[0].type == AlertType.INTEGRITY_ISSUE
        assert report.alerts[0].severity == Severity.HIGH
