"""
Unit tests for configuration, logging setup, formatting helpers and error formatting.
"""

import logging
import pytest
from datetime import datetime
from pathlib import Path

from campaigndb.config.config import (
    BackupConfig,
    Config,
    ConfigurationError,
    DatabaseConfig,
    LoggingConfig,
    MonitoringConfig,
    validate_configuration,
)
from campaigndb.domain.errors import ErrorCode, InvalidTarget, MigrationFailure
from campaigndb.utils.formatting import filename_timestamp, format_bytes, truncate
from campaigndb.utils.logging import setup_logging
from campaigndb.utils.tracing import RunIdFilter, get_run_id, new_run_id

ENV_VARS = [
    "DATABASE_PATH", "DATABASE_TIMEOUT", "DATABASE_VERBOSE", "BACKUP_DIR",
    "MAX_AUTO_BACKUPS", "VERIFY_BACKUPS", "DB_LOG_DIR", "SLOW_QUERY_THRESHOLD_MS",
    "CRITICAL_QUERY_THRESHOLD_MS", "WAL_FRAME_THRESHOLD", "LOG_RETENTION_DAYS",
    "LOG_LEVEL", "LOG_FILE",
]


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def make_config(**monitoring):
    return Config(
        database=DatabaseConfig(path=Path("test.db")),
        backup=BackupConfig(),
        monitoring=MonitoringConfig(**monitoring),
        logging=LoggingConfig(),
    )


# ============================================================================
# Config
# ============================================================================


class TestConfig:

    def test_defaults(self, clean_env, tmp_path):
        config = Config.from_env(env_file=str(tmp_path / "missing.env"))

        assert config.database.path == Path("data/campaigns.db")
        assert config.database.verbose is False
        assert config.backup.max_auto_backups == 10
        assert config.backup.verify_after_create is True
        assert config.monitoring.slow_query_threshold_ms == 1000.0
        assert config.monitoring.critical_query_threshold_ms == 5000.0
        assert config.logging.log_file is None
        assert config.validate() == []

    def test_reads_environment(self, clean_env, tmp_path):
        clean_env.setenv("DATABASE_PATH", str(tmp_path / "store.db"))
        clean_env.setenv("DATABASE_VERBOSE", "true")
        clean_env.setenv("MAX_AUTO_BACKUPS", "3")
        clean_env.setenv("VERIFY_BACKUPS", "no")
        clean_env.setenv("SLOW_QUERY_THRESHOLD_MS", "250")
        clean_env.setenv("LOG_FILE", str(tmp_path / "toolkit.log"))

        config = Config.from_env(env_file=str(tmp_path / "missing.env"))

        assert config.database.path == tmp_path / "store.db"
        assert config.database.verbose is True
        assert config.backup.max_auto_backups == 3
        assert config.backup.verify_after_create is False
        assert config.monitoring.slow_query_threshold_ms == 250.0
        assert config.logging.log_file == tmp_path / "toolkit.log"

    def test_reads_env_file(self, clean_env, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("BACKUP_DIR=/srv/backups\n")
        # register BACKUP_DIR so the value load_dotenv sets is undone afterwards
        clean_env.setenv("BACKUP_DIR", "")
        clean_env.delenv("BACKUP_DIR")

        config = Config.from_env(env_file=str(env_file))
        assert config.backup.directory == Path("/srv/backups")

    def test_critical_must_exceed_slow(self):
        errors = make_config(slow_query_threshold_ms=500, critical_query_threshold_ms=500).validate()
        assert any("critical_query_threshold_ms" in e for e in errors)

    def test_invalid_log_level(self):
        config = Config(
            database=DatabaseConfig(path=Path("test.db")),
            backup=BackupConfig(),
            monitoring=MonitoringConfig(),
            logging=LoggingConfig(level="LOUD"),
        )
        assert any("Invalid log level" in e for e in config.validate())

    def test_validate_configuration_raises_with_all_errors(self):
        config = make_config(log_retention_days=0, wal_frame_threshold=0)
        with pytest.raises(ConfigurationError) as exc_info:
            validate_configuration(config)
        assert "2 configuration error(s)" in str(exc_info.value)

    def test_config_is_immutable(self):
        config = make_config()
        with pytest.raises(Exception):
            config.monitoring.slow_query_threshold_ms = 1


# ============================================================================
# Formatting / tracing / errors
# ============================================================================


class TestFormatting:

    @pytest.mark.parametrize("size,expected", [
        (0, "0 B"),
        (512, "512 B"),
        (1536, "1.5 KB"),
        (1048576, "1 MB"),
        (5 * 1024 ** 3, "5 GB"),
    ])
    def test_format_bytes(self, size, expected):
        assert format_bytes(size) == expected

    def test_filename_timestamp_is_path_safe(self):
        stamp = filename_timestamp(datetime(2025, 1, 2, 3, 4, 5, 6))
        assert stamp == "2025-01-02T03-04-05-000006"

    def test_truncate(self):
        assert truncate("abcdef", 3) == "abc"
        assert truncate("abc", 10) == "abc"


class TestTracing:

    def test_filter_stamps_short_run_id(self):
        rid = new_run_id()
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "msg", None, None)

        assert RunIdFilter().filter(record) is True
        assert record.run_id == rid[:8]
        assert get_run_id() == rid


class TestErrors:

    def test_error_string_carries_code_and_context(self):
        error = InvalidTarget(5, 3)
        assert str(error).startswith("INVALID_TARGET: Target version 5")
        assert "'current': 3" in str(error)

    def test_migration_failure_keeps_cause(self):
        cause = ValueError("bad sql")
        error = MigrationFailure(2, cause)
        assert error.code == ErrorCode.MIGRATION_FAILED
        assert error.cause is cause
        assert "Migration 2 failed: bad sql" in str(error)


class TestSetupLogging:

    @pytest.fixture(autouse=True)
    def restore_root_logger(self):
        root = logging.getLogger()
        handlers, level = root.handlers[:], root.level
        yield
        for handler in root.handlers:
            if handler not in handlers:
                handler.close()
        root.handlers[:] = handlers
        root.setLevel(level)

    def test_file_lines_carry_run_id(self, tmp_path):
        log_file = tmp_path / "logs" / "toolkit.log"
        setup_logging("INFO", log_file=log_file, console_output=False)
        rid = new_run_id()

        logging.getLogger("campaigndb.test").info("migration applied")

        text = log_file.read_text()
        assert f"[{rid[:8]}]" in text
        assert "migration applied" in text

    def test_second_call_replaces_only_its_own_handlers(self, tmp_path):
        root = logging.getLogger()
        foreign = logging.NullHandler()
        root.addHandler(foreign)

        setup_logging("INFO", log_file=tmp_path / "first.log")
        setup_logging("WARNING", log_file=tmp_path / "second.log")

        ours = [
            h for h in root.handlers
            if isinstance(h, logging.FileHandler) and Path(h.baseFilename).parent == tmp_path
        ]
        assert [Path(h.baseFilename).name for h in ours] == ["second.log"]
        assert foreign in root.handlers
        assert root.level == logging.WARNING
