"""
Configuration management for campaigndb.

Loads configuration from environment variables with sensible defaults.
All configuration is immutable and validated before any command runs.
"""

import os
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class ConfigurationError(Exception):
    """Raised when configuration is invalid."""

    pass


@dataclass(frozen=True)
class DatabaseConfig:
    """Database configuration."""

    path: Path
    timeout: int = 30
    verbose: bool = False  # trace every statement on the campaigndb.sql logger


@dataclass(frozen=True)
class BackupConfig:
    directory: Path = Path("backups")
    max_auto_backups: int = 10
    verify_after_create: bool = True


@dataclass(frozen=True)
class MonitoringConfig:
    """Query monitoring thresholds and retention."""

    log_dir: Path = Path("logs/database")
    slow_query_threshold_ms: float = 1000.0
    critical_query_threshold_ms: float = 5000.0  # alerts start here, 2x is critical
    wal_frame_threshold: int = 1000
    log_retention_days: int = 30
    alert_retention_days: int = 7
    buffer_window_hours: int = 24
    truncate_query_length: int = 200
    include_query_parameters: bool = True


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "WARNING"
    log_file: Optional[Path] = None


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Config:
    """Main configuration container."""

    database: DatabaseConfig
    backup: BackupConfig
    monitoring: MonitoringConfig
    logging: LoggingConfig

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "Config":
        """
        Load configuration from environment variables.

        Args:
            env_file: Optional path to .env file. Defaults to .env in project root.

        Returns:
            Config instance with all settings loaded.
        """
        if env_file:
            load_dotenv(env_file)
        else:
            # src/campaigndb/config/config.py -> project root
            project_root = Path(__file__).resolve().parents[3]
            env_path = project_root / ".env"
            if env_path.exists():
                load_dotenv(env_path)

        database = DatabaseConfig(
            path=Path(os.getenv("DATABASE_PATH", "data/campaigns.db")),
            timeout=int(os.getenv("DATABASE_TIMEOUT", "30")),
            verbose=_env_flag("DATABASE_VERBOSE"),
        )

        backup = BackupConfig(
            directory=Path(os.getenv("BACKUP_DIR", "backups")),
            max_auto_backups=int(os.getenv("MAX_AUTO_BACKUPS", "10")),
            verify_after_create=_env_flag("VERIFY_BACKUPS", default=True),
        )

        monitoring = MonitoringConfig(
            log_dir=Path(os.getenv("DB_LOG_DIR", "logs/database")),
            slow_query_threshold_ms=float(os.getenv("SLOW_QUERY_THRESHOLD_MS", "1000")),
            critical_query_threshold_ms=float(
                os.getenv("CRITICAL_QUERY_THRESHOLD_MS", "5000")
            ),
            wal_frame_threshold=int(os.getenv("WAL_FRAME_THRESHOLD", "1000")),
            log_retention_days=int(os.getenv("LOG_RETENTION_DAYS", "30")),
        )

        log_file = os.getenv("LOG_FILE")
        logging_config = LoggingConfig(
            level=os.getenv("LOG_LEVEL", "WARNING"),
            log_file=Path(log_file) if log_file else None,
        )

        return cls(
            database=database,
            backup=backup,
            monitoring=monitoring,
            logging=logging_config,
        )

    def validate(self) -> List[str]:
        """
        Validate configuration and return list of errors.

        Returns:
            List of error messages. Empty list if valid.
        """
        errors = []
        mon = self.monitoring

        if mon.slow_query_threshold_ms <= 0:
            errors.append("slow_query_threshold_ms must be > 0")

        if mon.critical_query_threshold_ms <= mon.slow_query_threshold_ms:
            errors.append(
                f"critical_query_threshold_ms ({mon.critical_query_threshold_ms}) must be > "
                f"slow_query_threshold_ms ({mon.slow_query_threshold_ms})"
            )

        if mon.log_retention_days <= 0:
            errors.append("log_retention_days must be > 0")

        if mon.wal_frame_threshold <= 0:
            errors.append("wal_frame_threshold must be > 0")

        if self.backup.max_auto_backups <= 0:
            errors.append("max_auto_backups must be > 0")

        if self.database.timeout <= 0:
            errors.append("database timeout must be > 0")

        if self.logging.level.upper() not in VALID_LOG_LEVELS:
            errors.append(
                f"Invalid log level: {self.logging.level}. Must be one of {VALID_LOG_LEVELS}"
            )

        return errors


def validate_configuration(config: Config) -> None:
    """
    Validate configuration before running a command.

    Raises:
        ConfigurationError: If any validation fails
    """
    errors = config.validate()
    if errors:
        for error in errors:
            logger.error(f"Configuration error: {error}")
        error_summary = "\n".join(f"  - {error}" for error in errors)
        raise ConfigurationError(
            f"{len(errors)} configuration error(s):\n{error_summary}"
        )

    logger.debug("✓ Configuration validated successfully")
