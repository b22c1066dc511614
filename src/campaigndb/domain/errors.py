"""
Exception taxonomy for the database toolkit.

Structural failures (migrations, seeds, backups, restores) are raised and
abort the current command. Integrity findings and alerts are data, not
exceptions: see IntegrityIssue and AlertRecord in domain.types.
"""

from enum import Enum
from typing import Optional


class ErrorCode(Enum):
    """Error codes for categorizing failures."""

    MIGRATION_FAILED = "MIGRATION_FAILED"
    INVALID_TARGET = "INVALID_TARGET"
    SEED_FAILED = "SEED_FAILED"
    NOT_FOUND = "NOT_FOUND"
    BACKUP_FAILED = "BACKUP_FAILED"
    RESTORE_FAILED = "RESTORE_FAILED"
    CONFIRMATION_REQUIRED = "CONFIRMATION_REQUIRED"
    UNKNOWN_TABLE = "UNKNOWN_TABLE"


class DatabaseToolkitError(Exception):
    """Base class for every error raised by campaigndb."""

    code: ErrorCode = ErrorCode.MIGRATION_FAILED

    def __init__(self, message: str, context: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self):
        ctx = f" | {self.context}" if self.context else ""
        return f"{self.code.value}: {self.message}{ctx}"


class MigrationFailure(DatabaseToolkitError):
    """A forward or backward change (or its control-row write) failed."""

    code = ErrorCode.MIGRATION_FAILED

    def __init__(self, version: int, cause: BaseException):
        self.version = version
        self.cause = cause
        super().__init__(
            f"Migration {version} failed: {cause}",
            {"version": version},
        )


class InvalidTarget(DatabaseToolkitError):
    """Rollback target is not below the current version."""

    code = ErrorCode.INVALID_TARGET

    def __init__(self, target: int, current: int):
        self.target = target
        self.current = current
        super().__init__(
            f"Target version {target} must be below current version {current} and >= 0",
            {"target": target, "current": current},
        )


class SeedFailure(DatabaseToolkitError):
    code = ErrorCode.SEED_FAILED

    def __init__(self, name: str, cause: BaseException):
        self.name = name
        self.cause = cause
        super().__init__(f"Seed '{name}' failed: {cause}", {"seed": name})


class SeedNotFound(DatabaseToolkitError):
    code = ErrorCode.NOT_FOUND

    def __init__(self, name: str, available: Optional[list] = None):
        self.name = name
        super().__init__(
            f"Seed '{name}' not found",
            {"available": available} if available else None,
        )


class BackupError(DatabaseToolkitError):
    """Backup copy did not complete or its target could not be written."""

    code = ErrorCode.BACKUP_FAILED


class RestoreError(DatabaseToolkitError):
    """Backup file missing or unreadable during restore."""

    code = ErrorCode.RESTORE_FAILED


class ConfirmationRequired(DatabaseToolkitError):
    """Destructive operation invoked without force=True."""

    code = ErrorCode.CONFIRMATION_REQUIRED

    def __init__(self, action: str):
        self.action = action
        super().__init__(f"'{action}' is destructive and requires force=True")


class UnknownTableError(DatabaseToolkitError):
    code = ErrorCode.UNKNOWN_TABLE

    def __init__(self, names: list):
        self.names = list(names)
        super().__init__(f"Unknown table(s): {', '.join(self.names)}")
