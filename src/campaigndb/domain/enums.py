"""
Enumerations for monitoring and analysis findings.
"""

from enum import Enum


class AlertType(Enum):
    """What kind of condition raised an alert."""

    SLOW_QUERY = "slow_query"
    HIGH_MEMORY = "high_memory"  # WAL backlog above threshold
    LOCK_TIMEOUT = "lock_timeout"
    INTEGRITY_ISSUE = "integrity_issue"


class Severity(Enum):
    """Severity shared by alerts and integrity issues."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class IntegrityIssueType(Enum):
    """Category of a data integrity finding."""

    FOREIGN_KEY = "foreign_key"
    CONSTRAINT = "constraint"  # engine-level integrity_check failure
    ORPHANED_RECORD = "orphaned_record"
    DATA_INCONSISTENCY = "data_inconsistency"  # business rule violated
