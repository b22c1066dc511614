"""
Logging configuration for campaigndb.

Every handler carries a run ID filter so a single CLI invocation can be
followed through the log file. Executed SQL goes to the ``campaigndb.sql``
logger when statement tracing is on (see open_connection).
"""

import logging
import sys
from pathlib import Path
from typing import List, Optional

from campaigndb.utils.tracing import RunIdFilter

SQL_LOGGER_NAME = "campaigndb.sql"

DEFAULT_FORMAT = "%(asctime)s - [%(run_id)s] - %(name)s - %(levelname)s - %(message)s"

# Marks handlers installed here so a second setup_logging call replaces
# them without touching handlers other code attached to the root logger.
_OWNED = "_campaigndb_handler"


def _owned_handlers(logger: logging.Logger) -> List[logging.Handler]:
    return [h for h in logger.handlers if getattr(h, _OWNED, False)]


def _attach(logger: logging.Logger, handler: logging.Handler, formatter: logging.Formatter) -> None:
    handler.setFormatter(formatter)
    handler.addFilter(RunIdFilter())
    setattr(handler, _OWNED, True)
    logger.addHandler(handler)


def setup_logging(
    level: str = "INFO",
    log_file: Optional[Path] = None,
    console_output: bool = True,
    log_format: Optional[str] = None,
) -> None:
    """
    Configure application logging.

    Console output goes to stderr so command output on stdout stays clean.
    Calling this again swaps out the handlers from the previous call.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file path for log output (appended to)
        console_output: Whether to log to the console
        log_format: Optional custom log format
    """
    formatter = logging.Formatter(log_format or DEFAULT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))

    for handler in _owned_handlers(root_logger):
        root_logger.removeHandler(handler)
        handler.close()

    if console_output:
        _attach(root_logger, logging.StreamHandler(sys.stderr), formatter)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        _attach(root_logger, logging.FileHandler(log_file), formatter)

    root_logger.debug(f"Logging initialized: level={level}")
