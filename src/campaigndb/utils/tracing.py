"""Run ID tracing so log lines from one CLI invocation can be grouped."""

import uuid
import logging
from contextvars import ContextVar
from typing import Optional

run_id: ContextVar[Optional[str]] = ContextVar("run_id", default=None)


class RunIdFilter(logging.Filter):
    """Logging filter that stamps each record with the current run ID.

    Formatters can then reference ``%(run_id)s`` to tie every log line
    back to the invocation that produced it.
    """

    def filter(self, record):
        rid = run_id.get() or "-"
        record.run_id = rid[:8]
        return True


def new_run_id() -> str:
    """Start a new run and return its ID."""
    rid = uuid.uuid4().hex
    run_id.set(rid)
    return rid


def get_run_id() -> Optional[str]:
    """Return the run ID of the current context, if any."""
    return run_id.get()
