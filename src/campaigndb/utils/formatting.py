"""Human-readable formatting helpers shared by the CLI and reports."""

from datetime import datetime


def format_bytes(size: float) -> str:
    """
    Render a byte count using the largest fitting unit.

    >>> format_bytes(0)
    '0 B'
    >>> format_bytes(1536)
    '1.5 KB'
    """
    units = ["B", "KB", "MB", "GB"]
    value = float(size)
    unit_index = 0
    while value >= 1024 and unit_index < len(units) - 1:
        value /= 1024
        unit_index += 1
    if unit_index == 0:
        return f"{int(value)} B"
    return f"{round(value, 2):g} {units[unit_index]}"


def filename_timestamp(moment: datetime) -> str:
    """ISO timestamp with ':' and '.' replaced so it is safe in file names."""
    return moment.isoformat().replace(":", "-").replace(".", "-")


def truncate(text: str, length: int) -> str:
    if len(text) <= length:
        return text
    return text[:length]
