"""
Text rendering of profiling data.
"""

from datetime import datetime, timedelta, timezone
from email.utils import format_datetime
from typing import Iterable

from .ledger import LedgerEntry


def format_timestamp(instant: datetime) -> str:
    """RFC 1123 timestamp, e.g. ``Sat, 17 Oct 2026 09:30:00 GMT``."""
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return format_datetime(instant.astimezone(timezone.utc), usegmt=True)


def format_duration(duration: timedelta) -> str:
    """Minutes, remaining seconds and remaining milliseconds: ``1m 2s 345ms``."""
    total_ms = duration // timedelta(milliseconds=1)
    minutes, remainder = divmod(total_ms, 60 * 1000)
    seconds, millis = divmod(remainder, 1000)
    return f"{minutes}m {seconds}s {millis}ms"


def render_report(run_start: datetime, entries: Iterable[LedgerEntry]) -> str:
    """
    Render a profiling report.

    The first line is ``Run at <timestamp>``, followed by one line per
    ledger entry and a terminating empty line.
    """
    lines = [f"Run at {format_timestamp(run_start)}"]
    for entry in entries:
        lines.append(f"{entry.key} took {format_duration(entry.duration)}")
    return '\n'.join(lines) + '\n\n'
