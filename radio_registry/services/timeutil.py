from __future__ import annotations
from datetime import datetime, timezone
from zoneinfo import ZoneInfo

# Stored timestamps are fixed-width UTC strings, so text order == time order.
STORAGE_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"
DISPLAY_FORMAT = "%Y-%m-%d %H:%M:%S"


def to_storage(dt: datetime) -> str:
    """Render an aware datetime in the storage format (naive values are taken as UTC)."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).strftime(STORAGE_FORMAT)


def utcnow_iso() -> str:
    return to_storage(datetime.now(timezone.utc))


def parse_iso(ts: str | None) -> datetime | None:
    """Parse an ISO-8601 timestamp string.
    Naive values are treated as UTC. Returns None if ts is falsy or unparseable.
    """
    if not ts:
        return None
    try:
        dt = datetime.fromisoformat(ts.replace('Z', '+00:00'))
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def format_local(ts: str | None, tz: str) -> str:
    """Format a stored timestamp as ``YYYY-MM-DD HH:MM:SS`` in ``tz``.

    Values that cannot be parsed are returned untouched rather than dropped.
    """
    dt = parse_iso(ts)
    if dt is None:
        return ts or ""
    return dt.astimezone(ZoneInfo(tz)).strftime(DISPLAY_FORMAT)
