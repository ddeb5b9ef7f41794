from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional


def localnow() -> datetime:
    """Shop-local wall-clock 'now' (naive, canonical for every stored timestamp)."""
    return datetime.now().replace(microsecond=0)


def to_iso(dt: Optional[datetime]) -> Optional[str]:
    """Serializes a naive local datetime to ISO-8601 (seconds precision)."""
    if dt is None:
        return None
    if dt.tzinfo is not None:
        dt = dt.astimezone().replace(tzinfo=None)
    return dt.replace(microsecond=0).isoformat()


def to_utc_z(dt: Optional[datetime]) -> Optional[str]:
    """ISO-8601 with trailing 'Z'; naive values are read as local time."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.astimezone()
    dt_utc = dt.astimezone(timezone.utc).replace(microsecond=0)
    return dt_utc.isoformat().replace("+00:00", "Z")
