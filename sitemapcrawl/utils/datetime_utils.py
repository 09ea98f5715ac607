from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_iso8601(value: Optional[datetime] = None) -> str:
    """Format `value` (default: now) as a UTC ISO-8601 timestamp with millisecond precision.

    Naive datetimes are assumed to already be UTC. The offset is rendered as
    ``Z`` which is what sitemap consumers expect in ``<lastmod>``.
    """
    dt = value if value is not None else utc_now()
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    else:
        dt = dt.astimezone(timezone.utc)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")
