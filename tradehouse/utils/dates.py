"""Date helpers shared by models and routes."""

from datetime import datetime, timedelta, timezone


def isoformat(value):
    """Render a naive UTC datetime as ISO-8601 with a Z suffix."""
    if value is None:
        return None
    return value.isoformat() + 'Z'


def parse_client_timestamp(value):
    """Parse an ISO-8601 string sent by a browser into naive UTC.

    Returns None when the value is missing or unparseable.
    """
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.strip())
    except (TypeError, ValueError):
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def period_starts(now=None):
    """Start of today, seven days ago and start of the month, all UTC."""
    now = now or datetime.utcnow()
    today = now.replace(hour=0, minute=0, second=0, microsecond=0)
    week = now - timedelta(days=7)
    month = today.replace(day=1)
    return today, week, month
