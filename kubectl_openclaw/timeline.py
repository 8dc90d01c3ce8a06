from datetime import datetime, timedelta, timezone

UNKNOWN_AGE = "<unknown>"


def parse_time(ts: str) -> datetime:
    dt = datetime.fromisoformat(ts.replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def format_duration(elapsed: timedelta) -> str:
    """
    Render a duration using the coarsest single unit that keeps the
    number human-scale. Values are truncated, never rounded.
    """
    seconds = max(0, int(elapsed.total_seconds()))

    if seconds < 60:
        return f"{seconds}s"
    if seconds < 3600:
        return f"{seconds // 60}m"
    if seconds < 86400:
        return f"{seconds // 3600}h"
    return f"{seconds // 86400}d"


def format_age(created: str | datetime | None, now: datetime | None = None) -> str:
    if not created:
        return UNKNOWN_AGE

    if isinstance(created, datetime):
        start = created if created.tzinfo else created.replace(tzinfo=timezone.utc)
    else:
        try:
            start = parse_time(created)
        except ValueError:
            return UNKNOWN_AGE

    reference = now or datetime.now(timezone.utc)
    return format_duration(reference - start)
