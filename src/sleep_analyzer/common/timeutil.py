from datetime import UTC, date, datetime, time, timedelta, tzinfo
from typing import Any


def parse_time_utc(t: Any) -> datetime:
    """Parse an ISO-8601 string, epoch seconds or datetime into a tz-aware UTC datetime."""
    if isinstance(t, datetime):
        return t.replace(tzinfo=UTC) if t.tzinfo is None else t.astimezone(UTC)

    if isinstance(t, bool):
        raise TypeError(f"Unsupported time type: {type(t)}")

    if isinstance(t, (int, float)):
        return datetime.fromtimestamp(float(t), tz=UTC)

    if isinstance(t, str):
        s = t.strip()
        if s.endswith("Z"):
            s = s[:-1] + "+00:00"
        dt = datetime.fromisoformat(s)
        return dt.replace(tzinfo=UTC) if dt.tzinfo is None else dt.astimezone(UTC)

    raise TypeError(f"Unsupported time type: {type(t)}")


def day_window(day: date, tz: tzinfo) -> tuple[datetime, datetime]:
    """Return [start of ``day``, start of the next day) in local calendar terms."""
    start = datetime.combine(day, time.min, tzinfo=tz)
    end = datetime.combine(day + timedelta(days=1), time.min, tzinfo=tz)
    return start, end


def format_duration(seconds: float) -> str:
    # HH:MM, truncated; hours are not wrapped at 24
    whole = int(seconds)
    return f"{whole // 3600:02d}:{whole // 60 % 60:02d}"
