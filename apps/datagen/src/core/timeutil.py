"""
Timestamp helpers.
"""

from datetime import date, datetime, timedelta, timezone

HISTORY_WINDOW: timedelta = timedelta(days=7)

_EPOCH_DAY = date(1970, 1, 1)


def utc_now() -> datetime:
    """Timezone-aware current time in UTC."""
    return datetime.now(tz=timezone.utc)


def format_timestamp(ts: datetime, pattern: str) -> str:
    """
    Render `ts` with a strftime pattern.

    `%f` renders milliseconds (three digits) rather than microseconds, which
    is the precision every payload timestamp uses.
    """
    if "%f" in pattern:
        pattern = pattern.replace("%f", f"{ts.microsecond // 1000:03d}")
    return ts.strftime(pattern)


def epoch_millis(ts: datetime) -> int:
    return int(ts.timestamp() * 1000)


def epoch_day(ts: datetime) -> int:
    """Days since 1970-01-01 for the calendar date of `ts` (UTC)."""
    return (ts.astimezone(timezone.utc).date() - _EPOCH_DAY).days
