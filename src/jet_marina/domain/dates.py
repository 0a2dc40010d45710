"""Civil-date helpers for the booking calendar."""

import calendar
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo


@dataclass(frozen=True)
class BookingClock:
    """The marina's notion of "today" and whether the daily unlock has passed."""

    today: date
    unlocked: bool

    @classmethod
    def at(cls, now: datetime, cutoff: time, timezone_name: str) -> "BookingClock":
        """Derive the clock from an instant, in the marina's time zone."""
        local = now.astimezone(ZoneInfo(timezone_name)) if now.tzinfo else now
        return cls(today=local.date(), unlocked=local.time() >= cutoff)


def parse_cutoff(raw: str) -> time:
    """Parse an HH:MM cutoff value."""
    try:
        hours, minutes = raw.strip().split(":")
        return time(hour=int(hours), minute=int(minutes))
    except ValueError as exc:
        raise ValueError(f"Invalid cutoff time: {raw!r}") from exc


def parse_civil_date(raw: str | date) -> date:
    """Parse a YYYY-MM-DD value as a local civil date."""
    if isinstance(raw, date):
        return raw
    return date.fromisoformat(raw[:10])


def date_range(start: date, end: date) -> list[date]:
    """Return every date from start to end, inclusive."""
    if end < start:
        return []
    return [start + timedelta(days=offset) for offset in range((end - start).days + 1)]


def month_dates(year: int, month: int) -> list[date]:
    """Return every date in a calendar month."""
    _, days = calendar.monthrange(year, month)
    return date_range(date(year, month, 1), date(year, month, days))
