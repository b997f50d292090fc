"""UTC datetime utilities."""

from datetime import date, datetime, time, timedelta, timezone


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(timezone.utc)


def utc_today() -> date:
    return utc_now().date()


def start_of_day(day: date) -> datetime:
    """Midnight UTC at the start of `day`."""
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


def start_of_next_day(day: date) -> datetime:
    return start_of_day(day + timedelta(days=1))


def to_utc_date(value: object) -> date:
    """Normalize a date-like value to a UTC calendar day.

    Accepts `date`, `datetime` (naive values are taken as UTC), epoch
    milliseconds (int/float or a digit string) and ISO-8601 strings.
    Raises ValueError for anything else.
    """
    if isinstance(value, bool):
        raise ValueError(f"Not a date: {value!r}")
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.date()
        return value.astimezone(timezone.utc).date()
    if isinstance(value, date):
        return value
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc).date()
    if isinstance(value, str):
        text = value.strip()
        if not text:
            raise ValueError("Empty date value")
        if text.lstrip("-").isdigit():
            return to_utc_date(int(text))
        # Python < 3.11 fromisoformat does not accept a trailing Z
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        return to_utc_date(parsed)
    raise ValueError(f"Not a date: {value!r}")
