from datetime import date, datetime, time, timezone
from typing import Union

DateLike = Union[str, date, datetime]


def parse_date(value: DateLike) -> datetime:
    """Parse a date, datetime or ISO string into an aware UTC datetime.

    Naive values are taken as UTC.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.min)
    elif isinstance(value, str):
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    else:
        raise TypeError(f"Unsupported date value: {value!r}")

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def to_iso_string(value: DateLike) -> str:
    """Normalize to `YYYY-MM-DDTHH:MM:SS.mmmZ`"""
    parsed = parse_date(value)
    return parsed.strftime("%Y-%m-%dT%H:%M:%S.") + f"{parsed.microsecond // 1000:03d}Z"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def now_iso() -> str:
    return to_iso_string(utcnow())


def start_of_day(value: DateLike) -> datetime:
    return parse_date(value).replace(hour=0, minute=0, second=0, microsecond=0)


def end_of_day(value: DateLike) -> datetime:
    return parse_date(value).replace(hour=23, minute=59, second=59, microsecond=999000)
