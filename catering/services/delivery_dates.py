from __future__ import annotations

from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

DEFAULT_CUTOFF_HOUR = 15


class DeliveryDateTooSoonError(ValueError):
    pass


def local_now(business_timezone: str = "") -> datetime:
    if business_timezone:
        return datetime.now(ZoneInfo(business_timezone))
    return datetime.now().astimezone()


def earliest_delivery_date(now: datetime, cutoff_hour: int = DEFAULT_CUTOFF_HOUR) -> date:
    """Before the cutoff the earliest date is tomorrow, from the cutoff on it is the day after."""
    days_ahead = 1 if now.hour < cutoff_hour else 2
    return now.date() + timedelta(days=days_ahead)


def parse_date_needed(value: str | date) -> date:
    if isinstance(value, date):
        return value
    raw = (value or "").strip()
    if len(raw) > 10 and raw[10] in "T ":
        # full ISO timestamps are accepted, only the calendar day matters
        return datetime.fromisoformat(raw.replace("Z", "+00:00")).date()
    return date.fromisoformat(raw)


def validate_date_needed(value: str | date, now: datetime, cutoff_hour: int = DEFAULT_CUTOFF_HOUR) -> date:
    requested = parse_date_needed(value)
    min_date = earliest_delivery_date(now, cutoff_hour)
    if requested < min_date:
        hour_label = datetime(2000, 1, 1, cutoff_hour).strftime("%I:%M %p").lstrip("0")
        raise DeliveryDateTooSoonError(
            f"Orders must be placed by {hour_label} the day before delivery. "
            f"The earliest available date is {min_date.strftime('%A, %B')} {min_date.day}."
        )
    return requested
