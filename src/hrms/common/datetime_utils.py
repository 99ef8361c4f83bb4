from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal

from ..core.constants import BUSINESS_UTC_OFFSET_HOURS

BUSINESS_TZ = timezone(timedelta(hours=BUSINESS_UTC_OFFSET_HOURS))

_MS_PER_HOUR = Decimal(3_600_000)
_TWO_PLACES = Decimal("0.01")


def business_tz(offset_hours: float) -> timezone:
    """Fixed-offset zone (no daylight saving)."""
    return timezone(timedelta(hours=offset_hours))


def utc_now() -> datetime:
    """Current UTC time (timezone-aware)."""
    return datetime.now(timezone.utc)


def as_utc(instant: datetime) -> datetime:
    """Attach UTC to naive values (DB drivers return naive UTC)."""
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc)


def day_start(day: date, tz: timezone = BUSINESS_TZ) -> datetime:
    """UTC instant of local 00:00 on ``day``."""
    return datetime.combine(day, time.min, tzinfo=tz).astimezone(timezone.utc)


def day_range(instant: datetime, tz: timezone = BUSINESS_TZ) -> tuple[datetime, datetime]:
    """Business day ``[start, end)`` that ``instant`` belongs to."""
    local_day = as_utc(instant).astimezone(tz).date()
    start = day_start(local_day, tz)
    return start, start + timedelta(hours=24)


def local_date(instant: datetime, tz: timezone = BUSINESS_TZ) -> date:
    return as_utc(instant).astimezone(tz).date()


def month_range(month: int, year: int, tz: timezone = BUSINESS_TZ) -> tuple[datetime, datetime]:
    """``[start, end)`` covering every business day of the month."""
    first = date(year, month, 1)
    following = date(year + 1, 1, 1) if month == 12 else date(year, month + 1, 1)
    return day_start(first, tz), day_start(following, tz)


def working_days_in_month(month: int, year: int) -> int:
    """Monday-Friday count."""
    day = date(year, month, 1)
    count = 0
    while day.month == month:
        if day.weekday() < 5:
            count += 1
        day += timedelta(days=1)
    return count


def round_half_up(value: float | Decimal, places: str = "0.01") -> float:
    return float(Decimal(str(value)).quantize(Decimal(places), rounding=ROUND_HALF_UP))


def hours_between(start: datetime, end: datetime) -> float:
    """Elapsed hours rounded half-up to 2 decimals, from whole milliseconds."""
    ms = (as_utc(end) - as_utc(start)) // timedelta(milliseconds=1)
    return float((Decimal(ms) / _MS_PER_HOUR).quantize(_TWO_PLACES, rounding=ROUND_HALF_UP))


def format_clock(instant: datetime | None, tz: timezone = BUSINESS_TZ) -> str | None:
    """``hh:mm AM/PM`` in business time."""
    if instant is None:
        return None
    return as_utc(instant).astimezone(tz).strftime("%I:%M %p")


def format_hours(hours: float | None) -> str:
    """``4.5`` -> ``4h 30m``."""
    total_minutes = int(round((hours or 0) * 60))
    return f"{total_minutes // 60}h {total_minutes % 60}m"


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()
