from __future__ import annotations

from datetime import date
from typing import Optional

from ..core.constants import MAX_PAGE_LIMIT, PAYROLL_MAX_YEAR, PAYROLL_MIN_YEAR
from ..core.exceptions import ValidationError
from .datetime_utils import parse_iso_date


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_length(value: str, field_name: str, min_len: int, max_len: int) -> str:
    value = (value or "").strip()
    if not min_len <= len(value) <= max_len:
        raise ValidationError(f"{field_name} must be between {min_len} and {max_len} characters")
    return value


def optional_max_length(value: Optional[str], field_name: str, max_len: int) -> Optional[str]:
    value = (value or "").strip()
    if len(value) > max_len:
        raise ValidationError(f"{field_name} cannot exceed {max_len} characters")
    return value or None


def require_int(value, field_name: str, *, minimum: int, maximum: int) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a whole number")
    if not minimum <= number <= maximum:
        raise ValidationError(f"{field_name} must be between {minimum} and {maximum}")
    return number


def require_month(value) -> int:
    return require_int(value, "Month", minimum=1, maximum=12)


def require_year(value) -> int:
    return require_int(value, "Year", minimum=PAYROLL_MIN_YEAR, maximum=PAYROLL_MAX_YEAR)


def paging(page, limit, *, default_limit: int) -> tuple[int, int]:
    """Normalize ``page``/``limit`` query values."""
    page_n = require_int(page if page not in (None, "") else 1, "Page", minimum=1, maximum=10**6)
    limit_n = require_int(limit if limit not in (None, "") else default_limit, "Limit", minimum=1, maximum=MAX_PAGE_LIMIT)
    return page_n, limit_n


def optional_date(value: Optional[str], field_name: str) -> Optional[date]:
    v = (value or "").strip()
    if not v:
        return None
    try:
        return parse_iso_date(v)
    except ValueError:
        raise ValidationError(f"{field_name} must be a date (YYYY-MM-DD)")


def pagination_block(*, page: int, limit: int, total: int) -> dict:
    total_pages = (total + limit - 1) // limit if limit else 0
    return {
        "current_page": page,
        "total_pages": total_pages,
        "total_records": total,
        "limit": limit,
        "has_next_page": page * limit < total,
        "has_prev_page": page > 1,
    }
