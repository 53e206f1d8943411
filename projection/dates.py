"""
Calendar utilities for placing phases and months on the simulation timeline.

All dates are plain calendar dates (no time of day, no timezone). Parsing is
strict and fails soft: malformed input yields None instead of raising, so
callers can degrade to simpler behaviour.
"""

import re
from datetime import date, timedelta
from typing import Optional, Sequence, Union, Mapping

from dateutil.relativedelta import relativedelta

_ISO_DATE = re.compile(r'^\s*(\d{4})-(\d{2})-(\d{2})\s*$')

# Backend dates count days from this epoch
BACKEND_EPOCH = date(1900, 1, 1)


def parse_iso_date(value: str) -> Optional[date]:
    """
    Parse a strict YYYY-MM-DD string.

    Returns None on wrong shape, non-numeric parts, a month outside 1-12, a
    day outside 1-31, or a day the month does not have (e.g. 2025-02-30).
    """
    match = _ISO_DATE.match(str(value if value is not None else ''))
    if match is None:
        return None
    year, month, day = (int(part) for part in match.groups())
    if not 1 <= month <= 12 or not 1 <= day <= 31:
        return None
    try:
        return date(year, month, day)
    except ValueError:
        return None


def to_iso_date(d: date) -> str:
    """Format a date as YYYY-MM-DD."""
    return f'{d.year:04d}-{d.month:02d}-{d.day:02d}'


def add_months_clamped(d: date, months: int) -> date:
    """
    Add whole months, clamping to the last day of the target month.

    Jan 31 + 1 month gives Feb 28 (Feb 29 in leap years).
    """
    return d + relativedelta(months=int(months))


def format_year_month(year: int, month: int) -> str:
    """YYYY-MM label used as the key of a monthly point."""
    return f'{int(year):04d}-{int(month):02d}'


def months_between(start_year: int, start_month: int, year: int, month: int) -> int:
    """Signed number of calendar months from (start_year, start_month)."""
    return (year - start_year) * 12 + (month - start_month)


def get_phase_start_month(
    start_date_iso: str,
    phase_durations_in_months: Sequence[int],
    phase_index: int,
) -> Optional[int]:
    """Calendar month (1-12) in which phase ``phase_index`` (0-based) starts."""
    start = parse_iso_date(start_date_iso)
    if start is None:
        return None
    idx = max(0, int(phase_index))
    offset = sum(int(m or 0) for m in phase_durations_in_months[:idx])
    return add_months_clamped(start, offset).month


# =============================================================================
# Backend Date Shapes
# =============================================================================

def epoch_day_to_iso_date(epoch_day: float) -> Optional[str]:
    """Convert a backend epoch day (days since 1900-01-01) to YYYY-MM-DD."""
    try:
        days = int(epoch_day)
    except (TypeError, ValueError, OverflowError):
        return None
    try:
        return to_iso_date(BACKEND_EPOCH + timedelta(days=days))
    except OverflowError:
        return None


def to_iso_date_string(value: Union[str, Mapping, None]) -> Optional[str]:
    """
    Extract an ISO date from the shapes the backend echoes back.

    Accepts a plain string, ``{"date": "..."}``, a LocalDate-like
    ``{"year", "month", "dayOfMonth"}`` mapping, or ``{"epochDay": n}``.
    """
    if not value:
        return None
    if isinstance(value, str):
        return value
    if not isinstance(value, Mapping):
        return None
    if isinstance(value.get('date'), str):
        return value['date']

    try:
        y, m, d = int(value['year']), int(value['month']), int(value['dayOfMonth'])
    except (KeyError, TypeError, ValueError):
        pass
    else:
        if y > 0 and 1 <= m <= 12 and 1 <= d <= 31:
            return f'{y}-{m:02d}-{d:02d}'

    if 'epochDay' in value:
        return epoch_day_to_iso_date(value['epochDay'])
    return None
