"""
Real vs nominal money perspective.

The simulation compounds inflation once per completed year, so the inflation
index only steps at 12-month boundaries from the simulation start. Real
values are nominal values divided by that index; percentages are never
deflated.
"""

import numpy as np
from dataclasses import replace
from typing import Iterable, List, Optional

from .params import MONETARY_FIELDS, MonthlySummary, ProjectedMonth, YearlySummary
from .dates import months_between, parse_iso_date


def _is_finite_number(value) -> bool:
    if isinstance(value, bool):
        return False
    try:
        return bool(np.isfinite(float(value)))
    except (TypeError, ValueError):
        return False


def inflation_index(
    year: float,
    month: float,
    start_year: float,
    start_month: float,
    factor: float,
) -> float:
    """
    Cumulative inflation since the simulation start.

    Returns factor ** completed_years, where completed years are whole
    12-month periods since (start_year, start_month). Returns 1.0 when the
    factor is not a finite positive number or any calendar input is not
    finite; months before the start count as zero.
    """
    if not _is_finite_number(factor) or float(factor) <= 0:
        return 1.0
    if not all(_is_finite_number(v) for v in (year, month, start_year, start_month)):
        return 1.0

    elapsed = months_between(int(start_year), int(start_month), int(year), int(month))
    completed_years = max(0, elapsed) // 12
    return float(np.power(float(factor), completed_years))


def is_real_view_available(
    start_date_iso: Optional[str],
    factor: Optional[float],
    tolerance: float = 1e-12,
) -> bool:
    """Real view needs a parseable start date and a factor meaningfully != 1."""
    if parse_iso_date(start_date_iso) is None:
        return False
    if not _is_finite_number(factor) or float(factor) <= 0:
        return False
    return abs(float(factor) - 1.0) > tolerance


def deflate(record: YearlySummary, index: float) -> YearlySummary:
    """
    Real counterpart of a record: every monetary field divided by ``index``.

    Failure rate and growth rate are percentages and stay as they are.
    """
    if not _is_finite_number(index) or float(index) <= 0:
        index = 1.0
    return replace(record, **{name: getattr(record, name) / index for name in MONETARY_FIELDS})


def project_real_values(
    monthly: Iterable[MonthlySummary],
    start_date_iso: Optional[str],
    factor: Optional[float],
    tolerance: float = 1e-12,
) -> List[ProjectedMonth]:
    """
    Attach the inflation index and deflated values to every month.

    When the real view is unavailable the index is 1 everywhere and the real
    record equals the nominal one.
    """
    start = parse_iso_date(start_date_iso)
    available = is_real_view_available(start_date_iso, factor, tolerance)

    projected = []
    for month in monthly:
        if available:
            index = inflation_index(month.year, month.month, start.year, start.month, factor)
        else:
            index = 1.0
        projected.append(ProjectedMonth(
            nominal=month,
            inflation_index=index,
            real=deflate(month, index) if index != 1.0 else month,
        ))
    return projected
