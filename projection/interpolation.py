"""
Yearly-to-monthly interpolation of Monte Carlo summary statistics.

The simulation reports one summary row per phase and calendar year. Charts
want a smooth monthly trajectory, so each phase is expanded to monthly points
by linear interpolation between consecutive yearly rows:

- Without an anchor, row Y is the value at January of Y; month m of year Y
  sits at t = (m-1)/12 between rows Y and Y+1. A year with no Y+1 row repeats
  row Y for its remaining months.
- With an anchor, the anchor is the value at the first emitted month and the
  first (possibly partial) year moves toward the first reported row, reaching
  it at that year's last emitted month. Each later row is the value reached
  at the end of its year, so month m of year Y sits at t = m/12 between rows
  Y-1 and Y. Past the last row the last value is repeated.

Every emitted month then goes through the failure-rate consistency correction
so low percentiles reach zero exactly when the failure rate says they must.
"""

import numpy as np
from dataclasses import dataclass
from datetime import date
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from .params import (
    STAT_FIELDS,
    InterpolationParams,
    MonthlySummary,
    YearlySummary,
)
from .dates import parse_iso_date
from .normalize import normalize_yearly_summary

_FIELD_INDEX = {name: i for i, name in enumerate(STAT_FIELDS)}
_FAILURE_INDEX = _FIELD_INDEX['negative_capital_percentage']


@dataclass(frozen=True)
class PhaseRange:
    """Calendar range of a phase; months starting at or after the end are not emitted."""
    start_date_iso: str
    end_date_iso: Optional[str] = None


def lerp(a: np.ndarray, b: np.ndarray, t: float) -> np.ndarray:
    """Linear interpolation: t=0 gives a, t=1 gives b."""
    return a + (b - a) * t


def apply_failure_floor(values: np.ndarray, params: InterpolationParams = None) -> np.ndarray:
    """
    Reconcile percentile statistics with the failure rate.

    A failure rate of f% means the f-th percentile of capital is at or below
    zero, so every percentile of rank p <= f is set to 0. Percentiles whose
    rank is close to the failure rate are blended toward zero beforehand:
    with r = f / p the blend weight rises linearly from 0 at
    r = percentile_ramp_start to 1 at r = 1.

    Args:
        values: Statistics ordered like STAT_FIELDS
        params: Interpolation parameters (ramp start, corrected ranks)

    Returns:
        Corrected copy of ``values``
    """
    if params is None:
        params = InterpolationParams()

    out = np.array(values, dtype=float)
    failure = float(np.clip(out[_FAILURE_INDEX], 0.0, 100.0))
    out[_FAILURE_INDEX] = failure
    ramp = params.percentile_ramp_start

    for name, rank in params.percentile_ranks:
        idx = _FIELD_INDEX[name]
        ratio = failure / rank
        if ratio >= 1.0:
            out[idx] = 0.0
        elif ramp < 1.0 and ratio > ramp:
            weight = (ratio - ramp) / (1.0 - ramp)
            out[idx] = out[idx] * (1.0 - weight)
    return out


def _resolve_start_month(
    get_first_year_start_month: Optional[Callable[[str], Optional[int]]],
    phase_name: str,
) -> int:
    if get_first_year_start_month is None:
        return 1
    raw = get_first_year_start_month(phase_name)
    try:
        month = float(raw)
    except (TypeError, ValueError):
        return 1
    if not np.isfinite(month) or month == 0:
        return 1
    return int(min(12, max(1, int(month))))


def _group_by_phase(rows: Iterable[YearlySummary]) -> Dict[str, List[YearlySummary]]:
    groups: Dict[str, List[YearlySummary]] = {}
    for row in rows:
        groups.setdefault(row.phase_name, []).append(row)
    return groups


def _rows_by_year(rows: List[YearlySummary]) -> Dict[int, YearlySummary]:
    """Sort ascending by year; a later duplicate of the same year wins."""
    by_year: Dict[int, YearlySummary] = {}
    for row in sorted(rows, key=lambda r: r.year):
        by_year[row.year] = row
    return by_year


def _month_key(year: int, month: int) -> int:
    return year * 12 + (month - 1)


def end_month_key(end: date) -> int:
    """
    Key of the first month lying entirely at or after ``end``.

    A phase ending 2028-06-18 still covers June 1-17, so June is emitted;
    one ending 2028-06-01 stops after May.
    """
    key = _month_key(end.year, end.month)
    return key if end.day == 1 else key + 1


def _unanchored_months(
    by_year: Dict[int, YearlySummary],
    first_key: int,
    end_key: Optional[int],
) -> List[Tuple[int, int, np.ndarray]]:
    """Months for a phase without anchor: row Y sits at January of Y."""
    emitted = []
    for year in sorted(by_year):
        current = by_year[year].stat_vector()
        following = by_year.get(year + 1)
        for month in range(1, 13):
            key = _month_key(year, month)
            if key < first_key:
                continue
            if end_key is not None and key >= end_key:
                break
            if following is not None:
                values = lerp(current, following.stat_vector(), (month - 1) / 12)
            else:
                # no next year: boundary artifact, not a true plateau
                values = current
            emitted.append((year, month, values))
    return emitted


def _anchored_months(
    by_year: Dict[int, YearlySummary],
    anchor: YearlySummary,
    start_year: int,
    start_month: int,
    end_key: Optional[int],
) -> List[Tuple[int, int, np.ndarray]]:
    """Months for a phase anchored at its first emitted month."""
    years = sorted(by_year)
    later = [y for y in years if y >= start_year]
    target_year = later[0] if later else years[-1]

    first_key = _month_key(start_year, start_month)
    first_year_end = _month_key(start_year, 12)
    if end_key is not None:
        first_year_end = min(first_year_end, end_key - 1)

    # Knots as (month key, values); the target lands at the end of the
    # first year and each later row at the December of its (shifted) year.
    shift = start_year - target_year
    knots = [
        (first_key, anchor.stat_vector()),
        (max(first_key, first_year_end), by_year[target_year].stat_vector()),
    ]
    for year in years:
        if year > target_year:
            knots.append((_month_key(year + shift, 12), by_year[year].stat_vector()))

    last_key = end_key - 1 if end_key is not None else _month_key(knots[-1][0] // 12, 12)

    (anchor_key, anchor_values), (target_key, target_values) = knots[0], knots[1]
    first_span = target_key - anchor_key

    emitted = []
    k = 1
    for key in range(first_key, last_key + 1):
        if key <= target_key:
            t = 0.0 if first_span == 0 else (key - anchor_key) / first_span
            values = lerp(anchor_values, target_values, t)
        else:
            while k + 1 < len(knots) and knots[k + 1][0] <= key:
                k += 1
            lo_key, lo_values = knots[k]
            if k + 1 < len(knots) and knots[k + 1][0] - lo_key == 12:
                values = lerp(lo_values, knots[k + 1][1], (key - lo_key) / 12)
            else:
                # past the last row, or a missing year: repeat the last value
                values = lo_values
        year, month0 = divmod(key, 12)
        emitted.append((year, month0 + 1, values))
    return emitted


def transform_yearly_to_monthly(
    yearly: Iterable,
    get_first_year_start_month: Optional[Callable[[str], Optional[int]]] = None,
    phase_range: Optional[PhaseRange] = None,
    start_anchor: Optional[YearlySummary] = None,
    params: InterpolationParams = None,
) -> List[MonthlySummary]:
    """
    Expand yearly summaries into monthly summaries by linear interpolation.

    Example: with 2025 average capital 100 and 2026 average capital 112 (no
    anchor), Jan 2025 = 100, Feb 2025 = 101, ..., Dec 2025 = 111.

    Args:
        yearly: YearlySummary rows (or raw mappings) for one or more phases
        get_first_year_start_month: Returns the 1-12 start month of a phase's
            first year; ignored when ``phase_range`` is given
        phase_range: Calendar range; emission starts at its start month and
            stops before its end month
        start_anchor: Value at the first emitted month (previous block or
            initial deposit)
        params: Interpolation parameters

    Returns:
        MonthlySummary list, chronological within each phase
    """
    if params is None:
        params = InterpolationParams()

    rows = [r if isinstance(r, YearlySummary) else normalize_yearly_summary(r) for r in yearly]
    if not rows:
        return []

    range_start = parse_iso_date(phase_range.start_date_iso) if phase_range else None
    range_end = parse_iso_date(phase_range.end_date_iso) if phase_range and phase_range.end_date_iso else None
    end_key = end_month_key(range_end) if range_end else None

    result: List[MonthlySummary] = []
    for phase_name, phase_rows in _group_by_phase(rows).items():
        by_year = _rows_by_year(phase_rows)

        if range_start is not None:
            start_year, start_month = range_start.year, range_start.month
        else:
            start_year = min(by_year)
            start_month = _resolve_start_month(get_first_year_start_month, phase_name)

        if start_anchor is not None:
            months = _anchored_months(by_year, start_anchor, start_year, start_month, end_key)
        else:
            months = _unanchored_months(by_year, _month_key(start_year, start_month), end_key)

        for year, month, values in months:
            corrected = apply_failure_floor(values, params)
            result.append(MonthlySummary.from_vector(phase_name, year, month, corrected))

    return result
