"""
One-time normalisation of raw yearly summary rows.

Rows arrive from the simulation client as loosely typed mappings (camelCase
wire keys, occasionally missing or non-numeric values). They are converted
here, once, into strict YearlySummary records so the rest of the package can
assume well-typed floats.
"""

import numpy as np
from typing import Iterable, List, Mapping, Union

from .params import STAT_FIELDS, WIRE_KEYS, YearlySummary


def to_float(value, default: float = 0.0) -> float:
    """Coerce to a finite float; None, NaN, inf and junk become ``default``."""
    if isinstance(value, bool):
        return float(value)
    try:
        result = float(value)
    except (TypeError, ValueError):
        return default
    if not np.isfinite(result):
        return default
    return result


def clamp_failure_rate(value: float) -> float:
    """Failure rate is a percentage of paths; keep it within 0-100."""
    return float(np.clip(value, 0.0, 100.0))


def normalize_phase_name(value) -> str:
    if value is None:
        return 'UNKNOWN'
    name = str(value).strip().upper()
    return name or 'UNKNOWN'


def _lookup(row: Mapping, attr: str):
    """Read a field by wire key first, then by attribute name."""
    wire = WIRE_KEYS[attr]
    if wire in row:
        return row[wire]
    return row.get(attr)


def normalize_yearly_summary(row: Union[Mapping, YearlySummary]) -> YearlySummary:
    """
    Build a strict YearlySummary from a raw row.

    Missing or non-finite statistics become 0.0, the phase name is
    upper-cased and the failure rate is clamped to 0-100.
    """
    if isinstance(row, YearlySummary):
        row = {name: getattr(row, name) for name in ('phase_name', 'year') + STAT_FIELDS}
    if not isinstance(row, Mapping):
        raise TypeError(f"Expected a mapping or YearlySummary, got {type(row).__name__}")

    stats = {name: to_float(_lookup(row, name)) for name in STAT_FIELDS}
    stats['negative_capital_percentage'] = clamp_failure_rate(
        stats['negative_capital_percentage']
    )
    return YearlySummary(
        phase_name=normalize_phase_name(_lookup(row, 'phase_name')),
        year=int(to_float(_lookup(row, 'year'))),
        **stats,
    )


def normalize_yearly_summaries(rows: Iterable) -> List[YearlySummary]:
    """Normalise a whole run; order is preserved."""
    if rows is None:
        return []
    return [normalize_yearly_summary(row) for row in rows]
