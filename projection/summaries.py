"""
Tabular views of summary statistics: failure table and CSV export.

These consume yearly or monthly records directly, without the real/nominal
projection or band reshaping.
"""

import pandas as pd
from dataclasses import dataclass, fields
from typing import Iterable, List

from .params import WIRE_KEYS, YearlySummary
from .normalize import normalize_yearly_summaries

# Display label per statistic, in chart order
STAT_LABELS = {
    'average_capital': 'Average Capital',
    'median_capital': 'Median Capital',
    'min_capital': 'Minimum Capital',
    'max_capital': 'Maximum Capital',
    'std_dev_capital': 'Std. Dev. Capital',
    'cumulative_growth_rate': 'Cumulative Growth Rate',
    'quantile5': '5th Quantile',
    'quantile25': '25th Quantile',
    'quantile75': '75th Quantile',
    'quantile95': '95th Quantile',
    'var': 'Value at Risk (VaR)',
    'cvar': 'Conditional VaR (CVaR)',
    'negative_capital_percentage': 'Negative Capital Percentage',
}


@dataclass(frozen=True)
class FailureCase:
    """A year in which some simulated paths ran out of capital."""
    year: int
    failure_rate: float    # percent
    success_rate: float    # percent


def failed_cases_summary(rows: Iterable) -> List[FailureCase]:
    """Years with a non-zero failure rate, in input order."""
    return [
        FailureCase(
            year=row.year,
            failure_rate=row.negative_capital_percentage,
            success_rate=100.0 - row.negative_capital_percentage,
        )
        for row in normalize_yearly_summaries(rows)
        if row.negative_capital_percentage > 0
    ]


def summaries_to_frame(rows: Iterable[YearlySummary]) -> pd.DataFrame:
    """
    One DataFrame row per record, columns named by their wire keys.

    Monthly records add ``month`` and ``yearMonth`` columns.
    """
    rows = list(rows)
    if not rows:
        return pd.DataFrame(columns=[WIRE_KEYS[f.name] for f in fields(YearlySummary)])
    columns = [WIRE_KEYS[f.name] for f in fields(rows[0])]
    return pd.DataFrame([r.to_wire() for r in rows], columns=columns)


def export_statistics_csv(rows: Iterable[YearlySummary], path_or_buf=None):
    """
    Write records as CSV (header row from the wire keys).

    Returns the CSV text when ``path_or_buf`` is None, like DataFrame.to_csv.
    """
    return summaries_to_frame(rows).to_csv(path_or_buf, index=False)
