"""
Stacked-band reshaping of percentile statistics.

Stacked area charts draw an invisible base series and stack a band height on
top of it, so each percentile band becomes a (lower, height) pair:
lower5 / band5_95 for the outer band and lower25 / band25_75 for the inner
band. Both money perspectives are kept on every record, with the active one
tagged so a stateless tooltip can pick the right numbers.
"""

from typing import Iterable, List

from .params import BandRecord, BandValues, ProjectedMonth, ViewMode, YearlySummary


def band_values(record: YearlySummary) -> BandValues:
    """Base + height pairs for the 5-95 and 25-75 bands of one record."""
    return BandValues(
        lower5=record.quantile5,
        band5_95=record.quantile95 - record.quantile5,
        lower25=record.quantile25,
        band25_75=record.quantile75 - record.quantile25,
        median=record.median_capital,
    )


def build_band_record(projected: ProjectedMonth, mode: ViewMode = ViewMode.NOMINAL) -> BandRecord:
    nominal = projected.nominal
    return BandRecord(
        year_month=nominal.year_month,
        phase_name=nominal.phase_name,
        mode=mode,
        nominal=band_values(nominal),
        real=band_values(projected.real),
        inflation_index=projected.inflation_index,
        failure_rate=nominal.negative_capital_percentage,
    )


def build_band_series(
    projected: Iterable[ProjectedMonth],
    mode: ViewMode = ViewMode.NOMINAL,
) -> List[BandRecord]:
    """Band records for a whole series, all tagged with the same mode."""
    return [build_band_record(p, mode) for p in projected]
