"""
Record and parameter dataclasses for monthly projection reconstruction.

This module holds every record type that flows through the projection code
(yearly rows, interpolated months, phase blocks, band records) together with
the configuration dataclasses, consolidated into a single source of truth.
"""

import numpy as np
from dataclasses import dataclass, field, fields
from typing import Optional, List, Dict, Tuple
from enum import Enum


# =============================================================================
# Field Tables
# =============================================================================

# Numeric statistics carried by every summary row, in wire order.
STAT_FIELDS: Tuple[str, ...] = (
    'average_capital',
    'median_capital',
    'min_capital',
    'max_capital',
    'std_dev_capital',
    'cumulative_growth_rate',
    'quantile5',
    'quantile25',
    'quantile75',
    'quantile95',
    'var',
    'cvar',
    'negative_capital_percentage',
)

# Fields expressed in currency units (deflated in the real view)
MONETARY_FIELDS: Tuple[str, ...] = (
    'average_capital',
    'median_capital',
    'min_capital',
    'max_capital',
    'std_dev_capital',
    'quantile5',
    'quantile25',
    'quantile75',
    'quantile95',
    'var',
    'cvar',
)

# snake_case attribute -> camelCase wire key
WIRE_KEYS: Dict[str, str] = {
    'phase_name': 'phaseName',
    'year': 'year',
    'month': 'month',
    'year_month': 'yearMonth',
    'average_capital': 'averageCapital',
    'median_capital': 'medianCapital',
    'min_capital': 'minCapital',
    'max_capital': 'maxCapital',
    'std_dev_capital': 'stdDevCapital',
    'cumulative_growth_rate': 'cumulativeGrowthRate',
    'quantile5': 'quantile5',
    'quantile25': 'quantile25',
    'quantile75': 'quantile75',
    'quantile95': 'quantile95',
    'var': 'var',
    'cvar': 'cvar',
    'negative_capital_percentage': 'negativeCapitalPercentage',
}


# =============================================================================
# Enums
# =============================================================================

class PhaseType(Enum):
    """Stage of the simulated financial plan."""
    DEPOSIT = "DEPOSIT"
    PASSIVE = "PASSIVE"
    WITHDRAW = "WITHDRAW"

    @classmethod
    def parse(cls, value) -> 'PhaseType':
        """Case-insensitive lookup; raises ValueError for unknown names."""
        if isinstance(value, cls):
            return value
        name = str(value).strip().upper()
        try:
            return cls(name)
        except ValueError:
            raise ValueError(f"Unknown phase type: {value!r}") from None

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


class ViewMode(Enum):
    """Which money perspective a chart shows."""
    NOMINAL = "nominal"
    REAL = "real"


# =============================================================================
# Configuration Parameters
# =============================================================================

@dataclass(frozen=True)
class InterpolationParams:
    """Parameters for the yearly-to-monthly interpolator."""
    # Fraction of a percentile's rank at which the failure-rate blend starts.
    # 0.5 means quantile25 starts trending to zero once 12.5% of paths failed.
    percentile_ramp_start: float = 0.5
    # Percentile rank of each corrected field
    percentile_ranks: Tuple[Tuple[str, float], ...] = (
        ('quantile5', 5.0),
        ('quantile25', 25.0),
        ('median_capital', 50.0),
        ('quantile75', 75.0),
        ('quantile95', 95.0),
    )


@dataclass(frozen=True)
class ProjectionParams:
    """Parameters for the full projection pipeline."""
    real_view_tolerance: float = 1e-12   # |factor - 1| below this = no inflation
    interpolation: InterpolationParams = field(default_factory=InterpolationParams)


# =============================================================================
# Summary Records
# =============================================================================

@dataclass(frozen=True)
class YearlySummary:
    """One row of Monte Carlo output for a phase and calendar year."""
    phase_name: str
    year: int
    average_capital: float = 0.0
    median_capital: float = 0.0
    min_capital: float = 0.0
    max_capital: float = 0.0
    std_dev_capital: float = 0.0
    cumulative_growth_rate: float = 0.0
    quantile5: float = 0.0
    quantile25: float = 0.0
    quantile75: float = 0.0
    quantile95: float = 0.0
    var: float = 0.0
    cvar: float = 0.0
    negative_capital_percentage: float = 0.0   # 0-100, share of failed paths

    def stat_vector(self) -> np.ndarray:
        """Statistics as a float array ordered like STAT_FIELDS."""
        return np.array([getattr(self, name) for name in STAT_FIELDS], dtype=float)

    def with_phase(self, phase_name: str) -> 'YearlySummary':
        """Copy relabelled with another phase name (used for anchors)."""
        return YearlySummary(
            phase_name=phase_name,
            year=self.year,
            **{name: getattr(self, name) for name in STAT_FIELDS},
        )

    def to_wire(self) -> dict:
        """camelCase mapping, as exchanged with the simulation backend."""
        return {WIRE_KEYS[f.name]: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class MonthlySummary(YearlySummary):
    """Interpolated monthly point; exists only for charting."""
    month: int = 1            # 1-12
    year_month: str = ''      # YYYY-MM

    @classmethod
    def from_vector(
        cls,
        phase_name: str,
        year: int,
        month: int,
        values: np.ndarray,
    ) -> 'MonthlySummary':
        stats = {name: float(v) for name, v in zip(STAT_FIELDS, values)}
        return cls(
            phase_name=phase_name,
            year=year,
            month=month,
            year_month=f'{year:04d}-{month:02d}',
            **stats,
        )


# =============================================================================
# Timeline Records
# =============================================================================

@dataclass(frozen=True)
class TimelineContext:
    """
    Enough of the simulation request to place phases on a calendar.

    Mirrors what the simulation client knows after a run completes: the start
    date, the requested phase sequence and the assumptions needed for
    anchoring and deflation.
    """
    start_date: str                                  # YYYY-MM-DD
    phase_types: Tuple[PhaseType, ...] = ()
    phase_durations_in_months: Tuple[int, ...] = ()
    first_phase_initial_deposit: Optional[float] = None
    inflation_factor_per_year: Optional[float] = None  # e.g. 1.02


@dataclass(frozen=True)
class PhaseBlock:
    """Consecutive same-type phases merged into one contiguous block."""
    phase_type: PhaseType
    start_offset_months: int
    end_offset_months: int
    first_phase_index: int     # 1-based, inclusive
    last_phase_index: int      # 1-based, inclusive
    start_date: str            # YYYY-MM-DD
    end_date: str              # YYYY-MM-DD, exclusive

    @property
    def duration_months(self) -> int:
        return self.end_offset_months - self.start_offset_months

    @property
    def label(self) -> str:
        name = self.phase_type.display_name
        if self.first_phase_index == self.last_phase_index:
            return f'{name} - Phase #{self.first_phase_index}'
        return f'{name} - Phases #{self.first_phase_index}-{self.last_phase_index}'


@dataclass(frozen=True)
class ResolvedBlock:
    """A phase block with its anchor and interpolated monthly output."""
    block: PhaseBlock
    anchor: Optional[YearlySummary]
    monthly: Tuple[MonthlySummary, ...]
    # year_month -> month, including the month the next block starts in
    monthly_index: Dict[str, MonthlySummary] = field(default_factory=dict, compare=False)

    @property
    def label(self) -> str:
        return self.block.label


@dataclass(frozen=True)
class PhaseGroup:
    """Fallback grouping: a run of yearly rows sharing one phase name."""
    name: str
    index: int                 # 1-based position of the run
    rows: Tuple[YearlySummary, ...]

    @property
    def label(self) -> str:
        return f'{self.name.capitalize()} - Phase #{self.index}'


# =============================================================================
# Projection Records
# =============================================================================

@dataclass(frozen=True)
class ProjectedMonth:
    """A monthly point with its inflation index and deflated counterpart."""
    nominal: MonthlySummary
    inflation_index: float
    real: MonthlySummary

    @property
    def year_month(self) -> str:
        return self.nominal.year_month


@dataclass(frozen=True)
class BandValues:
    """Stacked-area deltas for the 5-95 and 25-75 percentile bands."""
    lower5: float
    band5_95: float
    lower25: float
    band25_75: float
    median: float

    def quantiles(self) -> Tuple[float, float, float, float, float]:
        """Recover (q5, q25, median, q75, q95) from the stacked deltas."""
        return (
            self.lower5,
            self.lower25,
            self.median,
            self.lower25 + self.band25_75,
            self.lower5 + self.band5_95,
        )


@dataclass(frozen=True)
class BandRecord:
    """
    One chart point carrying both views and the active mode.

    The renderer is stateless, so the mode travels with the data.
    """
    year_month: str
    phase_name: str
    mode: ViewMode
    nominal: BandValues
    real: BandValues
    inflation_index: float
    failure_rate: float

    @property
    def active(self) -> BandValues:
        if self.mode is ViewMode.REAL:
            return self.real
        return self.nominal


@dataclass(frozen=True)
class ProjectionResult:
    """Everything the chart layer needs for one completed run."""
    blocks: List[ResolvedBlock]
    groups: List[PhaseGroup]
    monthly: List[MonthlySummary]
    projected: List[ProjectedMonth]
    bands: List[BandRecord]
    real_view_available: bool
    mode: ViewMode

    @property
    def stitched(self) -> bool:
        """True when phases were stitched into blocks with continuity."""
        return len(self.blocks) > 0
