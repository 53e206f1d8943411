"""
Core module for monthly projection reconstruction.

This module turns sparse yearly Monte Carlo summaries into chart-ready series:
- Record and parameter dataclasses (params.py)
- Calendar utilities (dates.py)
- Yearly-to-monthly interpolation with the failure-rate correction (interpolation.py)
- Phase blocks and cross-phase stitching (blocks.py)
- Real vs nominal projection (inflation.py)
- Stacked percentile bands (bands.py)
- Failure table and CSV export (summaries.py)
- End-to-end pipeline (pipeline.py)
"""

# Field tables
from .params import STAT_FIELDS, MONETARY_FIELDS, WIRE_KEYS

# Records and parameters
from .params import (
    PhaseType,
    ViewMode,
    InterpolationParams,
    ProjectionParams,
    YearlySummary,
    MonthlySummary,
    TimelineContext,
    PhaseBlock,
    ResolvedBlock,
    PhaseGroup,
    ProjectedMonth,
    BandValues,
    BandRecord,
    ProjectionResult,
)

# Calendar
from .dates import (
    parse_iso_date,
    to_iso_date,
    add_months_clamped,
    format_year_month,
    months_between,
    get_phase_start_month,
    epoch_day_to_iso_date,
    to_iso_date_string,
)

# Normalisation
from .normalize import (
    to_float,
    clamp_failure_rate,
    normalize_yearly_summary,
    normalize_yearly_summaries,
)

# Interpolation
from .interpolation import (
    PhaseRange,
    apply_failure_floor,
    transform_yearly_to_monthly,
)

# Phase blocks
from .blocks import (
    StitchCarry,
    build_phase_blocks,
    initial_deposit_anchor,
    select_anchor,
    stitch_block,
    resolve_phase_blocks,
    group_contiguous_phases,
)

# Real vs nominal
from .inflation import (
    inflation_index,
    is_real_view_available,
    deflate,
    project_real_values,
)

# Bands
from .bands import (
    band_values,
    build_band_record,
    build_band_series,
)

# Tabular views
from .summaries import (
    STAT_LABELS,
    FailureCase,
    failed_cases_summary,
    summaries_to_frame,
    export_statistics_csv,
)

# Pipeline
from .pipeline import (
    build_projection,
    context_from_bundle,
)

__all__ = [
    # Field tables
    'STAT_FIELDS',
    'MONETARY_FIELDS',
    'WIRE_KEYS',
    # Records and parameters
    'PhaseType',
    'ViewMode',
    'InterpolationParams',
    'ProjectionParams',
    'YearlySummary',
    'MonthlySummary',
    'TimelineContext',
    'PhaseBlock',
    'ResolvedBlock',
    'PhaseGroup',
    'ProjectedMonth',
    'BandValues',
    'BandRecord',
    'ProjectionResult',
    # Calendar
    'parse_iso_date',
    'to_iso_date',
    'add_months_clamped',
    'format_year_month',
    'months_between',
    'get_phase_start_month',
    'epoch_day_to_iso_date',
    'to_iso_date_string',
    # Normalisation
    'to_float',
    'clamp_failure_rate',
    'normalize_yearly_summary',
    'normalize_yearly_summaries',
    # Interpolation
    'PhaseRange',
    'apply_failure_floor',
    'transform_yearly_to_monthly',
    # Phase blocks
    'StitchCarry',
    'build_phase_blocks',
    'initial_deposit_anchor',
    'select_anchor',
    'stitch_block',
    'resolve_phase_blocks',
    'group_contiguous_phases',
    # Real vs nominal
    'inflation_index',
    'is_real_view_available',
    'deflate',
    'project_real_values',
    # Bands
    'band_values',
    'build_band_record',
    'build_band_series',
    # Tabular views
    'STAT_LABELS',
    'FailureCase',
    'failed_cases_summary',
    'summaries_to_frame',
    'export_statistics_csv',
    # Pipeline
    'build_projection',
    'context_from_bundle',
]
