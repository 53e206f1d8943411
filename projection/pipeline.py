"""
End-to-end reconstruction of chart series for one completed simulation run.

Data flow: raw yearly rows -> normalise -> phase blocks and anchors ->
monthly interpolation -> inflation index and real values -> stacked bands.
"""

import logging
from typing import Iterable, List, Mapping

from .params import (
    MonthlySummary,
    PhaseType,
    ProjectionParams,
    ProjectionResult,
    TimelineContext,
    ViewMode,
)
from .normalize import normalize_yearly_summaries, to_float
from .dates import to_iso_date_string
from .blocks import group_contiguous_phases, resolve_phase_blocks
from .interpolation import transform_yearly_to_monthly
from .inflation import is_real_view_available, project_real_values
from .bands import build_band_series

logger = logging.getLogger(__name__)


def build_projection(
    yearly: Iterable,
    context: TimelineContext,
    mode: ViewMode = ViewMode.NOMINAL,
    params: ProjectionParams = None,
) -> ProjectionResult:
    """
    Build every chart series for a run.

    With a resolvable timeline the phases are stitched into blocks with
    continuity across block boundaries. Otherwise rows are grouped into runs
    of identical phase name and each run is interpolated on its own.

    Args:
        yearly: Raw yearly summary rows (mappings or YearlySummary)
        context: Start date, phase sequence and assumptions of the request
        mode: Requested money perspective; REAL silently falls back to
            NOMINAL when no real view is available
        params: Projection parameters

    Returns:
        ProjectionResult
    """
    if params is None:
        params = ProjectionParams()

    rows = normalize_yearly_summaries(yearly)

    blocks = resolve_phase_blocks(
        rows,
        context.phase_types,
        context.phase_durations_in_months,
        context.start_date,
        first_phase_initial_deposit=context.first_phase_initial_deposit,
        params=params.interpolation,
    )

    groups = []
    monthly: List[MonthlySummary] = []
    if blocks:
        for resolved in blocks:
            monthly.extend(resolved.monthly)
    else:
        logger.debug("No phase blocks (start date %r); grouping by phase", context.start_date)
        groups = group_contiguous_phases(rows)
        for group in groups:
            monthly.extend(transform_yearly_to_monthly(group.rows, params=params.interpolation))

    available = is_real_view_available(
        context.start_date,
        context.inflation_factor_per_year,
        params.real_view_tolerance,
    )
    if mode is ViewMode.REAL and not available:
        mode = ViewMode.NOMINAL

    projected = project_real_values(
        monthly,
        context.start_date,
        context.inflation_factor_per_year,
        params.real_view_tolerance,
    )

    return ProjectionResult(
        blocks=blocks,
        groups=groups,
        monthly=monthly,
        projected=projected,
        bands=build_band_series(projected, mode),
        real_view_available=available,
        mode=mode,
    )


def context_from_bundle(bundle: Mapping) -> TimelineContext:
    """
    Read a TimelineContext from a run bundle's camelCase fields.

    ``startDate`` may be any date shape the backend echoes back. Phase types
    that do not parse are kept as given.
    """
    raw_types = tuple(bundle.get('phaseTypes') or ())
    try:
        phase_types = tuple(PhaseType.parse(t) for t in raw_types)
    except ValueError:
        # left as given; the resolver then falls back to phase grouping
        logger.debug("Unknown phase type in %r", raw_types)
        phase_types = raw_types
    durations = tuple(int(to_float(d)) for d in bundle.get('phaseDurationsInMonths') or ())
    deposit = bundle.get('firstPhaseInitialDeposit')
    factor = bundle.get('inflationFactorPerYear')
    return TimelineContext(
        start_date=to_iso_date_string(bundle.get('startDate')) or '',
        phase_types=phase_types,
        phase_durations_in_months=durations,
        first_phase_initial_deposit=None if deposit is None else to_float(deposit),
        inflation_factor_per_year=None if factor is None else to_float(factor, default=1.0),
    )
