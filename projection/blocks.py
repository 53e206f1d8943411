"""
Phase block resolution and cross-phase stitching.

The simulation request is a sequence of phases (type + duration in months).
Consecutive phases of the same type are merged into blocks, each block is
placed on the calendar, and blocks are interpolated one after another so that
every block starts from where the previous one left off.

Stitching is a fold: each step receives an immutable carry (the previous
block's last yearly row and its monthly index) and returns the resolved block
together with the carry for the next step.
"""

import logging
from typing import Dict, Iterable, List, NamedTuple, Optional, Sequence, Tuple

from .params import (
    InterpolationParams,
    MonthlySummary,
    PhaseBlock,
    PhaseGroup,
    PhaseType,
    ResolvedBlock,
    YearlySummary,
)
from .dates import add_months_clamped, format_year_month, parse_iso_date, to_iso_date
from .normalize import normalize_yearly_summaries, to_float
from .interpolation import PhaseRange, transform_yearly_to_monthly

logger = logging.getLogger(__name__)


class StitchCarry(NamedTuple):
    """State handed from one block to the next while stitching."""
    last_yearly: Optional[YearlySummary]
    monthly_index: Dict[str, MonthlySummary]


EMPTY_CARRY = StitchCarry(last_yearly=None, monthly_index={})


# =============================================================================
# Block Construction
# =============================================================================

def build_phase_blocks(
    phase_types: Sequence,
    phase_durations_in_months: Sequence,
    start_date_iso: str,
) -> List[PhaseBlock]:
    """
    Merge consecutive same-type phases and place the blocks on the calendar.

    Args:
        phase_types: Phase types in request order (PhaseType or names)
        phase_durations_in_months: Duration of each phase, same order
        start_date_iso: Simulation start date (YYYY-MM-DD)

    Returns:
        Contiguous PhaseBlock list; empty when the start date does not parse
        or a phase type is unknown
    """
    start = parse_iso_date(start_date_iso)
    if start is None:
        logger.debug("Start date %r does not parse; no phase blocks", start_date_iso)
        return []

    # [type, start offset, end offset, first index, last index]
    merged: List[list] = []
    offset = 0
    for index, (raw_type, raw_duration) in enumerate(
        zip(phase_types, phase_durations_in_months), start=1
    ):
        try:
            phase_type = PhaseType.parse(raw_type)
        except ValueError:
            logger.debug("Phase #%d has unknown type %r; no phase blocks", index, raw_type)
            return []
        duration = max(0, int(to_float(raw_duration)))
        if merged and merged[-1][0] is phase_type:
            merged[-1][2] += duration
            merged[-1][4] = index
        else:
            merged.append([phase_type, offset, offset + duration, index, index])
        offset += duration

    return [
        PhaseBlock(
            phase_type=phase_type,
            start_offset_months=start_offset,
            end_offset_months=end_offset,
            first_phase_index=first,
            last_phase_index=last,
            start_date=to_iso_date(add_months_clamped(start, start_offset)),
            end_date=to_iso_date(add_months_clamped(start, end_offset)),
        )
        for phase_type, start_offset, end_offset, first, last in merged
    ]


# =============================================================================
# Anchors
# =============================================================================

def initial_deposit_anchor(deposit: float, phase_name: str, year: int) -> YearlySummary:
    """Flat snapshot of the initial deposit: no spread, growth or failures."""
    amount = to_float(deposit)
    return YearlySummary(
        phase_name=phase_name,
        year=year,
        average_capital=amount,
        median_capital=amount,
        min_capital=amount,
        max_capital=amount,
        std_dev_capital=0.0,
        cumulative_growth_rate=0.0,
        quantile5=amount,
        quantile25=amount,
        quantile75=amount,
        quantile95=amount,
        var=amount,
        cvar=amount,
        negative_capital_percentage=0.0,
    )


def select_anchor(
    block: PhaseBlock,
    carry: StitchCarry,
    is_first: bool,
    first_phase_initial_deposit: Optional[float] = None,
) -> Optional[YearlySummary]:
    """
    Pick the time-zero value of a block.

    The first DEPOSIT block starts from the initial deposit. Any other block
    starts from the previous block's month at this block's start, falling
    back to the previous block's last yearly row.
    """
    start = parse_iso_date(block.start_date)
    phase_name = block.phase_type.value

    if is_first:
        if block.phase_type is PhaseType.DEPOSIT and first_phase_initial_deposit is not None:
            return initial_deposit_anchor(first_phase_initial_deposit, phase_name, start.year)
        return None

    monthly = carry.monthly_index.get(format_year_month(start.year, start.month))
    if monthly is not None:
        return monthly.with_phase(phase_name)
    if carry.last_yearly is not None:
        return carry.last_yearly.with_phase(phase_name)
    return None


# =============================================================================
# Stitching
# =============================================================================

def rows_for_block(block: PhaseBlock, rows: Iterable[YearlySummary]) -> List[YearlySummary]:
    """Rows of the block's type within [start year, end year + 1]."""
    start_year = int(block.start_date[:4])
    end_year = int(block.end_date[:4])
    return [
        r for r in rows
        if r.phase_name == block.phase_type.value and start_year <= r.year <= end_year + 1
    ]


def _end_month_start(block: PhaseBlock) -> str:
    """First day of the month the block ends in; that month belongs to the next block."""
    return block.end_date[:8] + '01'


def _boundary_month(
    block: PhaseBlock,
    rows: List[YearlySummary],
    anchor: Optional[YearlySummary],
    params: InterpolationParams,
) -> Optional[MonthlySummary]:
    """The block's value in the month the next block starts in."""
    end = parse_iso_date(_end_month_start(block))
    key = format_year_month(end.year, end.month)
    extended = transform_yearly_to_monthly(
        rows,
        phase_range=PhaseRange(block.start_date, to_iso_date(add_months_clamped(end, 1))),
        start_anchor=anchor,
        params=params,
    )
    for month in reversed(extended):
        if month.year_month == key:
            return month
    return None


def stitch_block(
    block: PhaseBlock,
    rows: Sequence[YearlySummary],
    carry: StitchCarry,
    is_first: bool,
    first_phase_initial_deposit: Optional[float] = None,
    params: InterpolationParams = None,
) -> Tuple[ResolvedBlock, StitchCarry]:
    """
    Interpolate one block and produce the carry for the next one.

    Args:
        block: Block to resolve
        rows: All normalised yearly rows of the run
        carry: Carry from the previous block (EMPTY_CARRY for the first)
        is_first: True for the first block of the request
        first_phase_initial_deposit: Initial deposit of phase #1
        params: Interpolation parameters

    Returns:
        Tuple of (resolved block, carry for the next block)
    """
    if params is None:
        params = InterpolationParams()

    block_rows = rows_for_block(block, rows)
    anchor = select_anchor(block, carry, is_first, first_phase_initial_deposit)

    monthly = transform_yearly_to_monthly(
        block_rows,
        phase_range=PhaseRange(block.start_date, _end_month_start(block)),
        start_anchor=anchor,
        params=params,
    )
    index = {m.year_month: m for m in monthly}

    end = parse_iso_date(_end_month_start(block))
    boundary_key = format_year_month(end.year, end.month)
    if block_rows and boundary_key not in index:
        boundary = _boundary_month(block, block_rows, anchor, params)
        if boundary is not None:
            index[boundary_key] = boundary

    end_year = int(block.end_date[:4])
    within = [r for r in block_rows if r.year <= end_year] or block_rows
    last_yearly = max(within, key=lambda r: r.year) if within else carry.last_yearly

    resolved = ResolvedBlock(
        block=block,
        anchor=anchor,
        monthly=tuple(monthly),
        monthly_index=index,
    )
    return resolved, StitchCarry(last_yearly=last_yearly, monthly_index=index)


def resolve_phase_blocks(
    yearly: Iterable,
    phase_types: Sequence,
    phase_durations_in_months: Sequence,
    start_date_iso: str,
    first_phase_initial_deposit: Optional[float] = None,
    params: InterpolationParams = None,
) -> List[ResolvedBlock]:
    """
    Resolve, anchor and interpolate every block of a simulation request.

    Returns an empty list when the start date does not parse; callers then
    fall back to group_contiguous_phases without cross-block continuity.
    """
    if params is None:
        params = InterpolationParams()

    blocks = build_phase_blocks(phase_types, phase_durations_in_months, start_date_iso)
    if not blocks:
        return []

    rows = normalize_yearly_summaries(yearly)

    resolved: List[ResolvedBlock] = []
    carry = EMPTY_CARRY
    for position, block in enumerate(blocks):
        result, carry = stitch_block(
            block,
            rows,
            carry,
            is_first=position == 0,
            first_phase_initial_deposit=first_phase_initial_deposit,
            params=params,
        )
        resolved.append(result)
    return resolved


# =============================================================================
# Fallback Grouping
# =============================================================================

def group_contiguous_phases(yearly: Iterable) -> List[PhaseGroup]:
    """
    Group rows into runs of identical phase name, in input order.

    Used when the timeline cannot be resolved (e.g. missing start date):
    each run is charted on its own, without continuity between runs.
    """
    rows = normalize_yearly_summaries(yearly)
    groups: List[PhaseGroup] = []
    current: List[YearlySummary] = []
    for row in rows:
        if current and row.phase_name != current[-1].phase_name:
            groups.append(PhaseGroup(current[-1].phase_name, len(groups) + 1, tuple(current)))
            current = []
        current.append(row)
    if current:
        groups.append(PhaseGroup(current[-1].phase_name, len(groups) + 1, tuple(current)))
    return groups
