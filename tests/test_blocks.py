"""
Phase block resolution and stitching tests.

Validates:
1. Consecutive same-type phases merge into one block with combined labels
2. Block dates are clamped month offsets from the simulation start
3. An unparseable start date yields no blocks
4. The first DEPOSIT block is anchored at the initial deposit
5. Each later block starts from the previous block's value at the boundary
6. End-to-end: one two-year DEPOSIT phase gives 24 continuous months
7. Fallback grouping by contiguous phase name
"""

import pytest

from projection import (
    PhaseType,
    build_phase_blocks,
    group_contiguous_phases,
    initial_deposit_anchor,
    resolve_phase_blocks,
    select_anchor,
    stitch_block,
)
from projection.blocks import EMPTY_CARRY, StitchCarry, rows_for_block


@pytest.fixture(scope="module")
def end_to_end_blocks():
    """Start 2025-01-01, one 24-month DEPOSIT phase, 10000 initial deposit."""
    yearly = [
        {'phaseName': 'DEPOSIT', 'year': 2025, 'averageCapital': 10500},
        {'phaseName': 'DEPOSIT', 'year': 2026, 'averageCapital': 11000},
    ]
    return resolve_phase_blocks(
        yearly, ['DEPOSIT'], [24], '2025-01-01', first_phase_initial_deposit=10000
    )


@pytest.fixture(scope="module")
def two_block_run(make_row):
    """DEPOSIT for 2027 then WITHDRAW for 2028."""
    yearly = [
        make_row('DEPOSIT', 2027, 160),
        make_row('DEPOSIT', 2028, 220),
        make_row('WITHDRAW', 2028, 200),
        make_row('WITHDRAW', 2029, 180),
    ]
    return resolve_phase_blocks(
        yearly, ['DEPOSIT', 'WITHDRAW'], [12, 12], '2027-01-01', first_phase_initial_deposit=100
    )


# =============================================================================
# Block construction
# =============================================================================

def test_same_type_phases_merge():
    blocks = build_phase_blocks(['DEPOSIT', 'deposit', 'WITHDRAW'], [12, 6, 24], '2025-01-31')
    assert len(blocks) == 2

    deposit, withdraw = blocks
    assert deposit.phase_type is PhaseType.DEPOSIT
    assert (deposit.start_offset_months, deposit.end_offset_months) == (0, 18)
    assert deposit.label == 'Deposit - Phases #1-2'
    assert deposit.start_date == '2025-01-31'
    assert deposit.end_date == '2026-07-31'

    assert withdraw.label == 'Withdraw - Phase #3'
    assert withdraw.start_date == deposit.end_date, "blocks are contiguous"
    assert withdraw.duration_months == 24
    assert withdraw.end_date == '2028-07-31'


def test_block_dates_clamp_to_month_end():
    blocks = build_phase_blocks(['DEPOSIT', 'PASSIVE'], [1, 1], '2025-01-31')
    assert blocks[0].end_date == '2025-02-28'
    assert blocks[1].end_date == '2025-03-31'


def test_invalid_start_date_gives_no_blocks():
    assert build_phase_blocks(['DEPOSIT'], [12], '2025-02-30') == []
    assert build_phase_blocks(['DEPOSIT'], [12], '') == []
    assert resolve_phase_blocks([{'phaseName': 'DEPOSIT', 'year': 2025}], ['DEPOSIT'], [12], 'junk') == []


def test_unknown_phase_type_gives_no_blocks():
    assert build_phase_blocks(['SAVING'], [12], '2025-01-01') == []
    assert build_phase_blocks(['DEPOSIT', 'SAVING'], [12, 12], '2025-01-01') == [], \
        "one unknown phase type drops the whole timeline"


def test_rows_for_block_window(make_row):
    block = build_phase_blocks(['DEPOSIT'], [12], '2027-01-01')[0]
    rows = [make_row('DEPOSIT', y, 1) for y in range(2025, 2031)] + [make_row('WITHDRAW', 2027, 1)]
    selected = rows_for_block(block, rows)
    # block ends 2028-01-01: rows 2027..2029 are in reach
    assert [r.year for r in selected] == [2027, 2028, 2029]
    assert all(r.phase_name == 'DEPOSIT' for r in selected)


# =============================================================================
# Anchors
# =============================================================================

def test_initial_deposit_anchor():
    anchor = initial_deposit_anchor(10000, 'DEPOSIT', 2025)
    assert anchor.average_capital == 10000
    assert anchor.quantile5 == anchor.quantile95 == 10000
    assert anchor.var == anchor.cvar == 10000
    assert anchor.std_dev_capital == 0
    assert anchor.negative_capital_percentage == 0


def test_first_block_anchor_rules():
    deposit_block, withdraw_block = build_phase_blocks(['DEPOSIT', 'WITHDRAW'], [12, 12], '2025-01-01')
    assert select_anchor(deposit_block, EMPTY_CARRY, True, 5000).average_capital == 5000
    assert select_anchor(deposit_block, EMPTY_CARRY, True, None) is None

    first_withdraw = build_phase_blocks(['WITHDRAW'], [12], '2025-01-01')[0]
    assert select_anchor(first_withdraw, EMPTY_CARRY, True, 5000) is None, \
        "only a DEPOSIT block starts from the initial deposit"


def test_later_block_falls_back_to_last_yearly(make_row):
    _, withdraw_block = build_phase_blocks(['DEPOSIT', 'WITHDRAW'], [12, 12], '2025-01-01')
    carry = StitchCarry(last_yearly=make_row('DEPOSIT', 2025, 777), monthly_index={})
    anchor = select_anchor(withdraw_block, carry, False)
    assert anchor.average_capital == 777
    assert anchor.phase_name == 'WITHDRAW', "anchors are relabelled to the block's phase"
    assert select_anchor(withdraw_block, EMPTY_CARRY, False) is None


# =============================================================================
# Stitching
# =============================================================================

def test_end_to_end_scenario(end_to_end_blocks):
    assert len(end_to_end_blocks) == 1
    monthly = end_to_end_blocks[0].monthly
    assert len(monthly) == 24
    assert monthly[0].year_month == '2025-01'
    assert monthly[-1].year_month == '2026-12'

    by_ym = {m.year_month: m.average_capital for m in monthly}
    assert by_ym['2025-01'] == pytest.approx(10000.0)
    assert by_ym['2025-12'] == pytest.approx(10500.0)
    assert by_ym['2026-01'] == pytest.approx(10500 + 500 / 12)
    assert by_ym['2026-12'] == pytest.approx(11000.0)

    values = [m.average_capital for m in monthly]
    assert all(b >= a for a, b in zip(values, values[1:])), "trajectory is non-decreasing"


def test_boundary_index_covers_next_month(end_to_end_blocks):
    resolved = end_to_end_blocks[0]
    assert '2027-01' in resolved.monthly_index
    assert '2027-01' not in {m.year_month for m in resolved.monthly}


def test_next_block_continues_from_boundary(two_block_run):
    deposit, withdraw = two_block_run
    assert deposit.monthly[0].average_capital == pytest.approx(100.0)
    assert deposit.monthly[-1].year_month == '2027-12'
    assert deposit.monthly[-1].average_capital == pytest.approx(160.0)

    boundary = deposit.monthly_index['2028-01']
    assert boundary.average_capital == pytest.approx(165.0)

    assert withdraw.anchor.phase_name == 'WITHDRAW'
    assert withdraw.anchor.average_capital == pytest.approx(165.0)
    assert withdraw.monthly[0].year_month == '2028-01'
    assert withdraw.monthly[0].average_capital == pytest.approx(165.0)
    assert withdraw.monthly[-1].year_month == '2028-12'
    assert withdraw.monthly[-1].average_capital == pytest.approx(200.0)


def test_stitch_returns_fresh_carry(make_row):
    block = build_phase_blocks(['DEPOSIT'], [12], '2027-01-01')[0]
    rows = [make_row('DEPOSIT', 2027, 160), make_row('DEPOSIT', 2028, 220), make_row('DEPOSIT', 2029, 300)]
    resolved, carry = stitch_block(block, rows, EMPTY_CARRY, is_first=True)
    assert resolved.anchor is None
    assert carry.last_yearly.year == 2028, "last row within the block's end year"
    assert carry.monthly_index is resolved.monthly_index
    assert EMPTY_CARRY.monthly_index == {}, "the incoming carry is left untouched"


# =============================================================================
# Fallback grouping
# =============================================================================

def test_group_contiguous_phases():
    rows = [
        {'phaseName': 'DEPOSIT', 'year': 2025},
        {'phaseName': 'DEPOSIT', 'year': 2026},
        {'phaseName': 'WITHDRAW', 'year': 2027},
        {'phaseName': 'DEPOSIT', 'year': 2028},
    ]
    groups = group_contiguous_phases(rows)
    assert [(g.name, g.index, len(g.rows)) for g in groups] == [
        ('DEPOSIT', 1, 2), ('WITHDRAW', 2, 1), ('DEPOSIT', 3, 1),
    ]
    assert groups[1].label == 'Withdraw - Phase #2'
    assert group_contiguous_phases([]) == []


# =============================================================================
# Start dates off the first of the month
# =============================================================================

def _assert_contiguous(resolved_blocks):
    """Each block emits one month per month of duration, with no gaps or repeats."""
    for resolved in resolved_blocks:
        assert len(resolved.monthly) == resolved.block.duration_months, resolved.label
    keys = [m.year * 12 + m.month for r in resolved_blocks for m in r.monthly]
    assert all(b - a == 1 for a, b in zip(keys, keys[1:])), "months across blocks are consecutive"


def test_mid_month_start_blocks_do_not_overlap(make_row):
    yearly = [make_row('DEPOSIT', 2025, 1000), make_row('DEPOSIT', 2026, 1300)]
    yearly += [make_row('WITHDRAW', y, 1300 - 100 * i) for i, y in enumerate(range(2026, 2030))]
    resolved = resolve_phase_blocks(
        yearly, ['DEPOSIT', 'WITHDRAW'], [18, 30], '2025-06-18', first_phase_initial_deposit=900
    )
    deposit, withdraw = resolved
    _assert_contiguous(resolved)

    assert deposit.monthly[0].year_month == '2025-06'
    assert deposit.monthly[-1].year_month == '2026-11'
    assert withdraw.monthly[0].year_month == '2026-12'
    assert withdraw.monthly[-1].year_month == '2029-05'

    boundary = deposit.monthly_index['2026-12']
    assert withdraw.monthly[0].average_capital == pytest.approx(boundary.average_capital)


def test_month_end_start_blocks_do_not_overlap(make_row):
    yearly = [make_row('DEPOSIT', 2025, 100), make_row('PASSIVE', 2025, 110), make_row('WITHDRAW', 2025, 90)]
    resolved = resolve_phase_blocks(
        yearly, ['DEPOSIT', 'PASSIVE', 'WITHDRAW'], [1, 1, 1], '2025-01-31', first_phase_initial_deposit=80
    )
    assert [r.block.start_date for r in resolved] == ['2025-01-31', '2025-02-28', '2025-03-31']
    _assert_contiguous(resolved)
    assert [m.year_month for r in resolved for m in r.monthly] == ['2025-01', '2025-02', '2025-03']
    assert resolved[0].monthly[0].average_capital == pytest.approx(80.0)
