"""
Failure table and CSV export tests.

Validates:
1. Only years with a non-zero failure rate are listed, with success = 100 - failure
2. DataFrames use the wire keys as columns, monthly records add month columns
3. CSV export writes a header row and one line per record
"""

import io

import pandas as pd
import pytest

from projection import (
    STAT_LABELS,
    STAT_FIELDS,
    WIRE_KEYS,
    FailureCase,
    MonthlySummary,
    YearlySummary,
    export_statistics_csv,
    failed_cases_summary,
    summaries_to_frame,
)


@pytest.fixture(scope="module")
def yearly_rows():
    return [
        YearlySummary(phase_name='WITHDRAW', year=2040, average_capital=900.0),
        YearlySummary(phase_name='WITHDRAW', year=2041, average_capital=700.0,
                      negative_capital_percentage=12.5),
    ]


def test_failed_cases(yearly_rows):
    cases = failed_cases_summary(yearly_rows)
    assert cases == [FailureCase(year=2041, failure_rate=12.5, success_rate=87.5)]


def test_failed_cases_from_wire_rows():
    rows = [{'phaseName': 'WITHDRAW', 'year': 2050, 'negativeCapitalPercentage': '140'},
            {'phaseName': 'WITHDRAW', 'year': 2051, 'negativeCapitalPercentage': None}]
    cases = failed_cases_summary(rows)
    assert len(cases) == 1
    assert cases[0].failure_rate == 100.0
    assert cases[0].success_rate == 0.0


def test_every_statistic_has_a_label():
    assert list(STAT_LABELS) == list(STAT_FIELDS)


def test_yearly_frame(yearly_rows):
    frame = summaries_to_frame(yearly_rows)
    assert list(frame.columns[:3]) == ['phaseName', 'year', 'averageCapital']
    assert 'yearMonth' not in frame.columns
    assert frame['averageCapital'].tolist() == [900.0, 700.0]


def test_monthly_frame_adds_month_columns():
    monthly = [MonthlySummary(phase_name='DEPOSIT', year=2025, month=m,
                              year_month=f'2025-{m:02d}', average_capital=float(m))
               for m in (1, 2)]
    frame = summaries_to_frame(monthly)
    assert list(frame.columns[-2:]) == ['month', 'yearMonth']
    assert frame['yearMonth'].tolist() == ['2025-01', '2025-02']


def test_empty_frame_has_columns():
    frame = summaries_to_frame([])
    assert frame.empty
    assert 'negativeCapitalPercentage' in frame.columns
    assert len(frame.columns) == 2 + len(STAT_FIELDS)


def test_csv_export_to_string(yearly_rows):
    text = export_statistics_csv(yearly_rows)
    lines = text.strip().splitlines()
    assert lines[0].startswith('phaseName,year,averageCapital')
    assert len(lines) == 3

    frame = pd.read_csv(io.StringIO(text))
    assert frame['negativeCapitalPercentage'].tolist() == [0.0, 12.5]


def test_csv_export_to_file(tmp_path, yearly_rows):
    path = tmp_path / 'stats.csv'
    assert export_statistics_csv(yearly_rows, path) is None
    frame = pd.read_csv(path)
    assert list(frame.columns) == [WIRE_KEYS[name] for name in ('phase_name', 'year') + STAT_FIELDS]
