"""
Command-line report tests.

Validates:
1. A JSON run bundle renders a chart and a monthly CSV
2. Non-object bundles are rejected
"""

import json

import pandas as pd
import pytest

import render_projection


@pytest.fixture
def bundle_path(tmp_path):
    bundle = {
        'startDate': '2025-01-01',
        'phaseTypes': ['DEPOSIT'],
        'phaseDurationsInMonths': [24],
        'firstPhaseInitialDeposit': 10000,
        'inflationFactorPerYear': 1.02,
        'yearlySummaries': [
            {'phaseName': 'DEPOSIT', 'year': 2025, 'averageCapital': 10500},
            {'phaseName': 'DEPOSIT', 'year': 2026, 'averageCapital': 11000},
        ],
    }
    path = tmp_path / 'bundle.json'
    path.write_text(json.dumps(bundle))
    return path


def test_render_chart_and_csv(tmp_path, bundle_path, capsys):
    chart = tmp_path / 'chart.png'
    csv = tmp_path / 'monthly.csv'
    result = render_projection.main(str(bundle_path), str(chart), str(csv), real=True, verbose=True)

    assert chart.exists() and chart.stat().st_size > 0
    frame = pd.read_csv(csv)
    assert len(frame) == 24
    assert frame['yearMonth'].iloc[0] == '2025-01'
    assert result.mode.value == 'real'

    out = capsys.readouterr().out
    assert 'Deposit - Phase #1' in out


def test_quiet_run(tmp_path, bundle_path, capsys):
    render_projection.main(str(bundle_path), str(tmp_path / 'chart.pdf'), verbose=False)
    assert capsys.readouterr().out == ''


def test_rejects_non_object_bundle(tmp_path):
    path = tmp_path / 'bad.json'
    path.write_text('[1, 2, 3]')
    with pytest.raises(ValueError):
        render_projection.load_bundle(str(path))


def test_unknown_phase_type_still_renders(tmp_path, bundle_path, capsys):
    bundle = json.loads(bundle_path.read_text())
    bundle['phaseTypes'] = ['SAVINGS']
    bundle_path.write_text(json.dumps(bundle))

    result = render_projection.main(str(bundle_path), str(tmp_path / 'chart.png'), verbose=True)
    assert not result.stitched
    assert len(result.monthly) == 24
    assert 'phase groups separately' in capsys.readouterr().out
