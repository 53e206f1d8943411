"""Shared fixtures for the projection test suite."""

import matplotlib
matplotlib.use('Agg')

import pytest

from projection import STAT_FIELDS, YearlySummary


def flat_row(phase_name, year, value, failure_pct=0.0, **overrides):
    """Yearly row whose capital statistics all equal ``value``."""
    stats = {name: float(value) for name in STAT_FIELDS}
    stats['std_dev_capital'] = 0.0
    stats['cumulative_growth_rate'] = 0.0
    stats['negative_capital_percentage'] = float(failure_pct)
    stats.update(overrides)
    return YearlySummary(phase_name=phase_name, year=year, **stats)


@pytest.fixture(scope="session")
def make_row():
    return flat_row
