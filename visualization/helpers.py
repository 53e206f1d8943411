"""
Plot utility functions for projection charts.

This module provides common plotting utilities used across visualization modules.
"""

import numpy as np
import matplotlib.pyplot as plt
from typing import List, Sequence, Tuple


def add_zero_line(ax: plt.Axes, alpha: float = 0.3) -> None:
    """Add a horizontal line at y=0."""
    ax.axhline(y=0, color='gray', linestyle='-', alpha=alpha)


def format_currency_axis(ax: plt.Axes, axis: str = 'y') -> None:
    """Format axis labels as whole currency units with thousands separators."""
    def currency_formatter(x, pos):
        return f'{x:,.0f}'

    if axis == 'y':
        ax.yaxis.set_major_formatter(plt.FuncFormatter(currency_formatter))
    else:
        ax.xaxis.set_major_formatter(plt.FuncFormatter(currency_formatter))


def format_percent_axis(ax: plt.Axes) -> None:
    ax.yaxis.set_major_formatter(plt.FuncFormatter(lambda x, pos: f'{x:.0f}%'))


def month_tick_positions(year_months: Sequence[str], max_ticks: int = 12) -> Tuple[np.ndarray, List[str]]:
    """
    Evenly spaced x ticks for a YYYY-MM series.

    Prefers January points so labels line up with calendar years.

    Returns:
        Tuple of (tick positions, tick labels)
    """
    n = len(year_months)
    if n == 0:
        return np.array([], dtype=int), []
    january = [i for i, ym in enumerate(year_months) if ym.endswith('-01')]
    by_year = len(january) >= 2
    candidates = january if by_year else list(range(n))
    step = max(1, int(np.ceil(len(candidates) / max_ticks)))
    positions = np.array(candidates[::step], dtype=int)
    labels = [year_months[i][:4] if by_year else year_months[i] for i in positions]
    return positions, labels


def add_legend(ax: plt.Axes, loc: str = 'upper left', fontsize: int = 9) -> None:
    """Add a legend with standard formatting."""
    ax.legend(loc=loc, fontsize=fontsize)
