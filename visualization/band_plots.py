"""
Percentile band charts for reconstructed monthly projections.

This module plots stacked percentile bands (5th-95th and 25th-75th around
the median), the failure rate, and phase block shading.
"""

import numpy as np
import matplotlib.pyplot as plt
from typing import List, Sequence, Tuple, TYPE_CHECKING

from .styles import COLORS, phase_color
from .helpers import (
    add_legend,
    add_zero_line,
    format_currency_axis,
    format_percent_axis,
    month_tick_positions,
)

if TYPE_CHECKING:
    from projection import BandRecord, ProjectionResult, ResolvedBlock


def plot_band_chart(
    ax: plt.Axes,
    bands: Sequence['BandRecord'],
    alpha_outer: float = 0.25,
    alpha_inner: float = 0.35,
    label_prefix: str = '',
) -> np.ndarray:
    """
    Plot stacked percentile bands and the median line.

    Each record's active view (nominal or real) is drawn, so the chart
    follows the mode embedded in the data.

    Args:
        ax: Matplotlib axes to plot on
        bands: Band records in chronological order
        alpha_outer: Transparency for outer band (5-95%)
        alpha_inner: Transparency for inner band (25-75%)
        label_prefix: Prefix for legend labels

    Returns:
        Array of shape (5, n_points) with q5, q25, median, q75, q95
    """
    if not bands:
        return np.empty((5, 0))

    x = np.arange(len(bands))
    quantiles = np.array([b.active.quantiles() for b in bands]).T
    q5, q25, median, q75, q95 = quantiles

    ax.fill_between(x, q5, q95, alpha=alpha_outer, color=COLORS['outer_band'],
                    linewidth=0, label=f'{label_prefix}Quantiles (5th-95th)')
    ax.fill_between(x, q25, q75, alpha=alpha_inner, color=COLORS['inner_band'],
                    linewidth=0, label=f'{label_prefix}Quantiles (25th-75th)')
    ax.plot(x, median, color=COLORS['median'], linewidth=2,
            label=f'{label_prefix}Median Capital')

    positions, labels = month_tick_positions([b.year_month for b in bands])
    ax.set_xticks(positions)
    ax.set_xticklabels(labels, rotation=45, ha='right')
    format_currency_axis(ax)
    add_zero_line(ax)
    return quantiles


def plot_failure_rate(ax: plt.Axes, bands: Sequence['BandRecord']) -> None:
    """Plot the share of failed paths (0-100%) per month."""
    x = np.arange(len(bands))
    rate = np.array([b.failure_rate for b in bands], dtype=float)
    ax.fill_between(x, 0, rate, color=COLORS['failure'], alpha=0.4, linewidth=0)
    ax.plot(x, rate, color=COLORS['failure'], linewidth=1.5, label='Failure Rate')
    ax.set_ylim(0, max(5.0, float(rate.max()) * 1.1) if len(rate) else 5.0)
    format_percent_axis(ax)


def block_spans(
    blocks: Sequence['ResolvedBlock'],
    year_months: Sequence[str],
) -> List[Tuple[int, int, str, str]]:
    """
    Index range of every block within a chart's x positions.

    Returns:
        List of (first index, last index, label, phase name)
    """
    position = {}
    for i, ym in enumerate(year_months):
        position.setdefault(ym, i)
    spans = []
    for resolved in blocks:
        keys = [m.year_month for m in resolved.monthly if m.year_month in position]
        if not keys:
            continue
        spans.append((position[keys[0]], position[keys[-1]], resolved.label,
                      resolved.block.phase_type.value))
    return spans


def shade_phase_blocks(
    ax: plt.Axes,
    blocks: Sequence['ResolvedBlock'],
    year_months: Sequence[str],
    alpha: float = 0.06,
) -> None:
    """Tint each block's months and mark block boundaries."""
    for first, last, label, phase_name in block_spans(blocks, year_months):
        ax.axvspan(first - 0.5, last + 0.5, color=phase_color(phase_name), alpha=alpha)
        ax.axvline(x=first - 0.5, color='gray', linestyle='--', alpha=0.5, linewidth=1)
        ax.text(first, 1.0, label, transform=ax.get_xaxis_transform(),
                fontsize=8, va='bottom', ha='left', color='dimgray')


def create_projection_figure(
    result: 'ProjectionResult',
    title: str = 'Projected Capital',
    figsize: Tuple[int, int] = (14, 10),
) -> plt.Figure:
    """
    Two-panel figure: percentile bands on top, failure rate below.

    Args:
        result: Output of projection.build_projection
        title: Title of the band panel
        figsize: Figure size

    Returns:
        matplotlib Figure
    """
    fig, (ax_bands, ax_fail) = plt.subplots(
        2, 1, figsize=figsize, sharex=True, gridspec_kw={'height_ratios': [3, 1]}
    )

    bands = result.bands
    year_months = [b.year_month for b in bands]
    plot_band_chart(ax_bands, bands)
    if result.blocks:
        shade_phase_blocks(ax_bands, result.blocks, year_months)

    ax_bands.set_title(f'{title} ({result.mode.value})', pad=18)
    ax_bands.set_ylabel('Capital')
    add_legend(ax_bands)

    plot_failure_rate(ax_fail, bands)
    ax_fail.set_ylabel('Failed paths')
    ax_fail.set_xlabel('Month')

    plt.tight_layout()
    return fig
