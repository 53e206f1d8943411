"""
Visualization module for monthly projection charts.

This module consolidates the matplotlib code that draws reconstructed
projections, keeping it separate from the data transformation in
``projection``.

Submodules:
- styles: Color schemes, fonts, and style constants
- helpers: Common plotting utilities
- band_plots: Percentile band, failure rate and phase block charts
"""

# Import styles and helpers
from .styles import (
    COLORS,
    PHASE_COLORS,
    apply_standard_style,
    phase_color,
)

from .helpers import (
    add_zero_line,
    format_currency_axis,
    format_percent_axis,
    month_tick_positions,
    add_legend,
)

# Import band plots
from .band_plots import (
    plot_band_chart,
    plot_failure_rate,
    block_spans,
    shade_phase_blocks,
    create_projection_figure,
)

__all__ = [
    # Styles
    'COLORS',
    'PHASE_COLORS',
    'apply_standard_style',
    'phase_color',
    # Helpers
    'add_zero_line',
    'format_currency_axis',
    'format_percent_axis',
    'month_tick_positions',
    'add_legend',
    # Band plots
    'plot_band_chart',
    'plot_failure_rate',
    'block_spans',
    'shade_phase_blocks',
    'create_projection_figure',
]
