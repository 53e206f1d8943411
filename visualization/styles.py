"""
Centralized style definitions for projection charts.

This module provides consistent colors, fonts, and styles across all plots.
"""

import matplotlib.pyplot as plt

# Set consistent style for all figures
plt.style.use('seaborn-v0_8-whitegrid')

# Money semantics (colorblind-friendly)
COLORS = {
    'capital': '#0072B2',    # Blue - state / balance
    'deposit': '#7BCF5A',    # Light green - money in
    'withdraw': '#E69F00',   # Orange - money out

    # Percentile bands
    'outer_band': '#E9C46A',  # 5th-95th
    'inner_band': '#1A759F',  # 25th-75th
    'median': '#0033FF',

    # Failed paths
    'failure': '#E07A5F',
}

# Block background tint per phase type
PHASE_COLORS = {
    'DEPOSIT': COLORS['deposit'],
    'PASSIVE': COLORS['capital'],
    'WITHDRAW': COLORS['withdraw'],
}


def apply_standard_style():
    """Apply standard matplotlib style settings."""
    plt.rcParams.update({
        'font.size': 14,
        'axes.titlesize': 16,
        'axes.labelsize': 14,
        'legend.fontsize': 11,
        'figure.titlesize': 18,
    })


def phase_color(phase_name: str) -> str:
    """Color for a phase name; gray for unknown names."""
    return PHASE_COLORS.get(str(phase_name or '').upper(), '#8b8b8b')
