"""
Monthly Projection Chart from a Completed Simulation Run

Reads a run bundle (JSON) holding the simulation request's timeline and the
yearly summary rows, reconstructs the monthly trajectory and writes a
percentile band chart plus a monthly statistics CSV.

Bundle shape:
    {
        "startDate": "2025-01-01",
        "phaseTypes": ["DEPOSIT", "WITHDRAW"],
        "phaseDurationsInMonths": [120, 240],
        "firstPhaseInitialDeposit": 10000,
        "inflationFactorPerYear": 1.02,
        "yearlySummaries": [{"phaseName": "DEPOSIT", "year": 2025, ...}, ...]
    }
"""

import json
import matplotlib.pyplot as plt
from typing import Optional

from projection import (
    ViewMode,
    build_projection,
    context_from_bundle,
    export_statistics_csv,
    failed_cases_summary,
)
from visualization import apply_standard_style, create_projection_figure


def load_bundle(path: str) -> dict:
    """Read a run bundle from a JSON file."""
    with open(path) as f:
        bundle = json.load(f)
    if not isinstance(bundle, dict):
        raise ValueError(f"{path}: expected a JSON object, got {type(bundle).__name__}")
    return bundle


def main(
    bundle_path: str,
    output_path: str = 'projection.png',
    csv_path: Optional[str] = None,
    real: bool = False,
    title: str = 'Projected Capital',
    verbose: bool = True,
):
    """
    Render the projection chart (and optionally the monthly CSV) for a run.

    Args:
        bundle_path: Path of the JSON run bundle
        output_path: Chart path; the extension picks the format (png, pdf, ...)
        csv_path: Where to write monthly statistics, None to skip
        real: Show inflation-adjusted values when the run allows it
        title: Chart title
        verbose: If True, print progress and statistics

    Returns:
        ProjectionResult
    """
    bundle = load_bundle(bundle_path)
    context = context_from_bundle(bundle)
    yearly = bundle.get('yearlySummaries') or []

    if verbose:
        print(f"Loaded {len(yearly)} yearly rows from {bundle_path}")
        print(f"  start date: {context.start_date or 'unknown'}")
        print(f"  phases: {len(context.phase_types)}")

    mode = ViewMode.REAL if real else ViewMode.NOMINAL
    result = build_projection(yearly, context, mode=mode)

    if verbose:
        if result.stitched:
            print(f"Resolved {len(result.blocks)} phase blocks:")
            for resolved in result.blocks:
                print(f"  {resolved.label}: {resolved.block.start_date} to "
                      f"{resolved.block.end_date} ({len(resolved.monthly)} months)")
        else:
            print(f"Timeline not resolvable; charting {len(result.groups)} phase groups separately")
        print(f"Monthly points: {len(result.monthly)}")
        if real and result.mode is not ViewMode.REAL:
            print("Real view unavailable (no start date or no inflation); showing nominal values")

        failures = failed_cases_summary(yearly)
        if failures:
            worst = max(failures, key=lambda c: c.failure_rate)
            print(f"Years with failed paths: {len(failures)} "
                  f"(worst {worst.year}: {worst.failure_rate:.1f}%)")

    apply_standard_style()
    fig = create_projection_figure(result, title=title)
    fig.savefig(output_path, dpi=150, bbox_inches='tight')
    plt.close(fig)
    if verbose:
        print(f"Chart saved to {output_path}")

    if csv_path:
        export_statistics_csv(result.monthly, csv_path)
        if verbose:
            print(f"Monthly statistics saved to {csv_path}")

    return result


if __name__ == '__main__':
    import argparse

    parser = argparse.ArgumentParser(
        description='Render monthly projection bands from a completed simulation run'
    )
    parser.add_argument('bundle',
                       help='JSON run bundle (timeline + yearlySummaries)')
    parser.add_argument('-o', '--output', default='projection.png',
                       help='Output chart path (default: projection.png)')
    parser.add_argument('--csv', default=None,
                       help='Also write monthly statistics to this CSV file')
    parser.add_argument('--real', action='store_true',
                       help='Show inflation-adjusted (real) values')
    parser.add_argument('--title', default='Projected Capital',
                       help='Chart title')
    parser.add_argument('-q', '--quiet', action='store_true',
                       help='Suppress output messages')

    args = parser.parse_args()

    main(
        bundle_path=args.bundle,
        output_path=args.output,
        csv_path=args.csv,
        real=args.real,
        title=args.title,
        verbose=not args.quiet,
    )
