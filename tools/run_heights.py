"""
Tower Height Runner
===================

Reads a jet pattern file and prints the tower height after each requested
number of rocks.

Usage:
    python -m tools.run_heights INPUT [--drops N [N ...]] [--naive] [--show ROWS]
"""

from __future__ import annotations

import argparse
import json
import sys
import time
from typing import List, Optional

from rockfall.core.config_loader import load_config, SimConfig
from rockfall.core.push_sequence import load_pushes, PushSequence
from rockfall.core.simulation import Simulation, SimulationResult
from rockfall.core.render_text import render_chamber


def run_heights(
    pushes: PushSequence,
    drop_counts: List[int],
    config: SimConfig,
    extrapolate: bool = True,
    show_rows: int = 0,
    debug: bool = False
) -> List[SimulationResult]:
    """
    Run one simulation per drop count.

    Args:
        pushes: Jet pattern.
        drop_counts: Target rock counts.
        config: Simulation configuration.
        extrapolate: Enable cycle skipping.
        show_rows: Print this many rows from the top of the chamber after each run.
        debug: Verbose cycle detection output.

    Returns:
        One result per drop count, in order.
    """
    sim = Simulation(pushes, config=config, extrapolate=extrapolate, debug=debug)

    results = []
    for total_drops in drop_counts:
        result = sim.run(total_drops)
        results.append(result)

        line = f"{total_drops:>16,} rocks -> height {result.height:,}"
        if result.cycle is not None:
            line += (f"  (cycle {result.cycle.rounds} rocks / {result.cycle.height} rows, "
                     f"{result.simulated_drops:,} simulated)")
        line += f"  [{result.elapsed_time:.3f}s]"
        print(line)

        if show_rows > 0:
            print(render_chamber(sim.chamber, max_rows=show_rows), end="")

    return results


def save_results(
    results: List[SimulationResult],
    input_path: str,
    output_path: str
) -> None:
    """Save run results to JSON."""
    data = {
        "input": input_path,
        "timestamp": time.strftime("%Y-%m-%d %H:%M:%S"),
        "results": [
            {
                "total_drops": r.total_drops,
                "height": r.height,
                "simulated_drops": r.simulated_drops,
                "skipped_drops": r.skipped_drops,
                "extrapolated_height": r.extrapolated_height,
                "cycle_rounds": r.cycle.rounds if r.cycle else None,
                "cycle_height": r.cycle.height if r.cycle else None,
                "elapsed_time": r.elapsed_time
            }
            for r in results
        ]
    }

    with open(output_path, "w") as f:
        json.dump(data, f, indent=2)

    print(f"Results saved to {output_path}")


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Compute rock tower heights")
    parser.add_argument(
        "input",
        type=str,
        help="Path to the jet pattern file"
    )
    parser.add_argument(
        "--drops",
        type=int,
        nargs="+",
        default=None,
        help="Rock counts to report (default: from config)"
    )
    parser.add_argument(
        "--naive",
        action="store_true",
        help="Simulate every rock, no cycle skipping"
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to chamber_config.yaml (uses default if not specified)"
    )
    parser.add_argument(
        "--show",
        type=int,
        default=0,
        metavar="ROWS",
        help="Print the top ROWS rows of the chamber after each run"
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Path to save results JSON"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Print cycle detection details"
    )

    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
        pushes = load_pushes(args.input)
    except (OSError, ValueError) as e:
        print(f"Error: {e}")
        return 1

    drop_counts = args.drops if args.drops is not None else list(config.defaults.drop_counts)
    if any(n < 0 for n in drop_counts):
        print("Error: drop counts must be non-negative")
        return 1

    results = run_heights(
        pushes,
        drop_counts,
        config,
        extrapolate=not args.naive,
        show_rows=args.show,
        debug=args.debug
    )

    if args.output:
        save_results(results, args.input, args.output)

    return 0


if __name__ == "__main__":
    sys.exit(main())
