"""
Performance Benchmark
=====================

Measures rock drop throughput and the cost of reaching large drop counts.

Usage:
    python -m tools.benchmark_speed [--pushes N] [--drops D] [--seed S]
"""

from __future__ import annotations

import argparse
import sys
import time
import numpy as np

from rockfall.core.config_loader import load_config
from rockfall.core.push_sequence import PushDirection, PushSequence
from rockfall.core.chamber import Chamber
from rockfall.core.drop_cycle import DropCycle
from rockfall.core.simulation import Simulation


def random_pushes(length: int, seed: int = 42) -> PushSequence:
    """Random jet pattern of the given length."""
    rng = np.random.default_rng(seed)
    return PushSequence(
        PushDirection.LEFT if bit else PushDirection.RIGHT
        for bit in rng.integers(0, 2, size=length)
    )


def benchmark_drop_cycle(
    pushes: PushSequence,
    num_drops: int = 5000
) -> dict:
    """
    Benchmark raw DropCycle without cycle detection.

    Args:
        pushes: Jet pattern.
        num_drops: Number of rocks to drop.

    Returns:
        Dict with timing results.
    """
    config = load_config()
    dropper = DropCycle(Chamber(config), pushes, config=config)

    start = time.perf_counter()
    for _ in range(num_drops):
        dropper.drop()
    elapsed = time.perf_counter() - start

    return {
        "mode": "drop_cycle",
        "num_drops": num_drops,
        "elapsed_seconds": elapsed,
        "drops_per_second": num_drops / elapsed,
        "us_per_drop": (elapsed * 1e6) / num_drops,
        "height": dropper.chamber.highest_settled_row
    }


def benchmark_extrapolated(
    pushes: PushSequence,
    total_drops: int = 1_000_000_000_000
) -> dict:
    """
    Benchmark a full extrapolated run.

    Args:
        pushes: Jet pattern.
        total_drops: Target rock count.

    Returns:
        Dict with timing results.
    """
    sim = Simulation(pushes, config=load_config(), extrapolate=True)
    result = sim.run(total_drops)

    return {
        "mode": "extrapolated",
        "total_drops": total_drops,
        "simulated_drops": result.simulated_drops,
        "elapsed_seconds": result.elapsed_time,
        "cycle_rounds": result.cycle.rounds if result.cycle else None,
        "height": result.height
    }


def main():
    parser = argparse.ArgumentParser(description="Benchmark rock simulation speed")
    parser.add_argument("--pushes", type=int, default=10091, help="Jet pattern length (default: 10091)")
    parser.add_argument("--drops", type=int, default=5000, help="Rocks for the raw benchmark (default: 5000)")
    parser.add_argument("--seed", type=int, default=42, help="Random seed for the jet pattern")

    args = parser.parse_args()
    pushes = random_pushes(args.pushes, args.seed)

    print("=" * 60)
    print("ROCKFALL PERFORMANCE BENCHMARK")
    print("=" * 60)
    print()

    print("Benchmarking DropCycle (raw)...")
    result = benchmark_drop_cycle(pushes, num_drops=args.drops)
    print(f"  Drops/sec: {result['drops_per_second']:.1f}")
    print(f"  us/drop:   {result['us_per_drop']:.1f}")
    print()

    print("Benchmarking extrapolated run (1e12 rocks)...")
    result = benchmark_extrapolated(pushes)
    print(f"  Simulated: {result['simulated_drops']:,} rocks")
    print(f"  Cycle:     {result['cycle_rounds']} rocks")
    print(f"  Height:    {result['height']:,}")
    print(f"  Elapsed:   {result['elapsed_seconds']:.3f}s")

    return 0


if __name__ == "__main__":
    sys.exit(main())
