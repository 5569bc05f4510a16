"""
Simulation
==========

Driver combining the chamber, the drop cycle and the period extrapolator.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Iterable, Optional, Union

from rockfall.core.config_loader import SimConfig, get_config
from rockfall.core.shape_catalog import ShapeCatalog, get_catalog
from rockfall.core.push_sequence import PushDirection, PushSequence
from rockfall.core.chamber import Chamber
from rockfall.core.drop_cycle import DropCycle, DropEvent
from rockfall.core.period_extrapolator import CycleInfo, PeriodExtrapolator


@dataclass
class SimulationResult:
    """Result of running the simulation to a target drop count."""
    height: int                    # Stack height after total_drops rocks
    total_drops: int
    simulated_drops: int           # Rocks actually dropped
    skipped_drops: int             # Rocks accounted for by extrapolation
    extrapolated_height: int       # Height contributed by skipped cycles
    cycle: Optional[CycleInfo]
    elapsed_time: float


class Simulation:
    """
    Owns one chamber and answers "how tall after N rocks?".

    run() resets first, so every answer starts from an empty chamber.
    """

    def __init__(
        self,
        pushes: Union[PushSequence, Iterable[PushDirection]],
        config: Optional[SimConfig] = None,
        extrapolate: Optional[bool] = None,
        render_callback: Optional[Callable[[DropCycle], None]] = None,
        debug: bool = False
    ):
        """
        Initialize simulation.

        Args:
            pushes: Jet pattern.
            config: Simulation configuration. Uses default if None.
            extrapolate: Enable cycle skipping. Uses cycle.enabled if None.
            render_callback: Optional callback for every rock movement.
            debug: If True, prints cycle detection details.
        """
        if config is None:
            config = get_config()
        if not isinstance(pushes, PushSequence):
            pushes = PushSequence(pushes)

        self._config = config
        self._pushes = pushes
        self._extrapolate = config.cycle.enabled if extrapolate is None else extrapolate
        self._debug = debug

        self._catalog: ShapeCatalog = get_catalog(config)
        self._chamber = Chamber(config)
        self._dropper = DropCycle(
            chamber=self._chamber,
            pushes=pushes,
            config=config,
            catalog=self._catalog,
            render_callback=render_callback
        )
        self._extrapolator = PeriodExtrapolator(len(pushes), config)

        if self._debug:
            print(f"[DEBUG] Simulation initialized")
            print(f"[DEBUG]   Chamber width: {config.chamber.width}")
            print(f"[DEBUG]   Push pattern length: {len(pushes)}")
            print(f"[DEBUG]   Extrapolation: {'on' if self._extrapolate else 'off'}")

    @property
    def config(self) -> SimConfig:
        return self._config

    @property
    def chamber(self) -> Chamber:
        return self._chamber

    @property
    def dropper(self) -> DropCycle:
        return self._dropper

    @property
    def extrapolator(self) -> PeriodExtrapolator:
        return self._extrapolator

    def reset(self) -> None:
        """Empty the chamber and forget any detected cycle."""
        self._dropper.reset()
        self._extrapolator.reset()

    def _detection_key(self, event: DropEvent):
        key = (event.shape_slot, event.push_slot)
        if self._config.cycle.surface_key:
            return key + (self._chamber.surface_profile(),)
        return key

    def run(self, total_drops: int) -> SimulationResult:
        """
        Drop `total_drops` rocks from an empty chamber.

        Args:
            total_drops: Number of rocks to settle.

        Returns:
            SimulationResult with the final height.

        Raises:
            ValueError: If total_drops is negative.
        """
        if total_drops < 0:
            raise ValueError(f"total_drops must be non-negative, got {total_drops}")

        self.reset()
        start = time.perf_counter()

        rounds = 0
        skipped = 0
        extra_height = 0
        cycle: Optional[CycleInfo] = None

        while rounds < total_drops:
            event = self._dropper.drop()
            rounds += 1

            if not self._extrapolate or cycle is not None:
                continue

            cycle = self._extrapolator.observe(event, self._detection_key(event))
            if cycle is None:
                continue

            skipped, extra_height = PeriodExtrapolator.fast_forward(
                cycle, total_drops, rounds
            )
            rounds += skipped

            if self._debug:
                print(f"[DEBUG] Cycle confirmed at round {cycle.confirmed_at}: "
                      f"{cycle.rounds} rocks add {cycle.height} rows")
                print(f"[DEBUG]   Skipped {skipped:,} rocks (+{extra_height:,} rows), "
                      f"{total_drops - rounds:,} left to drop")

        elapsed = time.perf_counter() - start

        return SimulationResult(
            height=self._chamber.highest_settled_row + extra_height,
            total_drops=total_drops,
            simulated_drops=self._dropper.rounds,
            skipped_drops=skipped,
            extrapolated_height=extra_height,
            cycle=cycle,
            elapsed_time=elapsed
        )


def highest_point(
    push_sequence: Union[PushSequence, Iterable[PushDirection]],
    total_drops: int,
    config: Optional[SimConfig] = None,
    extrapolate: Optional[bool] = None
) -> int:
    """
    Stack height after `total_drops` rocks fall through the jet pattern.

    Args:
        push_sequence: Jet pattern.
        total_drops: Number of rocks to settle.
        config: Simulation configuration. Uses default if None.
        extrapolate: If False, every rock is simulated. Uses cycle.enabled if None.

    Returns:
        Height of the settled stack.
    """
    sim = Simulation(push_sequence, config=config, extrapolate=extrapolate)
    return sim.run(total_drops).height
