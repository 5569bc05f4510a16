"""
Period Extrapolator
===================

Watches settle events for a repeating (shape slot, push slot) signature and
skips whole cycles of rocks by arithmetic once a cycle is confirmed.

A signature match only predicts future growth if the stack's surface has
also settled into a repeating shape. That is assumed, not checked, unless
the surface profile is folded into the key (cycle.surface_key).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Hashable, Optional, Tuple

from rockfall.core.config_loader import SimConfig, get_config
from rockfall.core.drop_cycle import DropEvent


@dataclass(frozen=True)
class CycleInfo:
    """A confirmed repeat: every `rounds` rocks add `height` rows."""
    rounds: int
    height: int
    confirmed_at: int   # Round of the event that confirmed it

    def __repr__(self) -> str:
        return f"CycleInfo(rounds={self.rounds}, height={self.height}, at={self.confirmed_at})"


class PeriodExtrapolator:
    """
    Cycle detector over DropEvents.

    Records the first (round, height) seen for each signature. A later
    event with the same signature counts as a match once the jet pattern
    has been consumed `warmup_passes` times. A cycle is confirmed after
    `required_matches` consecutive events match with identical deltas.
    """

    def __init__(
        self,
        push_count: int,
        config: Optional[SimConfig] = None
    ):
        """
        Args:
            push_count: Length of the jet pattern.
            config: Simulation configuration. Uses default if None.
        """
        if config is None:
            config = get_config()
        if push_count <= 0:
            raise ValueError(f"push_count must be positive, got {push_count}")

        self._config = config
        self._push_count = push_count
        self._warmup_pushes = config.cycle.warmup_passes * push_count
        self._required_matches = config.cycle.required_matches

        self._seen: Dict[Hashable, Tuple[int, int]] = {}
        self._streak = 0
        self._last_delta: Optional[Tuple[int, int]] = None
        self._cycle: Optional[CycleInfo] = None

    @property
    def cycle(self) -> Optional[CycleInfo]:
        """The confirmed cycle, or None."""
        return self._cycle

    @property
    def signatures_seen(self) -> int:
        return len(self._seen)

    @property
    def streak(self) -> int:
        """Consecutive consistent matches so far."""
        return self._streak

    def observe(
        self,
        event: DropEvent,
        key: Optional[Hashable] = None
    ) -> Optional[CycleInfo]:
        """
        Feed one settle event.

        Args:
            event: The event to record.
            key: Detection key. Defaults to the event's signature.

        Returns:
            The cycle, once confirmed (on this or an earlier event).
        """
        if self._cycle is not None:
            return self._cycle

        if key is None:
            key = event.signature

        first = self._seen.get(key)
        if first is None:
            self._seen[key] = (event.round_number, event.height)
            self._reset_streak()
            return None

        if event.pushes_consumed < self._warmup_pushes:
            return None

        delta = (event.round_number - first[0], event.height - first[1])
        if self._streak > 0 and delta == self._last_delta:
            self._streak += 1
        else:
            self._streak = 1
        self._last_delta = delta

        if self._streak >= self._required_matches:
            self._cycle = CycleInfo(
                rounds=delta[0],
                height=delta[1],
                confirmed_at=event.round_number
            )
        return self._cycle

    def _reset_streak(self) -> None:
        self._streak = 0
        self._last_delta = None

    @staticmethod
    def fast_forward(
        cycle: CycleInfo,
        target: int,
        current_round: int
    ) -> Tuple[int, int]:
        """
        Skip as many whole cycles as fit before `target`.

        Returns:
            (rounds skipped, height gained).
        """
        remaining = target - current_round
        if remaining <= 0:
            return (0, 0)
        whole_cycles = remaining // cycle.rounds
        return (whole_cycles * cycle.rounds, whole_cycles * cycle.height)

    def reset(self) -> None:
        """Forget all recorded signatures."""
        self._seen.clear()
        self._reset_streak()
        self._cycle = None
