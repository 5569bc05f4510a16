"""
Drop Cycle
==========

Runs one rock from spawn to settle: a push attempt, then a fall attempt,
repeated until the rock cannot fall any further.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from rockfall.core.config_loader import SimConfig, get_config
from rockfall.core.shape_catalog import Shape, ShapeCatalog, get_catalog
from rockfall.core.push_sequence import PushDirection, PushSequence
from rockfall.core.chamber import Chamber


@dataclass
class FallingPiece:
    """A rock in flight: a shape anchored by its bottom-left corner."""
    shape: Shape
    col: int
    row: int

    @property
    def top_row(self) -> int:
        """One past the piece's highest row."""
        return self.row + self.shape.height

    def cells(self) -> Tuple[Tuple[int, int], ...]:
        """Absolute (col, row) cells covered by the piece."""
        return self.shape.cells_at(self.col, self.row)


@dataclass(frozen=True)
class DropEvent:
    """Record of one settled rock."""
    signature: Tuple          # (shape slot, push slot) at spawn
    round_number: int         # Rocks settled so far, including this one
    height: int               # Stack height after settling
    anchor: Tuple[int, int]   # Final (col, row) of the rock
    pushes_consumed: int      # Total pushes consumed so far

    @property
    def shape_slot(self) -> int:
        return self.signature[0]

    @property
    def push_slot(self) -> int:
        return self.signature[1]


class DropCycle:
    """
    Drops rocks into a chamber one at a time.

    Owns the unbounded shape and push counters, and the rock currently in
    flight (None between drops). The chamber is mutated only by settle().
    """

    def __init__(
        self,
        chamber: Chamber,
        pushes: PushSequence,
        config: Optional[SimConfig] = None,
        catalog: Optional[ShapeCatalog] = None,
        render_callback: Optional[Callable[["DropCycle"], None]] = None
    ):
        """
        Args:
            chamber: Chamber to drop into.
            pushes: Jet pattern, consumed cyclically.
            config: Simulation configuration. Uses default if None.
            catalog: Shape catalog. Built from config if None.
            render_callback: Called after every applied move of a rock.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._chamber = chamber
        self._pushes = pushes
        self._catalog = catalog if catalog is not None else get_catalog(config)
        self._render_callback = render_callback

        self._spawn_column = config.chamber.spawn_column
        self._spawn_clearance = config.chamber.spawn_clearance

        self._shape_index = 0
        self._push_index = 0
        self._rounds = 0
        self._current: Optional[FallingPiece] = None
        self._spawn_signature: Optional[Tuple[int, int]] = None

    @property
    def chamber(self) -> Chamber:
        return self._chamber

    @property
    def pushes(self) -> PushSequence:
        return self._pushes

    @property
    def shape_index(self) -> int:
        """Rocks spawned so far."""
        return self._shape_index

    @property
    def push_index(self) -> int:
        """Pushes consumed so far."""
        return self._push_index

    @property
    def rounds(self) -> int:
        """Rocks settled so far."""
        return self._rounds

    @property
    def current_piece(self) -> Optional[FallingPiece]:
        """The rock in flight, or None between drops."""
        return self._current

    def signature(self) -> Tuple[int, int]:
        """(shape slot, push slot) the next rock would spawn with."""
        return (
            self._shape_index % len(self._catalog),
            self._push_index % len(self._pushes)
        )

    def spawn(self) -> FallingPiece:
        """
        Place the next rock above the stack.

        Raises:
            RuntimeError: If a rock is already in flight or the spawn
                position is blocked.
        """
        if self._current is not None:
            raise RuntimeError("A rock is already falling")

        shape = self._catalog.for_drop(self._shape_index)
        col = self._spawn_column
        row = self._chamber.highest_settled_row + self._spawn_clearance

        self._chamber.ensure_height(row + shape.height)
        if not self._chamber.fits(shape, col, row):
            raise RuntimeError(
                f"Cannot spawn {shape.name} at ({col}, {row}): position blocked"
            )

        self._spawn_signature = self.signature()
        self._current = FallingPiece(shape=shape, col=col, row=row)
        self._shape_index += 1
        self._notify()
        return self._current

    def _require_piece(self) -> FallingPiece:
        if self._current is None:
            raise RuntimeError("No rock is falling")
        return self._current

    def _try_move(self, piece: FallingPiece, dcol: int, drow: int) -> bool:
        col = piece.col + dcol
        row = piece.row + drow
        if not self._chamber.fits(piece.shape, col, row):
            return False
        piece.col = col
        piece.row = row
        self._notify()
        return True

    def push(self) -> bool:
        """
        Consume the next push and try to shift the rock sideways.

        The push is consumed even when the wall or the stack blocks it.

        Returns:
            True if the rock moved.
        """
        piece = self._require_piece()
        direction: PushDirection = self._pushes[self._push_index]
        self._push_index += 1
        return self._try_move(piece, direction.offset, 0)

    def fall(self) -> bool:
        """
        Try to move the rock down one row.

        Returns:
            True if the rock moved, False if it is resting.
        """
        return self._try_move(self._require_piece(), 0, -1)

    def settle(self) -> DropEvent:
        """Fuse the falling rock into the chamber and report it."""
        piece = self._require_piece()
        self._chamber.settle(piece)
        self._rounds += 1
        self._current = None

        event = DropEvent(
            signature=self._spawn_signature,
            round_number=self._rounds,
            height=self._chamber.highest_settled_row,
            anchor=(piece.col, piece.row),
            pushes_consumed=self._push_index
        )
        self._spawn_signature = None
        self._notify()
        return event

    def drop(self) -> DropEvent:
        """
        Drop one rock from spawn through settle.

        Each iteration makes exactly one push attempt, then one fall
        attempt, whether or not the push moved the rock.
        """
        self.spawn()
        while True:
            self.push()
            if not self.fall():
                break
        return self.settle()

    def _notify(self) -> None:
        if self._render_callback is not None:
            self._render_callback(self)

    def reset(self) -> None:
        """Clear counters and the chamber."""
        self._chamber.reset()
        self._shape_index = 0
        self._push_index = 0
        self._rounds = 0
        self._current = None
        self._spawn_signature = None
