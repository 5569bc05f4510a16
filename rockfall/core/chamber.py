"""
Chamber
=======

Occupancy grid of settled rock between the two chamber walls.

Row 0 is the floor and rows increase upward. The grid only ever grows;
a falling rock is never written here until it settles.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional, Tuple, TYPE_CHECKING

import numpy as np

from rockfall.core.config_loader import SimConfig, get_config
from rockfall.core.shape_catalog import Shape

if TYPE_CHECKING:
    from rockfall.core.drop_cycle import FallingPiece

# Rows allocated up front; storage doubles when outgrown
INITIAL_CAPACITY = 64


class Tile(Enum):
    """Contents of a single chamber cell."""
    AIR = "."
    ROCK = "#"


class Chamber:
    """
    Settled-rock store over a fixed number of columns.

    Tracks:
    - Addressable rows (grown by ensure_height)
    - Highest settled row (stack height)
    - Per-column top, for the surface profile
    """

    def __init__(self, config: Optional[SimConfig] = None):
        """
        Initialize an empty chamber.

        Args:
            config: Simulation configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._width = config.chamber.width

        self._grid = np.zeros((INITIAL_CAPACITY, self._width), dtype=bool)
        self._rows = 0
        self._highest_settled_row = 0
        # One past the topmost rock in each column, 0 when the column is empty
        self._column_tops = np.zeros(self._width, dtype=np.int64)

    @property
    def width(self) -> int:
        """Number of columns."""
        return self._width

    @property
    def stored_rows(self) -> int:
        """Rows currently addressable."""
        return self._rows

    @property
    def highest_settled_row(self) -> int:
        """
        Height of the settled stack.

        One past the topmost rock row, so an empty chamber reports 0 and
        a single flat rock on the floor reports 1.
        """
        return self._highest_settled_row

    @property
    def height(self) -> int:
        """Alias for highest_settled_row."""
        return self._highest_settled_row

    @property
    def rock_count(self) -> int:
        """Number of ROCK cells."""
        return int(np.count_nonzero(self._grid[:self._rows]))

    def _check_column(self, col: int) -> None:
        if not 0 <= col < self._width:
            raise IndexError(f"Column {col} out of range [0, {self._width})")

    def occupied(self, col: int, row: int) -> bool:
        """
        True if the cell holds settled rock.

        Rows above the stored height are air.

        Raises:
            IndexError: If col is outside [0, width) or row is negative.
        """
        self._check_column(col)
        if row < 0:
            raise IndexError(f"Row {row} is below the floor")
        if row >= self._rows:
            return False
        return bool(self._grid[row, col])

    def tile_at(self, col: int, row: int) -> Tile:
        """Tile at (col, row), same bounds as occupied()."""
        return Tile.ROCK if self.occupied(col, row) else Tile.AIR

    def ensure_height(self, rows: int) -> None:
        """
        Make every row below `rows` addressable.

        New rows are air. Never shrinks.
        """
        if rows <= self._rows:
            return

        capacity = self._grid.shape[0]
        if rows > capacity:
            while capacity < rows:
                capacity *= 2
            grown = np.zeros((capacity, self._width), dtype=bool)
            grown[:self._rows] = self._grid[:self._rows]
            self._grid = grown

        self._rows = rows

    def fits(self, shape: Shape, col: int, row: int) -> bool:
        """
        True if `shape` anchored at (col, row) lies between the walls,
        on or above the floor, and on no settled rock.
        """
        if col < 0 or row < 0 or col + shape.width > self._width:
            return False

        grid = self._grid
        rows = self._rows
        for dc, dr in shape.cells:
            r = row + dr
            if r < rows and grid[r, col + dc]:
                return False
        return True

    def settle(self, piece: "FallingPiece") -> None:
        """
        Fuse a piece into the stack.

        Raises:
            IndexError: If a cell lies outside the chamber.
            ValueError: If a cell is already rock.
        """
        cells = piece.cells()
        for col, row in cells:
            self._check_column(col)
            if row < 0:
                raise IndexError(f"Row {row} is below the floor")
            if self.occupied(col, row):
                raise ValueError(f"Cell ({col}, {row}) is already rock")

        self.ensure_height(piece.top_row)
        for col, row in cells:
            self._grid[row, col] = True
            if row + 1 > self._column_tops[col]:
                self._column_tops[col] = row + 1

        self._highest_settled_row = max(self._highest_settled_row, piece.top_row)

    def column_heights(self) -> np.ndarray:
        """One past the topmost rock of each column (0 when empty)."""
        return self._column_tops.copy()

    def surface_profile(self) -> Tuple[int, ...]:
        """
        Depth of each column's top below the stack height.

        The column holding the highest rock reports 0; an empty column
        reports the full stack height.
        """
        return tuple(int(d) for d in self._highest_settled_row - self._column_tops)

    def rows_view(self, start: int = 0, stop: Optional[int] = None) -> np.ndarray:
        """Read-only view of grid rows [start, stop)."""
        if stop is None or stop > self._rows:
            stop = self._rows
        view = self._grid[max(0, start):stop]
        view.flags.writeable = False
        return view

    def reset(self) -> None:
        """Clear to an empty chamber."""
        self._grid = np.zeros((INITIAL_CAPACITY, self._width), dtype=bool)
        self._rows = 0
        self._highest_settled_row = 0
        self._column_tops = np.zeros(self._width, dtype=np.int64)
