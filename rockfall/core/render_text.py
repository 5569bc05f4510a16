"""
Text Renderer
=============

Draws the chamber as text for debugging:

    |..@@...|
    |..@@...|
    |#......|
    |..#....|
    +-------+

`#` is settled rock, `@` the rock in flight, `.` air.
"""

from __future__ import annotations

from typing import List, Optional

import numpy as np

from rockfall.core.chamber import Chamber, Tile
from rockfall.core.drop_cycle import FallingPiece

FALLING_CHAR = "@"


def render_chamber(
    chamber: Chamber,
    piece: Optional[FallingPiece] = None,
    max_rows: Optional[int] = None
) -> str:
    """
    Render every stored row, top row first.

    Args:
        chamber: Chamber to draw.
        piece: Rock in flight to overlay, if any.
        max_rows: Only draw this many rows from the top.

    Returns:
        Multi-line string ending with the floor line and a newline.
    """
    rows = chamber.stored_rows
    start = 0 if max_rows is None else max(0, rows - max_rows)

    canvas = np.full((rows - start, chamber.width), Tile.AIR.value, dtype="<U1")
    canvas[chamber.rows_view(start, rows)] = Tile.ROCK.value

    if piece is not None:
        for col, row in piece.cells():
            if start <= row < rows:
                canvas[row - start, col] = FALLING_CHAR

    lines: List[str] = ["|" + "".join(canvas[r]) + "|" for r in range(len(canvas) - 1, -1, -1)]
    lines.append("+" + "-" * chamber.width + "+")
    return "\n".join(lines) + "\n"
