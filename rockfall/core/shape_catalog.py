"""
Shape Catalog
=============

Provides convenient access to rock shape definitions loaded from config.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple, Optional

from rockfall.core.config_loader import (
    SimConfig,
    ShapeConfig,
    get_config
)


@dataclass(frozen=True)
class Shape:
    """
    Runtime representation of a rock shape.

    Cells are (column, row) offsets from the bottom-left anchor of the
    bounding box, row increasing upward. Shared read-only by every rock
    of this shape.
    """
    index: int
    name: str
    width: int
    height: int
    cells: Tuple[Tuple[int, int], ...]

    @classmethod
    def from_config(cls, index: int, config: ShapeConfig) -> "Shape":
        return cls(
            index=index,
            name=config.name,
            width=config.width,
            height=config.height,
            cells=config.cells
        )

    @property
    def cell_count(self) -> int:
        return len(self.cells)

    def cells_at(self, col: int, row: int) -> Tuple[Tuple[int, int], ...]:
        """Absolute cells when anchored at (col, row)."""
        return tuple((col + dc, row + dr) for dc, dr in self.cells)

    def __repr__(self) -> str:
        return f"Shape({self.index}: {self.name})"


class ShapeCatalog:
    """
    The rocks in drop order.

    Indexing wraps: catalog.for_drop(n) is the shape of the n-th rock.
    """

    def __init__(self, config: Optional[SimConfig] = None):
        """
        Initialize catalog from simulation config.

        Args:
            config: SimConfig instance. If None, loads from default location.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._shapes: Tuple[Shape, ...] = tuple(
            Shape.from_config(i, shape_config)
            for i, shape_config in enumerate(config.shapes)
        )

    def __len__(self) -> int:
        """Number of shapes in the drop order."""
        return len(self._shapes)

    def __getitem__(self, shape_id: int) -> Shape:
        """Get shape by index."""
        if 0 <= shape_id < len(self._shapes):
            return self._shapes[shape_id]
        raise IndexError(f"Shape ID {shape_id} out of range [0, {len(self._shapes)})")

    def __iter__(self):
        """Iterate over shapes in drop order."""
        return iter(self._shapes)

    def for_drop(self, shape_index: int) -> Shape:
        """Shape of the rock with the given (unbounded) drop counter."""
        return self._shapes[shape_index % len(self._shapes)]

    def get_by_name(self, name: str) -> Optional[Shape]:
        """Get shape by name (case-insensitive)."""
        name_lower = name.lower()
        for shape in self._shapes:
            if shape.name.lower() == name_lower:
                return shape
        return None


# Module-level singleton
_cached_catalog: Optional[ShapeCatalog] = None


def get_catalog(config: Optional[SimConfig] = None) -> ShapeCatalog:
    """
    Get the shape catalog singleton.

    Args:
        config: Optional config to use. If None, uses cached or default config.

    Returns:
        ShapeCatalog instance.
    """
    global _cached_catalog
    if _cached_catalog is None or config is not None:
        _cached_catalog = ShapeCatalog(config)
    return _cached_catalog
