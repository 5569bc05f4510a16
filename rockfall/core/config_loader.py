"""
Configuration Loader
====================

Loads and validates chamber_config.yaml, providing typed access to all parameters.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Tuple, Optional

import yaml


# The drop order is fixed at five rocks
SHAPE_COUNT = 5

DEFAULT_CONFIG_PATH = os.path.join(
    os.path.dirname(os.path.dirname(__file__)),
    "chamber_config.yaml"
)


@dataclass(frozen=True)
class ChamberConfig:
    """Chamber geometry and spawn placement."""
    width: int              # Columns between the walls
    spawn_column: int       # Anchor column of a freshly spawned rock
    spawn_clearance: int    # Empty rows left above the stack at spawn


@dataclass(frozen=True)
class ShapeConfig:
    """Configuration for a single rock shape."""
    name: str
    cells: Tuple[Tuple[int, int], ...]

    @property
    def width(self) -> int:
        return max(col for col, _ in self.cells) + 1

    @property
    def height(self) -> int:
        return max(row for _, row in self.cells) + 1


@dataclass(frozen=True)
class CycleConfig:
    """Cycle detection parameters."""
    enabled: bool
    warmup_passes: int
    required_matches: int
    surface_key: bool


@dataclass(frozen=True)
class DefaultsConfig:
    """Defaults used by the command line tools."""
    drop_counts: Tuple[int, ...]


@dataclass(frozen=True)
class SimConfig:
    """
    Complete simulation configuration loaded from YAML.

    All values are immutable to prevent accidental modification during runtime.
    """
    chamber: ChamberConfig
    shapes: Tuple[ShapeConfig, ...]
    cycle: CycleConfig
    defaults: DefaultsConfig

    def get_shape(self, shape_id: int) -> ShapeConfig:
        """Get shape config by index."""
        if 0 <= shape_id < len(self.shapes):
            return self.shapes[shape_id]
        raise ValueError(f"Invalid shape ID: {shape_id}")


def _parse_cells(cells_data: List) -> Tuple[Tuple[int, int], ...]:
    """Parse shape cell offsets from YAML."""
    cells = []
    for cell in cells_data:
        if len(cell) != 2:
            raise ValueError(f"Shape cell must have 2 values [column, row], got {cell}")
        cells.append((int(cell[0]), int(cell[1])))
    return tuple(cells)


def _parse_shape(shape_data: dict) -> ShapeConfig:
    """Parse a single shape configuration from YAML."""
    return ShapeConfig(
        name=str(shape_data["name"]),
        cells=_parse_cells(shape_data["cells"])
    )


def _validate_config(config: SimConfig) -> None:
    """Validate configuration consistency."""
    chamber = config.chamber
    if chamber.width <= 0:
        raise ValueError(f"chamber.width must be positive, got {chamber.width}")

    if not 0 <= chamber.spawn_column < chamber.width:
        raise ValueError(
            f"chamber.spawn_column ({chamber.spawn_column}) must lie in "
            f"[0, {chamber.width})"
        )

    if chamber.spawn_clearance < 0:
        raise ValueError(
            f"chamber.spawn_clearance must be non-negative, got {chamber.spawn_clearance}"
        )

    if len(config.shapes) != SHAPE_COUNT:
        raise ValueError(f"Expected {SHAPE_COUNT} shapes, got {len(config.shapes)}")

    for shape in config.shapes:
        if not shape.cells:
            raise ValueError(f"Shape '{shape.name}' has no cells")
        if any(col < 0 or row < 0 for col, row in shape.cells):
            raise ValueError(f"Shape '{shape.name}' has a negative cell offset")
        if len(set(shape.cells)) != len(shape.cells):
            raise ValueError(f"Shape '{shape.name}' repeats a cell")
        # A new rock must fit between the walls where it spawns
        if chamber.spawn_column + shape.width > chamber.width:
            raise ValueError(
                f"Shape '{shape.name}' (width {shape.width}) does not fit at "
                f"spawn column {chamber.spawn_column} in a {chamber.width}-wide chamber"
            )

    if config.cycle.warmup_passes < 0:
        raise ValueError(
            f"cycle.warmup_passes must be non-negative, got {config.cycle.warmup_passes}"
        )

    if config.cycle.required_matches < 1:
        raise ValueError(
            f"cycle.required_matches must be at least 1, got {config.cycle.required_matches}"
        )

    if any(count < 0 for count in config.defaults.drop_counts):
        raise ValueError(f"defaults.drop_counts must be non-negative, got {config.defaults.drop_counts}")


def load_config(config_path: Optional[str] = None) -> SimConfig:
    """
    Load and validate simulation configuration from YAML.

    Args:
        config_path: Path to chamber_config.yaml. If None, uses default location.

    Returns:
        Validated SimConfig instance.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ValueError: If config validation fails.
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r") as f:
        raw = yaml.safe_load(f)

    chamber_data = raw["chamber"]
    chamber = ChamberConfig(
        width=int(chamber_data.get("width", 7)),
        spawn_column=int(chamber_data.get("spawn_column", 2)),
        spawn_clearance=int(chamber_data.get("spawn_clearance", 3))
    )

    shapes = tuple(_parse_shape(s) for s in raw["shapes"])

    # Cycle section is optional
    cycle_data = raw.get("cycle", {})
    cycle = CycleConfig(
        enabled=bool(cycle_data.get("enabled", True)),
        warmup_passes=int(cycle_data.get("warmup_passes", 1)),
        required_matches=int(cycle_data.get("required_matches", 5)),
        surface_key=bool(cycle_data.get("surface_key", False))
    )

    defaults_data = raw.get("defaults", {})
    defaults = DefaultsConfig(
        drop_counts=tuple(
            int(n) for n in defaults_data.get("drop_counts", [2022, 1_000_000_000_000])
        )
    )

    config = SimConfig(
        chamber=chamber,
        shapes=shapes,
        cycle=cycle,
        defaults=defaults
    )

    _validate_config(config)
    return config


# Module-level singleton for convenience
_cached_config: Optional[SimConfig] = None


def get_config() -> SimConfig:
    """Get the cached simulation configuration, loading if necessary."""
    global _cached_config
    if _cached_config is None:
        _cached_config = load_config()
    return _cached_config


def reload_config(config_path: Optional[str] = None) -> SimConfig:
    """Reload the configuration (useful for testing)."""
    global _cached_config
    _cached_config = load_config(config_path)
    return _cached_config
