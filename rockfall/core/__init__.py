"""
Rockfall Core - The tower simulation.

This module provides the chamber, the rock drop loop, and the cycle
detector that makes very large drop counts tractable.

Main exports:
- highest_point: Stack height after N rocks (the main entry point)
- Simulation: Driver owning one chamber
- DropCycle: Single-rock spawn/push/fall/settle loop
- PeriodExtrapolator: Repeating-signature detector and cycle skipper
- SimConfig: Configuration loaded from chamber_config.yaml
"""

from rockfall.core.config_loader import SimConfig, load_config
from rockfall.core.shape_catalog import Shape, ShapeCatalog
from rockfall.core.push_sequence import (
    PushDirection,
    PushSequence,
    parse_pushes,
    load_pushes,
)
from rockfall.core.chamber import Chamber, Tile
from rockfall.core.drop_cycle import DropCycle, DropEvent, FallingPiece
from rockfall.core.period_extrapolator import CycleInfo, PeriodExtrapolator
from rockfall.core.simulation import Simulation, SimulationResult, highest_point
from rockfall.core.render_text import render_chamber

__all__ = [
    "SimConfig",
    "load_config",
    "Shape",
    "ShapeCatalog",
    "PushDirection",
    "PushSequence",
    "parse_pushes",
    "load_pushes",
    "Chamber",
    "Tile",
    "DropCycle",
    "DropEvent",
    "FallingPiece",
    "CycleInfo",
    "PeriodExtrapolator",
    "Simulation",
    "SimulationResult",
    "highest_point",
    "render_chamber",
]
