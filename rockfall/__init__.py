"""
Rockfall Package
================

Simulates rocks falling into a narrow chamber under a repeating jet
pattern and reports how tall the settled tower grows:

- Five rock shapes dropped in a fixed order
- Sideways jet pushes alternating with gravity
- Cycle detection to extrapolate up to a trillion rocks

All tunable parameters are in chamber_config.yaml.
"""

from rockfall.core import highest_point, parse_pushes, load_pushes, Simulation

__all__ = [
    "highest_point",
    "parse_pushes",
    "load_pushes",
    "Simulation",
]
