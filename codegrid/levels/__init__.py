"""
Levels - The course catalog and the worlds it is played on.
"""

from .catalog import (
    LEVELS,
    Concept,
    LevelDefinition,
    get_level,
    list_levels,
)
from .generator import GRID_SIZE, generate_world, is_solvable, reachable_cells

__all__ = [
    "LEVELS",
    "Concept",
    "LevelDefinition",
    "get_level",
    "list_levels",
    "GRID_SIZE",
    "generate_world",
    "is_solvable",
    "reachable_cells",
]
