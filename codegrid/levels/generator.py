"""
World Generator - Builds the World a level is played on.

Levels 1-6 use hand-made layouts so the introductory lessons always look
the same. Later levels are generated:
- Levels with collectibles: start top-left, goal bottom-right, random walls
  (if the level has them) and collectibles cycling coin/gem/key
- Other levels: start in the left half, goal in the right half, 4-9 walls

Generation is deterministic for a given seed. Generated layouts are
retried until the goal and every collectible can be reached from the
start.
"""

from __future__ import annotations
from collections import deque
import logging
import random

from ..engine_core.world import Collectible, CollectibleKind, Position, World
from ..errors import WorldValidationError
from .catalog import LevelDefinition

logger = logging.getLogger(__name__)

GRID_SIZE = 6
MAX_ATTEMPTS = 100

_KIND_CYCLE = (CollectibleKind.COIN, CollectibleKind.GEM, CollectibleKind.KEY)

# level_id -> (start, goal, walls)
_FIXED_LAYOUTS: dict[int, tuple[tuple[int, int], tuple[int, int], tuple[tuple[int, int], ...]]] = {
    1: ((1, 2), (3, 2), ()),
    2: ((1, 1), (4, 3), ()),
    3: ((0, 0), (5, 5), ((2, 1), (4, 3))),
    4: ((1, 3), (5, 3), ()),
    5: ((0, 0), (5, 2), ()),
    6: ((0, 0), (5, 5), ((2, 0), (2, 1), (2, 2), (4, 3), (4, 4), (4, 5))),
}


def generate_world(level: LevelDefinition, seed: int | None = None) -> World:
    """
    Build the World for a level.

    Args:
        level: The level to build
        seed: Seed for the random layout (ignored by fixed layouts)

    Raises:
        WorldValidationError: no reachable layout was found
    """
    if level.level_id in _FIXED_LAYOUTS:
        return _fixed_world(level.level_id)

    rng = random.Random(seed)
    for attempt in range(1, MAX_ATTEMPTS + 1):
        if level.collectibles:
            world = _collectible_world(level, rng)
        else:
            world = _random_world(level, rng)
        if is_solvable(world):
            logger.debug(
                "Generated level %d (seed=%s) in %d attempt(s)",
                level.level_id, seed, attempt,
            )
            return world

    raise WorldValidationError(
        [f"Could not generate a reachable layout for level {level.level_id} "
         f"after {MAX_ATTEMPTS} attempts"]
    )


def _fixed_world(level_id: int) -> World:
    start, goal, walls = _FIXED_LAYOUTS[level_id]
    return World(
        grid_size=GRID_SIZE,
        start=Position(*start),
        goal=Position(*goal),
        walls=frozenset(Position(*w) for w in walls),
    )


def _random_cell(rng: random.Random) -> Position:
    return Position(rng.randrange(GRID_SIZE), rng.randrange(GRID_SIZE))


def _place_walls(
    rng: random.Random,
    count: int,
    start: Position,
    goal: Position,
) -> set[Position]:
    walls: set[Position] = set()
    while len(walls) < count:
        cell = _random_cell(rng)
        if cell != start and cell != goal:
            walls.add(cell)
    return walls


def _collectible_world(level: LevelDefinition, rng: random.Random) -> World:
    start = Position(0, 0)
    goal = Position(GRID_SIZE - 1, GRID_SIZE - 1)

    walls: set[Position] = set()
    if level.has_walls:
        walls = _place_walls(rng, min(8, 3 + level.level_id), start, goal)

    taken = {start, goal} | walls
    items: list[Collectible] = []
    for i in range(level.collectibles):
        cell = _random_cell(rng)
        while cell in taken:
            cell = _random_cell(rng)
        taken.add(cell)
        items.append(Collectible(position=cell, kind=_KIND_CYCLE[i % len(_KIND_CYCLE)]))

    return World(
        grid_size=GRID_SIZE,
        start=start,
        goal=goal,
        walls=frozenset(walls),
        collectibles=tuple(items),
    )


def _random_world(level: LevelDefinition, rng: random.Random) -> World:
    half = GRID_SIZE // 2
    start = Position(rng.randrange(half), rng.randrange(GRID_SIZE))
    goal = Position(half + rng.randrange(GRID_SIZE - half), rng.randrange(GRID_SIZE))

    walls: set[Position] = set()
    if level.has_walls:
        walls = _place_walls(rng, 4 + rng.randrange(6), start, goal)

    return World(
        grid_size=GRID_SIZE,
        start=start,
        goal=goal,
        walls=frozenset(walls),
    )


def reachable_cells(world: World) -> set[Position]:
    """Cells the robot can reach from the start (breadth-first flood fill)."""
    seen = {world.start}
    queue = deque([world.start])
    while queue:
        cell = queue.popleft()
        for dx, dy in ((1, 0), (-1, 0), (0, 1), (0, -1)):
            nxt = Position(cell.x + dx, cell.y + dy)
            if nxt not in seen and world.is_passable(nxt):
                seen.add(nxt)
                queue.append(nxt)
    return seen


def is_solvable(world: World) -> bool:
    """Can the goal and every collectible be reached from the start?"""
    reachable = reachable_cells(world)
    if world.goal not in reachable:
        return False
    return all(item.position in reachable for item in world.collectibles)
