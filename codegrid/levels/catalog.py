"""
Level Catalog - The fifteen levels of the coding course.

Each level defines:
- What the player learns (concept, tutorial, instructions, hints)
- How many top-level blocks they may place (max_blocks)
- Which block types appear in the palette
- Whether walls and collectibles are generated
- The goal predicate that decides success

Layouts are not stored here; generator.generate_world() builds the
World for a level, fixed for the introductory levels and seeded-random
for the rest.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum

from ..engine_core.goal import GoalPredicate, collect_all_then_goal, reach_goal
from ..program.blocks import BlockType


class Concept(Enum):
    """The programming idea a level is built around."""
    SEQUENCE = "sequence"
    LOOP = "loop"
    CONDITIONAL = "conditional"
    FUNCTION = "function"
    MIXED = "mixed"


MOVES = (BlockType.UP, BlockType.DOWN, BlockType.LEFT, BlockType.RIGHT)


def _palette(*extra: BlockType) -> frozenset[BlockType]:
    return frozenset(MOVES + extra)


@dataclass(frozen=True)
class LevelDefinition:
    """
    Static description of one level.

    Immutable: worlds and runs are derived from it, never written back.
    """
    level_id: int
    name: str
    concept: str
    tutorial: str
    max_blocks: int
    available_blocks: frozenset[BlockType]
    instructions: tuple[str, ...] = ()
    has_walls: bool = False
    required_concept: Concept | None = None
    collectibles: int = 0
    goal: GoalPredicate = reach_goal
    hints: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {
            "level_id": self.level_id,
            "name": self.name,
            "concept": self.concept,
            "tutorial": self.tutorial,
            "instructions": list(self.instructions),
            "max_blocks": self.max_blocks,
            "has_walls": self.has_walls,
            "available_blocks": [bt.value for bt in BlockType if bt in self.available_blocks],
            "required_concept": self.required_concept.value if self.required_concept else None,
            "collectibles": self.collectibles,
            "hints": list(self.hints),
        }


def _define_sequence_levels() -> list[LevelDefinition]:
    return [
        LevelDefinition(
            level_id=1,
            name="First Steps",
            concept="Basic Movement",
            tutorial="Welcome! Move the robot to the battery.",
            instructions=(
                "Add arrow blocks to build your moves",
                "Each arrow moves the robot one space",
                "Press Run to execute your program",
                "Goal: Reach the battery",
            ),
            max_blocks=4,
            available_blocks=_palette(),
            required_concept=Concept.SEQUENCE,
            hints=("The battery is 2 spaces to the right", "Use 2 RIGHT arrows"),
        ),
        LevelDefinition(
            level_id=2,
            name="Two Turns",
            concept="Sequences",
            tutorial="Navigate around! Use multiple directions.",
            instructions=(
                "You'll need to move in different directions",
                "Plan your path to avoid going off the grid",
                "The order of moves matters!",
            ),
            max_blocks=6,
            available_blocks=_palette(),
            required_concept=Concept.SEQUENCE,
        ),
        LevelDefinition(
            level_id=3,
            name="The Long Path",
            concept="Longer Sequences",
            tutorial="This requires many moves in sequence.",
            instructions=(
                "Notice how many blocks you're using",
                "When you use the same move multiple times...",
                "...wouldn't a shortcut be nice?",
                "Complete this level to unlock LOOPS!",
            ),
            max_blocks=12,
            available_blocks=_palette(),
            required_concept=Concept.SEQUENCE,
        ),
    ]


def _define_loop_levels() -> list[LevelDefinition]:
    return [
        LevelDefinition(
            level_id=4,
            name="Repeat Discovery",
            concept="Loop Introduction",
            tutorial="Try the new LOOP block! Same path, fewer blocks.",
            instructions=(
                "NEW BLOCK UNLOCKED: LOOP (Repeat)",
                "The LOOP block repeats moves multiple times",
                "Instead of: RIGHT RIGHT RIGHT RIGHT",
                "Use: LOOP 4x containing RIGHT",
                "Set how many times to repeat on the LOOP block",
                "Put moves INTO the loop block",
            ),
            max_blocks=8,
            available_blocks=_palette(BlockType.LOOP),
            required_concept=Concept.LOOP,
            hints=(
                "Use LOOP 4x with RIGHT inside",
                "You can combine loops with regular moves",
            ),
        ),
        LevelDefinition(
            level_id=5,
            name="Nested Journey",
            concept="Loop Mastery",
            tutorial="Use multiple loops efficiently!",
            instructions=(
                "This path has repeating patterns",
                "Break it into smaller loops",
                "Example: Move right 3x, then up 3x",
            ),
            max_blocks=6,
            available_blocks=_palette(BlockType.LOOP),
            required_concept=Concept.LOOP,
        ),
        LevelDefinition(
            level_id=6,
            name="Obstacle Course",
            concept="Walls & Loops",
            tutorial="Walls appear! Plan carefully with loops.",
            instructions=(
                "NEW: Walls block your path",
                "Hitting a wall wastes a move",
                "Plan your route to avoid walls",
                "Loops are still useful here!",
            ),
            max_blocks=8,
            has_walls=True,
            available_blocks=_palette(BlockType.LOOP),
            required_concept=Concept.LOOP,
        ),
        LevelDefinition(
            level_id=7,
            name="Collector",
            concept="Multiple Goals",
            tutorial="Collect all coins, then reach the battery!",
            instructions=(
                "NEW: Collectible items!",
                "Use COLLECT to pick up items",
                "You must collect ALL items before reaching the goal",
                "Plan your route efficiently",
            ),
            max_blocks=15,
            available_blocks=_palette(BlockType.COLLECT, BlockType.LOOP),
            collectibles=3,
            goal=collect_all_then_goal,
        ),
    ]


def _define_conditional_levels() -> list[LevelDefinition]:
    return [
        LevelDefinition(
            level_id=8,
            name="Smart Decisions",
            concept="IF Blocks",
            tutorial="Sometimes you need to make decisions!",
            instructions=(
                "NEW BLOCK: IF (Conditional)",
                "IF blocks execute moves only when a condition is true",
                "IF ITEM_HERE -> COLLECT",
                "This picks up items automatically!",
                "Choose the condition on the IF block",
            ),
            max_blocks=10,
            available_blocks=_palette(BlockType.COLLECT, BlockType.LOOP, BlockType.IF),
            required_concept=Concept.CONDITIONAL,
            collectibles=2,
            goal=collect_all_then_goal,
            hints=(
                "Use IF ITEM_HERE with COLLECT inside",
                "You don't need to know exactly where items are!",
            ),
        ),
        LevelDefinition(
            level_id=9,
            name="Wall Detection",
            concept="IF with Obstacles",
            tutorial="Detect walls before hitting them!",
            instructions=(
                "IF WALL_AHEAD lets you detect walls",
                "Make smart turns to avoid obstacles",
                "Combine IF blocks with different directions",
            ),
            max_blocks=12,
            has_walls=True,
            available_blocks=_palette(BlockType.LOOP, BlockType.IF),
            required_concept=Concept.CONDITIONAL,
        ),
        LevelDefinition(
            level_id=10,
            name="Treasure Hunt",
            concept="Complex Conditionals",
            tutorial="Navigate maze, collect treasures!",
            instructions=(
                "Combine everything you've learned",
                "Use loops for repeated moves",
                "Use IF ITEM_HERE to collect automatically",
                "Use IF WALL_AHEAD to avoid crashes",
                "NEW: BREAK stops a loop early when needed!",
            ),
            max_blocks=16,
            has_walls=True,
            available_blocks=_palette(
                BlockType.COLLECT, BlockType.LOOP, BlockType.IF, BlockType.BREAK,
            ),
            required_concept=Concept.CONDITIONAL,
            collectibles=4,
            goal=collect_all_then_goal,
        ),
    ]


def _define_function_levels() -> list[LevelDefinition]:
    return [
        LevelDefinition(
            level_id=11,
            name="Function Power",
            concept="Reusable Code",
            tutorial="Create a function to reuse complex patterns!",
            instructions=(
                "NEW BLOCK: FUNCTION",
                "Functions let you group and reuse sequences",
                "Example: 'StepRight' = RIGHT + IF ITEM_HERE { COLLECT }",
                "Great for repeated complex patterns!",
            ),
            max_blocks=14,
            available_blocks=_palette(
                BlockType.COLLECT, BlockType.LOOP, BlockType.IF,
                BlockType.FUNCTION, BlockType.BREAK,
            ),
            required_concept=Concept.FUNCTION,
            collectibles=3,
            goal=collect_all_then_goal,
        ),
        LevelDefinition(
            level_id=12,
            name="Pattern Master",
            concept="Function Optimization",
            tutorial="Find the repeating pattern and functionize it!",
            instructions=(
                "Look for patterns in your required path",
                "Create a function for the pattern",
                "Use loops around the function",
                "Achieve maximum code efficiency!",
            ),
            max_blocks=10,
            has_walls=True,
            available_blocks=_palette(
                BlockType.LOOP, BlockType.IF, BlockType.FUNCTION, BlockType.BREAK,
            ),
            required_concept=Concept.FUNCTION,
        ),
    ]


def _define_master_levels() -> list[LevelDefinition]:
    everything = frozenset(BlockType)
    return [
        LevelDefinition(
            level_id=13,
            name="The Gauntlet",
            concept="Everything Combined",
            tutorial="Use all your skills to master this complex maze!",
            instructions=(
                "This is a master challenge",
                "You'll need loops, conditionals, and functions",
                "Think about efficiency",
                "Multiple valid solutions exist!",
            ),
            max_blocks=20,
            has_walls=True,
            available_blocks=everything,
            required_concept=Concept.MIXED,
            collectibles=5,
            goal=collect_all_then_goal,
        ),
        LevelDefinition(
            level_id=14,
            name="Efficiency Expert",
            concept="Code Golf",
            tutorial="Same as before, but use MINIMAL blocks!",
            instructions=(
                "You know the concepts...",
                "Now optimize your solution",
                "Use the fewest blocks possible",
                "Think like a real programmer!",
            ),
            max_blocks=12,
            has_walls=True,
            available_blocks=everything - {BlockType.WAIT},
            required_concept=Concept.MIXED,
            collectibles=4,
            goal=collect_all_then_goal,
        ),
        LevelDefinition(
            level_id=15,
            name="Final Boss",
            concept="Ultimate Challenge",
            tutorial="The ultimate programming puzzle!",
            instructions=(
                "FINAL CHALLENGE",
                "Complex maze with multiple paths",
                "Many collectibles and obstacles",
                "Show everything you've learned!",
            ),
            max_blocks=25,
            has_walls=True,
            available_blocks=everything,
            required_concept=Concept.MIXED,
            collectibles=6,
            goal=collect_all_then_goal,
        ),
    ]


def create_catalog() -> dict[int, LevelDefinition]:
    """Build the full level catalog, keyed by level id."""
    levels: list[LevelDefinition] = []
    levels.extend(_define_sequence_levels())
    levels.extend(_define_loop_levels())
    levels.extend(_define_conditional_levels())
    levels.extend(_define_function_levels())
    levels.extend(_define_master_levels())
    return {level.level_id: level for level in levels}


LEVELS: dict[int, LevelDefinition] = create_catalog()


def get_level(level_id: int) -> LevelDefinition | None:
    return LEVELS.get(level_id)


def list_levels() -> list[LevelDefinition]:
    return [LEVELS[level_id] for level_id in sorted(LEVELS)]
