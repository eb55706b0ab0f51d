"""
Engine exceptions.

Gameplay outcomes (blocked moves, missed goals, cancellation) are never
exceptions. These classes cover construction mistakes and lifecycle misuse.
"""

from __future__ import annotations


class CodegridError(Exception):
    """Base class for all codegrid errors."""


class WorldValidationError(CodegridError):
    """Raised when a World violates its invariants."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__(f"World validation failed with {len(errors)} error(s): {'; '.join(errors)}")


class ProgramValidationError(CodegridError):
    """Raised when a block program is malformed or breaks level rules."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__(f"Program validation failed with {len(errors)} error(s): {'; '.join(errors)}")


class BlockBudgetExceeded(ProgramValidationError):
    """Raised by the builder when the top-level block budget is full."""

    def __init__(self, max_blocks: int):
        self.max_blocks = max_blocks
        super().__init__([f"Block limit reached: at most {max_blocks} top-level blocks"])


class EmptyProgramError(CodegridError):
    """Raised when asked to run a program with no blocks."""

    def __init__(self):
        super().__init__("Nothing to run: the program is empty")


class RunStateError(CodegridError):
    """Raised when a run is used in a way its current state does not allow."""
