"""
Session Module - Run lifecycle for block programs.

A run represents one execution of a program:
- Created when the player presses Run
- Streams trace events for the host to animate
- Ends FINISHED with an outcome, or CANCELLED with none

Runs are EPHEMERAL:
- No persistence
- Every run starts from the level's initial state
"""

from .run import RunHandle, RunState, cancel, outcome, start_run
from .manager import RunManager, RunRecord

__all__ = [
    "RunHandle",
    "RunState",
    "cancel",
    "outcome",
    "start_run",
    "RunManager",
    "RunRecord",
]
