"""
Run Manager - Creates and tracks runs by ID.

LIFECYCLE:
1. Host submits a program for a level -> run created (IDLE)
2. Host pulls events in batches -> RUNNING
3. Program ends -> FINISHED, outcome available
   or host cancels -> CANCELLED, no outcome
4. Host ends the run, or stale terminal runs are cleaned up

PERSISTENCE RULES:
- Runs are in-memory only
- Nothing survives a restart; re-running means a new run
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any
import logging
import time

from ..engine_core.goal import GoalPredicate, reach_goal
from ..engine_core.trace import ExecutionOutcome
from ..engine_core.world import World
from ..program.blocks import Program
from .run import RunHandle, RunState, start_run

logger = logging.getLogger(__name__)


@dataclass
class RunRecord:
    """A tracked run plus the context it was created for."""
    handle: RunHandle
    level_id: int | None = None
    seed: int | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def run_id(self) -> str:
        return self.handle.run_id


class RunManager:
    """
    Manages runs.

    Responsibilities:
    - Create runs from programs and worlds
    - Look runs up for the host
    - Clean up finished runs

    No persistence - runs are in-memory only.
    """

    def __init__(self):
        self._runs: dict[str, RunRecord] = {}

    def start_run(
        self,
        program: Program,
        world: World,
        goal: GoalPredicate = reach_goal,
        level_id: int | None = None,
        seed: int | None = None,
    ) -> RunHandle:
        """
        Create and register a new run.

        Raises EmptyProgramError / ProgramValidationError like start_run().
        """
        handle = start_run(program, world, goal)
        self._runs[handle.run_id] = RunRecord(handle=handle, level_id=level_id, seed=seed)
        logger.info(
            "Run %s created (level=%s, %d top-level blocks)",
            handle.run_id, level_id, program.top_level_count,
        )
        return handle

    def get_run(self, run_id: str) -> RunHandle | None:
        record = self._runs.get(run_id)
        return record.handle if record else None

    def get_record(self, run_id: str) -> RunRecord | None:
        return self._runs.get(run_id)

    def cancel(self, run_id: str) -> bool:
        """Cancel a run. Returns False if unknown or already over."""
        handle = self.get_run(run_id)
        if handle is None:
            return False
        return handle.cancel()

    def outcome(self, run_id: str) -> ExecutionOutcome | None:
        handle = self.get_run(run_id)
        return handle.outcome if handle else None

    def end_run(self, run_id: str) -> bool:
        """
        Forget a run, cancelling it first if it is still going.
        """
        record = self._runs.pop(run_id, None)
        if record is None:
            return False
        record.handle.cancel()
        return True

    def list_active_runs(self) -> list[str]:
        """List IDs of runs that are IDLE or RUNNING."""
        return [
            run_id for run_id, record in self._runs.items()
            if record.handle.is_active
        ]

    def list_runs(self) -> list[str]:
        return list(self._runs.keys())

    def cleanup_finished(self, max_age_seconds: int = 3600) -> int:
        """
        Drop terminal runs that ended more than max_age_seconds ago.

        Returns the number of runs removed.
        """
        current_time = time.time()
        to_remove = [
            run_id for run_id, record in self._runs.items()
            if record.handle.state in (RunState.FINISHED, RunState.CANCELLED)
            and record.handle.finished_at is not None
            and current_time - record.handle.finished_at > max_age_seconds
        ]
        for run_id in to_remove:
            del self._runs[run_id]
        return len(to_remove)
