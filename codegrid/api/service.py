"""
API Service - Business logic layer between API and engine.

The service:
1. Looks levels up and generates their worlds
2. Parses and validates submitted programs
3. Creates runs and hands out their events in batches
4. Formats responses for the client

This layer is framework-agnostic (can be used with FastAPI, Flask, etc.)
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any
import logging

from ..engine_core.trace import ExecutionOutcome, TraceEvent
from ..engine_core.world import Collectible, Position, World
from ..errors import CodegridError, EmptyProgramError, ProgramValidationError
from ..levels import LevelDefinition, generate_world, get_level, list_levels
from ..program.serialization import parse_program
from ..program.validation import validate_for_level
from ..session import RunHandle, RunManager, RunState
from .schemas import (
    CancelRunResponse,
    CollectibleInfo,
    CreateRunRequest,
    ErrorCode,
    EventsResponse,
    LevelDetailResponse,
    LevelListResponse,
    LevelSummary,
    OutcomeInfo,
    PositionInfo,
    RunResponse,
    RunStatus,
    TraceEventInfo,
    WorldInfo,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_EVENTS_PER_PULL = 100
DEFAULT_RUN_TTL_SECONDS = 3600


class ServiceError(CodegridError):
    """A request the service refuses, with the code the client sees."""

    def __init__(
        self,
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: dict[str, Any] | None = None,
    ):
        self.error_code = error_code
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(message)


@dataclass
class APIService:
    """
    Main API service for the game client.

    Usage:
        service = APIService()

        # Show a level
        detail = service.get_level(4, seed=7)

        # Run a program
        run = service.create_run(CreateRunRequest(level_id=4, program=[...]))

        # Animate it
        batch = service.pull_events(run.run_id, limit=10)
    """
    run_manager: RunManager = field(default_factory=RunManager)
    max_events_per_pull: int = DEFAULT_MAX_EVENTS_PER_PULL
    run_ttl_seconds: int = DEFAULT_RUN_TTL_SECONDS

    # Levels

    def list_levels(self) -> LevelListResponse:
        levels = [
            LevelSummary(
                level_id=level.level_id,
                name=level.name,
                concept=level.concept,
                max_blocks=level.max_blocks,
                has_walls=level.has_walls,
                collectibles=level.collectibles,
            )
            for level in list_levels()
        ]
        return LevelListResponse(levels=levels, count=len(levels))

    def get_level(self, level_id: int, seed: int | None = None) -> LevelDetailResponse:
        level = self._require_level(level_id)
        world = generate_world(level, seed=seed)
        data = level.to_dict()
        return LevelDetailResponse(
            level_id=level.level_id,
            name=level.name,
            concept=level.concept,
            tutorial=level.tutorial,
            instructions=data["instructions"],
            hints=data["hints"],
            max_blocks=level.max_blocks,
            available_blocks=data["available_blocks"],
            required_concept=data["required_concept"],
            seed=seed,
            world=self._world_info(world),
        )

    # Runs

    def create_run(self, request: CreateRunRequest) -> RunResponse:
        """
        Parse, validate and start a program on a level.

        The world is regenerated from (level_id, seed), so a client that
        fetched the level with the same seed sees the same layout.
        Finished and cancelled runs older than run_ttl_seconds are dropped
        first.
        """
        removed = self.run_manager.cleanup_finished(self.run_ttl_seconds)
        if removed:
            logger.debug("Dropped %d stale run(s)", removed)

        level = self._require_level(request.level_id)

        try:
            program = parse_program(request.program)
        except ProgramValidationError as e:
            raise ServiceError(
                ErrorCode.INVALID_PROGRAM,
                "Program could not be parsed",
                details={"errors": e.errors},
            )

        if program.is_empty:
            raise ServiceError(ErrorCode.EMPTY_PROGRAM, str(EmptyProgramError()))

        validation = validate_for_level(program, level)
        if not validation.valid:
            raise ServiceError(
                ErrorCode.INVALID_PROGRAM,
                f"Program does not fit level {level.level_id}",
                details={"errors": validation.errors},
            )

        world = generate_world(level, seed=request.seed)
        handle = self.run_manager.start_run(
            program,
            world,
            goal=level.goal,
            level_id=level.level_id,
            seed=request.seed,
        )
        response = self._run_to_response(handle)
        response.warnings = validation.warnings
        return response

    def get_run(self, run_id: str) -> RunResponse:
        return self._run_to_response(self._require_run(run_id))

    def pull_events(self, run_id: str, limit: int | None = None) -> EventsResponse:
        """
        Advance a run by up to `limit` atomic actions.

        The batch is capped at max_events_per_pull. An empty batch with
        done=True means the run is over.
        """
        handle = self._require_run(run_id)
        batch_size = min(limit or self.max_events_per_pull, self.max_events_per_pull)

        events: list[TraceEventInfo] = []
        while len(events) < batch_size:
            event = handle.step()
            if event is None:
                break
            events.append(self._event_info(event))

        return EventsResponse(
            run_id=handle.run_id,
            state=RunStatus(handle.state.value),
            events=events,
            done=not handle.is_active,
            outcome=self._outcome_info(handle),
        )

    def cancel_run(self, run_id: str) -> CancelRunResponse:
        handle = self._require_run(run_id)
        cancelled = handle.cancel()
        return CancelRunResponse(
            run_id=run_id,
            cancelled=cancelled,
            state=RunStatus(handle.state.value),
        )

    def get_outcome(self, run_id: str) -> OutcomeInfo:
        handle = self._require_run(run_id)
        if handle.state is not RunState.FINISHED:
            raise ServiceError(
                ErrorCode.RUN_NOT_FINISHED,
                f"Run {run_id} is {handle.state.value}; no outcome yet",
                status_code=409,
            )
        return self._outcome_info(handle)

    def end_run(self, run_id: str) -> bool:
        return self.run_manager.end_run(run_id)

    def list_runs(self) -> list[str]:
        return self.run_manager.list_active_runs()

    # =========================================================================
    # Helpers
    # =========================================================================

    def _require_level(self, level_id: int) -> LevelDefinition:
        level = get_level(level_id)
        if level is None:
            raise ServiceError(
                ErrorCode.LEVEL_NOT_FOUND,
                f"Level {level_id} not found",
                status_code=404,
            )
        return level

    def _require_run(self, run_id: str) -> RunHandle:
        handle = self.run_manager.get_run(run_id)
        if handle is None:
            raise ServiceError(
                ErrorCode.RUN_NOT_FOUND,
                f"Run {run_id} not found",
                status_code=404,
            )
        return handle

    def _run_to_response(self, handle: RunHandle) -> RunResponse:
        record = self.run_manager.get_record(handle.run_id)
        return RunResponse(
            run_id=handle.run_id,
            level_id=record.level_id if record else None,
            state=RunStatus(handle.state.value),
            events_emitted=len(handle.trace),
            outcome=self._outcome_info(handle),
        )

    @staticmethod
    def _position(pos: Position) -> PositionInfo:
        return PositionInfo(x=pos.x, y=pos.y)

    @staticmethod
    def _collectible(item: Collectible) -> CollectibleInfo:
        return CollectibleInfo(x=item.position.x, y=item.position.y, kind=item.kind.value)

    def _world_info(self, world: World) -> WorldInfo:
        return WorldInfo(
            grid_size=world.grid_size,
            start=self._position(world.start),
            goal=self._position(world.goal),
            walls=[self._position(w) for w in sorted(world.walls)],
            collectibles=[self._collectible(c) for c in world.collectibles],
        )

    def _event_info(self, event: TraceEvent) -> TraceEventInfo:
        return TraceEventInfo(
            sequence=event.sequence,
            kind=event.kind.value,
            actor_pos=self._position(event.actor_pos),
            collected=list(event.collectibles_snapshot),
            block_path=list(event.block_path),
            direction=event.direction.value if event.direction else None,
            target=self._position(event.target) if event.target else None,
            collectible=self._collectible(event.collectible) if event.collectible else None,
        )

    def _outcome_info(self, handle: RunHandle) -> OutcomeInfo | None:
        outcome: ExecutionOutcome | None = handle.outcome
        if outcome is None:
            return None
        goal = outcome.goal
        return OutcomeInfo(
            success=outcome.success,
            message=goal.message,
            failure_code=goal.failure.code if goal.failure else None,
            final_position=self._position(outcome.final_position),
            collected_count=outcome.collected_count,
            total_collectibles=len(outcome.collected),
            terminated_early=outcome.terminated_early,
            steps=outcome.steps,
        )
