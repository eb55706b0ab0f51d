"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the contract between the game client and the engine.

Error Codes:
- LEVEL_NOT_FOUND: Level id is not in the catalog
- RUN_NOT_FOUND: Run does not exist or has been cleaned up
- INVALID_PROGRAM: Program could not be parsed or breaks level rules
- EMPTY_PROGRAM: Program has no blocks
- RUN_NOT_FINISHED: Outcome requested before the run finished
"""

from enum import Enum
from typing import Optional, Any
from pydantic import BaseModel, Field


# =============================================================================
# Enums
# =============================================================================

class RunStatus(str, Enum):
    """Run lifecycle states."""
    IDLE = "idle"
    RUNNING = "running"
    FINISHED = "finished"
    CANCELLED = "cancelled"


class ErrorCode(str, Enum):
    """Structured error codes."""
    LEVEL_NOT_FOUND = "LEVEL_NOT_FOUND"
    RUN_NOT_FOUND = "RUN_NOT_FOUND"
    INVALID_PROGRAM = "INVALID_PROGRAM"
    EMPTY_PROGRAM = "EMPTY_PROGRAM"
    RUN_NOT_FINISHED = "RUN_NOT_FINISHED"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# =============================================================================
# Shared Models
# =============================================================================

class PositionInfo(BaseModel):
    """A grid cell."""
    x: int
    y: int


class CollectibleInfo(BaseModel):
    """An item on the grid."""
    x: int
    y: int
    kind: str = Field(description="coin, gem or key")


class WorldInfo(BaseModel):
    """Layout of a generated level."""
    grid_size: int
    start: PositionInfo
    goal: PositionInfo
    walls: list[PositionInfo] = Field(default_factory=list)
    collectibles: list[CollectibleInfo] = Field(default_factory=list)


class LevelSummary(BaseModel):
    """Catalog entry."""
    level_id: int
    name: str
    concept: str
    max_blocks: int
    has_walls: bool = False
    collectibles: int = 0


class TraceEventInfo(BaseModel):
    """One atomic action of a run."""
    sequence: int
    kind: str = Field(description="moved, blocked, collected, waited or broke")
    actor_pos: PositionInfo
    collected: list[bool] = Field(default_factory=list, description="Collected flag per collectible")
    block_path: list[int] = Field(default_factory=list, description="Child indices of the source block")
    direction: Optional[str] = None
    target: Optional[PositionInfo] = None
    collectible: Optional[CollectibleInfo] = None


class OutcomeInfo(BaseModel):
    """Verdict of a finished run."""
    success: bool
    message: str
    failure_code: Optional[str] = Field(None, description="POSITION_MISMATCH or MISSING_COLLECTIBLES")
    final_position: PositionInfo
    collected_count: int = 0
    total_collectibles: int = 0
    terminated_early: bool = False
    steps: int = 0


# =============================================================================
# Request Models
# =============================================================================

class CreateRunRequest(BaseModel):
    """Request to run a program on a level."""
    level_id: int = Field(..., ge=1, description="Level to play")
    program: list[dict[str, Any]] = Field(
        ...,
        description='Block list, e.g. [{"type": "LOOP", "value": 4, "children": [{"type": "RIGHT"}]}]',
    )
    seed: Optional[int] = Field(None, description="Seed for generated layouts")


# =============================================================================
# Response Models
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str = Field(..., description="Human-readable error message")
    error_code: ErrorCode = Field(..., description="Machine-readable error code")
    details: Optional[dict[str, Any]] = Field(None, description="Additional error context")
    api_version: str = Field("v1", description="API version")


class LevelListResponse(BaseModel):
    """The level catalog."""
    levels: list[LevelSummary]
    count: int


class LevelDetailResponse(BaseModel):
    """A level with its generated world."""
    level_id: int
    name: str
    concept: str
    tutorial: str
    instructions: list[str] = Field(default_factory=list)
    hints: list[str] = Field(default_factory=list)
    max_blocks: int
    available_blocks: list[str]
    required_concept: Optional[str] = None
    seed: Optional[int] = None
    world: WorldInfo


class RunResponse(BaseModel):
    """Current state of a run."""
    run_id: str
    level_id: Optional[int] = None
    state: RunStatus
    events_emitted: int = 0
    outcome: Optional[OutcomeInfo] = None
    warnings: list[str] = Field(default_factory=list)


class EventsResponse(BaseModel):
    """A batch of trace events."""
    run_id: str
    state: RunStatus
    events: list[TraceEventInfo]
    done: bool = Field(description="True once no more events will be produced")
    outcome: Optional[OutcomeInfo] = None


class CancelRunResponse(BaseModel):
    """Result of a cancel request."""
    run_id: str
    cancelled: bool = Field(description="False if the run had already ended")
    state: RunStatus


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    service: str
    version: str
