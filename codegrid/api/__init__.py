"""
API Module - Game client interface.

Exposes the engine via REST API. The client:
1. Lists levels and fetches one with its generated world
2. Submits a block program, which creates a run
3. Pulls trace events in batches and animates them
4. Reads the outcome, or cancels mid-run

All state is run-scoped. No persistent user accounts required.
"""

from .schemas import (
    # Requests
    CreateRunRequest,
    # Responses
    CancelRunResponse,
    ErrorResponse,
    EventsResponse,
    LevelDetailResponse,
    LevelListResponse,
    RunResponse,
    # Shared
    OutcomeInfo,
    TraceEventInfo,
    WorldInfo,
    # Enums
    ErrorCode,
    RunStatus,
)
from .service import APIService, ServiceError
from .app import create_app

__all__ = [
    # Requests
    "CreateRunRequest",
    # Responses
    "CancelRunResponse",
    "ErrorResponse",
    "EventsResponse",
    "LevelDetailResponse",
    "LevelListResponse",
    "RunResponse",
    # Shared
    "OutcomeInfo",
    "TraceEventInfo",
    "WorldInfo",
    # Enums
    "ErrorCode",
    "RunStatus",
    # Service
    "APIService",
    "ServiceError",
    "create_app",
]
