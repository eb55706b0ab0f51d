"""
FastAPI Application - REST API for the game client.

Endpoints:
    GET    /api/v1/levels                 List the level catalog
    GET    /api/v1/levels/{id}            Level detail with its generated world
    POST   /api/v1/runs                   Submit a program, create a run
    GET    /api/v1/runs                   List active runs
    GET    /api/v1/runs/{id}              Run state (and outcome once finished)
    GET    /api/v1/runs/{id}/events       Pull the next batch of trace events
    GET    /api/v1/runs/{id}/outcome      Outcome of a finished run
    POST   /api/v1/runs/{id}/cancel       Cancel a run
    DELETE /api/v1/runs/{id}              Forget a run

Run Flow:
    1. POST /runs validates the program against the level
    2. Client pulls events with GET /events and animates them at its own pace
    3. When done=true the outcome is included
    4. Pressing reset mid-animation calls POST /cancel

All responses are JSON with explicit Pydantic schemas.
"""

from typing import Annotated, Optional, Union
import logging
import os

# Environment configuration
CODEGRID_ENV = os.getenv("CODEGRID_ENV", "development")
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")
MAX_EVENTS_PER_PULL = int(os.getenv("CODEGRID_MAX_EVENTS_PER_PULL", "100"))
RUN_TTL_SECONDS = int(os.getenv("CODEGRID_RUN_TTL_SECONDS", "3600"))

logger = logging.getLogger(__name__)


def create_app(service=None):
    """
    Create the FastAPI application.

    Args:
        service: Optional APIService instance (creates new if not provided)

    Returns:
        FastAPI application instance
    """
    try:
        from fastapi import FastAPI, Query
        from fastapi.encoders import jsonable_encoder
        from fastapi.exceptions import RequestValidationError
        from fastapi.middleware.cors import CORSMiddleware
        from fastapi.responses import JSONResponse
    except ImportError:
        raise ImportError(
            "FastAPI not installed. Install with: pip install fastapi uvicorn"
        )

    from .service import APIService, ServiceError
    from .schemas import (
        # Request models
        CreateRunRequest,
        # Response models
        CancelRunResponse,
        ErrorResponse,
        EventsResponse,
        HealthResponse,
        LevelDetailResponse,
        LevelListResponse,
        OutcomeInfo,
        RunResponse,
        # Enums
        ErrorCode,
    )

    app = FastAPI(
        title="Codegrid API",
        description="""
Block-programming puzzle engine - build a program, watch the robot run it.

## Run Flow

1. `POST /api/v1/runs` with a level and a block program
2. `GET /api/v1/runs/{run_id}/events?limit=N` until `done=true`
3. The last batch carries the `outcome`

## Error Codes

| Code | Description |
|------|-------------|
| `LEVEL_NOT_FOUND` | Level id is not in the catalog |
| `RUN_NOT_FOUND` | Run does not exist |
| `INVALID_PROGRAM` | Program is malformed or breaks level rules |
| `EMPTY_PROGRAM` | Program has no blocks |
| `RUN_NOT_FINISHED` | Outcome requested before the run finished |
| `VALIDATION_ERROR` | Request body or parameters failed validation |
| `INTERNAL_ERROR` | Unexpected server error |
        """,
        version="0.1.0",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    api_service = service or APIService(
        max_events_per_pull=MAX_EVENTS_PER_PULL,
        run_ttl_seconds=RUN_TTL_SECONDS,
    )

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Optional[dict] = None,
    ) -> JSONResponse:
        """Create a standardized error response."""
        return JSONResponse(
            status_code=status_code,
            content=ErrorResponse(
                error=message,
                error_code=error_code,
                details=details,
            ).model_dump(mode="json"),
        )

    @app.exception_handler(ServiceError)
    async def service_error_handler(request, exc: ServiceError):
        logger.info("%s %s -> %s: %s", request.method, request.url.path, exc.error_code.value, exc.message)
        return make_error_response(exc.error_code, exc.message, exc.status_code, exc.details)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request, exc: RequestValidationError):
        return make_error_response(
            ErrorCode.VALIDATION_ERROR,
            "Request failed validation",
            status_code=422,
            details={"errors": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return make_error_response(
            ErrorCode.INTERNAL_ERROR,
            "Internal server error",
            status_code=500,
        )

    # =========================================================================
    # Level Endpoints
    # =========================================================================

    @app.get(
        "/api/v1/levels",
        response_model=LevelListResponse,
        tags=["Levels"],
        summary="List the level catalog",
    )
    async def list_levels() -> LevelListResponse:
        return api_service.list_levels()

    @app.get(
        "/api/v1/levels/{level_id}",
        response_model=LevelDetailResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Levels"],
        summary="Get a level and its world",
    )
    async def get_level(
        level_id: int,
        seed: Annotated[Optional[int], Query(description="Seed for generated layouts")] = None,
    ) -> LevelDetailResponse:
        """
        Get a level with its world.

        Levels 1-6 have fixed layouts. Later levels are generated; pass the
        same `seed` here and to `POST /runs` to play the layout you saw.
        """
        return api_service.get_level(level_id, seed=seed)

    # =========================================================================
    # Run Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/runs",
        response_model=RunResponse,
        responses={
            400: {"model": ErrorResponse, "description": "Invalid or empty program"},
            404: {"model": ErrorResponse, "description": "Level not found"},
        },
        tags=["Runs"],
        summary="Run a program on a level",
    )
    async def create_run(body: CreateRunRequest) -> RunResponse:
        """
        Validate a program against the level and create a run.

        **Request Body:**
        ```json
        {
          "level_id": 4,
          "program": [{"type": "LOOP", "value": 4, "children": [{"type": "RIGHT"}]}]
        }
        ```
        """
        return api_service.create_run(body)

    @app.get(
        "/api/v1/runs",
        tags=["Runs"],
        summary="List active runs",
    )
    async def list_runs() -> dict:
        runs = api_service.list_runs()
        return {"runs": runs, "count": len(runs)}

    @app.get(
        "/api/v1/runs/{run_id}",
        response_model=RunResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Runs"],
        summary="Get run state",
    )
    async def get_run(run_id: str) -> RunResponse:
        return api_service.get_run(run_id)

    @app.get(
        "/api/v1/runs/{run_id}/events",
        response_model=EventsResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Runs"],
        summary="Pull the next trace events",
    )
    async def pull_events(
        run_id: str,
        limit: Annotated[Optional[int], Query(ge=1, description="Maximum events to return")] = None,
    ) -> EventsResponse:
        """
        Advance the run by up to `limit` atomic actions.

        The first call starts the run. Once `done` is true no further
        events will be produced.
        """
        return api_service.pull_events(run_id, limit=limit)

    @app.get(
        "/api/v1/runs/{run_id}/outcome",
        response_model=OutcomeInfo,
        responses={
            404: {"model": ErrorResponse},
            409: {"model": ErrorResponse, "description": "Run not finished"},
        },
        tags=["Runs"],
        summary="Get the outcome of a finished run",
    )
    async def get_outcome(run_id: str) -> OutcomeInfo:
        return api_service.get_outcome(run_id)

    @app.post(
        "/api/v1/runs/{run_id}/cancel",
        response_model=CancelRunResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Runs"],
        summary="Cancel a run",
    )
    async def cancel_run(run_id: str) -> CancelRunResponse:
        """Stop a run before its next action. A cancelled run has no outcome."""
        return api_service.cancel_run(run_id)

    @app.delete(
        "/api/v1/runs/{run_id}",
        response_model=None,
        tags=["Runs"],
        summary="Forget a run",
    )
    async def end_run(run_id: str) -> Union[dict, JSONResponse]:
        if not api_service.end_run(run_id):
            return make_error_response(
                ErrorCode.RUN_NOT_FOUND,
                f"Run {run_id} not found",
                status_code=404,
            )
        return {"success": True, "run_id": run_id}

    # =========================================================================
    # Health Check
    # =========================================================================

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        """Health check endpoint for load balancers."""
        return HealthResponse(
            status="healthy",
            service="codegrid-engine",
            version="0.1.0",
        )

    @app.get("/", tags=["System"])
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "Codegrid API",
            "version": "0.1.0",
            "env": CODEGRID_ENV,
            "docs": "/api/docs",
            "health": "/health",
        }

    return app


# For running directly: uvicorn codegrid.api.app:app
app = None
try:
    app = create_app()
except ImportError:
    # FastAPI not installed
    pass
