"""
FastAPI server for the shared league room.

Provides HTTP endpoints to read and replace the team list, a Server-Sent
Events stream of every accepted update, and live fantasy scores.

The app is built by create_app(); run it with
`uvicorn --factory league_room.room.api_server:create_app` or `league-room`.
"""

import logging
from pathlib import Path
from typing import AsyncIterator, Dict, Optional

from fastapi import APIRouter, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from .. import config
from ..errors import UpstreamFetchError, ValidationError
from ..espn_client import EspnClient
from ..live_scores import build_live_scores
from .api_serializers import (
    ErrorResponse,
    HealthResponse,
    LiveScoresErrorResponse,
    LiveScoresResponse,
    RoomDocumentResponse,
    serialize_live_scores,
    serialize_room_document,
)
from .broadcast_hub import ListenerChannel
from .room_coordinator import RoomCoordinator
from .state_store import RoomStateStore

logger = logging.getLogger(__name__)

CORS_HEADERS = {'Access-Control-Allow-Origin': '*'}

STREAM_HEADERS = {
    'Cache-Control': 'no-cache',
    'Connection': 'keep-alive',
    'X-Accel-Buffering': 'no',
    **CORS_HEADERS,
}

room_router = APIRouter(tags=["Room"])
scores_router = APIRouter(tags=["Live Scores"])


def json_response(payload: Dict, status_code: int = 200, headers: Optional[Dict] = None) -> JSONResponse:
    """JSON response carrying the open cross-origin header."""
    return JSONResponse(
        content=payload,
        status_code=status_code,
        headers={**(headers or {}), **CORS_HEADERS}
    )


def get_coordinator(request: Request) -> RoomCoordinator:
    return request.app.state.coordinator


async def event_stream(
    coordinator: RoomCoordinator,
    channel: ListenerChannel,
    heartbeat_interval: Optional[float] = None
) -> AsyncIterator[str]:
    """
    Yield SSE frames for one listener until it is closed.

    Writes a keep-alive comment whenever the channel has been idle for
    heartbeat_interval seconds. The channel is always unsubscribed on exit,
    whether the client disconnected, a write failed or the hub closed it.

    Args:
        coordinator: Room the listener belongs to
        channel: Listener channel opened by coordinator.open_stream()
        heartbeat_interval: Idle seconds between keep-alives
                            (default: config.HEARTBEAT_INTERVAL_SECONDS)
    """
    interval = heartbeat_interval or config.HEARTBEAT_INTERVAL_SECONDS
    try:
        while True:
            frame = await channel.next_frame(timeout=interval)
            if frame is not None:
                yield frame
            elif channel.closed:
                break
            else:
                yield config.KEEP_ALIVE_FRAME
    finally:
        coordinator.close_stream(channel)


# ===== Room Endpoints =====

@room_router.get("/api/data", response_model=RoomDocumentResponse)
async def get_room_data(request: Request):
    """
    Get the current team list.

    Returns:
        RoomDocumentResponse with teams and updatedAt
    """
    try:
        document = await get_coordinator(request).get()
    except Exception as e:
        logger.error(f"Failed to read room: {e}", exc_info=True)
        return json_response({'error': f"Failed to read room: {e}"}, status_code=500)

    return json_response(serialize_room_document(document).model_dump())


@room_router.post(
    "/api/data",
    response_model=RoomDocumentResponse,
    responses={400: {"model": ErrorResponse}}
)
async def update_room_data(request: Request):
    """
    Replace the team list and broadcast it to every listener.

    Expects a JSON body of the form {"teams": [...]}.

    Returns:
        RoomDocumentResponse with the saved document

    Raises:
        400 Bad Request: If the body is not JSON or "teams" is not an array
        500 Internal Server Error: If the document cannot be persisted
    """
    try:
        body = await request.json()
    except ValueError:
        logger.warning("Rejected update: body is not valid JSON")
        return json_response({'error': 'Invalid JSON body'}, status_code=400)

    teams = body.get('teams') if isinstance(body, dict) else None

    try:
        document = await get_coordinator(request).update(teams)

    except ValidationError as e:
        logger.warning(f"Rejected update: {e}")
        return json_response({'error': str(e)}, status_code=400)

    except Exception as e:
        logger.error(f"Failed to update room: {e}", exc_info=True)
        return json_response({'error': f"Failed to update room: {e}"}, status_code=500)

    return json_response(serialize_room_document(document).model_dump())


@room_router.get("/api/stream")
async def stream_room_updates(request: Request):
    """
    Open a Server-Sent Events stream of room updates.

    The first frame is the current document; a new frame follows every
    accepted update, with keep-alive comments in between when idle.
    """
    coordinator = get_coordinator(request)
    channel = await coordinator.open_stream()

    return StreamingResponse(
        event_stream(coordinator, channel),
        media_type="text/event-stream",
        headers=STREAM_HEADERS
    )


# ===== Live Scores Endpoint =====

@scores_router.get(
    "/api/live-scores",
    response_model=LiveScoresResponse,
    responses={500: {"model": LiveScoresErrorResponse}}
)
def get_live_scores(request: Request):
    """
    Get fantasy points for players on the tracked teams.

    Returns:
        LiveScoresResponse with players, gamesCount, allGamesFinal and games

    Raises:
        500 Internal Server Error: If the ESPN scoreboard cannot be fetched
    """
    client: EspnClient = request.app.state.espn_client

    try:
        payload = build_live_scores(client)
        response = serialize_live_scores(payload)

    except UpstreamFetchError as e:
        logger.error(f"Live scores unavailable: {e}")
        return json_response({'success': False, 'error': str(e)}, status_code=500)

    except Exception as e:
        logger.error(f"Failed to build live scores: {e}", exc_info=True)
        return json_response({'success': False, 'error': str(e)}, status_code=500)

    return json_response(response.model_dump())


@scores_router.get("/health", response_model=HealthResponse)
def health_check(request: Request):
    """
    Simple health check endpoint.

    Returns:
        Status OK plus the number of connected listeners
    """
    return json_response({
        "status": "ok",
        "service": config.SERVICE_NAME,
        "version": config.SERVICE_VERSION,
        "listeners": get_coordinator(request).listener_count
    })


def create_app(
    data_dir: Optional[Path] = None,
    espn_client: Optional[EspnClient] = None,
    static_dir: Optional[Path] = None
) -> FastAPI:
    """
    Build the FastAPI application with its single shared room.

    Args:
        data_dir: Directory for the room state file (default: config.DATA_DIR)
        espn_client: ESPN client for live scores (default: a new EspnClient)
        static_dir: Front-end build to serve at "/" (default: config.STATIC_DIR)

    Returns:
        Configured FastAPI app; the room is available as app.state.coordinator
    """
    app = FastAPI(
        title=config.SERVICE_NAME,
        description="Shared team list with live updates and fantasy scoring",
        version=config.SERVICE_VERSION
    )

    # CORS middleware for web UI access
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.coordinator = RoomCoordinator(RoomStateStore(data_dir))
    app.state.espn_client = espn_client or EspnClient()

    app.include_router(room_router)
    app.include_router(scores_router)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        """Unknown paths (404) and wrong methods (405) as JSON errors."""
        return json_response({'error': exc.detail}, status_code=exc.status_code, headers=exc.headers)

    @app.on_event("startup")
    async def startup_event():
        """Load the room before serving requests."""
        await app.state.coordinator.start()
        logger.info(f"{config.SERVICE_NAME} started")
        logger.info(f"State file: {app.state.coordinator.store.state_file}")

    @app.on_event("shutdown")
    async def shutdown_event():
        """Disconnect listeners and release the ESPN session."""
        logger.info(f"{config.SERVICE_NAME} shutting down")
        app.state.coordinator.close()
        app.state.espn_client.close()

    # ===== STATIC FILE SERVING FOR FRONTEND =====

    frontend_dir = Path(static_dir or config.STATIC_DIR)
    if frontend_dir.is_dir():
        logger.info(f"Serving frontend from: {frontend_dir}")
        app.mount("/", StaticFiles(directory=frontend_dir, html=True), name="static")
    else:
        logger.debug(f"No frontend directory at {frontend_dir}; static files disabled")

    return app
