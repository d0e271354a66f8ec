"""
API serializers for the league room endpoints.

Transforms internal data structures into the JSON shapes clients rely on.
"""

from typing import Any, Dict, List, Union
from pydantic import BaseModel, Field

from .room_document import RoomDocument


# ========== Room Endpoints ==========

class RoomDocumentResponse(BaseModel):
    """Response for GET/POST /api/data and the payload of every stream frame."""
    teams: List[Any] = Field(description="Ordered team list, as last written")
    updatedAt: str = Field(description="ISO-8601 timestamp of the last accepted write")


class ErrorResponse(BaseModel):
    """Error body for rejected requests."""
    error: str


# ========== Live Scores Endpoint ==========

class PlayerScoreResponse(BaseModel):
    """Individual player entry for /api/live-scores."""
    name: str
    team: str
    stats: Dict[str, Union[int, float]] = Field(description="Raw counting stats")
    points: float = Field(description="Fantasy points, one decimal")


class GameSummaryResponse(BaseModel):
    """Tracked game entry for /api/live-scores."""
    name: str
    status: str


class LiveScoresResponse(BaseModel):
    """Response for GET /api/live-scores."""
    success: bool = True
    players: Dict[str, PlayerScoreResponse] = Field(description="Keyed by 'name|TEAM'")
    gamesCount: int
    allGamesFinal: bool
    games: List[GameSummaryResponse]


class LiveScoresErrorResponse(BaseModel):
    """Failure response for GET /api/live-scores."""
    success: bool = False
    error: str


# ========== Health Endpoint ==========

class HealthResponse(BaseModel):
    status: str
    service: str
    version: str
    listeners: int


def serialize_room_document(document: RoomDocument) -> RoomDocumentResponse:
    """Convert a RoomDocument to its response model."""
    return RoomDocumentResponse(**document.to_dict())


def serialize_live_scores(payload: Dict) -> LiveScoresResponse:
    """
    Convert the live scores pipeline output to its response model.

    Args:
        payload: Dict returned by build_live_scores()

    Returns:
        LiveScoresResponse
    """
    return LiveScoresResponse(
        success=payload.get('success', True),
        players={
            key: PlayerScoreResponse(**player)
            for key, player in payload.get('players', {}).items()
        },
        gamesCount=payload.get('gamesCount', 0),
        allGamesFinal=payload.get('allGamesFinal', False),
        games=[GameSummaryResponse(**game) for game in payload.get('games', [])]
    )
