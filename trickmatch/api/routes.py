"""API routes."""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, FastAPI, Query, Request, WebSocket
from fastapi.responses import JSONResponse

from trickmatch.api.responses import (
    ActiveMatchesResponse,
    CreateMatchRequest,
    ErrorResponse,
    SubmitPlayRequest,
)
from trickmatch.api.websocket import websocket_manager
from trickmatch.exceptions import (
    ConcurrencyConflictError,
    MatchCompleteError,
    MatchError,
    NotFoundError,
    StoreError,
    TurnError,
    ValidationError,
)
from trickmatch.services.match_service import MatchService
from trickmatch.services.projection import MatchProjection, PlaysView

router = APIRouter(prefix="/v1")

ERROR_STATUS: dict[type[MatchError], int] = {
    ValidationError: 400,
    NotFoundError: 404,
    TurnError: 409,
    MatchCompleteError: 409,
    ConcurrencyConflictError: 409,
    StoreError: 503,
}


def get_match_service(request: Request) -> MatchService:
    """Resolve the match service owned by the application."""
    return request.app.state.match_service


MatchServiceDep = Annotated[MatchService, Depends(get_match_service)]


async def match_error_handler(_request: Request, exc: MatchError) -> JSONResponse:
    """Render a domain error as an ErrorResponse."""
    status_code = next(
        (ERROR_STATUS[cls] for cls in type(exc).__mro__ if cls in ERROR_STATUS), 400
    )
    body = ErrorResponse(error=exc.code.value, detail=exc.message)
    return JSONResponse(status_code=status_code, content=body.model_dump())


def add_exception_handlers(app: FastAPI) -> None:
    """Map domain errors to HTTP responses."""
    app.add_exception_handler(MatchError, match_error_handler)


@router.post("/match/create")
async def create_match(request: CreateMatchRequest, service: MatchServiceDep) -> MatchProjection:
    """Create a new match.

    team1.player1 opens round1; the turn then rotates through
    team2.player1, team1.player2 and team2.player2.
    """
    return await service.create_match(request.team1.to_team(), request.team2.to_team())


@router.get("/matches/active")
async def get_active_matches(
    service: MatchServiceDep,
    limit: Annotated[int | None, Query(ge=1, le=500)] = None,
) -> ActiveMatchesResponse:
    """Get summaries of every match still in progress."""
    matches = await service.list_active_matches(limit)
    return ActiveMatchesResponse(matches=matches, count=len(matches))


@router.get("/match/{match_id}")
async def get_match(match_id: str, service: MatchServiceDep) -> MatchProjection:
    """Get match state.

    Args:
        match_id: Match identifier
        service: Match service

    Returns:
        Teams, summary and plays grouped by round

    """
    return await service.get_match(match_id)


@router.get("/match/{match_id}/plays")
async def get_plays(match_id: str, service: MatchServiceDep) -> PlaysView:
    """Get the plays of a match grouped by round."""
    return await service.get_plays(match_id)


@router.post("/match/{match_id}/plays")
async def submit_play(
    match_id: str, request: SubmitPlayRequest, service: MatchServiceDep
) -> MatchProjection:
    """Play a card for the player whose turn it is."""
    return await service.submit_play(match_id, request.player_id, request.card.model_dump())


@router.get("/{match_id}/{user_id}/{card_value}/{suit}")
async def submit_play_by_path(
    match_id: str, user_id: str, card_value: str, suit: str, service: MatchServiceDep
) -> MatchProjection:
    """Play a card using the path-only form older clients send.

    The card value is kept as text so a malformed value is reported by the
    match core, after the match lookup, like any other invalid card.
    """
    return await service.submit_play(match_id, user_id, {"value": card_value, "suit": suit})


@router.websocket("/match/{match_id}/subscribe")
async def subscribe_to_match(
    websocket: WebSocket,
    match_id: str,
    subscriber_id: str = Query(default="", description="Subscriber ID"),
) -> None:
    """WebSocket endpoint streaming committed changes of one match.

    The current state is sent on connect; every committed play is pushed
    as MATCH_UPDATED afterwards.
    """
    subscriber_id = subscriber_id or str(uuid.uuid4())

    await websocket_manager.connect(websocket, match_id, subscriber_id)
    await websocket_manager.send_match_state(match_id, subscriber_id)
    await websocket_manager.handle_subscriber_message(websocket, match_id, subscriber_id)
