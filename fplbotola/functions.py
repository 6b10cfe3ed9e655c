"""
Match-event ingestion endpoint.

Deployed on its own (`uvicorn fplbotola.functions:app`) for the match-data
feed, and also mounted into the main API. POST only; other verbs get 405.

Error contract for the feed: missing or malformed body -> 400, unknown or
unscored action -> 400, anything that fails once the update has started
(including a player id the catalog does not know) -> 500 with a short message.
"""
from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

from fastapi import APIRouter, Body, FastAPI, HTTPException
from pydantic import BaseModel, Field, ValidationError

from fplbotola.api_errors import http_errors
from fplbotola.config import get_settings
from fplbotola.logging_config import get_logger, setup_logging
from fplbotola.persistence.db import db_conn, ensure_db
from fplbotola.services.errors import PlayerNotFoundError
from fplbotola.services.match_events import apply_match_event

logger = get_logger(__name__)

_MISSING_FIELDS = "Bad Request: Missing playerId or action in request body."
_MALFORMED_FIELDS = "Bad Request: playerId and action must be strings."


class MatchEventRequest(BaseModel):
    """Both fields optional so a missing one is reported by the handler, not by validation."""
    playerId: str | None = Field(None, description="ID of the player involved")
    action: str | None = Field(
        None,
        description="goal | assist | yellow_card | red_card | appearance | clean_sheet_half | clean_sheet_full",
    )


def _parse_body(body: Any) -> MatchEventRequest:
    if body is None:
        raise HTTPException(status_code=400, detail=_MISSING_FIELDS)
    if not isinstance(body, dict):
        raise HTTPException(status_code=400, detail=_MALFORMED_FIELDS)
    try:
        req = MatchEventRequest.model_validate(body)
    except ValidationError:
        raise HTTPException(status_code=400, detail=_MALFORMED_FIELDS)
    if not req.playerId or not req.action:
        raise HTTPException(status_code=400, detail=_MISSING_FIELDS)
    return req


router = APIRouter()


@router.post("/process-match-event")
def process_match_event(body: Any = Body(None)) -> dict[str, Any]:
    """Apply one match action to one player's cumulative points."""
    req = _parse_body(body)
    with http_errors("match event"), db_conn() as conn:
        try:
            result = apply_match_event(conn, req.playerId, req.action)
        except PlayerNotFoundError as e:
            # the feed only ever sees a generic failure for an absent player
            logger.error("Match event for missing player %s: %s", req.playerId, req.action)
            raise HTTPException(status_code=500, detail=f"Internal Server Error: {e}")
    return {
        "status": "success",
        "message": f"Player {result.player_id}'s score updated due to {result.action.value}.",
        "pointsAdded": result.points_added,
    }


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging(get_settings().log_level)
    ensure_db()
    yield


app = FastAPI(
    title="Botola Fantasy Match Events",
    description="Ingests match actions and updates player points",
    version="0.1.0",
    lifespan=lifespan,
)
app.include_router(router)
