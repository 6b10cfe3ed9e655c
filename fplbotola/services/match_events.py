"""
Match-event ingestion: one action for one player becomes a points delta,
added to the player's cumulative points in a single transaction.
"""
from __future__ import annotations

import sqlite3
from dataclasses import dataclass

from fplbotola.logging_config import get_logger
from fplbotola.models import MatchAction
from fplbotola.persistence.db import transaction
from fplbotola.persistence.repositories import PlayerRepository
from fplbotola.scoring import ACTION_POINTS, UNSCORED_ACTIONS
from fplbotola.services.errors import PlayerNotFoundError

logger = get_logger(__name__)


class UnknownActionError(ValueError):
    """Action kind is not part of the ingestion contract."""


class UnscoredActionError(ValueError):
    """Action kind is accepted by the contract but has no point value yet."""


@dataclass(frozen=True)
class MatchEventResult:
    player_id: str
    action: MatchAction
    points_added: int
    previous_points: int
    new_points: int


def parse_action(raw: str) -> MatchAction:
    try:
        return MatchAction(raw)
    except ValueError:
        logger.warning("Unknown action type: %s", raw)
        raise UnknownActionError(f"Unknown action type: {raw}") from None


def points_for_action(action: MatchAction) -> int:
    if action in UNSCORED_ACTIONS:
        raise UnscoredActionError(f"No point value defined for action: {action.value}")
    return ACTION_POINTS[action]


def apply_match_event(conn: sqlite3.Connection, player_id: str, action: str | MatchAction) -> MatchEventResult:
    """
    Validate, then read-add-write the player's points under one write lock.
    Any rejection happens before the transaction opens, so the player row is untouched.
    """
    if not player_id:
        raise ValueError("Missing playerId")
    parsed = action if isinstance(action, MatchAction) else parse_action(action)
    delta = points_for_action(parsed)
    repo = PlayerRepository()
    with transaction(conn):
        current = repo.get_points(conn, player_id)
        if current is None:
            raise PlayerNotFoundError(player_id)
        new_total = current + delta
        repo.update_points(conn, player_id, new_total, commit=False)
    logger.info(
        "Player %s points updated from %d to %d for action %s",
        player_id, current, new_total, parsed.value,
    )
    return MatchEventResult(
        player_id=player_id,
        action=parsed,
        points_added=delta,
        previous_points=current,
        new_points=new_total,
    )
