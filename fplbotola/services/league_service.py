"""
League-centric service: creation with join codes, joining by code, leaderboards.
Persistence is delegated to repositories; scoring to fplbotola.scoring.
"""
from __future__ import annotations

import secrets
import sqlite3
from typing import Callable

from fplbotola.logging_config import get_logger
from fplbotola.models import League, LeaderboardEntry
from fplbotola.persistence.repositories import (
    GameStateRepository,
    LeagueRepository,
    LedgerRepository,
    PlayerRepository,
    UserRepository,
)
from fplbotola.rules import JOIN_CODE_ALPHABET, JOIN_CODE_LENGTH, JOIN_CODE_MAX_ATTEMPTS
from fplbotola.scoring import build_catalog, compute_leaderboard
from fplbotola.services.errors import LeagueNotFoundError
from fplbotola.transfers import reconcile_gameweek

logger = get_logger(__name__)

# ---------- Exceptions ----------


class AlreadyMemberError(ValueError):
    """User is already in the league they tried to join."""


class JoinCodeExhaustedError(RuntimeError):
    """Could not draw an unused join code within the retry bound."""


# ---------- Join codes ----------


def generate_join_code(length: int = JOIN_CODE_LENGTH) -> str:
    """Random uppercase alphanumeric code."""
    return "".join(secrets.choice(JOIN_CODE_ALPHABET) for _ in range(length))


def normalize_join_code(code: str) -> str:
    return code.strip().upper()


# ---------- LeagueService ----------


class LeagueService:
    """
    Domain logic for mini-leagues: creation, membership, leaderboard.
    Membership only grows; there is no leave or kick.
    """

    def __init__(self, code_generator: Callable[[], str] = generate_join_code) -> None:
        self._league_repo = LeagueRepository()
        self._ledger_repo = LedgerRepository()
        self._player_repo = PlayerRepository()
        self._user_repo = UserRepository()
        self._game_state_repo = GameStateRepository()
        self._code_generator = code_generator

    def _unused_code(self, conn: sqlite3.Connection) -> str:
        for _ in range(JOIN_CODE_MAX_ATTEMPTS):
            code = self._code_generator()
            if not self._league_repo.code_exists(conn, code):
                return code
            logger.debug("Join code collision on %s; drawing again", code)
        raise JoinCodeExhaustedError(
            f"No unused join code after {JOIN_CODE_MAX_ATTEMPTS} attempts"
        )

    def create_league(self, conn: sqlite3.Connection, name: str, creator_id: str) -> League:
        """New league with a fresh join code. The creator is its first member."""
        name = name.strip()
        if not name:
            raise ValueError("League name is required")
        code = self._unused_code(conn)
        league = self._league_repo.create(conn, name, code, creator_id)
        logger.info("League %s (%s) created by %s", league.id, code, creator_id)
        return league

    def join_league(self, conn: sqlite3.Connection, code: str, user_id: str) -> League:
        """Add user_id to the league with this code."""
        normalized = normalize_join_code(code)
        if not normalized:
            raise ValueError("Join code is required")
        league = self._league_repo.get_by_code(conn, normalized)
        if league is None:
            raise LeagueNotFoundError(f"No league with code {normalized}")
        if user_id in league.members:
            raise AlreadyMemberError(f"Already a member of {league.name}")
        self._league_repo.add_member(conn, league.id, user_id)
        logger.info("User %s joined league %s", user_id, league.id)
        return self.get_league(conn, league.id)

    def get_league(self, conn: sqlite3.Connection, league_id: str) -> League:
        league = self._league_repo.get(conn, league_id)
        if league is None:
            raise LeagueNotFoundError(f"League not found: {league_id}")
        return league

    def list_leagues_for_user(self, conn: sqlite3.Connection, user_id: str) -> list[League]:
        return self._league_repo.list_by_member(conn, user_id)

    def leaderboard(self, conn: sqlite3.Connection, league_id: str) -> list[LeaderboardEntry]:
        """
        Ranked standings. One ledger read per member with no snapshot across
        them, so a ledger changed mid-read shows whichever version was read.
        """
        league = self.get_league(conn, league_id)
        catalog = build_catalog(self._player_repo.list_all(conn))
        gameweek = self._game_state_repo.get_current_gameweek(conn)
        # rolled over in memory only; reads never write ledgers
        ledgers = {
            uid: reconcile_gameweek(ledger, gameweek)
            for uid, ledger in self._ledger_repo.list_for_users(conn, league.members).items()
        }
        labels = self._user_repo.usernames_by_id(conn, league.members)
        return compute_leaderboard(league.members, ledgers, catalog, labels)
