"""
Squad ledger service: loads a user's ledger, reconciles it to the current
gameweek, applies transfer rules and persists the result.

Each mutation is one read-modify-write inside a single transaction scoped to
that user's ledger. Rule checks live in fplbotola.transfers; this module only
orchestrates persistence around them.
"""
from __future__ import annotations

import sqlite3
from typing import Callable

from fplbotola.logging_config import get_logger
from fplbotola.models import Player, SquadLedger
from fplbotola.persistence.db import transaction
from fplbotola.persistence.repositories import (
    GameStateRepository,
    LedgerRepository,
    PlayerRepository,
)
from fplbotola.scoring import PlayerCatalog, build_catalog, score_ledger
from fplbotola.services.errors import PlayerNotFoundError
from fplbotola.transfers import (
    TransferRejected,
    add_player,
    reconcile_gameweek,
    sell_player,
    set_captain,
    set_vice_captain,
)

logger = get_logger(__name__)


class LedgerService:
    """Read-modify-write orchestration for squad ledgers."""

    def __init__(self) -> None:
        self._ledger_repo = LedgerRepository()
        self._player_repo = PlayerRepository()
        self._game_state_repo = GameStateRepository()

    # ---------- Gameweek ----------

    def current_gameweek(self, conn: sqlite3.Connection) -> int:
        return self._game_state_repo.get_current_gameweek(conn)

    def set_current_gameweek(self, conn: sqlite3.Connection, gameweek: int) -> None:
        """Advance (or correct) the authoritative gameweek. Ledgers catch up on their next reconcile."""
        if gameweek < 1:
            raise ValueError(f"Gameweek must be >= 1 (got {gameweek})")
        self._game_state_repo.set_current_gameweek(conn, gameweek)
        logger.info("Current gameweek set to %d", gameweek)

    def _reconciled(self, conn: sqlite3.Connection, user_id: str) -> tuple[SquadLedger, bool]:
        """(ledger on the current gameweek, whether it differs from what is stored)."""
        gameweek = self.current_gameweek(conn)
        stored = self._ledger_repo.get(conn, user_id)
        if stored is None:
            return SquadLedger(user_id=user_id, current_gameweek=gameweek), True
        ledger = reconcile_gameweek(stored, gameweek)
        if ledger is not stored:
            logger.info(
                "Ledger %s rolled over from gameweek %d to %d",
                user_id, stored.current_gameweek, gameweek,
            )
        return ledger, ledger is not stored

    def reconcile(self, conn: sqlite3.Connection, user_id: str) -> SquadLedger:
        """
        Bring the user's ledger to the current gameweek, creating it with
        defaults if missing. Idempotent; writes only when something changed.
        """
        with transaction(conn):
            ledger, changed = self._reconciled(conn, user_id)
            if changed:
                self._ledger_repo.save(conn, ledger, commit=False)
        return ledger

    def get_ledger(self, conn: sqlite3.Connection, user_id: str) -> SquadLedger | None:
        """Stored ledger as-is. Never migrates; call reconcile() first for current counters."""
        return self._ledger_repo.get(conn, user_id)

    # ---------- Transfers ----------

    def _require_player(self, conn: sqlite3.Connection, player_id: str) -> Player:
        player = self._player_repo.get(conn, player_id)
        if player is None:
            raise PlayerNotFoundError(player_id)
        return player

    def _mutate(
        self,
        conn: sqlite3.Connection,
        user_id: str,
        change: Callable[[SquadLedger], SquadLedger],
        description: str,
    ) -> SquadLedger:
        with transaction(conn):
            ledger, _ = self._reconciled(conn, user_id)
            try:
                updated = change(ledger)
            except TransferRejected as e:
                logger.info("Rejected %s for %s: %s (%s)", description, user_id, e, e.reason.value)
                raise
            self._ledger_repo.save(conn, updated, commit=False)
        logger.info(
            "%s for %s: budget %s, free transfers %d, deductions %d",
            description, user_id, updated.budget, updated.free_transfers, updated.points_deductions,
        )
        return updated

    def add_player(self, conn: sqlite3.Connection, user_id: str, player_id: str) -> SquadLedger:
        player = self._require_player(conn, player_id)
        return self._mutate(conn, user_id, lambda ledger: add_player(ledger, player), f"add {player_id}")

    def sell_player(self, conn: sqlite3.Connection, user_id: str, player_id: str) -> SquadLedger:
        player = self._require_player(conn, player_id)
        return self._mutate(conn, user_id, lambda ledger: sell_player(ledger, player), f"sell {player_id}")

    def set_captain(self, conn: sqlite3.Connection, user_id: str, player_id: str) -> SquadLedger:
        return self._mutate(conn, user_id, lambda ledger: set_captain(ledger, player_id), f"captain {player_id}")

    def set_vice_captain(self, conn: sqlite3.Connection, user_id: str, player_id: str) -> SquadLedger:
        return self._mutate(
            conn, user_id, lambda ledger: set_vice_captain(ledger, player_id), f"vice-captain {player_id}"
        )

    # ---------- Scoring ----------

    def catalog(self, conn: sqlite3.Connection) -> PlayerCatalog:
        return build_catalog(self._player_repo.list_all(conn))

    def score(self, conn: sqlite3.Connection, ledger: SquadLedger, catalog: PlayerCatalog | None = None) -> int:
        return score_ledger(ledger, catalog if catalog is not None else self.catalog(conn))
