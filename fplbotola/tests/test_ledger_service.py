"""
Tests for the ledger service: persistence around transfer rules, gameweek rollover.
"""
from __future__ import annotations

from decimal import Decimal
from pathlib import Path

import pytest

from fplbotola.persistence.db import get_connection, init_db, set_db_path
from fplbotola.persistence.repositories import LedgerRepository, PlayerRepository, UserRepository
from fplbotola.rules import STARTING_BUDGET, TRANSFER_PENALTY_POINTS
from fplbotola.services.errors import PlayerNotFoundError
from fplbotola.services.ledger_service import LedgerService
from fplbotola.transfers import RejectionReason, TransferRejected

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent


@pytest.fixture
def db_conn(tmp_path):
    db_path = tmp_path / "ledger_test.db"
    set_db_path(db_path)
    init_db(db_path=db_path, players_path=PROJECT_ROOT / "data" / "players.json")
    conn = get_connection()
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture
def svc():
    return LedgerService()


@pytest.fixture
def user_id(db_conn):
    return UserRepository().create_with_password(db_conn, "amine", "x").id


class TestReconcile:
    def test_creates_default_ledger(self, db_conn, svc, user_id):
        assert svc.get_ledger(db_conn, user_id) is None
        ledger = svc.reconcile(db_conn, user_id)
        assert ledger.player_ids == ()
        assert ledger.budget == STARTING_BUDGET
        assert ledger.current_gameweek == 1
        assert svc.get_ledger(db_conn, user_id) == ledger

    def test_rolls_over_on_new_gameweek(self, db_conn, svc, user_id):
        svc.add_player(db_conn, user_id, "fus-gk-16")
        svc.add_player(db_conn, user_id, "fus-def-23")
        stored = svc.get_ledger(db_conn, user_id)
        assert stored.points_deductions == TRANSFER_PENALTY_POINTS

        svc.set_current_gameweek(db_conn, 2)
        ledger = svc.reconcile(db_conn, user_id)
        assert ledger.current_gameweek == 2
        assert ledger.free_transfers == 1
        assert ledger.transfers_made_this_gameweek == 0
        assert ledger.points_deductions == 0
        assert ledger.player_ids == ("fus-gk-16", "fus-def-23")
        assert svc.get_ledger(db_conn, user_id) == ledger

    def test_idempotent(self, db_conn, svc, user_id):
        svc.set_current_gameweek(db_conn, 3)
        first = svc.reconcile(db_conn, user_id)
        assert svc.reconcile(db_conn, user_id) == first

    def test_get_ledger_does_not_migrate(self, db_conn, svc, user_id):
        svc.reconcile(db_conn, user_id)
        svc.set_current_gameweek(db_conn, 2)
        assert svc.get_ledger(db_conn, user_id).current_gameweek == 1

    def test_gameweek_must_be_positive(self, db_conn, svc):
        with pytest.raises(ValueError):
            svc.set_current_gameweek(db_conn, 0)


class TestTransfers:
    def test_add_persists(self, db_conn, svc, user_id):
        ledger = svc.add_player(db_conn, user_id, "wac-fwd-9")
        assert ledger.budget == STARTING_BUDGET - Decimal("10.0")
        stored = LedgerRepository().get(db_conn, user_id)
        assert stored.player_ids == ("wac-fwd-9",)
        assert stored.budget == STARTING_BUDGET - Decimal("10.0")
        assert stored.free_transfers == 0

    def test_unknown_player(self, db_conn, svc, user_id):
        with pytest.raises(PlayerNotFoundError):
            svc.add_player(db_conn, user_id, "nobody")

    def test_rejection_does_not_write(self, db_conn, svc, user_id):
        svc.add_player(db_conn, user_id, "wac-fwd-9")
        before = svc.get_ledger(db_conn, user_id)
        with pytest.raises(TransferRejected) as exc:
            svc.add_player(db_conn, user_id, "wac-fwd-9")
        assert exc.value.reason is RejectionReason.ALREADY_OWNED
        assert svc.get_ledger(db_conn, user_id) == before

    def test_sell_uses_current_catalog_price(self, db_conn, svc, user_id):
        svc.add_player(db_conn, user_id, "fus-gk-16")
        db_conn.execute("UPDATE players SET price = 4.5 WHERE id = 'fus-gk-16'")
        db_conn.commit()
        ledger = svc.sell_player(db_conn, user_id, "fus-gk-16")
        assert ledger.budget == STARTING_BUDGET + Decimal("0.5")

    def test_captain_and_vice(self, db_conn, svc, user_id):
        svc.add_player(db_conn, user_id, "fus-gk-16")
        svc.add_player(db_conn, user_id, "fus-def-23")
        svc.set_captain(db_conn, user_id, "fus-gk-16")
        ledger = svc.set_vice_captain(db_conn, user_id, "fus-gk-16")
        assert ledger.vice_captain_id == "fus-gk-16"
        assert ledger.captain_id is None
        assert svc.get_ledger(db_conn, user_id) == ledger


class TestScore:
    def test_score_follows_player_points(self, db_conn, svc, user_id):
        svc.add_player(db_conn, user_id, "fus-gk-16")
        ledger = svc.set_captain(db_conn, user_id, "fus-gk-16")
        assert svc.score(db_conn, ledger) == 0
        PlayerRepository().update_points(db_conn, "fus-gk-16", 6)
        assert svc.score(db_conn, ledger) == 12
