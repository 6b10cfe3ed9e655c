"""
Tests for transfer rules: budget, squad limits, free transfers and penalties,
captaincy and gameweek rollover.
"""
from __future__ import annotations

import random
from decimal import Decimal

import pytest

from fplbotola.models import Player, SquadLedger
from fplbotola.rules import SQUAD_SIZE, STARTING_BUDGET, TRANSFER_PENALTY_POINTS
from fplbotola.transfers import (
    RejectionReason,
    TransferRejected,
    add_player,
    reconcile_gameweek,
    sell_player,
    set_captain,
    set_vice_captain,
)


def _player(pid: str, price: str, points: int = 0) -> Player:
    return Player(id=pid, name=pid.upper(), team="Wydad AC", price=Decimal(price), points=points)


P1 = _player("p1", "5.0", 10)
P2 = _player("p2", "3.0", 4)
P3 = _player("p3", "1.0")


@pytest.fixture
def fresh_ledger():
    return SquadLedger(user_id="u1")


class TestAddPlayer:
    def test_add_within_budget(self):
        ledger = SquadLedger(user_id="u1", budget=Decimal("8.0"))
        after = add_player(ledger, P1)
        after = add_player(after, P2)
        assert after.player_ids == ("p1", "p2")
        assert after.budget == Decimal("0.0")

    def test_first_transfer_is_free_then_penalised(self):
        ledger = SquadLedger(user_id="u1", budget=Decimal("8.0"))
        after = add_player(ledger, P1)
        assert after.free_transfers == 0
        assert after.points_deductions == 0
        assert after.transfers_made_this_gameweek == 1
        after = add_player(after, P2)
        assert after.free_transfers == 0
        assert after.points_deductions == TRANSFER_PENALTY_POINTS
        assert after.transfers_made_this_gameweek == 2

    def test_over_budget_rejected(self):
        ledger = SquadLedger(user_id="u1", budget=Decimal("4.9"))
        with pytest.raises(TransferRejected) as exc:
            add_player(ledger, P1)
        assert exc.value.reason is RejectionReason.INSUFFICIENT_BUDGET

    def test_exact_budget_accepted(self):
        ledger = SquadLedger(user_id="u1", budget=Decimal("5.0"))
        assert add_player(ledger, P1).budget == Decimal("0")

    def test_already_owned_rejected(self, fresh_ledger):
        ledger = add_player(fresh_ledger, P1)
        with pytest.raises(TransferRejected) as exc:
            add_player(ledger, P1)
        assert exc.value.reason is RejectionReason.ALREADY_OWNED

    def test_squad_full_rejected(self):
        ids = tuple(f"x{i}" for i in range(SQUAD_SIZE))
        ledger = SquadLedger(user_id="u1", player_ids=ids)
        with pytest.raises(TransferRejected) as exc:
            add_player(ledger, P3)
        assert exc.value.reason is RejectionReason.SQUAD_FULL

    def test_already_owned_checked_before_full_and_budget(self):
        ids = ("p1",) + tuple(f"x{i}" for i in range(SQUAD_SIZE - 1))
        ledger = SquadLedger(user_id="u1", player_ids=ids, budget=Decimal("0"))
        with pytest.raises(TransferRejected) as exc:
            add_player(ledger, P1)
        assert exc.value.reason is RejectionReason.ALREADY_OWNED

    def test_full_checked_before_budget(self):
        ids = tuple(f"x{i}" for i in range(SQUAD_SIZE))
        ledger = SquadLedger(user_id="u1", player_ids=ids, budget=Decimal("0"))
        with pytest.raises(TransferRejected) as exc:
            add_player(ledger, P1)
        assert exc.value.reason is RejectionReason.SQUAD_FULL

    def test_rejection_leaves_ledger_unchanged(self):
        ledger = SquadLedger(user_id="u1", budget=Decimal("1.0"))
        with pytest.raises(TransferRejected):
            add_player(ledger, P1)
        assert ledger.player_ids == ()
        assert ledger.budget == Decimal("1.0")
        assert ledger.free_transfers == 1


class TestSellPlayer:
    def test_add_then_sell_restores_budget_but_counts_two_transfers(self, fresh_ledger):
        after = sell_player(add_player(fresh_ledger, P1), P1)
        assert after.player_ids == ()
        assert after.budget == STARTING_BUDGET
        assert after.transfers_made_this_gameweek == 2
        assert after.points_deductions == TRANSFER_PENALTY_POINTS

    def test_sell_not_owned_rejected(self, fresh_ledger):
        with pytest.raises(TransferRejected) as exc:
            sell_player(fresh_ledger, P1)
        assert exc.value.reason is RejectionReason.NOT_IN_SQUAD

    def test_sell_clears_captaincy(self):
        ledger = SquadLedger(
            user_id="u1", player_ids=("p1", "p2"), captain_id="p1", vice_captain_id="p2",
        )
        after = sell_player(ledger, P1)
        assert after.captain_id is None
        assert after.vice_captain_id == "p2"
        after = sell_player(after, P2)
        assert after.vice_captain_id is None

    def test_sell_keeps_order_of_remaining(self):
        ledger = SquadLedger(user_id="u1", player_ids=("p1", "p2", "p3"))
        assert sell_player(ledger, P2).player_ids == ("p1", "p3")


class TestCaptaincy:
    def test_set_captain(self):
        ledger = SquadLedger(user_id="u1", player_ids=("p1", "p2"))
        assert set_captain(ledger, "p1").captain_id == "p1"

    def test_captain_must_be_in_squad(self, fresh_ledger):
        with pytest.raises(TransferRejected) as exc:
            set_captain(fresh_ledger, "p1")
        assert exc.value.reason is RejectionReason.NOT_IN_SQUAD

    def test_vice_captain_must_be_in_squad(self, fresh_ledger):
        with pytest.raises(TransferRejected):
            set_vice_captain(fresh_ledger, "p1")

    def test_captain_and_vice_are_distinct(self):
        ledger = SquadLedger(user_id="u1", player_ids=("p1", "p2"), captain_id="p1")
        after = set_vice_captain(ledger, "p1")
        assert after.vice_captain_id == "p1"
        assert after.captain_id is None
        after = set_captain(after, "p1")
        assert after.captain_id == "p1"
        assert after.vice_captain_id is None

    def test_captaincy_is_not_a_transfer(self):
        ledger = SquadLedger(user_id="u1", player_ids=("p1",))
        after = set_captain(ledger, "p1")
        assert after.free_transfers == ledger.free_transfers
        assert after.transfers_made_this_gameweek == 0


class TestReconcileGameweek:
    def test_rollover_resets_counters(self):
        ledger = SquadLedger(
            user_id="u1", player_ids=("p1",), captain_id="p1", budget=Decimal("95.0"),
            current_gameweek=1, free_transfers=0, transfers_made_this_gameweek=3,
            points_deductions=8,
        )
        after = reconcile_gameweek(ledger, 2)
        assert after.current_gameweek == 2
        assert after.free_transfers == 1
        assert after.transfers_made_this_gameweek == 0
        assert after.points_deductions == 0
        assert after.player_ids == ("p1",)
        assert after.captain_id == "p1"
        assert after.budget == Decimal("95.0")

    def test_same_gameweek_is_identity(self):
        ledger = SquadLedger(user_id="u1", current_gameweek=3, points_deductions=4)
        assert reconcile_gameweek(ledger, 3) is ledger

    def test_idempotent(self):
        ledger = SquadLedger(user_id="u1", points_deductions=4)
        once = reconcile_gameweek(ledger, 2)
        assert reconcile_gameweek(once, 2) is once


class TestTransferSequences:
    def test_random_sequences_keep_size_and_budget(self):
        rng = random.Random(7)
        pool = [_player(f"r{i}", str(rng.choice(["4.0", "5.5", "7.0", "9.5", "12.0"]))) for i in range(30)]
        for _ in range(50):
            ledger = SquadLedger(user_id="u1")
            for _ in range(60):
                player = rng.choice(pool)
                change = add_player if rng.random() < 0.7 else sell_player
                try:
                    ledger = change(ledger, player)
                except TransferRejected:
                    continue
                assert 0 <= len(ledger.player_ids) <= SQUAD_SIZE
                assert len(set(ledger.player_ids)) == len(ledger.player_ids)
                assert ledger.budget >= 0
                assert ledger.free_transfers >= 0
                assert ledger.points_deductions >= 0
