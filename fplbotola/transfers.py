"""
Transfer rules: pure functions from (ledger, request) to a new ledger.

Every accepted add or sell is one transfer event. A free transfer is consumed
first; once none are left each transfer accrues a points deduction.
Rejections raise TransferRejected before anything is computed.
"""
from __future__ import annotations

from dataclasses import replace
from enum import Enum

from fplbotola.models import Player, SquadLedger
from fplbotola.rules import FREE_TRANSFERS_PER_GAMEWEEK, SQUAD_SIZE, TRANSFER_PENALTY_POINTS


class RejectionReason(str, Enum):
    ALREADY_OWNED = "already_owned"
    SQUAD_FULL = "squad_full"
    INSUFFICIENT_BUDGET = "insufficient_budget"
    NOT_IN_SQUAD = "not_in_squad"


class TransferRejected(ValueError):
    """A squad change broke a transfer rule. reason says which one."""

    def __init__(self, reason: RejectionReason, message: str) -> None:
        super().__init__(message)
        self.reason = reason


def _count_transfer(ledger: SquadLedger) -> dict[str, int]:
    """Counter updates for one transfer event."""
    if ledger.free_transfers > 0:
        return {
            "free_transfers": ledger.free_transfers - 1,
            "points_deductions": ledger.points_deductions,
            "transfers_made_this_gameweek": ledger.transfers_made_this_gameweek + 1,
        }
    return {
        "free_transfers": 0,
        "points_deductions": ledger.points_deductions + TRANSFER_PENALTY_POINTS,
        "transfers_made_this_gameweek": ledger.transfers_made_this_gameweek + 1,
    }


def add_player(ledger: SquadLedger, player: Player) -> SquadLedger:
    """
    Buy player into the squad.
    Checked in order, first failure wins: not already owned; squad not full; price <= budget.
    """
    if player.id in ledger.player_ids:
        raise TransferRejected(
            RejectionReason.ALREADY_OWNED, f"{player.name} is already in your squad"
        )
    if len(ledger.player_ids) >= SQUAD_SIZE:
        raise TransferRejected(
            RejectionReason.SQUAD_FULL, f"Squad is full ({SQUAD_SIZE} players)"
        )
    if player.price > ledger.budget:
        raise TransferRejected(
            RejectionReason.INSUFFICIENT_BUDGET,
            f"{player.name} costs {player.price} but only {ledger.budget} is left",
        )
    return replace(
        ledger,
        player_ids=ledger.player_ids + (player.id,),
        budget=ledger.budget - player.price,
        **_count_transfer(ledger),
    )


def sell_player(ledger: SquadLedger, player: Player) -> SquadLedger:
    """Sell player back at catalog price. Clears captain/vice-captain if they held it."""
    if player.id not in ledger.player_ids:
        raise TransferRejected(
            RejectionReason.NOT_IN_SQUAD, f"{player.name} is not in your squad"
        )
    return replace(
        ledger,
        player_ids=tuple(pid for pid in ledger.player_ids if pid != player.id),
        budget=ledger.budget + player.price,
        captain_id=None if ledger.captain_id == player.id else ledger.captain_id,
        vice_captain_id=None if ledger.vice_captain_id == player.id else ledger.vice_captain_id,
        **_count_transfer(ledger),
    )


def set_captain(ledger: SquadLedger, player_id: str) -> SquadLedger:
    """Make player_id captain. Takes the role away from the vice-captain if it was them."""
    if player_id not in ledger.player_ids:
        raise TransferRejected(
            RejectionReason.NOT_IN_SQUAD, f"Player {player_id} is not in your squad"
        )
    vice = None if ledger.vice_captain_id == player_id else ledger.vice_captain_id
    return replace(ledger, captain_id=player_id, vice_captain_id=vice)


def set_vice_captain(ledger: SquadLedger, player_id: str) -> SquadLedger:
    """Make player_id vice-captain. Takes the role away from the captain if it was them."""
    if player_id not in ledger.player_ids:
        raise TransferRejected(
            RejectionReason.NOT_IN_SQUAD, f"Player {player_id} is not in your squad"
        )
    captain = None if ledger.captain_id == player_id else ledger.captain_id
    return replace(ledger, vice_captain_id=player_id, captain_id=captain)


def reconcile_gameweek(ledger: SquadLedger, gameweek: int) -> SquadLedger:
    """
    Bring ledger to the given gameweek. Idempotent: a ledger already on that
    gameweek is returned unchanged (same object).
    """
    if ledger.current_gameweek == gameweek:
        return ledger
    return replace(
        ledger,
        current_gameweek=gameweek,
        free_transfers=FREE_TRANSFERS_PER_GAMEWEEK,
        transfers_made_this_gameweek=0,
        points_deductions=0,
    )
