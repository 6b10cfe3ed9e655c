"""
Fantasy scoring: per-action point values, squad score and league leaderboards.

Everything here is pure. The player catalog is a read-only mapping snapshot
built once per request and shared by every score computed from it.
"""
from __future__ import annotations

from types import MappingProxyType
from typing import Iterable, Mapping, Sequence

from fplbotola.models import LeaderboardEntry, MatchAction, Player, SquadLedger
from fplbotola.rules import CAPTAIN_MULTIPLIER

# ---------- Match action points ----------
GOAL_POINTS = 5
ASSIST_POINTS = 3
YELLOW_CARD_POINTS = -1
RED_CARD_POINTS = -3
APPEARANCE_POINTS = 1

ACTION_POINTS: Mapping[MatchAction, int] = MappingProxyType({
    MatchAction.GOAL: GOAL_POINTS,
    MatchAction.ASSIST: ASSIST_POINTS,
    MatchAction.YELLOW_CARD: YELLOW_CARD_POINTS,
    MatchAction.RED_CARD: RED_CARD_POINTS,
    MatchAction.APPEARANCE: APPEARANCE_POINTS,
})

# Accepted by the ingestion contract but no point value has been decided yet.
UNSCORED_ACTIONS: frozenset[MatchAction] = frozenset({
    MatchAction.CLEAN_SHEET_HALF,
    MatchAction.CLEAN_SHEET_FULL,
})

UNKNOWN_MEMBER_LABEL = "unknown"

PlayerCatalog = Mapping[str, Player]


def build_catalog(players: Iterable[Player]) -> PlayerCatalog:
    """Read-only id -> Player snapshot."""
    return MappingProxyType({p.id: p for p in players})


def compute_score(
    player_ids: Iterable[str],
    captain_id: str | None,
    points_deductions: int,
    catalog: PlayerCatalog,
) -> int:
    """
    Sum of squad points, captain counted CAPTAIN_MULTIPLIER times, minus deductions.
    Ids missing from the catalog score 0. May be negative.
    """
    total = 0
    for pid in player_ids:
        player = catalog.get(pid)
        if player is None:
            continue
        if pid == captain_id:
            total += player.points * CAPTAIN_MULTIPLIER
        else:
            total += player.points
    return total - points_deductions


def score_ledger(ledger: SquadLedger, catalog: PlayerCatalog) -> int:
    return compute_score(ledger.player_ids, ledger.captain_id, ledger.points_deductions, catalog)


def compute_leaderboard(
    member_ids: Sequence[str],
    ledgers_by_member: Mapping[str, SquadLedger],
    catalog: PlayerCatalog,
    labels: Mapping[str, str] | None = None,
) -> list[LeaderboardEntry]:
    """
    Score every member, sort by score descending and rank 1..N by position.
    Ties keep the members' original order (sorted() is stable). A member with
    no ledger scores 0 and is labelled "unknown".
    """
    labels = labels or {}
    scored: list[tuple[str, str, int]] = []
    for member_id in member_ids:
        ledger = ledgers_by_member.get(member_id)
        if ledger is None:
            scored.append((member_id, UNKNOWN_MEMBER_LABEL, 0))
            continue
        scored.append((member_id, labels.get(member_id, member_id), score_ledger(ledger, catalog)))
    ordered = sorted(scored, key=lambda row: -row[2])
    return [
        LeaderboardEntry(member_id=mid, label=label, score=score, rank=i)
        for i, (mid, label, score) in enumerate(ordered, start=1)
    ]
