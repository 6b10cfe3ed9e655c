"""
Data models for the fantasy backend.
Domain objects only, no persistence or API logic.

Players are shared catalog data: frozen, passed around by value.
A SquadLedger is one user's squad, budget and transfer state for a gameweek.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from fplbotola.rules import FIRST_GAMEWEEK, FREE_TRANSFERS_PER_GAMEWEEK, STARTING_BUDGET


# ---------- Match actions (closed set accepted by the ingestion contract) ----------
class MatchAction(str, Enum):
    GOAL = "goal"
    ASSIST = "assist"
    YELLOW_CARD = "yellow_card"
    RED_CARD = "red_card"
    APPEARANCE = "appearance"
    CLEAN_SHEET_HALF = "clean_sheet_half"
    CLEAN_SHEET_FULL = "clean_sheet_full"


# ---------- User ----------
@dataclass
class User:
    """
    A fantasy app user.
    username is unique (login); password_hash is never plain text.
    """
    id: str
    username: str
    created_at: datetime
    password_hash: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "username": self.username,
            "created_at": self.created_at.isoformat(),
        }


# ---------- Player ----------
@dataclass(frozen=True)
class Player:
    """
    One selectable player. Immutable snapshot; points change only through
    match-event ingestion, which writes a new row rather than mutating this object.
    """
    id: str
    name: str
    team: str
    price: Decimal
    points: int = 0
    position: str | None = None
    jersey_number: int | None = None
    image_url: str | None = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "team": self.team,
            "price": float(self.price),
            "points": self.points,
        }
        if self.position is not None:
            d["position"] = self.position
        if self.jersey_number is not None:
            d["jersey_number"] = self.jersey_number
        if self.image_url is not None:
            d["image_url"] = self.image_url
        return d


# ---------- SquadLedger ----------
@dataclass(frozen=True)
class SquadLedger:
    """
    One per user. player_ids keeps insertion order and never holds duplicates.
    Transfer rules return a new ledger; nothing mutates one in place.
    """
    user_id: str
    player_ids: tuple[str, ...] = ()
    captain_id: str | None = None
    vice_captain_id: str | None = None
    budget: Decimal = STARTING_BUDGET
    current_gameweek: int = FIRST_GAMEWEEK
    free_transfers: int = FREE_TRANSFERS_PER_GAMEWEEK
    transfers_made_this_gameweek: int = 0
    points_deductions: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "user_id": self.user_id,
            "player_ids": list(self.player_ids),
            "captain_id": self.captain_id,
            "vice_captain_id": self.vice_captain_id,
            "budget": float(self.budget),
            "current_gameweek": self.current_gameweek,
            "free_transfers": self.free_transfers,
            "transfers_made_this_gameweek": self.transfers_made_this_gameweek,
            "points_deductions": self.points_deductions,
        }


# ---------- League ----------
@dataclass
class League:
    """
    User-created mini-league. Joined by code; members only ever grow.
    members is in join order with the creator first.
    """
    id: str
    name: str
    code: str
    creator_id: str
    created_at: datetime
    members: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "code": self.code,
            "creator_id": self.creator_id,
            "members": list(self.members),
            "created_at": self.created_at.isoformat(),
        }


# ---------- LeaderboardEntry (derived, never persisted) ----------
@dataclass(frozen=True)
class LeaderboardEntry:
    member_id: str
    label: str
    score: int
    rank: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "member_id": self.member_id,
            "label": self.label,
            "score": self.score,
            "rank": self.rank,
        }
