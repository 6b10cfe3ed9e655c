"""
Game rules for the fantasy squad game.
Fixed for this version of the game; change here, not per request.
"""
from __future__ import annotations

from decimal import Decimal

# ---------- Squad ----------
STARTING_BUDGET = Decimal("100.0")  # currency-millions
SQUAD_SIZE = 15

# ---------- Transfers ----------
FREE_TRANSFERS_PER_GAMEWEEK = 1
TRANSFER_PENALTY_POINTS = 4  # per transfer made with no free transfer left

# ---------- Scoring ----------
CAPTAIN_MULTIPLIER = 2

# ---------- Gameweeks ----------
FIRST_GAMEWEEK = 1

# ---------- Leagues ----------
JOIN_CODE_LENGTH = 6
JOIN_CODE_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"
JOIN_CODE_MAX_ATTEMPTS = 20
