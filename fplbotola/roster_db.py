"""
Roster database: loads the Botola Pro player catalog from JSON.

File shape: {"players": [{"name", "team", "price", optional "id", "position",
"jersey_number", "image_url", "points"}, ...]}. Missing ids are derived from
name + team. Re-loading refreshes profile fields but keeps accumulated points.
"""
from __future__ import annotations

import json
import sqlite3
from decimal import Decimal
from pathlib import Path
from typing import Any

from fplbotola.logging_config import get_logger
from fplbotola.models import Player
from fplbotola.persistence.repositories import PlayerRepository

logger = get_logger(__name__)


def _slug(*parts: str) -> str:
    """Stable id from name parts (lowercase, spaces and dashes to underscores)."""
    return "_".join(p.strip().lower().replace(" ", "_").replace("-", "_") for p in parts if p)


def player_from_record(record: dict[str, Any]) -> Player:
    name = record["name"]
    team = record["team"]
    price = Decimal(str(record["price"]))
    if price < 0:
        raise ValueError(f"Negative price for {name}: {price}")
    jersey = record.get("jersey_number")
    return Player(
        id=record.get("id") or _slug(name, team),
        name=name,
        team=team,
        price=price,
        points=int(record.get("points", 0)),
        position=record.get("position"),
        jersey_number=int(jersey) if jersey is not None else None,
        image_url=record.get("image_url"),
    )


def load_players_into_db(conn: sqlite3.Connection, players_path: Path) -> int:
    """Upsert every player in the JSON file. Returns the number of players loaded."""
    data = json.loads(players_path.read_text(encoding="utf-8"))
    repo = PlayerRepository()
    players = [player_from_record(r) for r in data.get("players", [])]
    for p in players:
        repo.upsert_profile(conn, p, commit=False)
    conn.commit()
    logger.info("Loaded %d players from %s", len(players), players_path)
    return len(players)
