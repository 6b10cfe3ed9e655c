#!/usr/bin/env python3
"""
Create the schema and load the player catalog.
Run from project root: python3 scripts/seed_db.py [--db data/app.db] [--players data/players.json] [--gameweek N]
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

# Ensure project root on path
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from fplbotola.config import get_settings
from fplbotola.logging_config import setup_logging
from fplbotola.persistence import GameStateRepository, PlayerRepository, get_connection, init_db
from fplbotola.persistence.db import set_db_path


def main() -> None:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Seed the fantasy database")
    parser.add_argument("--db", type=Path, default=settings.db_path, help="SQLite file to create or update")
    parser.add_argument("--players", type=Path, default=settings.players_path, help="Player catalog JSON")
    parser.add_argument("--gameweek", type=int, default=None, help="Set the current gameweek")
    args = parser.parse_args()

    setup_logging(settings.log_level)
    if not args.players.exists():
        parser.error(f"Players file not found: {args.players}")

    set_db_path(args.db)
    init_db(db_path=args.db, players_path=args.players)

    conn = get_connection()
    try:
        if args.gameweek is not None:
            if args.gameweek < 1:
                parser.error("--gameweek must be >= 1")
            GameStateRepository().set_current_gameweek(conn, args.gameweek)
        count = len(PlayerRepository().list_all(conn))
        gameweek = GameStateRepository().get_current_gameweek(conn)
    finally:
        conn.close()
    print(f"Database: {args.db}")
    print(f"  Players in catalog: {count}")
    print(f"  Current gameweek: {gameweek}")


if __name__ == "__main__":
    main()
