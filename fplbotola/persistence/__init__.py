"""
Persistence layer for fantasy data.
No business logic; only read/write interfaces.
"""
from .db import db_conn, get_connection, init_db, transaction
from .repositories import (
    UserRepository,
    PlayerRepository,
    LedgerRepository,
    LeagueRepository,
    GameStateRepository,
)

__all__ = [
    "db_conn",
    "get_connection",
    "init_db",
    "transaction",
    "UserRepository",
    "PlayerRepository",
    "LedgerRepository",
    "LeagueRepository",
    "GameStateRepository",
]
