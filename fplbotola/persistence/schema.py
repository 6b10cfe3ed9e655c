"""
SQLite schema for fantasy entities.
Migration-friendly: each table created with IF NOT EXISTS.
"""
from __future__ import annotations


def users_schema() -> str:
    return """
    CREATE TABLE IF NOT EXISTS users (
        id TEXT PRIMARY KEY,
        username TEXT NOT NULL,
        password_hash TEXT,
        created_at TEXT NOT NULL
    );
    CREATE UNIQUE INDEX IF NOT EXISTS ix_users_username ON users(username);
    """


def players_schema() -> str:
    """Player catalog. points is the only column written after seeding."""
    return """
    CREATE TABLE IF NOT EXISTS players (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        team TEXT NOT NULL,
        price REAL NOT NULL,
        points INTEGER NOT NULL DEFAULT 0,
        position TEXT,
        jersey_number INTEGER,
        image_url TEXT
    );
    CREATE INDEX IF NOT EXISTS ix_players_team ON players(team);
    """


def ledgers_schema() -> str:
    """One squad ledger per user. player_ids is a JSON array in squad order."""
    return """
    CREATE TABLE IF NOT EXISTS ledgers (
        user_id TEXT PRIMARY KEY,
        player_ids TEXT NOT NULL DEFAULT '[]',
        captain_id TEXT,
        vice_captain_id TEXT,
        budget REAL NOT NULL,
        current_gameweek INTEGER NOT NULL,
        free_transfers INTEGER NOT NULL,
        transfers_made_this_gameweek INTEGER NOT NULL DEFAULT 0,
        points_deductions INTEGER NOT NULL DEFAULT 0,
        FOREIGN KEY (user_id) REFERENCES users(id)
    );
    """


def leagues_schema() -> str:
    """Mini-leagues. code is the public join token."""
    return """
    CREATE TABLE IF NOT EXISTS leagues (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        code TEXT NOT NULL,
        creator_id TEXT NOT NULL,
        created_at TEXT NOT NULL,
        FOREIGN KEY (creator_id) REFERENCES users(id)
    );
    CREATE UNIQUE INDEX IF NOT EXISTS ix_leagues_code ON leagues(code);
    CREATE INDEX IF NOT EXISTS ix_leagues_creator ON leagues(creator_id);
    """


def league_members_schema() -> str:
    """Membership only grows; no delete path."""
    return """
    CREATE TABLE IF NOT EXISTS league_members (
        league_id TEXT NOT NULL,
        user_id TEXT NOT NULL,
        joined_at TEXT NOT NULL,
        PRIMARY KEY (league_id, user_id),
        FOREIGN KEY (league_id) REFERENCES leagues(id),
        FOREIGN KEY (user_id) REFERENCES users(id)
    );
    CREATE INDEX IF NOT EXISTS ix_league_members_user ON league_members(user_id);
    """


def game_state_schema() -> str:
    """Key/value store for global game state (current_gameweek)."""
    return """
    CREATE TABLE IF NOT EXISTS game_state (
        key TEXT PRIMARY KEY,
        value TEXT NOT NULL
    );
    """


def all_schema_sql() -> str:
    """Combine all schema DDL for a single execution. Order: users, players, ledgers, leagues, league_members, game_state."""
    return "\n".join([
        users_schema(),
        players_schema(),
        ledgers_schema(),
        leagues_schema(),
        league_members_schema(),
        game_state_schema(),
    ])
