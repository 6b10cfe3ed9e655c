"""
Database connection, transactions and initialization.
"""
from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from fplbotola.config import get_settings

from .schema import all_schema_sql

_db_path: Path | None = None


class TransactionStateError(RuntimeError):
    """transaction() was entered while the connection still had uncommitted writes."""


def set_db_path(path: str | Path) -> None:
    """Set the database path. Call before first get_connection if not using the configured one."""
    global _db_path
    _db_path = Path(path)


def get_db_path() -> Path:
    """Return the current database path."""
    if _db_path is not None:
        return _db_path
    return get_settings().db_path


def get_connection(db_path: str | Path | None = None) -> sqlite3.Connection:
    """
    Return a new SQLite connection.
    Use as context manager or ensure close() is called.
    """
    path = Path(db_path) if db_path else get_db_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path))
    conn.row_factory = sqlite3.Row
    return conn


@contextmanager
def db_conn() -> Iterator[sqlite3.Connection]:
    """Yield a DB connection, ensure close on exit."""
    conn = get_connection()
    try:
        yield conn
    finally:
        conn.close()


@contextmanager
def transaction(conn: sqlite3.Connection) -> Iterator[sqlite3.Connection]:
    """
    Single-document read-modify-write. BEGIN IMMEDIATE takes the write lock
    before the read, so a concurrent writer to the same row waits instead of
    interleaving. Commits on success, rolls back on any exception.
    Repository writes inside the block must pass commit=False.

    The connection must not have uncommitted writes on entry; those belong to
    the caller, so TransactionStateError is raised and they are left untouched.
    """
    if conn.in_transaction:
        raise TransactionStateError(
            "Connection has uncommitted writes; commit or roll back before starting a transaction"
        )
    conn.execute("BEGIN IMMEDIATE")
    try:
        yield conn
    except BaseException:
        conn.rollback()
        raise
    else:
        conn.commit()


def init_db(
    db_path: str | Path | None = None,
    players_path: str | Path | None = None,
) -> None:
    """
    Create or ensure all tables exist.
    If players_path is provided, also seed the player catalog from that JSON
    file (uses fplbotola.roster_db; existing players keep their points).
    """
    path = Path(db_path) if db_path else get_db_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path))
    try:
        conn.executescript(all_schema_sql())
        conn.commit()
        if players_path:
            from fplbotola.roster_db import load_players_into_db
            load_players_into_db(conn, Path(players_path))
            conn.commit()
    finally:
        conn.close()


def ensure_db() -> None:
    """Startup hook: schema on the current DB path, catalog seeded from the configured players file."""
    players_path = get_settings().players_path
    init_db(
        db_path=get_db_path(),
        players_path=players_path if players_path.exists() else None,
    )
