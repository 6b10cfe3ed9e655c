"""
Repository interfaces for fantasy data.
No business logic; only read/write operations.

Write methods commit by default; pass commit=False when running inside
db.transaction() so the whole read-modify-write commits once.
"""
from __future__ import annotations

import json
import sqlite3
import uuid
from datetime import datetime, timezone
from decimal import Decimal

from fplbotola.models import League, Player, SquadLedger, User
from fplbotola.rules import FIRST_GAMEWEEK


def _parse_datetime(s: str | None) -> datetime:
    if s is None:
        raise ValueError("expected datetime string")
    return datetime.fromisoformat(s.replace("Z", "+00:00"))


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _to_decimal(value: float | int | str) -> Decimal:
    # via str() so 0.1 stored as REAL comes back as Decimal("0.1")
    return Decimal(str(value))


# ---------- UserRepository ----------


class UserRepository:
    """CRUD for users. username is unique; password_hash for auth."""

    def create_with_password(
        self, conn: sqlite3.Connection, username: str, password_hash: str
    ) -> User:
        uid = str(uuid.uuid4())
        now = _now_iso()
        conn.execute(
            "INSERT INTO users (id, username, password_hash, created_at) VALUES (?, ?, ?, ?)",
            (uid, username, password_hash, now),
        )
        conn.commit()
        return User(id=uid, username=username, created_at=_parse_datetime(now), password_hash=password_hash)

    def get(self, conn: sqlite3.Connection, user_id: str) -> User | None:
        row = conn.execute(
            "SELECT id, username, password_hash, created_at FROM users WHERE id = ?",
            (user_id,),
        ).fetchone()
        if row is None:
            return None
        return User(
            id=row["id"],
            username=row["username"],
            created_at=_parse_datetime(row["created_at"]),
            password_hash=row["password_hash"],
        )

    def get_by_username(self, conn: sqlite3.Connection, username: str) -> User | None:
        row = conn.execute(
            "SELECT id, username, password_hash, created_at FROM users WHERE username = ?",
            (username,),
        ).fetchone()
        if row is None:
            return None
        return User(
            id=row["id"],
            username=row["username"],
            created_at=_parse_datetime(row["created_at"]),
            password_hash=row["password_hash"],
        )

    def usernames_by_id(self, conn: sqlite3.Connection, user_ids: list[str]) -> dict[str, str]:
        """user_id -> username for the given ids; unknown ids are left out."""
        if not user_ids:
            return {}
        marks = ", ".join("?" for _ in user_ids)
        rows = conn.execute(
            f"SELECT id, username FROM users WHERE id IN ({marks})", tuple(user_ids)
        ).fetchall()
        return {r["id"]: r["username"] for r in rows}


# ---------- PlayerRepository ----------


_PLAYER_COLS = "id, name, team, price, points, position, jersey_number, image_url"


def _row_to_player(row: sqlite3.Row) -> Player:
    return Player(
        id=row["id"],
        name=row["name"],
        team=row["team"],
        price=_to_decimal(row["price"]),
        points=row["points"],
        position=row["position"],
        jersey_number=row["jersey_number"],
        image_url=row["image_url"],
    )


class PlayerRepository:
    """Player catalog reads, seeding, and the single points write."""

    def upsert_profile(self, conn: sqlite3.Connection, player: Player, commit: bool = True) -> None:
        """Insert a player, or refresh its profile fields. Never touches points of an existing row."""
        conn.execute(
            f"""INSERT INTO players ({_PLAYER_COLS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    name = excluded.name,
                    team = excluded.team,
                    price = excluded.price,
                    position = excluded.position,
                    jersey_number = excluded.jersey_number,
                    image_url = excluded.image_url""",
            (
                player.id, player.name, player.team, float(player.price), player.points,
                player.position, player.jersey_number, player.image_url,
            ),
        )
        if commit:
            conn.commit()

    def get(self, conn: sqlite3.Connection, player_id: str) -> Player | None:
        row = conn.execute(
            f"SELECT {_PLAYER_COLS} FROM players WHERE id = ?", (player_id,)
        ).fetchone()
        if row is None:
            return None
        return _row_to_player(row)

    def list_all(self, conn: sqlite3.Connection, team: str | None = None) -> list[Player]:
        if team:
            rows = conn.execute(
                f"SELECT {_PLAYER_COLS} FROM players WHERE team = ? ORDER BY name", (team,)
            ).fetchall()
        else:
            rows = conn.execute(
                f"SELECT {_PLAYER_COLS} FROM players ORDER BY team, name"
            ).fetchall()
        return [_row_to_player(r) for r in rows]

    def get_points(self, conn: sqlite3.Connection, player_id: str) -> int | None:
        row = conn.execute("SELECT points FROM players WHERE id = ?", (player_id,)).fetchone()
        if row is None:
            return None
        return row["points"] or 0

    def update_points(
        self, conn: sqlite3.Connection, player_id: str, points: int, commit: bool = True
    ) -> None:
        conn.execute("UPDATE players SET points = ? WHERE id = ?", (points, player_id))
        if commit:
            conn.commit()


# ---------- LedgerRepository ----------


_LEDGER_COLS = (
    "user_id, player_ids, captain_id, vice_captain_id, budget, current_gameweek, "
    "free_transfers, transfers_made_this_gameweek, points_deductions"
)


class LedgerRepository:
    """Squad ledgers, one row per user. save() merges ledger columns only."""

    def get(self, conn: sqlite3.Connection, user_id: str) -> SquadLedger | None:
        row = conn.execute(
            f"SELECT {_LEDGER_COLS} FROM ledgers WHERE user_id = ?", (user_id,)
        ).fetchone()
        if row is None:
            return None
        return SquadLedger(
            user_id=row["user_id"],
            player_ids=tuple(json.loads(row["player_ids"] or "[]")),
            captain_id=row["captain_id"],
            vice_captain_id=row["vice_captain_id"],
            budget=_to_decimal(row["budget"]),
            current_gameweek=row["current_gameweek"],
            free_transfers=row["free_transfers"],
            transfers_made_this_gameweek=row["transfers_made_this_gameweek"],
            points_deductions=row["points_deductions"],
        )

    def list_for_users(self, conn: sqlite3.Connection, user_ids: list[str]) -> dict[str, SquadLedger]:
        """user_id -> ledger for the given users; users with no ledger are left out."""
        result: dict[str, SquadLedger] = {}
        for uid in user_ids:
            ledger = self.get(conn, uid)
            if ledger is not None:
                result[uid] = ledger
        return result

    def save(self, conn: sqlite3.Connection, ledger: SquadLedger, commit: bool = True) -> None:
        conn.execute(
            f"""INSERT INTO ledgers ({_LEDGER_COLS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(user_id) DO UPDATE SET
                    player_ids = excluded.player_ids,
                    captain_id = excluded.captain_id,
                    vice_captain_id = excluded.vice_captain_id,
                    budget = excluded.budget,
                    current_gameweek = excluded.current_gameweek,
                    free_transfers = excluded.free_transfers,
                    transfers_made_this_gameweek = excluded.transfers_made_this_gameweek,
                    points_deductions = excluded.points_deductions""",
            (
                ledger.user_id,
                json.dumps(list(ledger.player_ids)),
                ledger.captain_id,
                ledger.vice_captain_id,
                float(ledger.budget),
                ledger.current_gameweek,
                ledger.free_transfers,
                ledger.transfers_made_this_gameweek,
                ledger.points_deductions,
            ),
        )
        if commit:
            conn.commit()


# ---------- LeagueRepository ----------


class LeagueRepository:
    """CRUD for leagues and their member lists. No business logic."""

    def create(
        self,
        conn: sqlite3.Connection,
        name: str,
        code: str,
        creator_id: str,
        id: str | None = None,
    ) -> League:
        """Insert the league and its creator as first member."""
        lid = id or str(uuid.uuid4())
        now = _now_iso()
        conn.execute(
            "INSERT INTO leagues (id, name, code, creator_id, created_at) VALUES (?, ?, ?, ?, ?)",
            (lid, name, code, creator_id, now),
        )
        conn.execute(
            "INSERT INTO league_members (league_id, user_id, joined_at) VALUES (?, ?, ?)",
            (lid, creator_id, now),
        )
        conn.commit()
        return League(
            id=lid, name=name, code=code, creator_id=creator_id,
            created_at=_parse_datetime(now), members=[creator_id],
        )

    def _from_row(self, conn: sqlite3.Connection, row: sqlite3.Row) -> League:
        return League(
            id=row["id"],
            name=row["name"],
            code=row["code"],
            creator_id=row["creator_id"],
            created_at=_parse_datetime(row["created_at"]),
            members=self.list_member_ids(conn, row["id"]),
        )

    def get(self, conn: sqlite3.Connection, league_id: str) -> League | None:
        row = conn.execute(
            "SELECT id, name, code, creator_id, created_at FROM leagues WHERE id = ?",
            (league_id,),
        ).fetchone()
        if row is None:
            return None
        return self._from_row(conn, row)

    def get_by_code(self, conn: sqlite3.Connection, code: str) -> League | None:
        row = conn.execute(
            "SELECT id, name, code, creator_id, created_at FROM leagues WHERE code = ?",
            (code,),
        ).fetchone()
        if row is None:
            return None
        return self._from_row(conn, row)

    def code_exists(self, conn: sqlite3.Connection, code: str) -> bool:
        return conn.execute("SELECT 1 FROM leagues WHERE code = ?", (code,)).fetchone() is not None

    def list_by_member(self, conn: sqlite3.Connection, user_id: str) -> list[League]:
        rows = conn.execute(
            """SELECT l.id, l.name, l.code, l.creator_id, l.created_at
               FROM leagues l JOIN league_members m ON m.league_id = l.id
               WHERE m.user_id = ? ORDER BY l.created_at DESC""",
            (user_id,),
        ).fetchall()
        return [self._from_row(conn, r) for r in rows]

    def list_member_ids(self, conn: sqlite3.Connection, league_id: str) -> list[str]:
        """Member ids in join order (creator first)."""
        rows = conn.execute(
            "SELECT user_id FROM league_members WHERE league_id = ? ORDER BY joined_at, rowid",
            (league_id,),
        ).fetchall()
        return [r["user_id"] for r in rows]

    def add_member(self, conn: sqlite3.Connection, league_id: str, user_id: str) -> None:
        """Union semantics: adding an existing member is a no-op."""
        conn.execute(
            "INSERT OR IGNORE INTO league_members (league_id, user_id, joined_at) VALUES (?, ?, ?)",
            (league_id, user_id, _now_iso()),
        )
        conn.commit()


# ---------- GameStateRepository ----------


class GameStateRepository:
    """Global game state. current_gameweek is the authoritative gameweek."""

    def get_current_gameweek(self, conn: sqlite3.Connection) -> int:
        row = conn.execute(
            "SELECT value FROM game_state WHERE key = 'current_gameweek'"
        ).fetchone()
        if row is None:
            return FIRST_GAMEWEEK
        return int(row["value"])

    def set_current_gameweek(self, conn: sqlite3.Connection, gameweek: int) -> None:
        conn.execute(
            """INSERT INTO game_state (key, value) VALUES ('current_gameweek', ?)
               ON CONFLICT(key) DO UPDATE SET value = excluded.value""",
            (str(gameweek),),
        )
        conn.commit()
