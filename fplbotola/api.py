"""
REST API for the Botola fantasy backend.
Thin wrappers around domain logic and persistence.
"""
from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

from fastapi import Depends, FastAPI, Header, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel, Field

from fplbotola.api_errors import http_errors
from fplbotola.auth import create_access_token, decode_token, hash_password, verify_password
from fplbotola.config import get_settings
from fplbotola.functions import router as match_events_router
from fplbotola.logging_config import get_logger, setup_logging
from fplbotola.models import League, SquadLedger
from fplbotola.persistence import PlayerRepository, UserRepository, db_conn
from fplbotola.persistence.db import ensure_db
from fplbotola.scoring import PlayerCatalog
from fplbotola.services import LeagueService, LedgerService

logger = get_logger(__name__)


# ---------- Lifespan ----------
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging(get_settings().log_level)
    ensure_db()
    yield


# ---------- FastAPI app ----------
app = FastAPI(
    title="Botola Fantasy API",
    description="Backend for Botola Pro fantasy squads, transfers and mini-leagues",
    version="0.1.0",
    lifespan=lifespan,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(match_events_router)


# ---------- Request/Response models ----------

_MAX_PASSWORD_BYTES = 72

security = HTTPBearer(auto_error=False)


class SignupRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=6)


class LoginRequest(BaseModel):
    username: str
    password: str


class PlayerRef(BaseModel):
    player_id: str = Field(..., min_length=1)


class CreateLeagueRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)


class JoinLeagueRequest(BaseModel):
    code: str = Field(..., min_length=1, max_length=20, description="League join code")


class SetGameweekRequest(BaseModel):
    gameweek: int = Field(..., ge=1)


def _truncate_password(s: str) -> str:
    """Keep passwords to 72 UTF-8 bytes so hashes stay portable to bcrypt."""
    b = s.encode("utf-8")
    if len(b) <= _MAX_PASSWORD_BYTES:
        return s
    return b[:_MAX_PASSWORD_BYTES].decode("utf-8", errors="ignore")


def _get_current_user_id(credentials: HTTPAuthorizationCredentials | None = Depends(security)) -> str | None:
    """user_id from the bearer JWT, or None if no/invalid token."""
    if credentials is None:
        return None
    return decode_token(credentials.credentials)


def _require_user_id(user_id: str | None = Depends(_get_current_user_id)) -> str:
    if not user_id:
        raise HTTPException(status_code=401, detail="Login required")
    return user_id


def _require_admin(x_admin_key: str | None = Header(None)) -> None:
    admin_key = get_settings().admin_key
    if not admin_key:
        raise HTTPException(status_code=403, detail="Admin operations are disabled")
    if x_admin_key != admin_key:
        raise HTTPException(status_code=401, detail="Invalid admin key")


def _squad_payload(ledger: SquadLedger, catalog: PlayerCatalog, score: int) -> dict[str, Any]:
    players = []
    for pid in ledger.player_ids:
        p = catalog.get(pid)
        entry = p.to_dict() if p else {"id": pid}
        entry["is_captain"] = pid == ledger.captain_id
        entry["is_vice_captain"] = pid == ledger.vice_captain_id
        players.append(entry)
    out = ledger.to_dict()
    out["players"] = players
    out["score"] = score
    return out


def _league_payload(league: League) -> dict[str, Any]:
    return league.to_dict()


# ---------- Auth endpoints ----------


@app.post("/signup")
def signup(req: SignupRequest) -> dict[str, Any]:
    """Create account. Passwords hashed, never stored plain. Creates the user's ledger."""
    with http_errors("signup"), db_conn() as conn:
        user_repo = UserRepository()
        if user_repo.get_by_username(conn, req.username):
            raise HTTPException(status_code=400, detail="Username already taken")
        user = user_repo.create_with_password(
            conn, req.username, hash_password(_truncate_password(req.password))
        )
        LedgerService().reconcile(conn, user.id)
        logger.info("User %s signed up", user.id)
        return {"user_id": user.id, "username": user.username, "token": create_access_token(user.id)}


@app.post("/login")
def login(req: LoginRequest) -> dict[str, Any]:
    """Login. Returns JWT token."""
    with http_errors("login"), db_conn() as conn:
        user_repo = UserRepository()
        user = user_repo.get_by_username(conn, req.username)
        if user is None or not verify_password(_truncate_password(req.password), user.password_hash):
            raise HTTPException(status_code=401, detail="Invalid username or password")
        LedgerService().reconcile(conn, user.id)
        return {"user_id": user.id, "username": user.username, "token": create_access_token(user.id)}


@app.get("/me")
def me(user_id: str = Depends(_require_user_id)) -> dict[str, Any]:
    with http_errors("profile"), db_conn() as conn:
        user = UserRepository().get(conn, user_id)
        if user is None:
            raise HTTPException(status_code=404, detail="User not found")
        return user.to_dict()


# ---------- Player catalog ----------


@app.get("/players")
def get_players(team: str | None = Query(None, description="Filter by club")) -> dict[str, Any]:
    """List the player catalog."""
    with http_errors("list players"), db_conn() as conn:
        players = PlayerRepository().list_all(conn, team=team)
        return {"players": [p.to_dict() for p in players]}


@app.get("/players/{player_id}")
def get_player(player_id: str) -> dict[str, Any]:
    with http_errors("get player"), db_conn() as conn:
        player = PlayerRepository().get(conn, player_id)
        if player is None:
            raise HTTPException(status_code=404, detail="Player not found")
        return player.to_dict()


# ---------- Gameweek ----------


@app.get("/gameweek")
def get_gameweek() -> dict[str, Any]:
    with http_errors("get gameweek"), db_conn() as conn:
        return {"current_gameweek": LedgerService().current_gameweek(conn)}


@app.put("/gameweek", dependencies=[Depends(_require_admin)])
def set_gameweek(req: SetGameweekRequest) -> dict[str, Any]:
    """Admin: set the authoritative gameweek. Ledgers roll over on their next reconcile."""
    with http_errors("set gameweek"), db_conn() as conn:
        svc = LedgerService()
        svc.set_current_gameweek(conn, req.gameweek)
        return {"current_gameweek": svc.current_gameweek(conn)}


# ---------- Squad ----------


@app.get("/me/squad")
def get_squad(user_id: str = Depends(_require_user_id)) -> dict[str, Any]:
    """Current squad, reconciled to the current gameweek, with resolved players and score."""
    with http_errors("load squad"), db_conn() as conn:
        svc = LedgerService()
        ledger = svc.reconcile(conn, user_id)
        catalog = svc.catalog(conn)
        return _squad_payload(ledger, catalog, svc.score(conn, ledger, catalog))


@app.post("/me/squad/players")
def add_squad_player(req: PlayerRef, user_id: str = Depends(_require_user_id)) -> dict[str, Any]:
    """Buy a player into the squad."""
    with http_errors("add player"), db_conn() as conn:
        svc = LedgerService()
        ledger = svc.add_player(conn, user_id, req.player_id)
        catalog = svc.catalog(conn)
        return _squad_payload(ledger, catalog, svc.score(conn, ledger, catalog))


@app.delete("/me/squad/players/{player_id}")
def sell_squad_player(player_id: str, user_id: str = Depends(_require_user_id)) -> dict[str, Any]:
    """Sell a player from the squad at the current catalog price."""
    with http_errors("sell player"), db_conn() as conn:
        svc = LedgerService()
        ledger = svc.sell_player(conn, user_id, player_id)
        catalog = svc.catalog(conn)
        return _squad_payload(ledger, catalog, svc.score(conn, ledger, catalog))


@app.put("/me/squad/captain")
def set_squad_captain(req: PlayerRef, user_id: str = Depends(_require_user_id)) -> dict[str, Any]:
    with http_errors("set captain"), db_conn() as conn:
        svc = LedgerService()
        ledger = svc.set_captain(conn, user_id, req.player_id)
        catalog = svc.catalog(conn)
        return _squad_payload(ledger, catalog, svc.score(conn, ledger, catalog))


@app.put("/me/squad/vice-captain")
def set_squad_vice_captain(req: PlayerRef, user_id: str = Depends(_require_user_id)) -> dict[str, Any]:
    with http_errors("set vice-captain"), db_conn() as conn:
        svc = LedgerService()
        ledger = svc.set_vice_captain(conn, user_id, req.player_id)
        catalog = svc.catalog(conn)
        return _squad_payload(ledger, catalog, svc.score(conn, ledger, catalog))


# ---------- Leagues ----------


@app.post("/leagues")
def create_league(req: CreateLeagueRequest, user_id: str = Depends(_require_user_id)) -> dict[str, Any]:
    """Create a league; the creator is its first member. Returns the join code."""
    with http_errors("create league"), db_conn() as conn:
        league = LeagueService().create_league(conn, req.name, user_id)
        return _league_payload(league)


@app.get("/leagues")
def list_leagues(user_id: str = Depends(_require_user_id)) -> dict[str, Any]:
    """Leagues the current user belongs to."""
    with http_errors("list leagues"), db_conn() as conn:
        leagues = LeagueService().list_leagues_for_user(conn, user_id)
        return {"leagues": [_league_payload(league) for league in leagues]}


@app.post("/leagues/join")
def join_league(req: JoinLeagueRequest, user_id: str = Depends(_require_user_id)) -> dict[str, Any]:
    """Join a league by its code."""
    with http_errors("join league"), db_conn() as conn:
        league = LeagueService().join_league(conn, req.code, user_id)
        return _league_payload(league)


@app.get("/leagues/{league_id}")
def get_league(league_id: str, user_id: str = Depends(_require_user_id)) -> dict[str, Any]:
    with http_errors("get league"), db_conn() as conn:
        league = LeagueService().get_league(conn, league_id)
        return _league_payload(league)


@app.get("/leagues/{league_id}/leaderboard")
def get_leaderboard(league_id: str, user_id: str = Depends(_require_user_id)) -> dict[str, Any]:
    """Members ranked by score, recomputed on every request."""
    with http_errors("leaderboard"), db_conn() as conn:
        entries = LeagueService().leaderboard(conn, league_id)
        return {"league_id": league_id, "leaderboard": [e.to_dict() for e in entries]}
