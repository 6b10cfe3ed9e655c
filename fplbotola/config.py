"""Application settings, read from the environment once and cached."""
from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, Field

_DEFAULT_CORS_ORIGINS = (
    "http://localhost:3000,"
    "http://127.0.0.1:3000,"
    "http://localhost:9002"
)


def _project_root() -> Path:
    return Path(__file__).resolve().parent.parent


class Settings(BaseModel):
    db_path: Path = Field(default_factory=lambda: _project_root() / "data" / "app.db")
    players_path: Path = Field(default_factory=lambda: _project_root() / "data" / "players.json")
    jwt_secret: str = "fplbotola-dev-secret-change-in-production"
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = Field(default=60 * 24 * 7, ge=1)
    admin_key: str | None = None
    log_level: str = "INFO"
    cors_origins: list[str] = Field(default_factory=list)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Build Settings from environment variables.

    FPLBOTOLA_DB_PATH, FPLBOTOLA_PLAYERS_PATH, JWT_SECRET_KEY,
    FPLBOTOLA_JWT_EXPIRE_MINUTES, FPLBOTOLA_ADMIN_KEY, FPLBOTOLA_LOG_LEVEL,
    FPLBOTOLA_CORS_ORIGINS (comma separated). Unset variables keep defaults.
    """
    env = os.environ
    values: dict[str, object] = {}
    if env.get("FPLBOTOLA_DB_PATH"):
        values["db_path"] = env["FPLBOTOLA_DB_PATH"]
    if env.get("FPLBOTOLA_PLAYERS_PATH"):
        values["players_path"] = env["FPLBOTOLA_PLAYERS_PATH"]
    if env.get("JWT_SECRET_KEY"):
        values["jwt_secret"] = env["JWT_SECRET_KEY"]
    if env.get("FPLBOTOLA_JWT_EXPIRE_MINUTES"):
        values["jwt_expire_minutes"] = env["FPLBOTOLA_JWT_EXPIRE_MINUTES"]
    if env.get("FPLBOTOLA_ADMIN_KEY"):
        values["admin_key"] = env["FPLBOTOLA_ADMIN_KEY"]
    if env.get("FPLBOTOLA_LOG_LEVEL"):
        values["log_level"] = env["FPLBOTOLA_LOG_LEVEL"].upper()
    origins = env.get("FPLBOTOLA_CORS_ORIGINS", _DEFAULT_CORS_ORIGINS)
    values["cors_origins"] = [o.strip() for o in origins.split(",") if o.strip()]
    return Settings(**values)


def clear_settings_cache() -> None:
    """Drop cached settings so the next get_settings() re-reads the environment."""
    get_settings.cache_clear()
