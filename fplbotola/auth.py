"""
Manager identity for the fantasy app.

A manager signs up with a username and password and gets back a bearer token.
Squad, league and leaderboard routes only ever see the token's subject,
which is the manager's user id; that id also keys the squad ledger.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt
from passlib.context import CryptContext

from fplbotola.config import get_settings

# pbkdf2_sha256 only; the bcrypt backend fails on passwords over 72 bytes
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str | None) -> bool:
    """False for accounts with no stored hash instead of raising."""
    return bool(hashed) and pwd_context.verify(plain, hashed)


def create_access_token(user_id: str) -> str:
    """Signed token whose subject is the manager's user id, valid for jwt_expire_minutes."""
    settings = get_settings()
    issued = datetime.now(timezone.utc)
    claims = {
        "sub": user_id,
        "iat": issued,
        "exp": issued + timedelta(minutes=settings.jwt_expire_minutes),
    }
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> str | None:
    """User id carried by a valid token; None if it is expired, forged or has no subject."""
    settings = get_settings()
    try:
        claims = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None
    subject = claims.get("sub")
    return subject if isinstance(subject, str) and subject else None
