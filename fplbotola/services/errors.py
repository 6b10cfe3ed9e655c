"""Lookup failures shared by the services. The API maps NotFoundError to 404."""
from __future__ import annotations


class NotFoundError(ValueError):
    """A referenced document does not exist."""


class PlayerNotFoundError(NotFoundError):
    def __init__(self, player_id: str) -> None:
        super().__init__(f"Player not found: {player_id}")
        self.player_id = player_id


class LeagueNotFoundError(NotFoundError):
    """No league with the given id or join code."""
