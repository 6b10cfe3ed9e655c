"""
Service layer: domain orchestration around the pure rules in
fplbotola.transfers and fplbotola.scoring. Repositories do the persistence.
"""
from .errors import LeagueNotFoundError, NotFoundError, PlayerNotFoundError
from .ledger_service import LedgerService
from .league_service import (
    AlreadyMemberError,
    JoinCodeExhaustedError,
    LeagueService,
    generate_join_code,
)
from .match_events import (
    MatchEventResult,
    UnknownActionError,
    UnscoredActionError,
    apply_match_event,
)

__all__ = [
    "NotFoundError",
    "PlayerNotFoundError",
    "LeagueNotFoundError",
    "LedgerService",
    "LeagueService",
    "AlreadyMemberError",
    "JoinCodeExhaustedError",
    "generate_join_code",
    "MatchEventResult",
    "UnknownActionError",
    "UnscoredActionError",
    "apply_match_event",
]
