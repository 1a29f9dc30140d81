"""
Service layer: pure engine operations plus the orchestration service.
Only tournament_service touches persistence.
"""
from .errors import (
    EngineError,
    InsufficientTeams,
    IncompletePairing,
    SelfPairing,
    DuplicateTeamUsage,
    DuplicateMatchNumber,
    InsufficientTeamsForPlayers,
    RosterTooSmall,
    RosterNotLocked,
    InvalidScore,
    NotFoundError,
    MatchesAlreadyExist,
    DrawNotFound,
    NoMatches,
)
from .scheduling import generate_round_robin, number_of_rounds
from .fixtures import build_two_round_fixtures, matches_from_fixtures, matches_from_pairings
from .draw import draw, assign_players_to_matches
from .roster_gate import RosterGate
from .standings import compute_standings, team_summary
from .results import record_result, clear_result
from .tournament_service import TournamentService

__all__ = [
    "EngineError",
    "InsufficientTeams",
    "IncompletePairing",
    "SelfPairing",
    "DuplicateTeamUsage",
    "DuplicateMatchNumber",
    "InsufficientTeamsForPlayers",
    "RosterTooSmall",
    "RosterNotLocked",
    "InvalidScore",
    "NotFoundError",
    "MatchesAlreadyExist",
    "DrawNotFound",
    "NoMatches",
    "generate_round_robin",
    "number_of_rounds",
    "build_two_round_fixtures",
    "matches_from_fixtures",
    "matches_from_pairings",
    "draw",
    "assign_players_to_matches",
    "RosterGate",
    "compute_standings",
    "team_summary",
    "record_result",
    "clear_result",
    "TournamentService",
]
