"""
Persistence layer for tournament data.
No business logic: only read/write interfaces.
"""
from .db import get_connection, init_db
from .repositories import (
    PlayerRepository,
    TeamRepository,
    TournamentRepository,
    TournamentTeamRepository,
    DrawRepository,
    FixtureRepository,
    MatchRepository,
    RosterLockRepository,
)

__all__ = [
    "get_connection",
    "init_db",
    "PlayerRepository",
    "TeamRepository",
    "TournamentRepository",
    "TournamentTeamRepository",
    "DrawRepository",
    "FixtureRepository",
    "MatchRepository",
    "RosterLockRepository",
]
