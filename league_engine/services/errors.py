"""
Engine error taxonomy.
All failures are local validation errors; each carries the offending value so the
caller can build a precise message. None are retryable.
"""
from __future__ import annotations

from typing import Any


class EngineError(ValueError):
    """Base class for every league engine validation error."""


# ---------- Scheduling ----------


class InsufficientTeams(EngineError):
    """Round-robin needs at least two teams."""

    def __init__(self, team_count: int) -> None:
        self.team_count = team_count
        super().__init__(f"Insufficient teams: need at least 2, got {team_count}")


class IncompletePairing(EngineError):
    """A round-1 draft is missing its home or away team."""

    def __init__(self, match_number: int) -> None:
        self.match_number = match_number
        super().__init__(f"Incomplete pairing: match {match_number} needs both teams")


class SelfPairing(EngineError):
    """A team cannot play itself."""

    def __init__(self, match_number: int, team_id: str) -> None:
        self.match_number = match_number
        self.team_id = team_id
        super().__init__(f"Self-pairing: team {team_id} plays itself in match {match_number}")


class DuplicateTeamUsage(EngineError):
    """A team appears more than once where each team must appear exactly once."""

    def __init__(self, team_id: str, match_number: int | None = None) -> None:
        self.team_id = team_id
        self.match_number = match_number
        where = f" (match {match_number})" if match_number is not None else ""
        super().__init__(f"Duplicate team usage: team {team_id} is used more than once{where}")


class DuplicateMatchNumber(EngineError):
    """Two round-1 drafts share a match number."""

    def __init__(self, match_number: int) -> None:
        self.match_number = match_number
        super().__init__(f"Duplicate match number: {match_number} is used more than once")


# ---------- Draw & roster ----------


class InsufficientTeamsForPlayers(EngineError):
    """The tournament pool must hold at least as many teams as there are players."""

    def __init__(self, team_count: int, player_count: int) -> None:
        self.team_count = team_count
        self.player_count = player_count
        super().__init__(
            f"Insufficient teams for players: {team_count} teams for {player_count} players"
        )


class RosterTooSmall(EngineError):
    """Locking (and drawing) needs at least two players with role=player."""

    def __init__(self, player_count: int) -> None:
        self.player_count = player_count
        super().__init__(f"Roster too small: need at least 2 players, got {player_count}")


class RosterNotLocked(EngineError):
    """The draw may only run while the tournament roster is locked."""

    def __init__(self, tournament_id: str) -> None:
        self.tournament_id = tournament_id
        super().__init__(f"Roster not locked for tournament {tournament_id}: lock it before the draw")


# ---------- Results ----------


class InvalidScore(EngineError):
    """Scores must be non-negative integers."""

    def __init__(self, value: Any) -> None:
        self.value = value
        super().__init__(f"Invalid score: {value!r} (expected a non-negative integer)")


# ---------- Service level ----------


class NotFoundError(EngineError):
    """A referenced tournament or match does not exist."""


class MatchesAlreadyExist(EngineError):
    """Schedule generation refuses to run over existing matches; reset first."""

    def __init__(self, tournament_id: str, count: int) -> None:
        self.tournament_id = tournament_id
        self.count = count
        super().__init__(
            f"Matches already exist for tournament {tournament_id} ({count}); reset the schedule first"
        )


class DrawNotFound(EngineError):
    """Player assignment needs a completed draw."""

    def __init__(self, tournament_id: str) -> None:
        self.tournament_id = tournament_id
        super().__init__(f"No draw for tournament {tournament_id}: run the draw first")


class NoMatches(EngineError):
    """Nothing to operate on: generate matches first."""

    def __init__(self, tournament_id: str) -> None:
        self.tournament_id = tournament_id
        super().__init__(f"No matches for tournament {tournament_id}: generate matches first")
