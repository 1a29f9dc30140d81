"""
Data models for the league engine.
Domain objects only: no persistence or API logic.

Tournament-centric architecture: a tournament owns a team pool; players are drawn
onto teams; fixtures are planned pairings; matches carry the scores; standings
are always derived from matches and never stored.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any


# ---------- Player role ----------
class PlayerRole(str, Enum):
    ADMIN = "admin"
    PLAYER = "player"


# ---------- Fixture source ----------
class FixtureSource(str, Enum):
    """Round 1 is entered by hand; round 2 is mirrored from it."""
    MANUAL = "manual"
    AUTO_GENERATED = "auto_reverse"


# ---------- Roster lock (state machine) ----------
class RosterState(str, Enum):
    """Roster gate: unlocked → locked → (draw) ; locked → unlocked is an admin override."""
    UNLOCKED = "unlocked"
    LOCKED = "locked"


# ---------- Team ----------
@dataclass(frozen=True)
class Team:
    id: str
    name: str
    logo_url: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "logo_url": self.logo_url}


# ---------- Player ----------
@dataclass(frozen=True)
class Player:
    """
    A league participant. Identity is the e-mail address (lower-cased).
    Only role=player takes part in the draw; admins run the tournament.
    """
    email: str
    name: str
    role: PlayerRole = PlayerRole.PLAYER

    def to_dict(self) -> dict[str, Any]:
        return {"email": self.email, "name": self.name, "role": self.role.value}


# ---------- Tournament ----------
@dataclass(frozen=True)
class Tournament:
    id: str
    name: str
    date: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "date": self.date}


# ---------- TournamentTeam (join: tournament_id, team_id) ----------
@dataclass(frozen=True)
class TournamentTeam:
    """A team registered in a tournament's pool. At most once per tournament."""
    tournament_id: str
    team_id: str


# ---------- DrawAssignment ----------
@dataclass(frozen=True)
class DrawAssignment:
    """
    Result of the draw: one player owns one team for the tournament.
    Bijective within a tournament (no player or team twice).
    """
    tournament_id: str
    player_email: str
    team_id: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "tournament_id": self.tournament_id,
            "player_email": self.player_email,
            "team_id": self.team_id,
        }


# ---------- Round-robin pairing ----------
@dataclass(frozen=True)
class ScheduledPairing:
    """One (round, home, away) entry of a generated round-robin schedule."""
    round_number: int
    home_team_id: str
    away_team_id: str


# ---------- Fixture ----------
@dataclass(frozen=True)
class FixtureDraft:
    """Hand-entered round-1 pairing, before validation."""
    match_number: int
    home_team_id: str | None
    away_team_id: str | None


@dataclass(frozen=True)
class Fixture:
    """
    A planned pairing for a round. Distinct from Match, which carries scores.
    match_number is unique within (tournament, round); home != away unless bye.
    """
    tournament_id: str
    round_number: int
    match_number: int
    home_team_id: str | None
    away_team_id: str | None
    is_bye: bool = False
    source: FixtureSource = FixtureSource.MANUAL

    def to_dict(self) -> dict[str, Any]:
        return {
            "tournament_id": self.tournament_id,
            "round_number": self.round_number,
            "match_number": self.match_number,
            "home_team_id": self.home_team_id,
            "away_team_id": self.away_team_id,
            "is_bye": self.is_bye,
            "source": self.source.value,
        }


@dataclass(frozen=True)
class TwoRoundFixtures:
    round1: tuple[Fixture, ...]
    round2: tuple[Fixture, ...]

    @property
    def all(self) -> tuple[Fixture, ...]:
        return self.round1 + self.round2


# ---------- Match ----------
@dataclass(frozen=True)
class Match:
    """
    A fixture that can be played. Scores and played_at are jointly null
    (unplayed) or jointly set (played).
    """
    id: str
    tournament_id: str
    round_number: int | None
    home_team_id: str | None
    away_team_id: str | None
    home_player_email: str | None = None
    away_player_email: str | None = None
    home_score: int | None = None
    away_score: int | None = None
    played_at: datetime | None = None

    @property
    def is_played(self) -> bool:
        return (
            self.played_at is not None
            and self.home_score is not None
            and self.away_score is not None
        )

    @property
    def has_both_teams(self) -> bool:
        return bool(self.home_team_id) and bool(self.away_team_id)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "tournament_id": self.tournament_id,
            "round_number": self.round_number,
            "home_team_id": self.home_team_id,
            "away_team_id": self.away_team_id,
            "home_player_email": self.home_player_email,
            "away_player_email": self.away_player_email,
            "home_score": self.home_score,
            "away_score": self.away_score,
            "played_at": self.played_at.isoformat() if self.played_at else None,
        }


# ---------- Standings (derived, never stored) ----------
@dataclass(frozen=True)
class StandingRow:
    team_id: str
    team_name: str
    played: int = 0
    wins: int = 0
    draws: int = 0
    losses: int = 0
    goals_for: int = 0
    goals_against: int = 0
    goal_difference: int = 0
    points: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "team_id": self.team_id,
            "team_name": self.team_name,
            "played": self.played,
            "wins": self.wins,
            "draws": self.draws,
            "losses": self.losses,
            "goals_for": self.goals_for,
            "goals_against": self.goals_against,
            "goal_difference": self.goal_difference,
            "points": self.points,
        }


@dataclass(frozen=True)
class TeamSummary:
    """One team's record across the played matches (player dashboard)."""
    team_id: str
    played: int = 0
    wins: int = 0
    draws: int = 0
    losses: int = 0
    points: int = 0
    goals_for: int = 0
    goals_against: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "team_id": self.team_id,
            "played": self.played,
            "wins": self.wins,
            "draws": self.draws,
            "losses": self.losses,
            "points": self.points,
            "goals_for": self.goals_for,
            "goals_against": self.goals_against,
        }


# ---------- Roster gate transition ----------
@dataclass(frozen=True)
class GateTransitionResult:
    """
    Outcome of a lock/unlock. side_effect tells the persisting layer what to
    write: "record_lock" or "clear_lock".
    """
    tournament_id: str
    previous: RosterState
    current: RosterState
    side_effect: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "tournament_id": self.tournament_id,
            "previous": self.previous.value,
            "current": self.current.value,
            "side_effect": self.side_effect,
        }


def normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


