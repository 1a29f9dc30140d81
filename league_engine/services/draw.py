"""
The draw: random, bijective assignment of tournament teams to players.
Also maps drawn owners onto matches.
"""
from __future__ import annotations

import dataclasses
import logging
from typing import Sequence, Union

from league_engine.models import (
    DrawAssignment,
    Match,
    Player,
    PlayerRole,
    Team,
    TournamentTeam,
    normalize_email,
)
from league_engine.rng import DrawRNG
from league_engine.services.errors import (
    DrawNotFound,
    DuplicateTeamUsage,
    InsufficientTeamsForPlayers,
    NoMatches,
    RosterTooSmall,
)

logger = logging.getLogger(__name__)

PoolEntry = Union[Team, TournamentTeam, str]

MIN_PLAYERS = 2


def _pool_team_id(entry: PoolEntry) -> str:
    if isinstance(entry, str):
        return entry
    if isinstance(entry, TournamentTeam):
        return entry.team_id
    return entry.id


def draw_participants(players: Sequence[Player]) -> list[Player]:
    """Players with role=player, sorted by name (then e-mail) so input order is fixed."""
    only_players = [p for p in players if p.role == PlayerRole.PLAYER]
    return sorted(only_players, key=lambda p: (p.name, normalize_email(p.email)))


def draw(
    tournament_id: str,
    players: Sequence[Player],
    team_pool: Sequence[PoolEntry],
    rng: DrawRNG | None = None,
) -> list[DrawAssignment]:
    """
    Shuffle the team pool, take the first len(players) teams and zip them with
    the sorted players. Any previous assignment set for the tournament is
    superseded; the caller deletes it before writing this one.

    rng defaults to a freshly seeded DrawRNG, so two draws are never reproducible.
    """
    participants = draw_participants(players)
    if len(participants) < MIN_PLAYERS:
        raise RosterTooSmall(len(participants))

    team_ids = [_pool_team_id(t) for t in team_pool]
    seen: set[str] = set()
    for tid in team_ids:
        if tid in seen:
            raise DuplicateTeamUsage(tid)
        seen.add(tid)
    if len(team_ids) < len(participants):
        raise InsufficientTeamsForPlayers(len(team_ids), len(participants))

    rng = rng if rng is not None else DrawRNG()
    shuffled = list(team_ids)
    rng.shuffle(shuffled)
    chosen = shuffled[: len(participants)]

    assignments = [
        DrawAssignment(
            tournament_id=tournament_id,
            player_email=normalize_email(player.email),
            team_id=team_id,
        )
        for player, team_id in zip(participants, chosen)
    ]
    logger.debug(
        "Draw for tournament %s: %d players over %d teams",
        tournament_id, len(participants), len(team_ids),
    )
    return assignments


def owner_by_team(assignments: Sequence[DrawAssignment]) -> dict[str, str]:
    return {a.team_id: a.player_email for a in assignments}


def team_for_player(email: str, assignments: Sequence[DrawAssignment]) -> str | None:
    """The team drawn for this player, or None."""
    target = normalize_email(email)
    for a in assignments:
        if a.player_email == target:
            return a.team_id
    return None


def assign_players_to_matches(
    tournament_id: str,
    matches: Sequence[Match],
    assignments: Sequence[DrawAssignment],
) -> list[Match]:
    """
    Put each team's drawn owner on its matches. Matches missing a team are
    left alone; a side whose team was not drawn gets None.
    Returns only the matches whose assigned players change.
    """
    if not assignments:
        raise DrawNotFound(tournament_id)
    if not matches:
        raise NoMatches(tournament_id)

    owners = owner_by_team(assignments)
    updates: list[Match] = []
    for m in matches:
        if not m.has_both_teams:
            continue
        home_player = owners.get(m.home_team_id)
        away_player = owners.get(m.away_team_id)
        if m.home_player_email == home_player and m.away_player_email == away_player:
            continue
        updates.append(
            dataclasses.replace(m, home_player_email=home_player, away_player_email=away_player)
        )
    return updates
