"""
League table derived from recorded results.

Points: 3 for a win, 1 for a draw, 0 for a loss. Ranking is points, then goal
difference, then goals for, all descending. There is no further tie-break:
teams equal on all three keep their order from the team pool (stable sort).
The table is recomputed from the full match list on every call.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Mapping, Sequence, Union

from league_engine.models import Match, StandingRow, Team, TeamSummary, TournamentTeam

logger = logging.getLogger(__name__)

WIN_POINTS = 3
DRAW_POINTS = 1

PoolEntry = Union[Team, TournamentTeam, str]


@dataclass
class _Tally:
    played: int = 0
    wins: int = 0
    draws: int = 0
    losses: int = 0
    goals_for: int = 0
    goals_against: int = 0
    points: int = 0

    def add(self, scored: int, conceded: int) -> None:
        self.played += 1
        self.goals_for += scored
        self.goals_against += conceded
        if scored > conceded:
            self.wins += 1
            self.points += WIN_POINTS
        elif scored < conceded:
            self.losses += 1
        else:
            self.draws += 1
            self.points += DRAW_POINTS


def is_counted(match: Match) -> bool:
    """A match counts once both teams and both scores are present."""
    return (
        match.has_both_teams
        and match.home_score is not None
        and match.away_score is not None
    )


def _pool_entry(entry: PoolEntry, names: Mapping[str, str]) -> tuple[str, str]:
    if isinstance(entry, Team):
        return entry.id, names.get(entry.id, entry.name)
    team_id = entry.team_id if isinstance(entry, TournamentTeam) else entry
    return team_id, names.get(team_id, team_id)


def compute_standings(
    team_pool: Sequence[PoolEntry],
    matches: Iterable[Match],
    names: Mapping[str, str] | None = None,
) -> list[StandingRow]:
    """
    One row per pool team (zeros if it has not played), ranked.
    Matches missing a team or a score, or involving a team outside the pool,
    are skipped.
    """
    names = names or {}
    order: list[str] = []
    labels: dict[str, str] = {}
    tallies: dict[str, _Tally] = {}
    for entry in team_pool:
        team_id, label = _pool_entry(entry, names)
        if team_id in tallies:
            continue
        order.append(team_id)
        labels[team_id] = label
        tallies[team_id] = _Tally()

    counted = 0
    for m in matches:
        if not is_counted(m):
            continue
        home = tallies.get(m.home_team_id)
        away = tallies.get(m.away_team_id)
        if home is None or away is None:
            continue
        home.add(m.home_score, m.away_score)
        away.add(m.away_score, m.home_score)
        counted += 1

    rows = [
        StandingRow(
            team_id=tid,
            team_name=labels[tid],
            played=t.played,
            wins=t.wins,
            draws=t.draws,
            losses=t.losses,
            goals_for=t.goals_for,
            goals_against=t.goals_against,
            goal_difference=t.goals_for - t.goals_against,
            points=t.points,
        )
        for tid, t in ((tid, tallies[tid]) for tid in order)
    ]
    # list.sort is stable: equal keys keep pool order
    rows.sort(key=lambda r: (-r.points, -r.goal_difference, -r.goals_for))
    logger.debug("Standings: %d teams, %d matches counted", len(rows), counted)
    return rows


def team_summary(team_id: str, matches: Iterable[Match]) -> TeamSummary:
    """Record of a single team across its played matches."""
    tally = _Tally()
    for m in matches:
        if not is_counted(m):
            continue
        if m.home_team_id == team_id:
            tally.add(m.home_score, m.away_score)
        elif m.away_team_id == team_id:
            tally.add(m.away_score, m.home_score)
    return TeamSummary(
        team_id=team_id,
        played=tally.played,
        wins=tally.wins,
        draws=tally.draws,
        losses=tally.losses,
        points=tally.points,
        goals_for=tally.goals_for,
        goals_against=tally.goals_against,
    )


def matches_for_team(team_id: str, matches: Iterable[Match], round_number: int | None = None) -> list[Match]:
    return [
        m for m in matches
        if team_id in (m.home_team_id, m.away_team_id)
        and (round_number is None or m.round_number == round_number)
    ]


def rounds_of(matches: Iterable[Match]) -> list[int]:
    return sorted({m.round_number for m in matches if m.round_number})


def last_played(matches: Iterable[Match]) -> Match | None:
    """Most recently played match, by played_at."""
    played = [m for m in matches if m.is_played]
    if not played:
        return None
    return max(played, key=lambda m: m.played_at)
