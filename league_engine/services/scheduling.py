"""
Round-robin schedule generation for tournaments.

Round-robin is used so every team plays every other team exactly once per leg;
a leg is N-1 rounds (N even) or N rounds (N odd). Each team plays at most one
match per round.

BYE handling: when the number of teams is odd, one virtual BYE slot is added.
Pairings against the BYE are dropped (no fixture, no walkover), so in every
round exactly one team sits out.

Uses the circle method: slot 0 stays fixed and the other slots rotate one step
per round (the last slot moves to second place). The rotation is computed by
index arithmetic, so no list is ever mutated. Same team list ordering yields
the same schedule.
"""
from __future__ import annotations

import logging
from itertools import groupby
from typing import Sequence

from league_engine.models import ScheduledPairing
from league_engine.services.errors import DuplicateTeamUsage, InsufficientTeams

logger = logging.getLogger(__name__)


def number_of_rounds(team_count: int, double: bool = False) -> int:
    """Rounds in a full schedule: N'-1 per leg, where N' is team_count rounded up to even."""
    if team_count < 2:
        return 0
    slots = team_count + (team_count % 2)
    rounds = slots - 1
    return rounds * 2 if double else rounds


def _slot_at(position: int, round_index: int, slots: int) -> int:
    """
    Index of the team sitting at `position` in round `round_index` (0-based).
    Position 0 is fixed; positions 1..slots-1 cycle through indices 1..slots-1.
    """
    if position == 0:
        return 0
    ring = slots - 1
    return 1 + (position - 1 - round_index) % ring


def generate_round_robin(team_ids: Sequence[str], double: bool = False) -> list[ScheduledPairing]:
    """
    Generate the full schedule as an ordered list of (round, home, away).

    Odd rounds keep the first-named team of each pair at home, even rounds swap
    sides. With double=True a mirrored second leg (home/away swapped) follows,
    its rounds offset by the first leg's round count.
    """
    ids = list(team_ids)
    if len(ids) < 2:
        raise InsufficientTeams(len(ids))
    seen: set[str] = set()
    for tid in ids:
        if tid in seen:
            raise DuplicateTeamUsage(tid)
        seen.add(tid)

    n = len(ids)
    slots = n + (n % 2)  # slot index n (if present) is the BYE
    rounds = slots - 1
    first_leg: list[ScheduledPairing] = []
    for r in range(rounds):
        round_number = r + 1
        for i in range(slots // 2):
            a = _slot_at(i, r, slots)
            b = _slot_at(slots - 1 - i, r, slots)
            if a >= n or b >= n:
                continue
            if round_number % 2 == 1:
                home, away = ids[a], ids[b]
            else:
                home, away = ids[b], ids[a]
            first_leg.append(ScheduledPairing(round_number, home, away))

    schedule = list(first_leg)
    if double:
        schedule.extend(
            ScheduledPairing(p.round_number + rounds, p.away_team_id, p.home_team_id)
            for p in first_leg
        )
    logger.debug(
        "Round-robin for %d teams: %d rounds, %d fixtures (double=%s)",
        n, rounds * (2 if double else 1), len(schedule), double,
    )
    return schedule


def pairings_by_round(pairings: Sequence[ScheduledPairing]) -> dict[int, list[ScheduledPairing]]:
    """Group a schedule by round number, keeping the emitted order inside each round."""
    ordered = sorted(pairings, key=lambda p: p.round_number)
    return {r: list(group) for r, group in groupby(ordered, key=lambda p: p.round_number)}
