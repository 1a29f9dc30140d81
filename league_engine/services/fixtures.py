"""
Two-round fixtures: a hand-entered round 1 and its mirrored round 2.
Also turns fixtures (or round-robin pairings) into unplayed match records.
"""
from __future__ import annotations

import logging
import uuid
from typing import Callable, Iterable, Sequence

from league_engine.models import (
    Fixture,
    FixtureDraft,
    FixtureSource,
    Match,
    ScheduledPairing,
    TwoRoundFixtures,
)
from league_engine.services.errors import (
    DuplicateMatchNumber,
    DuplicateTeamUsage,
    IncompletePairing,
    SelfPairing,
)

logger = logging.getLogger(__name__)


def _clean(draft: FixtureDraft) -> FixtureDraft:
    return FixtureDraft(
        match_number=draft.match_number,
        home_team_id=(draft.home_team_id or "").strip(),
        away_team_id=(draft.away_team_id or "").strip(),
    )


def validate_round_one(drafts: Sequence[FixtureDraft]) -> list[FixtureDraft]:
    """
    Round 1 must be a perfect matching over the teams it mentions:
    both sides filled, no team against itself, no team used twice.
    An empty list is a valid (empty) round. Returns the cleaned drafts (ids stripped).
    """
    cleaned = [_clean(d) for d in drafts]
    for d in cleaned:
        if not d.home_team_id or not d.away_team_id:
            raise IncompletePairing(d.match_number)
        if d.home_team_id == d.away_team_id:
            raise SelfPairing(d.match_number, d.home_team_id)

    used: set[str] = set()
    for d in cleaned:
        for team_id in (d.home_team_id, d.away_team_id):
            if team_id in used:
                raise DuplicateTeamUsage(team_id, d.match_number)
            used.add(team_id)

    numbers: set[int] = set()
    for d in cleaned:
        if d.match_number in numbers:
            raise DuplicateMatchNumber(d.match_number)
        numbers.add(d.match_number)
    return cleaned


def build_two_round_fixtures(tournament_id: str, drafts: Sequence[FixtureDraft]) -> TwoRoundFixtures:
    """
    Validate round 1 and derive round 2 by swapping home/away, same match numbers.
    The result replaces every stored fixture of the tournament; callers must
    write it as one delete-then-insert.
    """
    cleaned = validate_round_one(drafts)
    round1 = tuple(
        Fixture(
            tournament_id=tournament_id,
            round_number=1,
            match_number=d.match_number,
            home_team_id=d.home_team_id,
            away_team_id=d.away_team_id,
            source=FixtureSource.MANUAL,
        )
        for d in cleaned
    )
    round2 = tuple(
        Fixture(
            tournament_id=tournament_id,
            round_number=2,
            match_number=f.match_number,
            home_team_id=f.away_team_id,
            away_team_id=f.home_team_id,
            source=FixtureSource.AUTO_GENERATED,
        )
        for f in round1
    )
    logger.debug("Built %d round-1 fixtures for tournament %s", len(round1), tournament_id)
    return TwoRoundFixtures(round1=round1, round2=round2)


def _new_match_id() -> str:
    return str(uuid.uuid4())


def matches_from_fixtures(
    tournament_id: str,
    fixtures: Iterable[Fixture],
    id_factory: Callable[[], str] = _new_match_id,
) -> list[Match]:
    """
    Playable fixtures → unplayed matches, ordered by (round, match number).
    Bye fixtures and fixtures with a missing side are skipped.
    """
    playable = sorted(
        (f for f in fixtures if not f.is_bye and f.home_team_id and f.away_team_id),
        key=lambda f: (f.round_number, f.match_number),
    )
    return [
        Match(
            id=id_factory(),
            tournament_id=tournament_id,
            round_number=f.round_number,
            home_team_id=f.home_team_id,
            away_team_id=f.away_team_id,
        )
        for f in playable
    ]


def matches_from_pairings(
    tournament_id: str,
    pairings: Iterable[ScheduledPairing],
    id_factory: Callable[[], str] = _new_match_id,
) -> list[Match]:
    """Round-robin output → unplayed matches, in schedule order."""
    return [
        Match(
            id=id_factory(),
            tournament_id=tournament_id,
            round_number=p.round_number,
            home_team_id=p.home_team_id,
            away_team_id=p.away_team_id,
        )
        for p in pairings
    ]
