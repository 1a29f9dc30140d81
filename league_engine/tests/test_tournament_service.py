"""
Tests for the tournament service: gate persistence, draw replace, fixture replace,
schedule generation guards, player assignment, results and standings.
"""
from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import pytest

import sys
sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent))

from league_engine.models import FixtureDraft, FixtureSource, PlayerRole, RosterState
from league_engine.persistence.db import get_connection, init_db, set_db_path
from league_engine.persistence.repositories import (
    DrawRepository,
    FixtureRepository,
    MatchRepository,
    PlayerRepository,
    TeamRepository,
    TournamentRepository,
    TournamentTeamRepository,
)
from league_engine.rng import DrawRNG
from league_engine.services.errors import (
    DrawNotFound,
    InsufficientTeams,
    InsufficientTeamsForPlayers,
    InvalidScore,
    MatchesAlreadyExist,
    NotFoundError,
    RosterNotLocked,
    RosterTooSmall,
    SelfPairing,
)
from league_engine.services.tournament_service import TournamentService

NOW = datetime(2026, 5, 1, 18, 0, tzinfo=timezone.utc)


@pytest.fixture
def db_conn(tmp_path):
    """Temporary DB with the full schema."""
    db_path = tmp_path / "league_test.db"
    set_db_path(db_path)
    init_db(db_path=db_path)
    conn = get_connection()
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture
def service():
    return TournamentService()


@pytest.fixture
def tournament(db_conn):
    """One tournament with four pool teams (A-D), one admin and no players yet."""
    t = TournamentRepository().create(db_conn, "Spring Cup", id="t1")
    team_repo = TeamRepository()
    pool_repo = TournamentTeamRepository()
    for tid, name in [("A", "Alfa"), ("B", "Beta"), ("C", "Gama"), ("D", "Delta")]:
        team_repo.create(db_conn, name, id=tid)
        pool_repo.add(db_conn, t.id, tid)
    PlayerRepository().create(db_conn, "admin@example.com", "Admin", role=PlayerRole.ADMIN)
    return t


def _add_players(conn, *names: str) -> None:
    repo = PlayerRepository()
    for n in names:
        repo.create(conn, f"{n.lower()}@example.com", n)


# ---------- Roster gate ----------


def test_lock_needs_two_players(db_conn, service, tournament):
    _add_players(db_conn, "Ana")
    with pytest.raises(RosterTooSmall):
        service.lock_roster(db_conn, tournament.id)
    assert service.roster_state(db_conn, tournament.id) == RosterState.UNLOCKED


def test_lock_is_persisted_and_unlock_clears_it(db_conn, service, tournament):
    _add_players(db_conn, "Ana", "Bojan")
    result = service.lock_roster(db_conn, tournament.id)
    assert result.current == RosterState.LOCKED
    assert TournamentService().roster_state(db_conn, tournament.id) == RosterState.LOCKED
    service.unlock_roster(db_conn, tournament.id)
    assert service.roster_state(db_conn, tournament.id) == RosterState.UNLOCKED


def test_unknown_tournament(db_conn, service, tournament):
    with pytest.raises(NotFoundError):
        service.lock_roster(db_conn, "nope")


# ---------- Draw ----------


def test_draw_requires_locked_roster(db_conn, service, tournament):
    _add_players(db_conn, "Ana", "Bojan")
    with pytest.raises(RosterNotLocked):
        service.run_draw(db_conn, tournament.id, rng=DrawRNG(1))


def test_draw_replaces_previous_assignment_set(db_conn, service, tournament):
    _add_players(db_conn, "Ana", "Bojan", "Cica")
    service.lock_roster(db_conn, tournament.id)
    service.run_draw(db_conn, tournament.id, rng=DrawRNG(1))
    second = service.run_draw(db_conn, tournament.id, rng=DrawRNG(2))
    stored = DrawRepository().list_by_tournament(db_conn, tournament.id)
    assert len(stored) == 3
    assert sorted(stored, key=lambda a: a.player_email) == sorted(second, key=lambda a: a.player_email)
    assert "admin@example.com" not in {a.player_email for a in stored}


def test_unlock_keeps_existing_draw(db_conn, service, tournament):
    _add_players(db_conn, "Ana", "Bojan")
    service.lock_roster(db_conn, tournament.id)
    service.run_draw(db_conn, tournament.id, rng=DrawRNG(5))
    service.unlock_roster(db_conn, tournament.id)
    assert len(service.list_draw(db_conn, tournament.id)) == 2


def test_failed_draw_leaves_previous_draw(db_conn, service, tournament):
    _add_players(db_conn, "Ana", "Bojan")
    service.lock_roster(db_conn, tournament.id)
    service.run_draw(db_conn, tournament.id, rng=DrawRNG(5))
    _add_players(db_conn, "Cica", "Dule", "Ema")
    with pytest.raises(InsufficientTeamsForPlayers):
        service.run_draw(db_conn, tournament.id, rng=DrawRNG(6))
    assert len(service.list_draw(db_conn, tournament.id)) == 2


def test_reset_draw(db_conn, service, tournament):
    _add_players(db_conn, "Ana", "Bojan")
    service.lock_roster(db_conn, tournament.id)
    service.run_draw(db_conn, tournament.id, rng=DrawRNG(5))
    service.reset_draw(db_conn, tournament.id)
    assert service.list_draw(db_conn, tournament.id) == []


# ---------- Fixtures ----------


def test_save_round_one_replaces_all_fixtures(db_conn, service, tournament):
    service.save_round_one(db_conn, tournament.id, [FixtureDraft(1, "A", "B"), FixtureDraft(2, "C", "D")])
    service.save_round_one(db_conn, tournament.id, [FixtureDraft(1, "A", "C")])
    stored = FixtureRepository().list_by_tournament(db_conn, tournament.id)
    assert [(f.round_number, f.match_number, f.home_team_id, f.away_team_id, f.source) for f in stored] == [
        (1, 1, "A", "C", FixtureSource.MANUAL),
        (2, 1, "C", "A", FixtureSource.AUTO_GENERATED),
    ]


def test_empty_round_one_clears_stored_fixtures(db_conn, service, tournament):
    service.save_round_one(db_conn, tournament.id, [FixtureDraft(1, "A", "B")])
    fixtures = service.save_round_one(db_conn, tournament.id, [])
    assert fixtures.all == ()
    assert service.list_fixtures(db_conn, tournament.id) == []


def test_invalid_round_one_keeps_stored_fixtures(db_conn, service, tournament):
    service.save_round_one(db_conn, tournament.id, [FixtureDraft(1, "A", "B")])
    with pytest.raises(SelfPairing):
        service.save_round_one(db_conn, tournament.id, [FixtureDraft(1, "C", "C")])
    assert len(service.list_fixtures(db_conn, tournament.id)) == 2


def test_matches_from_fixtures_then_guard(db_conn, service, tournament):
    service.save_round_one(db_conn, tournament.id, [FixtureDraft(1, "A", "B"), FixtureDraft(2, "C", "D")])
    matches = service.generate_matches_from_fixtures(db_conn, tournament.id)
    assert [(m.round_number, m.home_team_id, m.away_team_id) for m in matches] == [
        (1, "A", "B"), (1, "C", "D"), (2, "B", "A"), (2, "D", "C"),
    ]
    with pytest.raises(MatchesAlreadyExist):
        service.generate_matches_from_fixtures(db_conn, tournament.id)


def test_matches_from_fixtures_needs_fixtures(db_conn, service, tournament):
    with pytest.raises(NotFoundError):
        service.generate_matches_from_fixtures(db_conn, tournament.id)


# ---------- Round-robin schedule ----------


def test_round_robin_schedule_persisted(db_conn, service, tournament):
    matches = service.generate_round_robin_matches(db_conn, tournament.id, double=True)
    assert len(matches) == 12
    stored = MatchRepository().list_by_tournament(db_conn, tournament.id)
    assert len(stored) == 12
    assert {m.round_number for m in stored} == set(range(1, 7))


def test_round_robin_guard_and_reset(db_conn, service, tournament):
    service.generate_round_robin_matches(db_conn, tournament.id)
    with pytest.raises(MatchesAlreadyExist):
        service.generate_round_robin_matches(db_conn, tournament.id)
    service.reset_schedule(db_conn, tournament.id)
    assert len(service.generate_round_robin_matches(db_conn, tournament.id)) == 6


def test_round_robin_needs_two_pool_teams(db_conn, service):
    TournamentRepository().create(db_conn, "Tiny", id="t2")
    TeamRepository().create(db_conn, "Solo", id="S")
    TournamentTeamRepository().add(db_conn, "t2", "S")
    with pytest.raises(InsufficientTeams):
        service.generate_round_robin_matches(db_conn, "t2")


# ---------- Players on matches ----------


def test_assign_players_from_draw(db_conn, service, tournament):
    _add_players(db_conn, "Ana", "Bojan", "Cica", "Dule")
    service.generate_round_robin_matches(db_conn, tournament.id)
    with pytest.raises(DrawNotFound):
        service.assign_players(db_conn, tournament.id)
    service.lock_roster(db_conn, tournament.id)
    assignments = service.run_draw(db_conn, tournament.id, rng=DrawRNG(9))
    owners = {a.team_id: a.player_email for a in assignments}
    updated = service.assign_players(db_conn, tournament.id)
    assert len(updated) == 6
    for m in service.list_matches(db_conn, tournament.id):
        assert m.home_player_email == owners[m.home_team_id]
        assert m.away_player_email == owners[m.away_team_id]
    assert service.assign_players(db_conn, tournament.id) == []


# ---------- Results & standings ----------


def test_results_drive_standings(db_conn, service, tournament):
    service.save_round_one(db_conn, tournament.id, [FixtureDraft(1, "A", "B"), FixtureDraft(2, "C", "D")])
    matches = service.generate_matches_from_fixtures(db_conn, tournament.id)
    ab, cd = matches[0], matches[1]
    service.record_result(db_conn, ab.id, 2, 1, now=NOW)
    service.record_result(db_conn, cd.id, "0", "0", now=NOW)
    stored = MatchRepository().get(db_conn, ab.id)
    assert (stored.home_score, stored.away_score, stored.played_at) == (2, 1, NOW)

    rows = service.standings(db_conn, tournament.id)
    assert [r.team_id for r in rows] == ["A", "C", "D", "B"]
    assert rows[0].team_name == "Alfa"
    assert rows[0].points == 3

    service.clear_result(db_conn, ab.id)
    cleared = MatchRepository().get(db_conn, ab.id)
    assert (cleared.home_score, cleared.away_score, cleared.played_at) == (None, None, None)
    rows = service.standings(db_conn, tournament.id)
    assert [r.points for r in rows] == [1, 1, 0, 0]
    assert [r.team_id for r in rows] == ["C", "D", "A", "B"]


def test_invalid_score_not_written(db_conn, service, tournament):
    matches = service.generate_round_robin_matches(db_conn, tournament.id)
    with pytest.raises(InvalidScore):
        service.record_result(db_conn, matches[0].id, -1, 2)
    assert not MatchRepository().get(db_conn, matches[0].id).is_played


def test_record_result_unknown_match(db_conn, service, tournament):
    with pytest.raises(NotFoundError):
        service.record_result(db_conn, "missing", 1, 0)


def test_team_summary_for_player(db_conn, service, tournament):
    _add_players(db_conn, "Ana", "Bojan")
    assert service.team_summary_for_player(db_conn, tournament.id, "ana@example.com") is None
    service.lock_roster(db_conn, tournament.id)
    assignments = service.run_draw(db_conn, tournament.id, rng=DrawRNG(3))
    team_id = next(a.team_id for a in assignments if a.player_email == "ana@example.com")
    matches = service.generate_round_robin_matches(db_conn, tournament.id)
    mine = next(m for m in matches if team_id in (m.home_team_id, m.away_team_id))
    service.record_result(db_conn, mine.id, 1, 1, now=NOW)
    summary = service.team_summary_for_player(db_conn, tournament.id, "ANA@example.com")
    assert summary.team_id == team_id
    assert (summary.played, summary.draws, summary.points) == (1, 1, 1)
