"""
Tournament-centric service: roster gate, draw, fixtures, schedule, results, standings.
Engine functions stay pure; this class loads records, calls them and writes the
outcome back. Replace-all writes (draw, fixtures) run in one transaction.
"""
from __future__ import annotations

import logging
import sqlite3
from datetime import datetime
from typing import Any, Sequence

from league_engine.models import (
    DrawAssignment,
    Fixture,
    FixtureDraft,
    GateTransitionResult,
    Match,
    PlayerRole,
    RosterState,
    StandingRow,
    TeamSummary,
    TwoRoundFixtures,
)
from league_engine.persistence.repositories import (
    DrawRepository,
    FixtureRepository,
    MatchRepository,
    PlayerRepository,
    RosterLockRepository,
    TournamentRepository,
    TournamentTeamRepository,
)
from league_engine.rng import DrawRNG
from league_engine.services.draw import assign_players_to_matches, draw, team_for_player
from league_engine.services.errors import MatchesAlreadyExist, NotFoundError
from league_engine.services.fixtures import (
    build_two_round_fixtures,
    matches_from_fixtures,
    matches_from_pairings,
)
from league_engine.services.roster_gate import CLEAR_LOCK, RECORD_LOCK, RosterGate
from league_engine.services.results import clear_result as clear_match_result
from league_engine.services.results import record_result as record_match_result
from league_engine.services.scheduling import generate_round_robin
from league_engine.services.standings import compute_standings, team_summary

logger = logging.getLogger(__name__)


class TournamentService:
    """
    Domain logic for one tournament at a time: gate transitions, draw, fixtures,
    schedule generation and results. Persistence is delegated to repositories.
    """

    def __init__(self) -> None:
        self._tournament_repo = TournamentRepository()
        self._player_repo = PlayerRepository()
        self._pool_repo = TournamentTeamRepository()
        self._draw_repo = DrawRepository()
        self._fixture_repo = FixtureRepository()
        self._match_repo = MatchRepository()
        self._lock_repo = RosterLockRepository()

    def _require_tournament(self, conn: sqlite3.Connection, tournament_id: str) -> None:
        if self._tournament_repo.get(conn, tournament_id) is None:
            raise NotFoundError(f"Tournament not found: {tournament_id}")

    def _gate(self, conn: sqlite3.Connection) -> RosterGate:
        return RosterGate(initial=self._lock_repo.list_states(conn))

    def _apply_gate_effect(self, conn: sqlite3.Connection, result: GateTransitionResult) -> None:
        if result.side_effect == RECORD_LOCK:
            self._lock_repo.record_lock(conn, result.tournament_id)
        elif result.side_effect == CLEAR_LOCK:
            self._lock_repo.clear_lock(conn, result.tournament_id)

    def _assert_no_matches(self, conn: sqlite3.Connection, tournament_id: str) -> None:
        count = self._match_repo.count_by_tournament(conn, tournament_id)
        if count > 0:
            raise MatchesAlreadyExist(tournament_id, count)

    # ---------- Roster gate ----------

    def roster_state(self, conn: sqlite3.Connection, tournament_id: str) -> RosterState:
        return self._gate(conn).state(tournament_id)

    def lock_roster(self, conn: sqlite3.Connection, tournament_id: str) -> GateTransitionResult:
        """Unlocked -> locked. Needs at least two role=player entries."""
        self._require_tournament(conn, tournament_id)
        player_count = len(self._player_repo.list_by_role(conn, PlayerRole.PLAYER))
        result = self._gate(conn).lock(tournament_id, player_count)
        self._apply_gate_effect(conn, result)
        logger.info("Roster locked for tournament %s (%d players)", tournament_id, player_count)
        return result

    def unlock_roster(self, conn: sqlite3.Connection, tournament_id: str) -> GateTransitionResult:
        """Admin override. An existing draw stays in place."""
        self._require_tournament(conn, tournament_id)
        result = self._gate(conn).unlock(tournament_id)
        self._apply_gate_effect(conn, result)
        logger.info("Roster unlocked for tournament %s", tournament_id)
        return result

    # ---------- Draw ----------

    def run_draw(
        self, conn: sqlite3.Connection, tournament_id: str, rng: DrawRNG | None = None
    ) -> list[DrawAssignment]:
        """Replace the tournament's draw with a fresh one. Roster must be locked."""
        self._require_tournament(conn, tournament_id)
        self._gate(conn).assert_can_draw(tournament_id)
        players = self._player_repo.list_by_role(conn, PlayerRole.PLAYER)
        pool = self._pool_repo.list_by_tournament(conn, tournament_id)
        assignments = draw(tournament_id, players, pool, rng=rng)
        self._draw_repo.replace(conn, tournament_id, assignments)
        logger.info("Draw done for tournament %s: %d assignments", tournament_id, len(assignments))
        return assignments

    def reset_draw(self, conn: sqlite3.Connection, tournament_id: str) -> None:
        self._require_tournament(conn, tournament_id)
        self._draw_repo.delete_for_tournament(conn, tournament_id)
        logger.info("Draw reset for tournament %s", tournament_id)

    def list_draw(self, conn: sqlite3.Connection, tournament_id: str) -> list[DrawAssignment]:
        return self._draw_repo.list_by_tournament(conn, tournament_id)

    # ---------- Fixtures ----------

    def save_round_one(
        self, conn: sqlite3.Connection, tournament_id: str, drafts: Sequence[FixtureDraft]
    ) -> TwoRoundFixtures:
        """Validate round 1, mirror round 2, replace every stored fixture."""
        self._require_tournament(conn, tournament_id)
        fixtures = build_two_round_fixtures(tournament_id, drafts)
        self._fixture_repo.replace(conn, tournament_id, fixtures.all)
        logger.info(
            "Fixtures replaced for tournament %s: %d per round", tournament_id, len(fixtures.round1)
        )
        return fixtures

    def reset_fixtures(self, conn: sqlite3.Connection, tournament_id: str) -> None:
        self._require_tournament(conn, tournament_id)
        self._fixture_repo.delete_for_tournament(conn, tournament_id)

    def list_fixtures(self, conn: sqlite3.Connection, tournament_id: str) -> list[Fixture]:
        return self._fixture_repo.list_by_tournament(conn, tournament_id)

    # ---------- Schedule (matches) ----------

    def generate_round_robin_matches(
        self, conn: sqlite3.Connection, tournament_id: str, double: bool = False
    ) -> list[Match]:
        """Round-robin over the team pool. Refuses to run over existing matches."""
        self._require_tournament(conn, tournament_id)
        self._assert_no_matches(conn, tournament_id)
        team_ids = [t.team_id for t in self._pool_repo.list_by_tournament(conn, tournament_id)]
        pairings = generate_round_robin(team_ids, double=double)
        matches = matches_from_pairings(tournament_id, pairings)
        self._match_repo.insert_many(conn, matches)
        logger.info(
            "Round-robin schedule for tournament %s: %d matches (double=%s)",
            tournament_id, len(matches), double,
        )
        return matches

    def generate_matches_from_fixtures(self, conn: sqlite3.Connection, tournament_id: str) -> list[Match]:
        """Turn playable fixtures into matches. Refuses to run over existing matches."""
        self._require_tournament(conn, tournament_id)
        self._assert_no_matches(conn, tournament_id)
        fixtures = self._fixture_repo.list_by_tournament(conn, tournament_id)
        matches = matches_from_fixtures(tournament_id, fixtures)
        if not matches:
            raise NotFoundError(f"No fixtures for tournament {tournament_id}: enter round 1 first")
        self._match_repo.insert_many(conn, matches)
        logger.info("Matches generated from fixtures for tournament %s: %d", tournament_id, len(matches))
        return matches

    def reset_schedule(self, conn: sqlite3.Connection, tournament_id: str) -> None:
        self._require_tournament(conn, tournament_id)
        self._match_repo.delete_for_tournament(conn, tournament_id)
        logger.info("Schedule reset for tournament %s", tournament_id)

    def list_matches(self, conn: sqlite3.Connection, tournament_id: str) -> list[Match]:
        return self._match_repo.list_by_tournament(conn, tournament_id)

    def assign_players(self, conn: sqlite3.Connection, tournament_id: str) -> list[Match]:
        """Copy drawn owners onto matches. Returns the matches that changed."""
        self._require_tournament(conn, tournament_id)
        assignments = self._draw_repo.list_by_tournament(conn, tournament_id)
        matches = self._match_repo.list_by_tournament(conn, tournament_id)
        updates = assign_players_to_matches(tournament_id, matches, assignments)
        if updates:
            self._match_repo.update_players(conn, updates)
        logger.info("Players assigned for tournament %s: %d matches updated", tournament_id, len(updates))
        return updates

    # ---------- Results ----------

    def _require_match(self, conn: sqlite3.Connection, match_id: str) -> Match:
        match = self._match_repo.get(conn, match_id)
        if match is None:
            raise NotFoundError(f"Match not found: {match_id}")
        return match

    def record_result(
        self,
        conn: sqlite3.Connection,
        match_id: str,
        home_score: Any,
        away_score: Any,
        now: datetime | None = None,
    ) -> Match:
        match = self._require_match(conn, match_id)
        updated = record_match_result(match, home_score, away_score, now=now)
        self._match_repo.update_result(conn, updated)
        logger.info(
            "Result recorded for match %s: %d-%d", match_id, updated.home_score, updated.away_score
        )
        return updated

    def clear_result(self, conn: sqlite3.Connection, match_id: str) -> Match:
        match = self._require_match(conn, match_id)
        updated = clear_match_result(match)
        self._match_repo.update_result(conn, updated)
        logger.info("Result cleared for match %s", match_id)
        return updated

    # ---------- Standings ----------

    def standings(self, conn: sqlite3.Connection, tournament_id: str) -> list[StandingRow]:
        self._require_tournament(conn, tournament_id)
        teams = self._pool_repo.list_teams(conn, tournament_id)
        matches = self._match_repo.list_by_tournament(conn, tournament_id)
        return compute_standings(teams, matches)

    def team_summary_for_player(
        self, conn: sqlite3.Connection, tournament_id: str, email: str
    ) -> TeamSummary | None:
        """Record of the team drawn for this player, or None before the draw."""
        self._require_tournament(conn, tournament_id)
        assignments = self._draw_repo.list_by_tournament(conn, tournament_id)
        team_id = team_for_player(email, assignments)
        if team_id is None:
            return None
        matches = self._match_repo.list_by_tournament(conn, tournament_id)
        return team_summary(team_id, matches)
