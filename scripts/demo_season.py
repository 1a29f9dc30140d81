#!/usr/bin/env python3
"""
Demo season: Seed pool → Lock roster → Draw → Schedule → Results → Standings.
Run from project root: python3 scripts/demo_season.py
"""
from __future__ import annotations

import logging
import sys
import tempfile
from pathlib import Path

# Ensure project root on path
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from league_engine.models import PlayerRole
from league_engine.persistence import (
    PlayerRepository,
    TeamRepository,
    TournamentRepository,
    TournamentTeamRepository,
    get_connection,
    init_db,
)
from league_engine.persistence.db import set_db_path
from league_engine.rng import DrawRNG
from league_engine.services import TournamentService

TEAMS = ["Partizan", "Zvezda", "Vojvodina", "Radnicki", "Cukaricki"]
PLAYERS = ["Ana", "Bojan", "Cica", "Dule"]


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    # Throwaway DB so repeated runs start clean
    db_path = Path(tempfile.mkdtemp()) / "demo_season.db"
    set_db_path(db_path)
    init_db(db_path=db_path)

    conn = get_connection()
    try:
        service = TournamentService()

        # 1. Tournament with a five-team pool (odd, so every round has a bye)
        tournament = TournamentRepository().create(conn, "Demo Cup", date="2026-05-01")
        team_repo = TeamRepository()
        pool_repo = TournamentTeamRepository()
        names = {}
        for name in TEAMS:
            team = team_repo.create(conn, name)
            pool_repo.add(conn, tournament.id, team.id)
            names[team.id] = name
        print(f"Created tournament {tournament.name} with {len(TEAMS)} teams")

        # 2. Players, lock, draw
        player_repo = PlayerRepository()
        player_repo.create(conn, "admin@example.com", "Admin", role=PlayerRole.ADMIN)
        for n in PLAYERS:
            player_repo.create(conn, f"{n.lower()}@example.com", n)
        service.lock_roster(conn, tournament.id)
        for a in service.run_draw(conn, tournament.id, rng=DrawRNG(2026)):
            print(f"  {a.player_email} -> {names[a.team_id]}")

        # 3. Double round-robin, owners copied onto matches
        matches = service.generate_round_robin_matches(conn, tournament.id, double=True)
        service.assign_players(conn, tournament.id)
        print(f"Scheduled {len(matches)} matches over {max(m.round_number for m in matches)} rounds")

        # 4. Play the first leg with seeded scores
        rng = DrawRNG(7)
        first_leg = [m for m in matches if m.round_number <= len(TEAMS)]
        for m in first_leg:
            service.record_result(conn, m.id, rng.randrange(5), rng.randrange(5))
        print(f"Recorded {len(first_leg)} results")

        # 5. Table
        print("\n  #  Team         P  W  D  L  GF GA  GD Pts")
        for i, r in enumerate(service.standings(conn, tournament.id), start=1):
            print(
                f" {i:2d}  {r.team_name:<11} {r.played:2d} {r.wins:2d} {r.draws:2d} {r.losses:2d}"
                f" {r.goals_for:3d} {r.goals_against:2d} {r.goal_difference:+3d} {r.points:3d}"
            )

        summary = service.team_summary_for_player(conn, tournament.id, "ana@example.com")
        if summary is not None:
            print(f"\nAna's team {names[summary.team_id]}: {summary.points} pts from {summary.played} games")

        print("\nDemo season complete.")
    finally:
        conn.close()


if __name__ == "__main__":
    main()
