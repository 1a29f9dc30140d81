"""
API integration tests.
Uses TestClient to avoid starting a server.
Requires: pip install httpx (for TestClient)
"""
from __future__ import annotations

from pathlib import Path

import pytest

try:
    from fastapi.testclient import TestClient
    HAS_HTTPX = True
except (ImportError, RuntimeError):
    HAS_HTTPX = False

# Ensure project root on path
import sys
sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent))

pytestmark = pytest.mark.skipif(not HAS_HTTPX, reason="httpx required for TestClient")

from league_engine.api import app
from league_engine.auth import create_access_token
from league_engine.models import PlayerRole
from league_engine.persistence.db import get_connection, init_db, set_db_path
from league_engine.persistence.repositories import (
    PlayerRepository,
    TeamRepository,
    TournamentRepository,
    TournamentTeamRepository,
)

TID = "t1"


@pytest.fixture(autouse=True)
def isolated_db(tmp_path):
    """Temporary DB seeded with one tournament, four pool teams, an admin and two players."""
    db_path = tmp_path / "test.db"
    set_db_path(db_path)
    init_db(db_path=db_path)
    conn = get_connection()
    try:
        TournamentRepository().create(conn, "Spring Cup", id=TID)
        for team_id, name in [("A", "Alfa"), ("B", "Beta"), ("C", "Gama"), ("D", "Delta")]:
            TeamRepository().create(conn, name, id=team_id)
            TournamentTeamRepository().add(conn, TID, team_id)
        players = PlayerRepository()
        players.create(conn, "admin@example.com", "Admin", role=PlayerRole.ADMIN)
        players.create(conn, "ana@example.com", "Ana")
        players.create(conn, "bojan@example.com", "Bojan")
    finally:
        conn.close()
    yield db_path


@pytest.fixture
def client():
    return TestClient(app)


def _auth(email: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(email)}"}


ADMIN = _auth("admin@example.com")
PLAYER = _auth("ana@example.com")


def test_missing_token_is_401(client):
    resp = client.get(f"/tournaments/{TID}/standings")
    assert resp.status_code == 401


def test_invalid_token_is_401(client):
    resp = client.get(f"/tournaments/{TID}/standings", headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401


def test_player_cannot_run_admin_actions(client):
    resp = client.post(f"/tournaments/{TID}/roster/lock", headers=PLAYER)
    assert resp.status_code == 403


def test_roster_lock_and_unlock(client):
    resp = client.get(f"/tournaments/{TID}/roster", headers=PLAYER)
    assert resp.json()["state"] == "unlocked"
    resp = client.post(f"/tournaments/{TID}/roster/lock", headers=ADMIN)
    assert resp.status_code == 200
    assert resp.json()["current"] == "locked"
    resp = client.post(f"/tournaments/{TID}/roster/unlock", headers=ADMIN)
    assert resp.json()["current"] == "unlocked"


def test_unknown_tournament_is_404(client):
    resp = client.post("/tournaments/nope/roster/lock", headers=ADMIN)
    assert resp.status_code == 404


def test_draw_before_lock_is_400(client):
    resp = client.post(f"/tournaments/{TID}/draw", headers=ADMIN)
    assert resp.status_code == 400


def test_draw_after_lock(client):
    client.post(f"/tournaments/{TID}/roster/lock", headers=ADMIN)
    resp = client.post(f"/tournaments/{TID}/draw", headers=ADMIN)
    assert resp.status_code == 200
    assignments = resp.json()["assignments"]
    assert {a["player_email"] for a in assignments} == {"ana@example.com", "bojan@example.com"}
    assert len({a["team_id"] for a in assignments}) == 2
    resp = client.get(f"/tournaments/{TID}/draw", headers=PLAYER)
    assert len(resp.json()["assignments"]) == 2


def test_save_round_one_mirrors_round_two(client):
    body = {"drafts": [
        {"match_number": 1, "home_team_id": "A", "away_team_id": "B"},
        {"match_number": 2, "home_team_id": "C", "away_team_id": "D"},
    ]}
    resp = client.put(f"/tournaments/{TID}/fixtures/round1", json=body, headers=ADMIN)
    assert resp.status_code == 200
    round2 = resp.json()["round2"]
    assert [(f["home_team_id"], f["away_team_id"]) for f in round2] == [("B", "A"), ("D", "C")]
    assert all(f["source"] == "auto_reverse" for f in round2)


def test_save_round_one_rejects_repeated_team(client):
    body = {"drafts": [
        {"match_number": 1, "home_team_id": "A", "away_team_id": "B"},
        {"match_number": 2, "home_team_id": "A", "away_team_id": "C"},
    ]}
    resp = client.put(f"/tournaments/{TID}/fixtures/round1", json=body, headers=ADMIN)
    assert resp.status_code == 400
    assert client.get(f"/tournaments/{TID}/fixtures", headers=ADMIN).json()["fixtures"] == []


def test_schedule_twice_is_409(client):
    resp = client.post(f"/tournaments/{TID}/schedule/round-robin", json={"double": False}, headers=ADMIN)
    assert resp.status_code == 200
    assert len(resp.json()["matches"]) == 6
    resp = client.post(f"/tournaments/{TID}/schedule/round-robin", json={"double": True}, headers=ADMIN)
    assert resp.status_code == 409
    client.delete(f"/tournaments/{TID}/schedule", headers=ADMIN)
    resp = client.post(f"/tournaments/{TID}/schedule/round-robin", json={"double": True}, headers=ADMIN)
    assert len(resp.json()["matches"]) == 12


def test_result_flow_and_standings(client):
    matches = client.post(
        f"/tournaments/{TID}/schedule/round-robin", json={"double": False}, headers=ADMIN
    ).json()["matches"]
    first = matches[0]
    resp = client.put(
        f"/matches/{first['id']}/result", json={"home_score": "2", "away_score": 0}, headers=ADMIN
    )
    assert resp.status_code == 200
    assert (resp.json()["home_score"], resp.json()["away_score"]) == (2, 0)
    assert resp.json()["played_at"] is not None

    rows = client.get(f"/tournaments/{TID}/standings", headers=PLAYER).json()["standings"]
    assert rows[0]["team_id"] == first["home_team_id"]
    assert rows[0]["points"] == 3

    resp = client.put(
        f"/matches/{first['id']}/result", json={"home_score": -1, "away_score": 0}, headers=ADMIN
    )
    assert resp.status_code == 400

    resp = client.delete(f"/matches/{first['id']}/result", headers=ADMIN)
    assert resp.json()["home_score"] is None
    rows = client.get(f"/tournaments/{TID}/standings", headers=PLAYER).json()["standings"]
    assert all(r["points"] == 0 for r in rows)


@pytest.mark.parametrize("home,away", [(True, False), (1.5, 0), ("two", 1), (None, 0)])
def test_non_numeric_scores_are_400(client, home, away):
    first = client.post(
        f"/tournaments/{TID}/schedule/round-robin", json={"double": False}, headers=ADMIN
    ).json()["matches"][0]
    resp = client.put(
        f"/matches/{first['id']}/result", json={"home_score": home, "away_score": away}, headers=ADMIN
    )
    assert resp.status_code == 400
    stored = client.get(f"/tournaments/{TID}/matches", headers=ADMIN).json()["matches"]
    match = next(m for m in stored if m["id"] == first["id"])
    assert (match["home_score"], match["away_score"], match["played_at"]) == (None, None, None)


def test_empty_round_one_clears_fixtures(client):
    body = {"drafts": [{"match_number": 1, "home_team_id": "A", "away_team_id": "B"}]}
    client.put(f"/tournaments/{TID}/fixtures/round1", json=body, headers=ADMIN)
    resp = client.put(f"/tournaments/{TID}/fixtures/round1", json={"drafts": []}, headers=ADMIN)
    assert resp.status_code == 200
    assert resp.json() == {"round1": [], "round2": []}
    assert client.get(f"/tournaments/{TID}/fixtures", headers=ADMIN).json()["fixtures"] == []


def test_result_for_unknown_match_is_404(client):
    resp = client.put("/matches/missing/result", json={"home_score": 1, "away_score": 1}, headers=ADMIN)
    assert resp.status_code == 404


def test_assign_players_and_my_summary(client):
    resp = client.get(f"/tournaments/{TID}/me/summary", headers=PLAYER)
    assert resp.json()["summary"] is None
    client.post(f"/tournaments/{TID}/roster/lock", headers=ADMIN)
    client.post(f"/tournaments/{TID}/draw", headers=ADMIN)
    client.post(f"/tournaments/{TID}/schedule/round-robin", json={"double": False}, headers=ADMIN)
    resp = client.post(f"/tournaments/{TID}/schedule/assign-players", headers=ADMIN)
    assert resp.status_code == 200
    assert len(resp.json()["updated"]) > 0
    resp = client.get(f"/tournaments/{TID}/me/summary", headers=PLAYER)
    summary = resp.json()["summary"]
    assert summary is not None
    assert summary["played"] == 0
