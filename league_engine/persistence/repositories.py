"""
Repository interfaces for tournament data.
No business logic: only read/write operations, filtered by tournament id.
replace_* methods delete and insert inside one transaction.
"""
from __future__ import annotations

import sqlite3
import uuid
from datetime import datetime, timezone
from typing import Iterable

from league_engine.models import (
    DrawAssignment,
    Fixture,
    FixtureSource,
    Match,
    Player,
    PlayerRole,
    RosterState,
    Team,
    Tournament,
    TournamentTeam,
    normalize_email,
)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _parse_datetime(s: str | None) -> datetime | None:
    if s is None:
        return None
    return datetime.fromisoformat(s.replace("Z", "+00:00"))


def _new_id() -> str:
    return str(uuid.uuid4())


# ---------- PlayerRepository ----------


class PlayerRepository:
    """CRUD for players. E-mail is the identity."""

    def create(
        self, conn: sqlite3.Connection, email: str, name: str, role: PlayerRole = PlayerRole.PLAYER
    ) -> Player:
        player = Player(email=normalize_email(email), name=name.strip(), role=PlayerRole(role))
        conn.execute(
            "INSERT INTO players (email, name, role, created_at) VALUES (?, ?, ?, ?)",
            (player.email, player.name, player.role.value, _now_iso()),
        )
        conn.commit()
        return player

    def get(self, conn: sqlite3.Connection, email: str) -> Player | None:
        row = conn.execute(
            "SELECT email, name, role FROM players WHERE email = ?",
            (normalize_email(email),),
        ).fetchone()
        if row is None:
            return None
        return Player(email=row["email"], name=row["name"], role=PlayerRole(row["role"]))

    def get_role(self, conn: sqlite3.Connection, email: str) -> PlayerRole | None:
        player = self.get(conn, email)
        return player.role if player else None

    def list_by_role(self, conn: sqlite3.Connection, role: PlayerRole) -> list[Player]:
        rows = conn.execute(
            "SELECT email, name, role FROM players WHERE role = ? ORDER BY name, email",
            (PlayerRole(role).value,),
        ).fetchall()
        return [Player(email=r["email"], name=r["name"], role=PlayerRole(r["role"])) for r in rows]


# ---------- TeamRepository ----------


class TeamRepository:
    """CRUD for teams. No business logic."""

    def create(
        self, conn: sqlite3.Connection, name: str, logo_url: str | None = None, id: str | None = None
    ) -> Team:
        team = Team(id=id or _new_id(), name=name.strip(), logo_url=logo_url)
        conn.execute(
            "INSERT INTO teams (id, name, logo_url, created_at) VALUES (?, ?, ?, ?)",
            (team.id, team.name, team.logo_url, _now_iso()),
        )
        conn.commit()
        return team


# ---------- TournamentRepository ----------


class TournamentRepository:
    """CRUD for tournaments."""

    def create(
        self, conn: sqlite3.Connection, name: str, date: str | None = None, id: str | None = None
    ) -> Tournament:
        tournament = Tournament(id=id or _new_id(), name=name.strip(), date=date)
        conn.execute(
            "INSERT INTO tournaments (id, name, date, created_at) VALUES (?, ?, ?, ?)",
            (tournament.id, tournament.name, tournament.date, _now_iso()),
        )
        conn.commit()
        return tournament

    def get(self, conn: sqlite3.Connection, tournament_id: str) -> Tournament | None:
        row = conn.execute(
            "SELECT id, name, date FROM tournaments WHERE id = ?", (tournament_id,)
        ).fetchone()
        if row is None:
            return None
        return Tournament(id=row["id"], name=row["name"], date=row["date"])


# ---------- TournamentTeamRepository ----------


class TournamentTeamRepository:
    """Team pool of a tournament, in registration order."""

    def add(self, conn: sqlite3.Connection, tournament_id: str, team_id: str) -> TournamentTeam:
        conn.execute(
            "INSERT INTO tournament_teams (id, tournament_id, team_id, created_at) VALUES (?, ?, ?, ?)",
            (_new_id(), tournament_id, team_id, _now_iso()),
        )
        conn.commit()
        return TournamentTeam(tournament_id=tournament_id, team_id=team_id)

    def list_by_tournament(self, conn: sqlite3.Connection, tournament_id: str) -> list[TournamentTeam]:
        rows = conn.execute(
            "SELECT tournament_id, team_id FROM tournament_teams WHERE tournament_id = ? ORDER BY created_at, rowid",
            (tournament_id,),
        ).fetchall()
        return [TournamentTeam(tournament_id=r["tournament_id"], team_id=r["team_id"]) for r in rows]

    def list_teams(self, conn: sqlite3.Connection, tournament_id: str) -> list[Team]:
        """Pool teams with names, in registration order."""
        rows = conn.execute(
            """
            SELECT t.id, t.name, t.logo_url FROM tournament_teams tt
            JOIN teams t ON t.id = tt.team_id
            WHERE tt.tournament_id = ?
            ORDER BY tt.created_at, tt.rowid
            """,
            (tournament_id,),
        ).fetchall()
        return [Team(id=r["id"], name=r["name"], logo_url=r["logo_url"]) for r in rows]


# ---------- DrawRepository (tournament_players) ----------


class DrawRepository:
    """Active draw of a tournament. At most one assignment set at a time."""

    def list_by_tournament(self, conn: sqlite3.Connection, tournament_id: str) -> list[DrawAssignment]:
        rows = conn.execute(
            "SELECT tournament_id, player_email, team_id FROM tournament_players WHERE tournament_id = ? ORDER BY rowid",
            (tournament_id,),
        ).fetchall()
        return [
            DrawAssignment(
                tournament_id=r["tournament_id"], player_email=r["player_email"], team_id=r["team_id"]
            )
            for r in rows
        ]

    def replace(
        self, conn: sqlite3.Connection, tournament_id: str, assignments: Iterable[DrawAssignment]
    ) -> None:
        now = _now_iso()
        with conn:
            conn.execute("DELETE FROM tournament_players WHERE tournament_id = ?", (tournament_id,))
            conn.executemany(
                "INSERT INTO tournament_players (id, tournament_id, player_email, team_id, created_at) VALUES (?, ?, ?, ?, ?)",
                [(_new_id(), tournament_id, a.player_email, a.team_id, now) for a in assignments],
            )

    def delete_for_tournament(self, conn: sqlite3.Connection, tournament_id: str) -> None:
        conn.execute("DELETE FROM tournament_players WHERE tournament_id = ?", (tournament_id,))
        conn.commit()


# ---------- FixtureRepository ----------


def _row_to_fixture(r: sqlite3.Row) -> Fixture:
    return Fixture(
        tournament_id=r["tournament_id"],
        round_number=r["round_number"],
        match_number=r["match_number"],
        home_team_id=r["home_team_id"],
        away_team_id=r["away_team_id"],
        is_bye=bool(r["is_bye"]),
        source=FixtureSource(r["source"]),
    )


class FixtureRepository:
    """Fixtures of a tournament, ordered by round then match number."""

    def list_by_tournament(self, conn: sqlite3.Connection, tournament_id: str) -> list[Fixture]:
        rows = conn.execute(
            """
            SELECT tournament_id, round_number, match_number, home_team_id, away_team_id, is_bye, source
            FROM fixtures WHERE tournament_id = ?
            ORDER BY round_number, match_number
            """,
            (tournament_id,),
        ).fetchall()
        return [_row_to_fixture(r) for r in rows]

    def replace(self, conn: sqlite3.Connection, tournament_id: str, fixtures: Iterable[Fixture]) -> None:
        now = _now_iso()
        with conn:
            conn.execute("DELETE FROM fixtures WHERE tournament_id = ?", (tournament_id,))
            conn.executemany(
                """
                INSERT INTO fixtures
                    (id, tournament_id, round_number, match_number, home_team_id, away_team_id, is_bye, source, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                [
                    (
                        _new_id(), tournament_id, f.round_number, f.match_number,
                        f.home_team_id, f.away_team_id, int(f.is_bye), f.source.value, now,
                    )
                    for f in fixtures
                ],
            )

    def delete_for_tournament(self, conn: sqlite3.Connection, tournament_id: str) -> None:
        conn.execute("DELETE FROM fixtures WHERE tournament_id = ?", (tournament_id,))
        conn.commit()


# ---------- MatchRepository ----------


_MATCH_COLS = (
    "id, tournament_id, round, home_team_id, away_team_id, home_player_email, "
    "away_player_email, home_score, away_score, played_at"
)


def _row_to_match(r: sqlite3.Row) -> Match:
    return Match(
        id=r["id"],
        tournament_id=r["tournament_id"],
        round_number=r["round"],
        home_team_id=r["home_team_id"],
        away_team_id=r["away_team_id"],
        home_player_email=r["home_player_email"],
        away_player_email=r["away_player_email"],
        home_score=r["home_score"],
        away_score=r["away_score"],
        played_at=_parse_datetime(r["played_at"]),
    )


class MatchRepository:
    """Matches of a tournament. Results are written whole (scores + played_at together)."""

    def get(self, conn: sqlite3.Connection, match_id: str) -> Match | None:
        row = conn.execute(f"SELECT {_MATCH_COLS} FROM matches WHERE id = ?", (match_id,)).fetchone()
        if row is None:
            return None
        return _row_to_match(row)

    def list_by_tournament(self, conn: sqlite3.Connection, tournament_id: str) -> list[Match]:
        rows = conn.execute(
            f"SELECT {_MATCH_COLS} FROM matches WHERE tournament_id = ? ORDER BY round, created_at, rowid",
            (tournament_id,),
        ).fetchall()
        return [_row_to_match(r) for r in rows]

    def count_by_tournament(self, conn: sqlite3.Connection, tournament_id: str) -> int:
        row = conn.execute(
            "SELECT COUNT(*) FROM matches WHERE tournament_id = ?", (tournament_id,)
        ).fetchone()
        return int(row[0])

    def insert_many(self, conn: sqlite3.Connection, matches: Iterable[Match]) -> None:
        now = _now_iso()
        with conn:
            conn.executemany(
                f"INSERT INTO matches ({_MATCH_COLS}, created_at) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                [
                    (
                        m.id, m.tournament_id, m.round_number, m.home_team_id, m.away_team_id,
                        m.home_player_email, m.away_player_email, m.home_score, m.away_score,
                        m.played_at.isoformat() if m.played_at else None, now,
                    )
                    for m in matches
                ],
            )

    def update_players(self, conn: sqlite3.Connection, matches: Iterable[Match]) -> None:
        with conn:
            conn.executemany(
                "UPDATE matches SET home_player_email = ?, away_player_email = ? WHERE id = ?",
                [(m.home_player_email, m.away_player_email, m.id) for m in matches],
            )

    def update_result(self, conn: sqlite3.Connection, match: Match) -> None:
        conn.execute(
            "UPDATE matches SET home_score = ?, away_score = ?, played_at = ? WHERE id = ?",
            (
                match.home_score,
                match.away_score,
                match.played_at.isoformat() if match.played_at else None,
                match.id,
            ),
        )
        conn.commit()

    def delete_for_tournament(self, conn: sqlite3.Connection, tournament_id: str) -> None:
        conn.execute("DELETE FROM matches WHERE tournament_id = ?", (tournament_id,))
        conn.commit()


# ---------- RosterLockRepository ----------


class RosterLockRepository:
    """Persisted roster gate: a row per locked tournament."""

    def list_states(self, conn: sqlite3.Connection) -> dict[str, RosterState]:
        rows = conn.execute("SELECT tournament_id FROM roster_locks").fetchall()
        return {r["tournament_id"]: RosterState.LOCKED for r in rows}

    def record_lock(self, conn: sqlite3.Connection, tournament_id: str) -> None:
        conn.execute(
            "INSERT OR REPLACE INTO roster_locks (tournament_id, locked_at) VALUES (?, ?)",
            (tournament_id, _now_iso()),
        )
        conn.commit()

    def clear_lock(self, conn: sqlite3.Connection, tournament_id: str) -> None:
        conn.execute("DELETE FROM roster_locks WHERE tournament_id = ?", (tournament_id,))
        conn.commit()
