"""
SQLite schema for tournament entities.
Migration-friendly: each table created with IF NOT EXISTS.
"""
from __future__ import annotations


def players_schema() -> str:
    """Players are identified by e-mail (lower-cased). role: admin | player."""
    return """
    CREATE TABLE IF NOT EXISTS players (
        email TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        role TEXT NOT NULL DEFAULT 'player',
        created_at TEXT NOT NULL
    );
    CREATE INDEX IF NOT EXISTS ix_players_role ON players(role);
    """


def teams_schema() -> str:
    return """
    CREATE TABLE IF NOT EXISTS teams (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        logo_url TEXT,
        created_at TEXT NOT NULL
    );
    """


def tournaments_schema() -> str:
    return """
    CREATE TABLE IF NOT EXISTS tournaments (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        date TEXT,
        created_at TEXT NOT NULL
    );
    """


def tournament_teams_schema() -> str:
    """Team pool per tournament. A team appears at most once per pool."""
    return """
    CREATE TABLE IF NOT EXISTS tournament_teams (
        id TEXT PRIMARY KEY,
        tournament_id TEXT NOT NULL,
        team_id TEXT NOT NULL,
        created_at TEXT NOT NULL,
        FOREIGN KEY (tournament_id) REFERENCES tournaments(id),
        FOREIGN KEY (team_id) REFERENCES teams(id),
        UNIQUE (tournament_id, team_id)
    );
    CREATE INDEX IF NOT EXISTS ix_tournament_teams_tournament ON tournament_teams(tournament_id);
    """


def tournament_players_schema() -> str:
    """Draw result. Bijective within a tournament: one team per player, one player per team."""
    return """
    CREATE TABLE IF NOT EXISTS tournament_players (
        id TEXT PRIMARY KEY,
        tournament_id TEXT NOT NULL,
        player_email TEXT NOT NULL,
        team_id TEXT NOT NULL,
        created_at TEXT NOT NULL,
        FOREIGN KEY (tournament_id) REFERENCES tournaments(id),
        UNIQUE (tournament_id, player_email),
        UNIQUE (tournament_id, team_id)
    );
    CREATE INDEX IF NOT EXISTS ix_tournament_players_tournament ON tournament_players(tournament_id);
    """


def fixtures_schema() -> str:
    """Planned pairings. source: manual | auto_reverse."""
    return """
    CREATE TABLE IF NOT EXISTS fixtures (
        id TEXT PRIMARY KEY,
        tournament_id TEXT NOT NULL,
        round_number INTEGER NOT NULL,
        match_number INTEGER NOT NULL,
        home_team_id TEXT,
        away_team_id TEXT,
        is_bye INTEGER NOT NULL DEFAULT 0,
        source TEXT NOT NULL DEFAULT 'manual',
        created_at TEXT NOT NULL,
        FOREIGN KEY (tournament_id) REFERENCES tournaments(id),
        UNIQUE (tournament_id, round_number, match_number)
    );
    CREATE INDEX IF NOT EXISTS ix_fixtures_tournament ON fixtures(tournament_id);
    """


def matches_schema() -> str:
    """Playable matches. Scores and played_at are all NULL (unplayed) or all set (played)."""
    return """
    CREATE TABLE IF NOT EXISTS matches (
        id TEXT PRIMARY KEY,
        tournament_id TEXT NOT NULL,
        round INTEGER,
        home_team_id TEXT,
        away_team_id TEXT,
        home_player_email TEXT,
        away_player_email TEXT,
        home_score INTEGER,
        away_score INTEGER,
        played_at TEXT,
        created_at TEXT NOT NULL,
        FOREIGN KEY (tournament_id) REFERENCES tournaments(id)
    );
    CREATE INDEX IF NOT EXISTS ix_matches_tournament ON matches(tournament_id);
    CREATE INDEX IF NOT EXISTS ix_matches_round ON matches(tournament_id, round);
    """


def roster_locks_schema() -> str:
    """A row means the tournament roster is locked; no row means unlocked."""
    return """
    CREATE TABLE IF NOT EXISTS roster_locks (
        tournament_id TEXT PRIMARY KEY,
        locked_at TEXT NOT NULL,
        FOREIGN KEY (tournament_id) REFERENCES tournaments(id)
    );
    """


def all_schema_sql() -> str:
    """Combine all schema DDL for a single execution."""
    return "\n".join([
        players_schema(),
        teams_schema(),
        tournaments_schema(),
        tournament_teams_schema(),
        tournament_players_schema(),
        fixtures_schema(),
        matches_schema(),
        roster_locks_schema(),
    ])
