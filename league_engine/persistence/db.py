"""
SQLite connection handling for the tournament store.
Path comes from set_db_path (tests), else $LEAGUE_DB_PATH, else data/league.db.
"""
from __future__ import annotations

import logging
import os
import sqlite3
from pathlib import Path

from .schema import all_schema_sql

logger = logging.getLogger(__name__)

_db_path: Path | None = None


def _default_db_path() -> Path:
    env_path = os.environ.get("LEAGUE_DB_PATH", "").strip()
    if env_path:
        return Path(env_path)
    return Path(__file__).resolve().parent.parent.parent / "data" / "league.db"


def set_db_path(path: str | Path) -> None:
    """Override the store location for this process."""
    global _db_path
    _db_path = Path(path)


def get_db_path() -> Path:
    return _db_path if _db_path is not None else _default_db_path()


def get_connection(db_path: str | Path | None = None) -> sqlite3.Connection:
    """
    Open a connection with Row access and foreign keys enforced.
    Callers close it; the API wraps this in db_conn().
    """
    path = Path(db_path) if db_path else get_db_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path))
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def init_db(db_path: str | Path | None = None) -> None:
    """Create missing tables. Safe to call on every start-up."""
    conn = get_connection(db_path)
    try:
        conn.executescript(all_schema_sql())
        conn.commit()
    finally:
        conn.close()
    logger.info("Database ready at %s", db_path or get_db_path())
