"""
Recording and clearing match results.
A match is either unplayed (no scores, no played_at) or played (both scores and
played_at). clear_result is the only way back.
"""
from __future__ import annotations

import dataclasses
from datetime import datetime, timezone
from typing import Any

from league_engine.models import Match
from league_engine.services.errors import InvalidScore


def parse_score(value: Any) -> int:
    """
    Accept a non-negative integer (or its decimal string form). Booleans, fractions,
    negatives and anything non-numeric raise InvalidScore.
    """
    if isinstance(value, bool):
        raise InvalidScore(value)
    if isinstance(value, int):
        score = value
    elif isinstance(value, float):
        if not value.is_integer():
            raise InvalidScore(value)
        score = int(value)
    elif isinstance(value, str):
        text = value.strip()
        if not (text.isascii() and text.isdigit()):
            raise InvalidScore(value)
        score = int(text)
    else:
        raise InvalidScore(value)
    if score < 0:
        raise InvalidScore(value)
    return score


def record_result(match: Match, home_score: Any, away_score: Any, now: datetime | None = None) -> Match:
    """Set both scores and stamp played_at (UTC now unless given)."""
    home = parse_score(home_score)
    away = parse_score(away_score)
    played_at = now or datetime.now(timezone.utc)
    return dataclasses.replace(match, home_score=home, away_score=away, played_at=played_at)


def clear_result(match: Match) -> Match:
    """Return the match to unplayed."""
    return dataclasses.replace(match, home_score=None, away_score=None, played_at=None)
