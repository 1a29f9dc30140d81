"""
Roster gate: per-tournament lock that must be closed before the draw runs.

Transitions (the only legal mutators of the state map):
    unlocked -> locked    needs >= 2 role=player entries; side effect "record_lock"
    locked   -> unlocked  always allowed (admin override); side effect "clear_lock"

Unlocking does not undo an existing draw; it only re-opens the gate.
"""
from __future__ import annotations

from typing import Mapping

from league_engine.models import GateTransitionResult, RosterState
from league_engine.services.errors import RosterNotLocked, RosterTooSmall

RECORD_LOCK = "record_lock"
CLEAR_LOCK = "clear_lock"

MIN_ROSTER = 2


class RosterGate:
    """
    Keyed state map tournament_id -> RosterState. Unknown tournaments are unlocked.
    The layer that persists locks seeds the gate with `initial` and applies the
    side effect of each returned GateTransitionResult.
    """

    def __init__(self, initial: Mapping[str, RosterState] | None = None) -> None:
        self._states: dict[str, RosterState] = dict(initial or {})

    def state(self, tournament_id: str) -> RosterState:
        return self._states.get(tournament_id, RosterState.UNLOCKED)

    def is_locked(self, tournament_id: str) -> bool:
        return self.state(tournament_id) == RosterState.LOCKED

    def lock(self, tournament_id: str, player_count: int) -> GateTransitionResult:
        """Close the roster. Fails with RosterTooSmall below two players."""
        if player_count < MIN_ROSTER:
            raise RosterTooSmall(player_count)
        previous = self.state(tournament_id)
        self._states[tournament_id] = RosterState.LOCKED
        return GateTransitionResult(tournament_id, previous, RosterState.LOCKED, RECORD_LOCK)

    def unlock(self, tournament_id: str) -> GateTransitionResult:
        previous = self.state(tournament_id)
        self._states.pop(tournament_id, None)
        return GateTransitionResult(tournament_id, previous, RosterState.UNLOCKED, CLEAR_LOCK)

    def assert_can_draw(self, tournament_id: str) -> None:
        """Raise if the draw is not allowed (roster must be locked)."""
        if not self.is_locked(tournament_id):
            raise RosterNotLocked(tournament_id)

    def snapshot(self) -> dict[str, RosterState]:
        return dict(self._states)
