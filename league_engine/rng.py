"""
Injectable randomness for the draw.
Production code creates DrawRNG() per call (OS-seeded, never reproducible);
tests pass a fixed seed.
"""
from __future__ import annotations

import random
from typing import MutableSequence


class DrawRNG:
    """Wrapper around random.Random so the draw never touches module-level state."""

    def __init__(self, seed: int | None = None) -> None:
        self._rng = random.Random(seed)

    def randrange(self, stop: int) -> int:
        return self._rng.randrange(stop)

    def shuffle(self, seq: MutableSequence) -> None:
        """Unbiased in-place shuffle."""
        self._rng.shuffle(seq)
