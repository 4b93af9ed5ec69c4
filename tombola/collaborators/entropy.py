"""
Entropy - Source of drawn numbers.

The engine treats the source as opaque: it asks for one value per
draw and only checks that it fits in 8 bits. Statistical quality
is the source's concern.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Iterable
import hashlib
import random

from ..engine_core.errors import EntropyError


class EntropySource(ABC):
    """Interface for draw values."""

    @abstractmethod
    def next(self, game_id: int, draw_index: int) -> int:
        """Return the value for draw ``draw_index`` of ``game_id`` (0..255)."""
        pass


class SeededEntropySource(EntropySource):
    """
    Deterministic source: the value depends only on (seed, game, index).

    Not suitable where draws must be unpredictable.
    """

    def __init__(self, seed: str | int = 0, low: int = 0, high: int = 255):
        if not 0 <= low <= high <= 255:
            raise ValueError(f"Invalid draw range {low}..{high}")
        self.seed = seed
        self.low = low
        self.high = high

    def next(self, game_id: int, draw_index: int) -> int:
        material = f"{self.seed}:{game_id}:{draw_index}".encode("utf-8")
        rng = random.Random(hashlib.sha256(material).digest())
        return rng.randint(self.low, self.high)


class ScriptedEntropySource(EntropySource):
    """
    Replays a fixed list of values, shared across games.

    Useful for tests and for replaying a known draw order.
    """

    def __init__(self, values: Iterable[int]):
        self.values = list(values)
        self.calls: list[tuple[int, int]] = []
        self._position = 0

    def push(self, *values: int):
        self.values.extend(values)

    def next(self, game_id: int, draw_index: int) -> int:
        if self._position >= len(self.values):
            raise EntropyError("Scripted entropy source exhausted")
        value = self.values[self._position]
        self._position += 1
        self.calls.append((game_id, draw_index))
        return value
