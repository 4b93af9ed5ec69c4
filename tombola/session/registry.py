"""
Game Registry - Maps game ids to their lifecycles.

LIFECYCLE:
1. create() allocates the next id and registers a new lifecycle
2. Every operation on a game runs inside locked(game_id)
3. A finished game is reset in place; its id never changes
4. Ids are strictly increasing and never handed to another game

PERSISTENCE RULES:
- In-memory only; the registry lives as long as its orchestrator
"""

from __future__ import annotations
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Iterator
import logging
import threading

from ..collaborators import EntropySource, Ledger
from ..engine_core.board import BoardFactory
from ..engine_core.errors import GameNotFound
from ..engine_core.lifecycle import GameLifecycle

logger = logging.getLogger(__name__)


@dataclass
class GameSlot:
    """A registered game and the lock that serializes its operations."""
    lifecycle: GameLifecycle
    lock: threading.Lock = field(default_factory=threading.Lock)


class GameRegistry:
    """
    Registered games by id.

    Lookup is a dict access. Distinct games never share a lock, so
    operations on different ids run concurrently.
    """

    def __init__(self, first_id: int = 1):
        self._games: dict[int, GameSlot] = {}
        self._next_id = first_id
        self._lock = threading.Lock()

    def create(
        self,
        now: float,
        ledger: Ledger,
        entropy: EntropySource,
        board_factory: BoardFactory | None = None,
    ) -> GameLifecycle:
        """Allocate an id and register a new game in the Joining phase."""
        with self._lock:
            game_id = self._next_id
            self._next_id += 1
            lifecycle = GameLifecycle.create(
                game_id, now, ledger, entropy, board_factory=board_factory,
            )
            self._games[game_id] = GameSlot(lifecycle=lifecycle)
        logger.debug(f"Registered game {game_id}")
        return lifecycle

    def get(self, game_id: int) -> GameSlot:
        slot = self._games.get(game_id)
        if slot is None:
            raise GameNotFound(game_id)
        return slot

    @contextmanager
    def locked(self, game_id: int) -> Iterator[GameLifecycle]:
        """Hold the game's lock for one read-modify-write cycle."""
        slot = self.get(game_id)
        with slot.lock:
            yield slot.lifecycle

    def __contains__(self, game_id: int) -> bool:
        return game_id in self._games

    def __len__(self) -> int:
        return len(self._games)

    def ids(self) -> list[int]:
        """All registered ids in allocation order."""
        with self._lock:
            return sorted(self._games)

    def list_active(self) -> list[int]:
        """Ids of games that still accept play (not finished)."""
        active = []
        for game_id in self.ids():
            with self.locked(game_id) as lifecycle:
                if lifecycle.game.is_active:
                    active.append(game_id)
        return active
