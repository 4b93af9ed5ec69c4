"""
Pytest fixtures for Tombola tests.
"""

import pytest

from ..collaborators import InMemoryLedger, ScriptedEntropySource
from ..config import GameConfig
from ..engine_core.board import Board, generate
from ..engine_core.lifecycle import GameLifecycle
from ..orchestrator import Orchestrator

ADMIN = "admin"


def grid(start: int) -> list[list[int | None]]:
    """5x5 rows of consecutive numbers from ``start``; the center is free."""
    return [
        [None if (r == 2 and c == 2) else start + 5 * r + c for c in range(5)]
        for r in range(5)
    ]


class FixedBoards:
    """
    Board factory returning preset rows per player.

    Players without preset rows get a seed-generated board.
    """

    def __init__(self):
        self.rows: dict[str, list[list[int | None]]] = {}

    def set(self, player: str, rows: list[list[int | None]]):
        self.rows[player] = rows

    def __call__(self, seed: bytes, player: str) -> Board:
        rows = self.rows.get(player)
        if rows is None:
            return generate(seed, player)
        return Board.from_numbers(player, rows)


@pytest.fixture
def config() -> GameConfig:
    return GameConfig(entry_fee=100, join_window=120, turn_window=30)


@pytest.fixture
def ledger() -> InMemoryLedger:
    return InMemoryLedger(default_balance=1000)


@pytest.fixture
def entropy() -> ScriptedEntropySource:
    return ScriptedEntropySource([])


@pytest.fixture
def boards() -> FixedBoards:
    """Factory where p1 holds 0..24, p2 holds 100..124, p3 holds 200..224."""
    factory = FixedBoards()
    factory.set("p1", grid(0))
    factory.set("p2", grid(100))
    factory.set("p3", grid(200))
    return factory


@pytest.fixture
def lifecycle(ledger, entropy, boards) -> GameLifecycle:
    """Game 1 created at t=0."""
    return GameLifecycle.create(1, 0.0, ledger, entropy, board_factory=boards)


@pytest.fixture
def orchestrator(ledger, entropy, boards, config) -> Orchestrator:
    return Orchestrator(
        ledger=ledger,
        entropy=entropy,
        administrator=ADMIN,
        config=config,
        board_factory=boards,
    )
