"""
Engine Core - Deterministic boards and per-game lifecycle.

The engine is the runtime that:
1. Generates per-player boards from seeds
2. Marks drawn numbers idempotently
3. Detects completed lines
4. Enforces the join/draw/winner/reset state machine
"""

from .board import Board, BoardEngine, LINES, check, generate, mark, winning_lines
from .state import Game, GamePhase
from .lifecycle import GameLifecycle, JoinResult, DrawResult, WinnerOutcome
from .errors import TombolaError

__all__ = [
    "Board",
    "BoardEngine",
    "LINES",
    "check",
    "generate",
    "mark",
    "winning_lines",
    "Game",
    "GamePhase",
    "GameLifecycle",
    "JoinResult",
    "DrawResult",
    "WinnerOutcome",
    "TombolaError",
]
