"""
Game State - The per-game record mutated by the lifecycle.

A Game is one id's record. It is mutated in place across rounds:
reset() starts a new round under the same id instead of creating
a new record.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from enum import Enum


class GamePhase(Enum):
    """Which operations a game currently accepts."""
    JOINING = "joining"  # Created or reset, no draw yet
    OPEN = "open"  # At least one draw this round
    FINISHED = "finished"  # Winner paid, waiting for reset

    @property
    def accepts_play(self) -> bool:
        return self in (GamePhase.JOINING, GamePhase.OPEN)


@dataclass
class Game:
    """
    One game id's current round.

    Invariant: ``pot`` equals the fees collected since the round began,
    and drops to 0 on payout or reset.
    """
    game_id: int
    created_at: float
    phase: GamePhase = GamePhase.JOINING
    last_draw_at: float | None = None
    pot: int = 0
    winner: str | None = None
    players: list[str] = field(default_factory=list)

    # Round tracking
    round_number: int = 1
    draws: list[int] = field(default_factory=list)

    @property
    def is_active(self) -> bool:
        return self.phase.accepts_play

    def has_player(self, player: str) -> bool:
        return player in self.players

    def snapshot(self) -> Game:
        """Detached copy for readers outside the game's lock."""
        return replace(self, players=self.players.copy(), draws=self.draws.copy())

    def to_dict(self) -> dict:
        return {
            "game_id": self.game_id,
            "created_at": self.created_at,
            "phase": self.phase.value,
            "last_draw_at": self.last_draw_at,
            "pot": self.pot,
            "winner": self.winner,
            "players": list(self.players),
            "round_number": self.round_number,
            "draws": list(self.draws),
        }
