"""
Game Lifecycle - Per-game state machine.

    JOINING --first draw--> OPEN --declare_winner--> FINISHED
       ^                                                |
       +--------------------- reset --------------------+

Design principles:
- Every operation validates fully before touching state
- Collaborators (ledger, entropy) are called before the commit, so a
  collaborator failure leaves the game exactly as it was
- Time gates are evaluated against the caller's ``now``
- No locking here: the registry serializes calls per game
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import TYPE_CHECKING
import logging

from .board import Board, BoardEngine, BoardFactory, Cell, check, derive_seed
from .errors import (
    AlreadyJoined,
    EntropyError,
    GameNotOpen,
    IncorrectFee,
    InvalidPhaseForReset,
    NoPlayersJoined,
    TooSoon,
    WindowClosed,
)
from .state import Game, GamePhase

if TYPE_CHECKING:
    from ..collaborators import EntropySource, Ledger
    from ..config import GameConfig

logger = logging.getLogger(__name__)


@dataclass
class JoinResult:
    """
    Outcome of a successful join.

    ``caught_up`` lists the cells marked on the new board by numbers
    drawn before the player joined.
    """
    player: str
    fee: int
    pot: int
    board: Board
    caught_up: list[Cell] = field(default_factory=list)


@dataclass
class DrawResult:
    """
    Outcome of a draw.

    ``duplicate`` is True when the number had already been drawn this
    round; the draw still counts for the turn window but marks nothing.
    """
    number: int
    draw_index: int
    duplicate: bool
    newly_marked: dict[str, list[Cell]] = field(default_factory=dict)


@dataclass
class WinnerOutcome:
    """
    Outcome of declare_winner.

    ``winner`` is None when nobody qualifies yet; that is a no-op and
    the caller may retry after further draws.
    """
    winner: str | None = None
    pot_paid: int = 0
    checked: list[tuple[str, bool]] = field(default_factory=list)

    @property
    def declared(self) -> bool:
        return self.winner is not None


class GameLifecycle:
    """
    Owns one game's record and boards.

    Usage:
        lifecycle = GameLifecycle.create(game_id=1, now=0.0, ledger=..., entropy=...)
        lifecycle.join(now=10.0, player="p1", fee=100, config=config)
        lifecycle.draw(now=20.0, config=config)
        outcome = lifecycle.declare_winner()
    """

    def __init__(
        self,
        game: Game,
        ledger: Ledger,
        entropy: EntropySource,
        board_factory: BoardFactory | None = None,
    ):
        self.game = game
        self.boards = BoardEngine(game.game_id, factory=board_factory)
        self.ledger = ledger
        self.entropy = entropy

    @classmethod
    def create(
        cls,
        game_id: int,
        now: float,
        ledger: Ledger,
        entropy: EntropySource,
        board_factory: BoardFactory | None = None,
    ) -> GameLifecycle:
        game = Game(game_id=game_id, created_at=now)
        logger.info(f"Game {game_id} created at {now}")
        return cls(game, ledger, entropy, board_factory=board_factory)

    @property
    def game_id(self) -> int:
        return self.game.game_id

    # =========================================================================
    # Transitions
    # =========================================================================

    def join(self, now: float, player: str, fee: int, config: GameConfig) -> JoinResult:
        """
        Add a player, escrowing the fee and generating the board.

        Raises:
            GameNotOpen: game is finished
            WindowClosed: now > created_at + join_window
            AlreadyJoined: player already in this round
            IncorrectFee: fee differs from the configured entry fee
            LedgerError: escrow refused (nothing is committed)
        """
        game = self.game
        if not game.phase.accepts_play:
            raise GameNotOpen(game.game_id, game.phase)

        deadline = game.created_at + config.join_window
        if now > deadline:
            raise WindowClosed(game.game_id, now, deadline)

        if game.has_player(player):
            raise AlreadyJoined(game.game_id, player)

        if fee != config.entry_fee:
            raise IncorrectFee(fee, config.entry_fee)

        seed = derive_seed(game.game_id, game.round_number, player)
        board, caught_up = self.boards.build(seed, player)

        self.ledger.escrow(game.game_id, player, fee)

        self.boards.add(board)
        game.players.append(player)
        game.pot += fee

        logger.info(f"Player {player} joined game {game.game_id}, pot={game.pot}")
        return JoinResult(
            player=player, fee=fee, pot=game.pot, board=board, caught_up=caught_up,
        )

    def draw(self, now: float, config: GameConfig) -> DrawResult:
        """
        Draw one number and mark it on every board.

        Raises:
            GameNotOpen: game is finished
            TooSoon: now < last_draw_at + turn_window
            EntropyError: source returned something other than 0..255
        """
        game = self.game
        if not game.phase.accepts_play:
            raise GameNotOpen(game.game_id, game.phase)

        if game.last_draw_at is not None:
            earliest = game.last_draw_at + config.turn_window
            if now < earliest:
                raise TooSoon(game.game_id, now, earliest)

        draw_index = len(game.draws)
        number = self.entropy.next(game.game_id, draw_index)
        if isinstance(number, bool) or not isinstance(number, int) or not 0 <= number <= 255:
            raise EntropyError(f"Entropy source returned {number!r} for game {game.game_id}")

        duplicate = self.boards.is_drawn(number)
        newly_marked = self.boards.mark_all(number)
        game.draws.append(number)
        game.last_draw_at = now
        if game.phase == GamePhase.JOINING:
            game.phase = GamePhase.OPEN
            logger.info(f"Game {game.game_id} opened by first draw")

        logger.debug(f"Game {game.game_id} drew {number} (index {draw_index})")
        return DrawResult(
            number=number,
            draw_index=draw_index,
            duplicate=duplicate,
            newly_marked=newly_marked,
        )

    def declare_winner(self) -> WinnerOutcome:
        """
        Pay the pot to the earliest-joined player with a complete line.

        Returns an empty outcome when nobody qualifies.

        Raises:
            GameNotOpen: game is finished
            NoPlayersJoined: nobody joined this round
            LedgerError: payout failed (game stays open, pot intact)
        """
        game = self.game
        if not game.phase.accepts_play:
            raise GameNotOpen(game.game_id, game.phase)
        if not game.players:
            raise NoPlayersJoined(game.game_id)

        outcome = WinnerOutcome()
        for player in game.players:
            is_winner = check(self.boards.get(player))
            outcome.checked.append((player, is_winner))
            if is_winner:
                outcome.winner = player
                break

        if outcome.winner is None:
            logger.debug(f"Game {game.game_id}: no qualifying winner yet")
            return outcome

        self.ledger.payout(game.game_id, outcome.winner, game.pot)

        outcome.pot_paid = game.pot
        game.winner = outcome.winner
        game.pot = 0
        game.phase = GamePhase.FINISHED
        logger.info(
            f"Game {game.game_id} won by {outcome.winner}, paid {outcome.pot_paid}"
        )
        return outcome

    def reset(self, now: float) -> Game:
        """
        Start a fresh round under the same id.

        Raises:
            InvalidPhaseForReset: game is not finished
        """
        game = self.game
        if game.phase != GamePhase.FINISHED:
            raise InvalidPhaseForReset(game.game_id, game.phase)

        self.boards.clear()
        game.players.clear()
        game.draws.clear()
        game.pot = 0
        game.winner = None
        game.last_draw_at = None
        game.created_at = now
        game.round_number += 1
        game.phase = GamePhase.JOINING

        logger.info(f"Game {game.game_id} reset for round {game.round_number}")
        return game
