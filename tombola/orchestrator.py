"""
Orchestrator - Public surface of the engine.

The orchestrator:
1. Checks the administrative capability on privileged calls
2. Serializes each call on its game's lock
3. Delegates to the lifecycle (which calls the ledger and entropy source)
4. Publishes notifications after each committed change
5. Answers read-only queries with detached copies

This layer is framework-agnostic; the REST API and the CLI sit on top.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any
import logging
import threading

from pydantic import ValidationError

from .collaborators import EntropySource, InMemoryLedger, Ledger, SeededEntropySource
from .config import GameConfig, Settings
from .engine_core.board import Board, BoardFactory
from .engine_core.errors import InvalidConfig, NotAdministrator
from .engine_core.lifecycle import DrawResult, WinnerOutcome
from .engine_core.state import Game
from .events import Event, EventBus, EventType
from .session import GameRegistry

logger = logging.getLogger(__name__)


@dataclass
class Orchestrator:
    """
    Runs many Bingo games against one ledger and one entropy source.

    Usage:
        orchestrator = Orchestrator(ledger=InMemoryLedger(1000), entropy=SeededEntropySource())
        game = orchestrator.create_game("admin", now=0)
        orchestrator.join(game.game_id, "alice", now=10)
        orchestrator.draw("admin", game.game_id, now=20)
        outcome = orchestrator.declare_winner("admin", game.game_id)
    """
    ledger: Ledger
    entropy: EntropySource
    administrator: str = "admin"
    config: GameConfig = field(default_factory=GameConfig)
    registry: GameRegistry = field(default_factory=GameRegistry)
    events: EventBus = field(default_factory=EventBus)
    board_factory: BoardFactory | None = None

    _config_lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    @classmethod
    def from_settings(cls, settings: Settings) -> Orchestrator:
        """Orchestrator backed by the in-memory ledger and seeded entropy."""
        return cls(
            ledger=InMemoryLedger(default_balance=settings.starting_balance),
            entropy=SeededEntropySource(seed=settings.entropy_seed),
            administrator=settings.administrator,
            config=settings.game_config(),
            events=EventBus(history_size=settings.event_history),
        )

    # =========================================================================
    # Authorization
    # =========================================================================

    def is_administrator(self, caller: str | None) -> bool:
        return caller is not None and caller == self.administrator

    def _require_admin(self, caller: str | None):
        if not self.is_administrator(caller):
            logger.warning(f"Rejected privileged call from {caller!r}")
            raise NotAdministrator(caller)

    # =========================================================================
    # Transitions
    # =========================================================================

    def create_game(self, caller: str | None, now: float) -> Game:
        """Register a new game in the Joining phase."""
        self._require_admin(caller)
        lifecycle = self.registry.create(
            now, self.ledger, self.entropy, board_factory=self.board_factory,
        )
        with self.registry.locked(lifecycle.game_id) as lifecycle:
            self.events.publish(EventType.GAME_CREATED, lifecycle.game_id, start_time=now)
            return lifecycle.game.snapshot()

    def join(
        self,
        game_id: int,
        player: str,
        now: float,
        amount: int | None = None,
    ) -> Game:
        """
        Join a game. Open to any caller.

        ``amount`` defaults to the current entry fee.
        """
        config = self.config
        fee = config.entry_fee if amount is None else amount
        with self.registry.locked(game_id) as lifecycle:
            result = lifecycle.join(now, player, fee, config)
            self.events.publish(EventType.BOARD_GENERATED, game_id, player=player)
            for row, col in result.caught_up:
                self.events.publish(
                    EventType.CELL_MARKED, game_id, player=player, row=row, col=col,
                )
            self.events.publish(
                EventType.PLAYER_JOINED, game_id, player=player, pot=result.pot,
            )
            return lifecycle.game.snapshot()

    def draw(self, caller: str | None, game_id: int, now: float) -> DrawResult:
        """Draw one number for the game and mark every board."""
        self._require_admin(caller)
        config = self.config
        with self.registry.locked(game_id) as lifecycle:
            result = lifecycle.draw(now, config)
            self.events.publish(
                EventType.NUMBER_DRAWN,
                game_id,
                number=result.number,
                draw_index=result.draw_index,
                duplicate=result.duplicate,
            )
            for player, cells in result.newly_marked.items():
                for row, col in cells:
                    self.events.publish(
                        EventType.CELL_MARKED, game_id, player=player, row=row, col=col,
                    )
            return result

    def declare_winner(self, caller: str | None, game_id: int) -> WinnerOutcome:
        """
        Pay out to the first qualifying player in join order.

        A returned outcome with ``winner is None`` means nobody has a
        complete line yet; call again after more draws.
        """
        self._require_admin(caller)
        with self.registry.locked(game_id) as lifecycle:
            outcome = lifecycle.declare_winner()
            for player, is_winner in outcome.checked:
                self.events.publish(
                    EventType.BOARD_CHECKED, game_id, player=player, is_winner=is_winner,
                )
            if outcome.declared:
                self.events.publish(
                    EventType.WINNER_DECLARED,
                    game_id,
                    winner=outcome.winner,
                    pot_paid=outcome.pot_paid,
                )
            return outcome

    def reset(self, caller: str | None, game_id: int, now: float) -> Game:
        """Reopen a finished game under the same id."""
        self._require_admin(caller)
        with self.registry.locked(game_id) as lifecycle:
            game = lifecycle.reset(now)
            self.events.publish(
                EventType.GAME_RESET, game_id, round_number=game.round_number, start_time=now,
            )
            return game.snapshot()

    # =========================================================================
    # Configuration
    # =========================================================================

    def get_config(self) -> GameConfig:
        return self.config

    def update_config(self, caller: str | None, **changes: Any) -> GameConfig:
        """Replace some config values. Applies to every game from the next call."""
        self._require_admin(caller)
        unknown = set(changes) - set(GameConfig.model_fields)
        if unknown:
            raise InvalidConfig(f"Unknown config fields: {sorted(unknown)}")

        with self._config_lock:
            values = self.config.model_dump()
            values.update(changes)
            try:
                config = GameConfig(**values)
            except ValidationError as e:
                raise InvalidConfig(str(e)) from e
            self.config = config

        logger.info(f"Config updated: {config.model_dump()}")
        self.events.publish(EventType.CONFIG_UPDATED, None, **config.model_dump())
        return config

    # =========================================================================
    # Queries
    # =========================================================================

    def get_game(self, game_id: int) -> Game:
        with self.registry.locked(game_id) as lifecycle:
            return lifecycle.game.snapshot()

    def list_players(self, game_id: int) -> list[str]:
        with self.registry.locked(game_id) as lifecycle:
            return list(lifecycle.game.players)

    def get_board(self, game_id: int, player: str) -> Board:
        with self.registry.locked(game_id) as lifecycle:
            return lifecycle.boards.get(player).copy()

    def is_number_drawn(self, game_id: int, number: int) -> bool:
        with self.registry.locked(game_id) as lifecycle:
            return lifecycle.boards.is_drawn(number)

    def drawn_numbers(self, game_id: int) -> list[int]:
        """Draws of the current round, in order, duplicates included."""
        with self.registry.locked(game_id) as lifecycle:
            return list(lifecycle.game.draws)

    def list_games(self) -> list[int]:
        return self.registry.ids()

    def list_active_games(self) -> list[int]:
        return self.registry.list_active()

    def game_events(self, game_id: int, since: int = 0) -> list[Event]:
        self.registry.get(game_id)
        return self.events.history(game_id, since=since)
