"""
Events - Notifications for external observers.

The orchestrator publishes one Event per observable change. Observers
subscribe with a callable; the bus also keeps a bounded history per
game so late readers (the REST API) can catch up.
"""

from __future__ import annotations
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable
import logging
import threading

logger = logging.getLogger(__name__)


class EventType(Enum):
    GAME_CREATED = "game_created"
    PLAYER_JOINED = "player_joined"
    NUMBER_DRAWN = "number_drawn"
    WINNER_DECLARED = "winner_declared"
    GAME_RESET = "game_reset"
    BOARD_GENERATED = "board_generated"
    CELL_MARKED = "cell_marked"
    BOARD_CHECKED = "board_checked"
    CONFIG_UPDATED = "config_updated"


@dataclass
class Event:
    """A single notification. ``game_id`` is None for engine-wide events."""
    event_type: EventType
    game_id: int | None
    data: dict[str, Any] = field(default_factory=dict)
    sequence: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "event_type": self.event_type.value,
            "game_id": self.game_id,
            "data": dict(self.data),
            "sequence": self.sequence,
        }


Subscriber = Callable[[Event], None]


class EventBus:
    """
    Synchronous publish/subscribe.

    Subscribers run on the publishing thread, inside the game's lock,
    so they must not call back into the orchestrator for the same game.
    A failing subscriber is logged and does not affect the others.
    """

    def __init__(self, history_size: int = 1000):
        self.history_size = history_size
        self._subscribers: list[Subscriber] = []
        self._history: dict[int | None, deque[Event]] = {}
        self._sequence = 0
        self._lock = threading.Lock()

    def subscribe(self, subscriber: Subscriber) -> Subscriber:
        with self._lock:
            self._subscribers.append(subscriber)
        return subscriber

    def unsubscribe(self, subscriber: Subscriber):
        with self._lock:
            if subscriber in self._subscribers:
                self._subscribers.remove(subscriber)

    def publish(self, event_type: EventType, game_id: int | None, **data: Any) -> Event:
        with self._lock:
            self._sequence += 1
            event = Event(
                event_type=event_type,
                game_id=game_id,
                data=data,
                sequence=self._sequence,
            )
            history = self._history.get(game_id)
            if history is None:
                history = self._history[game_id] = deque(maxlen=self.history_size)
            history.append(event)
            subscribers = list(self._subscribers)

        for subscriber in subscribers:
            try:
                subscriber(event)
            except Exception:
                logger.exception(f"Subscriber failed on {event.event_type.value}")
        return event

    def history(self, game_id: int | None, since: int = 0) -> list[Event]:
        """Events for ``game_id`` with sequence greater than ``since``."""
        with self._lock:
            return [e for e in self._history.get(game_id, ()) if e.sequence > since]
