"""
Session Module - Registry of concurrently running games.

Each game id owns its lifecycle, boards, drawn numbers, and a lock.
Games are independent: nothing mutable is shared between ids.
"""

from .registry import GameRegistry, GameSlot

__all__ = [
    "GameRegistry",
    "GameSlot",
]
