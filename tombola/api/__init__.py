"""
API Module - REST interface over the orchestrator.

Exposes game creation, joins, draws, winner declaration, resets,
read-only queries, and administrator config changes.
"""

from .schemas import (
    # Requests
    CreateGameRequest,
    JoinRequest,
    TimedRequest,
    ConfigUpdateRequest,
    # Responses
    GameResponse,
    DrawResponse,
    WinnerResponse,
    BoardResponse,
    ErrorResponse,
)
from .app import create_app

__all__ = [
    # Requests
    "CreateGameRequest",
    "JoinRequest",
    "TimedRequest",
    "ConfigUpdateRequest",
    # Responses
    "GameResponse",
    "DrawResponse",
    "WinnerResponse",
    "BoardResponse",
    "ErrorResponse",
    # App
    "create_app",
]
