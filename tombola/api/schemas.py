"""
Pydantic Schemas for API - Request/response models for OpenAPI.

Error Codes:
- GAME_NOT_FOUND: No game with this id
- GAME_NOT_OPEN: Game is finished, operation not accepted
- WINDOW_CLOSED: Join window elapsed
- TOO_SOON: Turn window since the last draw not elapsed
- ALREADY_JOINED: Player already in this round
- INCORRECT_FEE: Offered amount differs from the entry fee
- NOT_ADMINISTRATOR: Caller may not perform this operation
- INVALID_PHASE_FOR_RESET: Only finished games can be reset
- INSUFFICIENT_FUNDS / TRANSFER_DENIED / TRANSFER_FAILED: Ledger failures
"""

from enum import Enum
from typing import Optional, Any
from pydantic import BaseModel, Field


# =============================================================================
# Enums
# =============================================================================

class GamePhaseValue(str, Enum):
    """Game phase values."""
    JOINING = "joining"
    OPEN = "open"
    FINISHED = "finished"


# =============================================================================
# Requests
# =============================================================================

class CreateGameRequest(BaseModel):
    """Create a game. ``now`` defaults to the server clock."""
    now: Optional[float] = None


class JoinRequest(BaseModel):
    """Join a game as ``player``."""
    player: str = Field(min_length=1)
    amount: Optional[int] = Field(default=None, ge=0, description="Defaults to the entry fee")
    now: Optional[float] = None


class TimedRequest(BaseModel):
    """Body for draw and reset."""
    now: Optional[float] = None


class ConfigUpdateRequest(BaseModel):
    """Partial config update; omitted fields keep their value."""
    entry_fee: Optional[int] = Field(default=None, ge=0)
    join_window: Optional[int] = Field(default=None, ge=0)
    turn_window: Optional[int] = Field(default=None, ge=0)


# =============================================================================
# Responses
# =============================================================================

class GameResponse(BaseModel):
    """Current round of a game."""
    game_id: int
    phase: GamePhaseValue
    created_at: float
    last_draw_at: Optional[float] = None
    pot: int = 0
    winner: Optional[str] = None
    players: list[str] = Field(default_factory=list)
    round_number: int = 1
    draws: list[int] = Field(default_factory=list)


class GameListResponse(BaseModel):
    games: list[int]
    count: int


class PlayersResponse(BaseModel):
    game_id: int
    players: list[str]


class CellInfo(BaseModel):
    row: int
    col: int


class MarkedCells(BaseModel):
    player: str
    cells: list[CellInfo]


class DrawResponse(BaseModel):
    """Result of one draw."""
    game_id: int
    number: int
    draw_index: int
    duplicate: bool
    newly_marked: list[MarkedCells] = Field(default_factory=list)


class WinnerResponse(BaseModel):
    """``winner`` is null when nobody qualifies yet."""
    game_id: int
    declared: bool
    winner: Optional[str] = None
    pot_paid: int = 0


class BoardResponse(BaseModel):
    """A player's board. The free center has a null number."""
    game_id: int
    player: str
    numbers: list[list[Optional[int]]]
    marked: list[list[bool]]
    is_winner: bool


class NumberDrawnResponse(BaseModel):
    game_id: int
    number: int
    drawn: bool


class ConfigResponse(BaseModel):
    entry_fee: int
    join_window: int
    turn_window: int


class EventInfo(BaseModel):
    event_type: str
    game_id: Optional[int] = None
    data: dict[str, Any] = Field(default_factory=dict)
    sequence: int


class EventListResponse(BaseModel):
    game_id: int
    events: list[EventInfo]


class ErrorResponse(BaseModel):
    """Standard error body."""
    error: str
    error_code: str
    details: Optional[dict[str, Any]] = None


class HealthResponse(BaseModel):
    status: str = "healthy"
    version: str
    games: int
