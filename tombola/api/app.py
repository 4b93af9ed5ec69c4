"""
FastAPI Application - REST API over the orchestrator.

Endpoints:
    POST   /api/v1/games                         Create game (admin)
    GET    /api/v1/games                         List game ids (?active=true)
    GET    /api/v1/games/{id}                    Get game
    POST   /api/v1/games/{id}/join               Join game
    POST   /api/v1/games/{id}/draw               Draw a number (admin)
    POST   /api/v1/games/{id}/declare-winner     Declare winner (admin)
    POST   /api/v1/games/{id}/reset              Reset finished game (admin)
    GET    /api/v1/games/{id}/players            List players
    GET    /api/v1/games/{id}/boards/{player}    Get a player's board
    GET    /api/v1/games/{id}/numbers/{number}   Is number drawn
    GET    /api/v1/games/{id}/events             Notifications (?since=seq)
    GET    /api/v1/config                        Get config
    PUT    /api/v1/config                        Update config (admin)
    GET    /health                               Health check

The caller identity is taken from the ``X-Caller`` header.
Request bodies may carry ``now``; the server clock is used otherwise.
"""

from typing import Annotated, Optional
import logging
import time

from fastapi import FastAPI, Header, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from ..config import Settings, configure_logging, get_settings
from ..engine_core.board import check
from ..engine_core.errors import TombolaError
from ..orchestrator import Orchestrator
from .schemas import (
    # Requests
    CreateGameRequest,
    JoinRequest,
    TimedRequest,
    ConfigUpdateRequest,
    # Responses
    GameResponse,
    GameListResponse,
    PlayersResponse,
    DrawResponse,
    WinnerResponse,
    BoardResponse,
    NumberDrawnResponse,
    ConfigResponse,
    EventListResponse,
    ErrorResponse,
    HealthResponse,
    # Nested models
    MarkedCells,
    CellInfo,
    EventInfo,
)

logger = logging.getLogger(__name__)

# Error code -> HTTP status; anything unlisted is a 400
ERROR_STATUS = {
    "GAME_NOT_FOUND": 404,
    "BOARD_NOT_FOUND": 404,
    "NOT_ADMINISTRATOR": 403,
    "GAME_NOT_OPEN": 409,
    "WINDOW_CLOSED": 409,
    "TOO_SOON": 409,
    "ALREADY_JOINED": 409,
    "BOARD_ALREADY_EXISTS": 409,
    "NO_PLAYERS": 409,
    "INVALID_PHASE_FOR_RESET": 409,
    "INSUFFICIENT_FUNDS": 402,
    "TRANSFER_DENIED": 402,
    "TRANSFER_FAILED": 502,
    "LEDGER_ERROR": 502,
    "ENTROPY_ERROR": 502,
}

CallerHeader = Annotated[Optional[str], Header(alias="X-Caller")]


def _clock(now: Optional[float]) -> float:
    return time.time() if now is None else now


def create_app(orchestrator: Optional[Orchestrator] = None, settings: Optional[Settings] = None):
    """
    Create the FastAPI application.

    Args:
        orchestrator: Optional Orchestrator (built from settings if not provided)
        settings: Optional Settings (read from the environment if not provided)

    Returns:
        FastAPI application instance
    """
    settings = settings or get_settings()
    engine = orchestrator or Orchestrator.from_settings(settings)

    app = FastAPI(
        title="Tombola Engine API",
        description="Multi-session Bingo coordination engine.",
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )
    app.state.orchestrator = engine

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins.split(","),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # =========================================================================
    # Error handling
    # =========================================================================

    @app.exception_handler(TombolaError)
    async def handle_engine_error(request: Request, exc: TombolaError) -> JSONResponse:
        status_code = ERROR_STATUS.get(exc.error_code, 400)
        logger.info(f"{request.method} {request.url.path} -> {exc.error_code}: {exc}")
        return JSONResponse(
            status_code=status_code,
            content=ErrorResponse(error=str(exc), error_code=exc.error_code).model_dump(),
        )

    error_responses = {
        400: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    }

    # =========================================================================
    # Game Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/games",
        response_model=GameResponse,
        status_code=201,
        responses=error_responses,
        tags=["Games"],
        summary="Create a new game",
    )
    def create_game(
        caller: CallerHeader = None,
        body: Optional[CreateGameRequest] = None,
    ) -> GameResponse:
        now = _clock(body.now if body else None)
        game = engine.create_game(caller, now)
        return _game_response(game)

    @app.get(
        "/api/v1/games",
        response_model=GameListResponse,
        tags=["Games"],
        summary="List games",
    )
    def list_games(
        active: Annotated[bool, Query(description="Only games not yet finished")] = False,
    ) -> GameListResponse:
        games = engine.list_active_games() if active else engine.list_games()
        return GameListResponse(games=games, count=len(games))

    @app.get(
        "/api/v1/games/{game_id}",
        response_model=GameResponse,
        responses=error_responses,
        tags=["Games"],
        summary="Get a game",
    )
    def get_game(game_id: int) -> GameResponse:
        return _game_response(engine.get_game(game_id))

    @app.post(
        "/api/v1/games/{game_id}/join",
        response_model=GameResponse,
        responses=error_responses,
        tags=["Games"],
        summary="Join a game",
    )
    def join_game(game_id: int, body: JoinRequest) -> GameResponse:
        game = engine.join(game_id, body.player, _clock(body.now), amount=body.amount)
        return _game_response(game)

    @app.post(
        "/api/v1/games/{game_id}/draw",
        response_model=DrawResponse,
        responses=error_responses,
        tags=["Game Loop"],
        summary="Draw one number",
    )
    def draw_number(
        game_id: int,
        caller: CallerHeader = None,
        body: Optional[TimedRequest] = None,
    ) -> DrawResponse:
        result = engine.draw(caller, game_id, _clock(body.now if body else None))
        return DrawResponse(
            game_id=game_id,
            number=result.number,
            draw_index=result.draw_index,
            duplicate=result.duplicate,
            newly_marked=[
                MarkedCells(
                    player=player,
                    cells=[CellInfo(row=r, col=c) for r, c in cells],
                )
                for player, cells in result.newly_marked.items()
                if cells
            ],
        )

    @app.post(
        "/api/v1/games/{game_id}/declare-winner",
        response_model=WinnerResponse,
        responses=error_responses,
        tags=["Game Loop"],
        summary="Pay out to the first qualifying player",
    )
    def declare_winner(game_id: int, caller: CallerHeader = None) -> WinnerResponse:
        outcome = engine.declare_winner(caller, game_id)
        return WinnerResponse(
            game_id=game_id,
            declared=outcome.declared,
            winner=outcome.winner,
            pot_paid=outcome.pot_paid,
        )

    @app.post(
        "/api/v1/games/{game_id}/reset",
        response_model=GameResponse,
        responses=error_responses,
        tags=["Games"],
        summary="Reopen a finished game",
    )
    def reset_game(
        game_id: int,
        caller: CallerHeader = None,
        body: Optional[TimedRequest] = None,
    ) -> GameResponse:
        game = engine.reset(caller, game_id, _clock(body.now if body else None))
        return _game_response(game)

    # =========================================================================
    # Queries
    # =========================================================================

    @app.get(
        "/api/v1/games/{game_id}/players",
        response_model=PlayersResponse,
        responses=error_responses,
        tags=["Queries"],
    )
    def list_players(game_id: int) -> PlayersResponse:
        return PlayersResponse(game_id=game_id, players=engine.list_players(game_id))

    @app.get(
        "/api/v1/games/{game_id}/boards/{player}",
        response_model=BoardResponse,
        responses=error_responses,
        tags=["Queries"],
    )
    def get_board(game_id: int, player: str) -> BoardResponse:
        board = engine.get_board(game_id, player)
        return BoardResponse(
            game_id=game_id,
            player=player,
            numbers=[list(row) for row in board.numbers],
            marked=[list(row) for row in board.marked],
            is_winner=check(board),
        )

    @app.get(
        "/api/v1/games/{game_id}/numbers/{number}",
        response_model=NumberDrawnResponse,
        responses=error_responses,
        tags=["Queries"],
    )
    def is_number_drawn(game_id: int, number: int) -> NumberDrawnResponse:
        return NumberDrawnResponse(
            game_id=game_id,
            number=number,
            drawn=engine.is_number_drawn(game_id, number),
        )

    @app.get(
        "/api/v1/games/{game_id}/events",
        response_model=EventListResponse,
        responses=error_responses,
        tags=["Queries"],
    )
    def list_events(
        game_id: int,
        since: Annotated[int, Query(ge=0, description="Only events after this sequence")] = 0,
    ) -> EventListResponse:
        events = engine.game_events(game_id, since=since)
        return EventListResponse(
            game_id=game_id,
            events=[EventInfo(**e.to_dict()) for e in events],
        )

    # =========================================================================
    # Config
    # =========================================================================

    @app.get("/api/v1/config", response_model=ConfigResponse, tags=["Config"])
    def get_config() -> ConfigResponse:
        return ConfigResponse(**engine.get_config().model_dump())

    @app.put(
        "/api/v1/config",
        response_model=ConfigResponse,
        responses=error_responses,
        tags=["Config"],
    )
    def update_config(body: ConfigUpdateRequest, caller: CallerHeader = None) -> ConfigResponse:
        config = engine.update_config(caller, **body.model_dump(exclude_none=True))
        return ConfigResponse(**config.model_dump())

    # =========================================================================
    # System
    # =========================================================================

    @app.get("/health", response_model=HealthResponse, tags=["System"])
    def health_check() -> HealthResponse:
        return HealthResponse(version=__version__, games=len(engine.registry))

    def _game_response(game) -> GameResponse:
        return GameResponse(**game.to_dict())

    return app


# For running directly: uvicorn tombola.api.app:app
app = create_app()


if __name__ == "__main__":
    import uvicorn

    configure_logging(get_settings().log_level)
    uvicorn.run(app, host="0.0.0.0", port=8000)
