"""
Engine Errors - Every failure a game operation can surface.

All errors derive from TombolaError so the API layer can map them in
one place. Each class carries a stable ``error_code`` used in responses.

Declaring a winner when nobody qualifies is a no-op outcome
(WinnerOutcome.winner is None), not an error.
"""


class TombolaError(Exception):
    """Base class for all engine errors."""
    error_code = "TOMBOLA_ERROR"


# ============ Game lookup ============

class GameNotFound(TombolaError):
    """No game registered under this id."""
    error_code = "GAME_NOT_FOUND"

    def __init__(self, game_id):
        self.game_id = game_id
        super().__init__(f"Game {game_id} not found")


# ============ Phase and timing gates ============

class GameNotOpen(TombolaError):
    """Game is not in a phase that accepts the operation."""
    error_code = "GAME_NOT_OPEN"

    def __init__(self, game_id, phase):
        self.game_id = game_id
        self.phase = phase
        super().__init__(f"Game {game_id} is {phase.value}, operation not accepted")


class WindowClosed(TombolaError):
    """Join window has elapsed."""
    error_code = "WINDOW_CLOSED"

    def __init__(self, game_id, now, deadline):
        self.game_id = game_id
        self.now = now
        self.deadline = deadline
        super().__init__(f"Join window for game {game_id} closed at {deadline} (now={now})")


class TooSoon(TombolaError):
    """Turn window since the last draw has not elapsed yet."""
    error_code = "TOO_SOON"

    def __init__(self, game_id, now, earliest):
        self.game_id = game_id
        self.now = now
        self.earliest = earliest
        super().__init__(f"Next draw for game {game_id} allowed at {earliest} (now={now})")


class InvalidPhaseForReset(TombolaError):
    """Only a finished game can be reset."""
    error_code = "INVALID_PHASE_FOR_RESET"

    def __init__(self, game_id, phase):
        self.game_id = game_id
        self.phase = phase
        super().__init__(f"Game {game_id} is {phase.value}, only finished games can be reset")


# ============ Players and boards ============

class AlreadyJoined(TombolaError):
    """Player is already in this round."""
    error_code = "ALREADY_JOINED"

    def __init__(self, game_id, player):
        self.game_id = game_id
        self.player = player
        super().__init__(f"Player {player} already joined game {game_id}")


class AlreadyExists(TombolaError):
    """A board already exists for (game, player); boards are create-only."""
    error_code = "BOARD_ALREADY_EXISTS"

    def __init__(self, game_id, player):
        self.game_id = game_id
        self.player = player
        super().__init__(f"Board for player {player} in game {game_id} already exists")


class BoardNotFound(TombolaError):
    """Player has no board in this game."""
    error_code = "BOARD_NOT_FOUND"

    def __init__(self, game_id, player):
        self.game_id = game_id
        self.player = player
        super().__init__(f"No board for player {player} in game {game_id}")


class IncorrectFee(TombolaError):
    """Offered amount does not match the configured entry fee."""
    error_code = "INCORRECT_FEE"

    def __init__(self, offered, expected):
        self.offered = offered
        self.expected = expected
        super().__init__(f"Entry fee is {expected}, got {offered}")


class NoPlayersJoined(TombolaError):
    """A winner cannot be declared in a game nobody joined."""
    error_code = "NO_PLAYERS"

    def __init__(self, game_id):
        self.game_id = game_id
        super().__init__(f"Game {game_id} has no players")


# ============ Authorization and config ============

class NotAdministrator(TombolaError):
    """Caller lacks the administrative capability."""
    error_code = "NOT_ADMINISTRATOR"

    def __init__(self, caller):
        self.caller = caller
        super().__init__(f"Caller {caller!r} is not the administrator")


class InvalidConfig(TombolaError):
    """Rejected configuration update."""
    error_code = "INVALID_CONFIG"


# ============ Collaborators ============

class LedgerError(TombolaError):
    """Base class for fee custody failures."""
    error_code = "LEDGER_ERROR"


class InsufficientFunds(LedgerError):
    """Payer cannot cover the escrow amount."""
    error_code = "INSUFFICIENT_FUNDS"

    def __init__(self, payer, amount, balance):
        self.payer = payer
        self.amount = amount
        self.balance = balance
        super().__init__(f"{payer} has {balance}, needs {amount}")


class TransferDenied(LedgerError):
    """Ledger refused to take custody of the fee."""
    error_code = "TRANSFER_DENIED"


class TransferFailed(LedgerError):
    """Ledger could not pay out the pot."""
    error_code = "TRANSFER_FAILED"


class EntropyError(TombolaError):
    """Entropy source failed or returned a value outside 0..255."""
    error_code = "ENTROPY_ERROR"
