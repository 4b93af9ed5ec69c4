"""
Board Engine - Per-player 5x5 boards, marking, and win detection.

Design principles:
- Numbers are fixed at generation; only the marked grid mutates
- The center cell is free: no number, always marked
- Marking is idempotent per game: a number already drawn has no effect
- Marks are never removed, so a winning board stays winning
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable
import hashlib

from .errors import AlreadyExists, BoardNotFound

BOARD_SIZE = 5
CENTER = BOARD_SIZE // 2

Cell = tuple[int, int]
BoardFactory = Callable[[bytes, str], "Board"]


def _build_lines() -> tuple[tuple[Cell, ...], ...]:
    """The 12 winning lines: 5 rows, 5 columns, 2 diagonals."""
    n = BOARD_SIZE
    lines = []
    for r in range(n):
        lines.append(tuple((r, c) for c in range(n)))
    for c in range(n):
        lines.append(tuple((r, c) for r in range(n)))
    lines.append(tuple((i, i) for i in range(n)))
    lines.append(tuple((i, n - 1 - i) for i in range(n)))
    return tuple(lines)


LINES = _build_lines()


def derive_seed(game_id: int, round_number: int, player: str) -> bytes:
    """Seed for a player's board, distinct per game, round, and player."""
    material = f"{game_id}:{round_number}:{player}".encode("utf-8")
    return hashlib.sha256(material).digest()


def cell_value(seed: bytes, row: int, col: int) -> int:
    """8-bit value for one cell, mixing the seed with the cell coordinate."""
    return hashlib.sha256(seed + bytes((row, col))).digest()[0]


@dataclass
class Board:
    """
    A participant's grid plus its marked-state grid.

    ``numbers`` is immutable; the center entry is None (free space).
    ``marked`` starts with only the center set.
    """
    player: str
    numbers: tuple[tuple[int | None, ...], ...]
    marked: list[list[bool]] = field(default_factory=lambda: [
        [r == CENTER and c == CENTER for c in range(BOARD_SIZE)]
        for r in range(BOARD_SIZE)
    ])

    @classmethod
    def from_numbers(cls, player: str, rows: list[list[int | None]]) -> Board:
        """Build a board from explicit rows. The center value is ignored."""
        if len(rows) != BOARD_SIZE or any(len(row) != BOARD_SIZE for row in rows):
            raise ValueError(f"Board must be {BOARD_SIZE}x{BOARD_SIZE}")
        numbers = tuple(
            tuple(
                None if (r == CENTER and c == CENTER) else int(rows[r][c])
                for c in range(BOARD_SIZE)
            )
            for r in range(BOARD_SIZE)
        )
        for row in numbers:
            for value in row:
                if value is not None and not 0 <= value <= 255:
                    raise ValueError(f"Cell value {value} is not an 8-bit number")
        return cls(player=player, numbers=numbers)

    def number_at(self, row: int, col: int) -> int | None:
        return self.numbers[row][col]

    def is_marked(self, row: int, col: int) -> bool:
        if row == CENTER and col == CENTER:
            return True
        return self.marked[row][col]

    def mark_number(self, number: int) -> list[Cell]:
        """Mark every unmarked cell holding ``number``. Returns newly marked cells."""
        newly = []
        for r in range(BOARD_SIZE):
            for c in range(BOARD_SIZE):
                if self.numbers[r][c] == number and not self.marked[r][c]:
                    self.marked[r][c] = True
                    newly.append((r, c))
        return newly

    @property
    def marked_count(self) -> int:
        return sum(
            1 for r in range(BOARD_SIZE) for c in range(BOARD_SIZE)
            if self.is_marked(r, c)
        )

    def copy(self) -> Board:
        """Detached copy, safe to hand out of a locked section."""
        return Board(
            player=self.player,
            numbers=self.numbers,
            marked=[row.copy() for row in self.marked],
        )


def generate(seed: bytes, player: str) -> Board:
    """Deterministically fill a board from a seed."""
    rows = [
        [None if (r == CENTER and c == CENTER) else cell_value(seed, r, c)
         for c in range(BOARD_SIZE)]
        for r in range(BOARD_SIZE)
    ]
    return Board.from_numbers(player, rows)


def mark(board: Board, drawn: set[int], number: int) -> list[Cell]:
    """
    Apply one draw to a single board.

    No-op if ``number`` is already in ``drawn``; otherwise records it
    and marks every matching cell. A game with several boards shares
    one drawn set between them, so it goes through
    BoardEngine.mark_all instead.
    """
    if number in drawn:
        return []
    drawn.add(number)
    return board.mark_number(number)


def winning_lines(board: Board) -> list[tuple[Cell, ...]]:
    """All fully marked lines on the board."""
    return [
        line for line in LINES
        if all(board.is_marked(r, c) for r, c in line)
    ]


def check(board: Board) -> bool:
    """True iff any row, column, or diagonal is fully marked."""
    return any(
        all(board.is_marked(r, c) for r, c in line)
        for line in LINES
    )


class BoardEngine:
    """
    Boards and drawn numbers for one game round.

    Boards are kept in creation order, which is join order.
    clear() discards everything when the game is reset.
    """

    def __init__(self, game_id: int, factory: BoardFactory | None = None):
        self.game_id = game_id
        self.factory = factory or generate
        self._boards: dict[str, Board] = {}
        self._drawn: set[int] = set()

    def build(self, seed: bytes, player: str) -> tuple[Board, list[Cell]]:
        """
        Make the board for ``player`` without registering it.

        Numbers drawn so far are applied to the new board; the cells
        they mark come back alongside it, sorted. Pass the board to
        add() once the join has been paid for.
        """
        if player in self._boards:
            raise AlreadyExists(self.game_id, player)
        board = self.factory(seed, player)
        caught_up = []
        for number in self._drawn:
            caught_up.extend(board.mark_number(number))
        return board, sorted(caught_up)

    def add(self, board: Board) -> Board:
        if board.player in self._boards:
            raise AlreadyExists(self.game_id, board.player)
        self._boards[board.player] = board
        return board

    def generate(self, seed: bytes, player: str) -> Board:
        """Create and register the board for ``player``. Create-only."""
        board, _ = self.build(seed, player)
        return self.add(board)

    def mark_all(self, number: int) -> dict[str, list[Cell]]:
        """
        Apply one draw to every board.

        Same contract as mark() with the drawn set shared by the whole
        game: returns newly marked cells per player, empty when the
        number had already been drawn.
        """
        if number in self._drawn:
            return {}
        self._drawn.add(number)
        return {
            player: board.mark_number(number)
            for player, board in self._boards.items()
        }

    def check(self, player: str) -> bool:
        return check(self.get(player))

    def get(self, player: str) -> Board:
        board = self._boards.get(player)
        if board is None:
            raise BoardNotFound(self.game_id, player)
        return board

    def has_board(self, player: str) -> bool:
        return player in self._boards

    def is_drawn(self, number: int) -> bool:
        return number in self._drawn

    @property
    def drawn(self) -> frozenset[int]:
        return frozenset(self._drawn)

    def players(self) -> list[str]:
        return list(self._boards)

    def clear(self):
        self._boards.clear()
        self._drawn.clear()
