"""
Game basics: marks, board representation, serialization, classification, validity.
Teaching notes:
- A board is a tuple of 9 marks, row-major (index = row*3 + col).
- Marks encode as 0=empty, 1=X, 2=O so boards serialize to 9-digit strings.
- X always starts. A "ply" is a half-move (one player's turn).
- The outcome of a board is derived, never stored.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

WIN_PATTERNS = [
    (0, 1, 2), (3, 4, 5), (6, 7, 8),  # rows
    (0, 3, 6), (1, 4, 7), (2, 5, 8),  # cols
    (0, 4, 8), (2, 4, 6),             # diags
]


class Mark(enum.IntEnum):
    EMPTY = 0
    X = 1
    O = 2

    @property
    def is_empty(self) -> bool:
        return self is Mark.EMPTY

    @property
    def opponent(self) -> "Mark":
        if self is Mark.EMPTY:
            raise ValueError("EMPTY has no opponent")
        return Mark.O if self is Mark.X else Mark.X

    @property
    def symbol(self) -> str:
        return _SYMBOLS[self]

    @classmethod
    def from_symbol(cls, text: str) -> "Mark":
        """Parse 'X'/'O' (any case) or '1'/'2' into a player mark."""
        t = text.strip().upper()
        if t in ("X", "1"):
            return cls.X
        if t in ("O", "2"):
            return cls.O
        raise ValueError(f"Unknown mark: {text!r}")


_SYMBOLS = {Mark.EMPTY: " ", Mark.X: "X", Mark.O: "O"}

Board = Tuple[Mark, ...]


class Status(enum.Enum):
    ONGOING = "ongoing"
    WIN = "win"
    DRAW = "draw"


@dataclass(frozen=True)
class Outcome:
    status: Status
    winner: Optional[Mark] = None

    @classmethod
    def win(cls, mark: Mark) -> "Outcome":
        if mark is Mark.EMPTY:
            raise ValueError("A win needs a player mark")
        return cls(Status.WIN, mark)

    @property
    def is_terminal(self) -> bool:
        return self.status is not Status.ONGOING

    def __str__(self) -> str:
        if self.status is Status.WIN:
            return f"win:{self.winner.symbol}"
        return self.status.value


ONGOING = Outcome(Status.ONGOING)
DRAW = Outcome(Status.DRAW)


def create_empty() -> Board:
    return (Mark.EMPTY,) * 9


def as_board(cells: Iterable) -> Board:
    """Coerce a 9-cell sequence of marks or 0/1/2 ints into a Board."""
    try:
        board = tuple(Mark(int(c)) for c in cells)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid board cells: {e}") from e
    if len(board) != 9:
        raise ValueError(f"Board must have 9 cells, got {len(board)}")
    return board


def classify(board: Board) -> Outcome:
    for a, b, c in WIN_PATTERNS:
        v = board[a]
        if v != Mark.EMPTY and v == board[b] and v == board[c]:
            return Outcome.win(Mark(v))
    if Mark.EMPTY in board:
        return ONGOING
    return DRAW


def legal_moves(board: Board) -> List[int]:
    return [i for i, v in enumerate(board) if v == Mark.EMPTY]


def apply_move(board: Board, idx: int, mark: Mark) -> Board:
    lst = list(board)
    lst[idx] = mark
    return tuple(lst)


def serialize_board(board: Board) -> str:
    return ''.join(str(int(cell)) for cell in board)


_PARSE = {
    "0": Mark.EMPTY, "-": Mark.EMPTY, ".": Mark.EMPTY, "_": Mark.EMPTY, " ": Mark.EMPTY,
    "1": Mark.X, "X": Mark.X,
    "2": Mark.O, "O": Mark.O,
}


def parse_board(text: str) -> Board:
    """Parse a 9-char board, e.g. '100020000' or 'X...O....'."""
    raw = text.strip("\n\r")
    if len(raw) != 9:
        raise ValueError("Board string must be 9 chars")
    try:
        return tuple(_PARSE[c.upper()] for c in raw)
    except KeyError as e:
        raise ValueError(f"Invalid board character: {e.args[0]!r}") from None


def piece_counts(board: Board) -> Tuple[int, int]:
    return board.count(Mark.X), board.count(Mark.O)


def current_player(board: Board) -> Mark:
    x, o = piece_counts(board)
    return Mark.X if x == o else Mark.O


def is_valid_state(board: Board) -> bool:
    x_count, o_count = piece_counts(board)
    if not (x_count == o_count or x_count == o_count + 1):
        return False

    def count_wins(p: Mark) -> int:
        return sum(1 for pat in WIN_PATTERNS if all(board[i] == p for i in pat))

    x_wins, o_wins = count_wins(Mark.X), count_wins(Mark.O)
    if x_wins and o_wins:
        return False
    if x_wins and x_count != o_count + 1:
        return False
    if o_wins and x_count != o_count:
        return False
    return True


def format_board(board: Board) -> str:
    rows = []
    for r in range(3):
        rows.append("|".join(f" {Mark(c).symbol} " for c in board[r * 3:r * 3 + 3]))
    return "\n---+---+---\n".join(rows)
