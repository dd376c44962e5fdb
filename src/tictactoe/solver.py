"""
Exact game-theoretic solver (plain minimax over the full game tree).

Scores are from the searching player's perspective:
- A win reached at ply depth d scores 10 - d, a loss scores -10 + d, a draw 0.
- So among wins the fastest is preferred, and among losses the slowest.
- Top-level ties are broken by the lowest cell index.

No pruning and no memoization: the tree is small enough that every call
searches it exhaustively. Boards are immutable tuples, so a call never
touches the caller's board and concurrent calls share nothing.
"""
from __future__ import annotations

from typing import List, Optional, Sequence

from .game_basics import Board, Mark, Status, apply_move, as_board, classify, legal_moves

WIN_SCORE = 10


class NoLegalMove(ValueError):
    """Raised when a move is requested for a board with no empty cell."""


def _check_marks(self_mark: Mark, opponent_mark: Mark) -> None:
    if Mark(self_mark).is_empty or Mark(opponent_mark).is_empty:
        raise ValueError("Player marks must be non-empty")
    if self_mark == opponent_mark:
        raise ValueError("Player marks must be distinct")


def terminal_score(board: Board, depth: int, self_mark: Mark, opponent_mark: Mark) -> Optional[int]:
    """Depth-adjusted score of a terminal board, or None if the game goes on."""
    outcome = classify(board)
    if outcome.status is Status.WIN:
        if outcome.winner == self_mark:
            return WIN_SCORE - depth
        return -WIN_SCORE + depth
    if outcome.status is Status.DRAW:
        return 0
    return None


def evaluate(board: Board, depth: int, maximizing: bool, self_mark: Mark, opponent_mark: Mark) -> int:
    score = terminal_score(board, depth, self_mark, opponent_mark)
    if score is not None:
        return score
    to_move = self_mark if maximizing else opponent_mark
    values = [
        evaluate(apply_move(board, mv, to_move), depth + 1, not maximizing, self_mark, opponent_mark)
        for mv in legal_moves(board)
    ]
    return max(values) if maximizing else min(values)


def move_values(board: Sequence, self_mark: Mark, opponent_mark: Mark) -> List[Optional[int]]:
    """Minimax value of playing each cell now; None for occupied cells."""
    _check_marks(self_mark, opponent_mark)
    board_t = as_board(board)
    values: List[Optional[int]] = [None] * 9
    for mv in legal_moves(board_t):
        child = apply_move(board_t, mv, self_mark)
        values[mv] = evaluate(child, 0, False, self_mark, opponent_mark)
    return values


def pick_best(values: Sequence[Optional[int]]) -> int:
    """First index holding the strictly greatest value, skipping None."""
    best: Optional[int] = None
    for mv, val in enumerate(values):
        if val is None:
            continue
        if best is None or val > values[best]:
            best = mv
    if best is None:
        raise NoLegalMove("No empty cell left on the board")
    return best


def best_move(board: Sequence, self_mark: Mark, opponent_mark: Mark) -> int:
    """Index of an optimal move for ``self_mark``, which moves now.

    Raises NoLegalMove when the board has no empty cell. Callers are
    expected to check ``classify(board)`` first; this is a guard.
    """
    return pick_best(move_values(board, self_mark, opponent_mark))
