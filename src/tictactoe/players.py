"""
Move providers: anything that picks a cell for one mark.

Each provider exposes ``mark`` and ``choose_move(board) -> Optional[int]``.
The session treats ``None`` as "no move"; FallbackPlayer wraps providers
that may answer with nothing or with garbage (e.g. a remote model) and
substitutes the solver's move.
"""
from __future__ import annotations

import logging
from typing import Callable, Optional

import numpy as np

from .game_basics import Board, Mark, legal_moves
from .solver import best_move

logger = logging.getLogger(__name__)


class QuitGame(Exception):
    """The human asked to leave the game."""


class ProviderError(RuntimeError):
    """A move provider failed to produce an answer."""


class MinimaxPlayer:
    name = "minimax"

    def __init__(self, mark: Mark):
        self.mark = Mark(mark)

    def choose_move(self, board: Board) -> Optional[int]:
        return best_move(board, self.mark, self.mark.opponent)


class RandomPlayer:
    name = "random"

    def __init__(self, mark: Mark, seed: Optional[int] = None):
        self.mark = Mark(mark)
        self.rng = np.random.default_rng(seed)

    def choose_move(self, board: Board) -> Optional[int]:
        moves = legal_moves(board)
        if not moves:
            return None
        return int(self.rng.choice(moves))


class HumanPlayer:
    name = "human"

    def __init__(
        self,
        mark: Mark,
        input_fn: Callable[[str], str] = input,
        output_fn: Callable[[str], None] = print,
    ):
        self.mark = Mark(mark)
        self.input_fn = input_fn
        self.output_fn = output_fn

    def choose_move(self, board: Board) -> Optional[int]:
        while True:
            try:
                line = self.input_fn("Enter position (1-9) or Q to quit: ")
            except EOFError:
                raise QuitGame("No input") from None
            raw = line.strip()
            if raw[:1] in ("q", "Q"):
                raise QuitGame("Quit requested")
            try:
                pos = int(raw)
            except ValueError:
                self.output_fn("Invalid input, please enter a number 1-9.")
                continue
            if pos < 1 or pos > 9:
                self.output_fn("Invalid input, please enter a number 1-9.")
                continue
            if board[pos - 1] != Mark.EMPTY:
                self.output_fn("Cell already occupied, try again.")
                continue
            return pos - 1


class FallbackPlayer:
    """Use ``primary`` when it gives a legal move, otherwise ``fallback``.

    The fallback defaults to the minimax solver for the same mark.
    """

    def __init__(self, primary, fallback=None):
        self.primary = primary
        self.fallback = fallback if fallback is not None else MinimaxPlayer(primary.mark)
        if self.fallback.mark != primary.mark:
            raise ValueError("Fallback provider must play the same mark")
        self.name = f"{getattr(primary, 'name', 'provider')}+fallback"
        self.fallbacks_used = 0

    @property
    def mark(self) -> Mark:
        return self.primary.mark

    @mark.setter
    def mark(self, value: Mark) -> None:
        self.primary.mark = Mark(value)
        self.fallback.mark = Mark(value)

    def choose_move(self, board: Board) -> Optional[int]:
        try:
            mv = self.primary.choose_move(board)
        except ProviderError as e:
            logger.warning("Move provider failed (%s); using fallback", e)
            mv = None
        if _is_legal(board, mv):
            return int(mv)
        if mv is not None:
            logger.warning("Move provider returned illegal move %r; using fallback", mv)
        self.fallbacks_used += 1
        return self.fallback.choose_move(board)


def _is_legal(board: Board, mv) -> bool:
    if isinstance(mv, bool) or not isinstance(mv, (int, np.integer)):
        return False
    return 0 <= mv < 9 and board[mv] == Mark.EMPTY


PLAYER_KINDS = ("minimax", "random")


def make_player(kind: str, mark: Mark, seed: Optional[int] = None):
    if kind == "minimax":
        return MinimaxPlayer(mark)
    if kind == "random":
        return RandomPlayer(mark, seed=seed)
    raise ValueError(f"Unknown player kind: {kind}")
