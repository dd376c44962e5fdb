"""
Game sessions: turn sequencing, move validation and score bookkeeping.

The solver never sees an illegal or finished board from here: moves are
requested only while ``classify`` reports the game as ongoing.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from .game_basics import (
    ONGOING,
    Board,
    Mark,
    Outcome,
    Status,
    classify,
    create_empty,
)

logger = logging.getLogger(__name__)


class IllegalMove(ValueError):
    """A move that breaks the rules of the game."""


class Game:
    def __init__(self, first: Mark = Mark.X):
        self.board: List[Mark] = list(create_empty())
        self.turn = Mark(first)
        self.moves: List[Tuple[Mark, int]] = []

    def snapshot(self) -> Board:
        return tuple(self.board)

    @property
    def outcome(self) -> Outcome:
        return classify(self.snapshot())

    @property
    def is_over(self) -> bool:
        return self.outcome.is_terminal

    def play(self, idx) -> None:
        if self.is_over:
            raise IllegalMove("The game is already over")
        if isinstance(idx, bool) or not isinstance(idx, int) or not 0 <= idx < 9:
            raise IllegalMove(f"Move out of range: {idx!r}")
        if self.board[idx] != Mark.EMPTY:
            raise IllegalMove(f"Cell {idx} is already occupied")
        self.board[idx] = self.turn
        self.moves.append((self.turn, idx))
        self.turn = self.turn.opponent


@dataclass
class Scoreboard:
    x_wins: int = 0
    o_wins: int = 0
    draws: int = 0

    def record(self, outcome: Outcome) -> None:
        if outcome.status is Status.DRAW:
            self.draws += 1
        elif outcome.status is Status.WIN and outcome.winner == Mark.X:
            self.x_wins += 1
        elif outcome.status is Status.WIN and outcome.winner == Mark.O:
            self.o_wins += 1
        else:
            raise ValueError(f"Cannot score an unfinished game: {outcome}")

    @property
    def total(self) -> int:
        return self.x_wins + self.o_wins + self.draws

    def as_dict(self) -> Dict[str, int]:
        return {"x_wins": self.x_wins, "o_wins": self.o_wins, "draws": self.draws}

    def __str__(self) -> str:
        return f"X: {self.x_wins}  |  Draws: {self.draws}  |  O: {self.o_wins}"


@dataclass
class GameRecord:
    moves: List[Tuple[Mark, int]] = field(default_factory=list)
    board: Board = field(default_factory=create_empty)
    outcome: Outcome = ONGOING
    x_name: str = ""
    o_name: str = ""


def play_game(x_player, o_player, on_move: Optional[Callable] = None) -> GameRecord:
    """Alternate the two providers from an empty board until the game ends."""
    if x_player.mark != Mark.X or o_player.mark != Mark.O:
        raise ValueError("Providers must play X and O respectively")
    game = Game()
    players = {Mark.X: x_player, Mark.O: o_player}
    while not game.is_over:
        mark = game.turn
        mv = players[mark].choose_move(game.snapshot())
        if mv is None:
            raise IllegalMove(f"{mark.symbol} produced no move")
        game.play(mv)
        logger.debug("%s plays %d", mark.symbol, mv)
        if on_move is not None:
            on_move(game, mark, mv)
    return GameRecord(
        moves=list(game.moves),
        board=game.snapshot(),
        outcome=game.outcome,
        x_name=getattr(x_player, "name", ""),
        o_name=getattr(o_player, "name", ""),
    )


def run_arena(first, second, games: int, swap_sides: bool = False) -> Tuple[Scoreboard, List[GameRecord]]:
    """Play a series. ``first`` starts as X; with ``swap_sides`` the providers
    exchange marks after every game."""
    if games < 0:
        raise ValueError("games must be >= 0")
    score = Scoreboard()
    records: List[GameRecord] = []
    x_player, o_player = first, second
    x_player.mark, o_player.mark = Mark.X, Mark.O
    for i in range(games):
        rec = play_game(x_player, o_player)
        score.record(rec.outcome)
        records.append(rec)
        logger.debug("game %d: %s (%s)", i + 1, rec.outcome, score)
        if swap_sides:
            x_player, o_player = o_player, x_player
            x_player.mark, o_player.mark = Mark.X, Mark.O
    logger.info("Arena finished after %d games: %s", games, score)
    return score, records
