"""tictactoe package.

Board model, exhaustive minimax solver, move providers, game sessions and a
terminal CLI.

Convenience imports are exposed for common workflows.
"""

from .game_basics import DRAW, ONGOING, Mark, Outcome, classify, create_empty
from .solver import NoLegalMove, best_move

__all__ = [
    "Mark",
    "Outcome",
    "ONGOING",
    "DRAW",
    "create_empty",
    "classify",
    "best_move",
    "NoLegalMove",
]
