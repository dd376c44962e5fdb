from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Callable, Optional

from .game_basics import (
    Mark,
    classify,
    current_player,
    format_board,
    is_valid_state,
    parse_board,
    serialize_board,
)
from .paths import default_seed, results_dir
from .players import PLAYER_KINDS, HumanPlayer, MinimaxPlayer, QuitGame, make_player
from .records import ExportArgs, run_export
from .session import Scoreboard, play_game, run_arena
from .solver import move_values, pick_best
from .tracking import log_artifact, log_params, log_scoreboard, maybe_mlflow_run

INDEX_MAP = " 1 | 2 | 3\n---+---+---\n 4 | 5 | 6\n---+---+---\n 7 | 8 | 9"


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="ttt", description="Tic-tac-toe with a perfect-play AI")
    sub = p.add_subparsers(dest="cmd")
    p.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    p.add_argument("--version", action="store_true", help="Print version and exit")
    p.add_argument(
        "--info",
        action="store_true",
        help="Print environment and dependency info and exit",
    )
    p.add_argument(
        "--seed", type=int, default=None, help="Seed for random players (default: $TTT_SEED)"
    )

    p_play = sub.add_parser("play", help="Play interactively in the terminal")
    p_play.add_argument(
        "--mode",
        choices=["ai", "human"],
        default="ai",
        help="ai: you against the AI (default); human: two players at one keyboard",
    )
    p_play.add_argument(
        "--symbol",
        choices=["X", "O", "x", "o"],
        default="X",
        help="Your symbol in ai mode; X always moves first (default: X)",
    )

    p_cls = sub.add_parser("classify", help="Report the outcome of a board")
    p_cls.add_argument("--board", required=True, help="Board string, e.g., 100020000 or X...O....")

    p_sol = sub.add_parser("solve", help="Best move for the side to move")
    p_sol.add_argument("--board", help="Board string, e.g., 100020000 (omit with --stdin)")
    p_sol.add_argument(
        "--as",
        dest="as_mark",
        choices=["X", "O", "x", "o"],
        default=None,
        help="Solve for this mark instead of the inferred side to move",
    )
    p_sol.add_argument(
        "--stdin", action="store_true", help="Read many boards from stdin and stream CSV output"
    )

    p_arena = sub.add_parser("arena", help="Play a series of AI games and tally the score")
    p_arena.add_argument("--x", choices=PLAYER_KINDS, default="minimax", help="Provider playing X")
    p_arena.add_argument("--o", choices=PLAYER_KINDS, default="random", help="Provider playing O")
    p_arena.add_argument("--games", type=int, default=10, help="Number of games (default: 10)")
    p_arena.add_argument(
        "--swap", action="store_true", help="Swap sides after every game"
    )
    p_arena.add_argument(
        "--out",
        type=Path,
        default=None,
        help="Export game records to this directory ('-' for $TTT_RESULTS_DIR)",
    )
    p_arena.add_argument(
        "--format",
        choices=["csv", "parquet", "both"],
        default="csv",
        help="Export format: csv (default), parquet, both",
    )
    p_arena.add_argument(
        "--tracking",
        choices=["none", "mlflow"],
        default="none",
        help="Experiment tracking backend",
    )
    p_arena.add_argument(
        "--log-dir",
        type=Path,
        default=Path("runs"),
        help="Directory for tracking logs (for mlflow local backend)",
    )

    return p


def _print_info() -> None:
    import importlib.util
    import platform
    import sys

    print(f"python={sys.version.split()[0]} platform={platform.platform()}")
    for pkg in ["numpy", "pandas", "pyarrow", "mlflow"]:
        spec = importlib.util.find_spec(pkg)
        if spec is None:
            print(f"{pkg}=<not installed>")
        else:
            mod = __import__(pkg)
            ver = getattr(mod, "__version__", "?")
            print(f"{pkg}={ver}")


def play_interactive(
    mode: str,
    symbol: str,
    input_fn: Callable[[str], str] = input,
    output_fn: Callable[[str], None] = print,
) -> Scoreboard:
    human = Mark.from_symbol(symbol)
    score = Scoreboard()
    output_fn("Tic-Tac-Toe. X goes first.")
    output_fn("Positions:\n" + INDEX_MAP + "\n")
    while True:
        if mode == "human":
            x_player = HumanPlayer(Mark.X, input_fn, output_fn)
            o_player = HumanPlayer(Mark.O, input_fn, output_fn)
            ai_mark: Optional[Mark] = None
        else:
            you = HumanPlayer(human, input_fn, output_fn)
            ai = MinimaxPlayer(human.opponent)
            ai_mark = ai.mark
            x_player, o_player = (you, ai) if human is Mark.X else (ai, you)

        def show(game, mark, idx):
            if mark == ai_mark:
                output_fn(f"AI plays {idx + 1}")
            output_fn(format_board(game.snapshot()) + "\n")

        try:
            rec = play_game(x_player, o_player, on_move=show)
        except QuitGame:
            output_fn("Quitting.")
            break
        score.record(rec.outcome)
        if rec.outcome.winner is None:
            output_fn("Game over: It's a draw!")
        elif ai_mark is not None and rec.outcome.winner == ai_mark:
            output_fn("Game over: AI wins!")
        else:
            output_fn(f"Game over: {rec.outcome.winner.symbol} wins!")
        output_fn(str(score))
        try:
            again = input_fn("Play again? [y/N]: ")
        except EOFError:
            break
        if not again.strip().lower().startswith("y"):
            break
    return score


def _read_board(raw: str):
    """Parse a board string; log and return None when malformed."""
    try:
        return parse_board(raw)
    except ValueError as e:
        logging.error("Invalid board string (%s). Must be 9 chars of 0/1/2 or X/O/-.", e)
        return None


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    ns = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if getattr(ns, "verbose", False) else logging.INFO,
                        format="[%(levelname)s] %(message)s")

    if getattr(ns, "version", False):
        from importlib.metadata import PackageNotFoundError, version as _ver

        try:
            print(_ver("tictactoe"))
        except PackageNotFoundError:
            print("unknown")
        return 0
    if getattr(ns, "info", False):
        _print_info()
        return 0

    if ns.cmd == "play":
        play_interactive(ns.mode, ns.symbol)
        return 0

    if ns.cmd == "classify":
        b = _read_board(ns.board)
        if b is None:
            return 2
        logging.info("outcome=%s", classify(b))
        return 0

    if ns.cmd == "solve":
        if ns.stdin:
            import csv as _csv
            import sys as _sys

            w = _csv.writer(_sys.stdout)
            w.writerow(["board", "to_move", "best_move", "value"])
            for line in _sys.stdin:
                raw = line.rstrip("\r\n")
                if not raw.strip():
                    continue
                try:
                    b = parse_board(raw)
                except ValueError:
                    continue
                if classify(b).is_terminal:
                    continue
                if ns.as_mark is not None:
                    me = Mark.from_symbol(ns.as_mark)
                elif is_valid_state(b):
                    me = current_player(b)
                else:
                    continue
                values = move_values(b, me, me.opponent)
                best = pick_best(values)
                w.writerow([serialize_board(b), me.symbol, best, values[best]])
            return 0

        b = _read_board(ns.board or "")
        if b is None:
            return 2
        if ns.as_mark is not None:
            me = Mark.from_symbol(ns.as_mark)
        else:
            if not is_valid_state(b):
                logging.error("Board is not a valid reachable state (use --as to force a side).")
                return 2
            me = current_player(b)
        outcome = classify(b)
        if outcome.is_terminal:
            logging.error("Board is already decided: %s", outcome)
            return 2
        values = move_values(b, me, me.opponent)
        best = pick_best(values)
        logging.info("to_move=%s best=%d values=%s", me.symbol, best, values)
        return 0

    if ns.cmd == "arena":
        if ns.games < 0:
            logging.error("--games must be >= 0")
            return 2
        seed = ns.seed if ns.seed is not None else default_seed()
        first = make_player(ns.x, Mark.X, seed=seed)
        second = make_player(ns.o, Mark.O, seed=None if seed is None else seed + 1)
        with maybe_mlflow_run(ns.tracking == "mlflow", run_name="arena", log_dir=ns.log_dir) as tracked:
            if tracked:
                log_params({"x": ns.x, "o": ns.o, "games": ns.games, "swap": ns.swap, "seed": seed})
            score, records = run_arena(first, second, ns.games, swap_sides=ns.swap)
            logging.info("%s", score)
            if tracked:
                log_scoreboard(score.as_dict())
            if ns.out is not None:
                out = results_dir() if str(ns.out) == "-" else ns.out
                try:
                    run_export(records, score, ExportArgs(
                        out=out,
                        format=ns.format,
                        cli_argv=list(argv) if argv is not None else None,
                    ))
                except RuntimeError as e:
                    logging.error("%s", e)
                    return 2
                logging.info("Exported game records to: %s", out)
                if tracked:
                    log_artifact(out / "manifest.json")
        return 0

    parser.print_help()
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
