from __future__ import annotations

import json
import os
import subprocess
import sys
from pathlib import Path

import pytest

from tictactoe.cli import play_interactive

SRC = Path(__file__).resolve().parents[1] / "src"


def _run_cli(args: list[str], cwd: Path, stdin: str | None = None) -> subprocess.CompletedProcess:
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join(p for p in [str(SRC), env.get("PYTHONPATH", "")] if p)
    exe = [sys.executable, "-m", "tictactoe.cli"]
    return subprocess.run(exe + args, cwd=cwd, capture_output=True, text=True, input=stdin, env=env)


def test_cli_classify(tmp_path: Path):
    r = _run_cli(["classify", "--board", "111220000"], cwd=tmp_path)
    assert r.returncode == 0
    assert "outcome=win:X" in r.stdout + r.stderr
    r = _run_cli(["classify", "--board", "121122211"], cwd=tmp_path)
    assert "outcome=draw" in r.stdout + r.stderr


def test_cli_solve(tmp_path: Path):
    r = _run_cli(["solve", "--board", "110220000"], cwd=tmp_path)
    assert r.returncode == 0
    s = r.stdout + r.stderr
    assert "to_move=X" in s and "best=2" in s and "values=" in s
    # unreachable piece counts need an explicit side
    r = _run_cli(["solve", "--board", "000220000"], cwd=tmp_path)
    assert r.returncode == 2
    r = _run_cli(["solve", "--board", "000220000", "--as", "X"], cwd=tmp_path)
    assert r.returncode == 0
    assert "best=5" in r.stdout + r.stderr


@pytest.mark.parametrize("bad", ["abc", "0123456789", "12345678z", "111220000", "121122211"])
def test_cli_solve_rejects_bad_or_decided_boards(tmp_path: Path, bad: str):
    r = _run_cli(["solve", "--board", bad], cwd=tmp_path)
    assert r.returncode == 2


def test_cli_solve_stdin(tmp_path: Path):
    r = _run_cli(["solve", "--stdin"], cwd=tmp_path, stdin="110220000\ngarbage\n111220000\n\n")
    assert r.returncode == 0
    lines = r.stdout.strip().splitlines()
    assert lines == ["board,to_move,best_move,value", "110220000,X,2,10"]


def test_cli_play_two_humans(tmp_path: Path):
    r = _run_cli(["play", "--mode", "human"], cwd=tmp_path, stdin="1\n4\n2\n5\n3\nn\n")
    assert r.returncode == 0
    assert "Game over: X wins!" in r.stdout
    assert "X: 1  |  Draws: 0  |  O: 0" in r.stdout


def test_cli_play_against_ai_then_quit(tmp_path: Path):
    r = _run_cli(["play", "--symbol", "X"], cwd=tmp_path, stdin="1\nq\n")
    assert r.returncode == 0
    # the only non-losing reply to a corner is the centre
    assert "AI plays 5" in r.stdout
    assert "Quitting." in r.stdout


def test_cli_arena_export(tmp_path: Path):
    out = tmp_path / "arena"
    r = _run_cli(
        ["--seed", "5", "arena", "--x", "random", "--o", "minimax", "--games", "3", "--out", str(out)],
        cwd=tmp_path,
    )
    assert r.returncode == 0, r.stderr
    assert "X: 0  |" in r.stdout + r.stderr
    assert (out / "arena_games.csv").exists()
    manifest = json.loads((out / "manifest.json").read_text())
    assert manifest["row_count"] == 3
    assert manifest["scoreboard"]["x_wins"] == 0


def test_play_interactive_replays_and_tallies():
    lines = iter(["1", "4", "2", "5", "3", "y", "5", "1", "9", "3", "2", "8", "7", "6", "4", "n"])
    out = []
    score = play_interactive("human", "X", lambda prompt: next(lines), out.append)
    assert score.as_dict() == {"x_wins": 1, "o_wins": 0, "draws": 1}
    assert "Game over: It's a draw!" in out
    assert out[-1] == "X: 1  |  Draws: 1  |  O: 0"


def test_cli_solve_stdin_with_forced_side(tmp_path: Path):
    r = _run_cli(["solve", "--stdin", "--as", "X"], cwd=tmp_path, stdin="000220000\n110220000\n111220000\n")
    assert r.returncode == 0
    lines = r.stdout.strip().splitlines()
    assert lines == [
        "board,to_move,best_move,value",
        "000220000,X,5,-7",
        "110220000,X,2,10",
    ]
