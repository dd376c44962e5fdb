from pathlib import Path

from tictactoe.paths import default_seed, repo_root, results_dir


def test_repo_root_prefers_cwd_when_no_git_and_no_env(tmp_path: Path, monkeypatch):
    monkeypatch.delenv("TTT_REPO_ROOT", raising=False)
    monkeypatch.delenv("TTT_RESULTS_DIR", raising=False)
    monkeypatch.chdir(tmp_path)
    import tictactoe.paths as P

    monkeypatch.setattr(P, "_find_git_root", lambda start: None)

    assert repo_root() == tmp_path
    assert results_dir() == tmp_path / "results"


def test_env_overrides(tmp_path: Path, monkeypatch):
    monkeypatch.setenv("TTT_REPO_ROOT", str(tmp_path))
    monkeypatch.delenv("TTT_RESULTS_DIR", raising=False)
    assert repo_root() == tmp_path
    assert results_dir() == tmp_path / "results"
    monkeypatch.setenv("TTT_RESULTS_DIR", str(tmp_path / "elsewhere"))
    assert results_dir() == tmp_path / "elsewhere"


def test_default_seed(monkeypatch):
    monkeypatch.delenv("TTT_SEED", raising=False)
    assert default_seed() is None
    monkeypatch.setenv("TTT_SEED", "42")
    assert default_seed() == 42
    monkeypatch.setenv("TTT_SEED", "forty-two")
    assert default_seed() is None
