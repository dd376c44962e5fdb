"""Environment-first configuration: output locations, default seed, git metadata.

Works when installed as a package or executed from arbitrary CWDs.
"""

from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path

logger = logging.getLogger(__name__)


def _find_git_root(start: Path) -> Path | None:
    cur = start
    for _ in range(5):
        if (cur / ".git").exists():
            return cur
        if cur.parent == cur:
            break
        cur = cur.parent
    return None


def repo_root() -> Path:
    """Best-effort repository root.

    Order: env var TTT_REPO_ROOT -> nearest parent containing .git -> CWD.
    """
    env = os.getenv("TTT_REPO_ROOT")
    if env:
        return Path(env)
    git_root = _find_git_root(Path(__file__).resolve())
    if git_root is not None:
        return git_root
    return Path.cwd()


def results_dir() -> Path:
    p = os.getenv("TTT_RESULTS_DIR")
    return Path(p) if p else repo_root() / "results"


def default_seed() -> int | None:
    raw = os.getenv("TTT_SEED")
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring non-integer TTT_SEED=%r", raw)
        return None


def get_git_commit() -> str | None:
    """Return the current git commit hash, or None outside a repository."""
    root = repo_root()
    try:
        out = subprocess.check_output(
            ["git", "-C", str(root), "rev-parse", "HEAD"],
            stderr=subprocess.DEVNULL,
            text=True,
            timeout=2.0,
        )
        return out.strip() or None
    except (OSError, subprocess.SubprocessError):
        return None


def get_git_is_dirty() -> bool | None:
    """True if there are uncommitted changes, False if clean, None if unknown."""
    root = repo_root()
    try:
        out = subprocess.check_output(
            ["git", "-C", str(root), "status", "--porcelain"],
            stderr=subprocess.DEVNULL,
            text=True,
            timeout=2.0,
        )
        return len(out.strip()) > 0
    except (OSError, subprocess.SubprocessError):
        return None
