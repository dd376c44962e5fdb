"""
Export of arena game records.

Writes one row per game (CSV by default, Parquet through pandas+pyarrow on
request) plus a manifest.json with run metadata and checksums.
"""
from __future__ import annotations

import csv
import hashlib
import importlib.util
import json
import logging
import sys
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List

from .game_basics import Status, serialize_board
from .paths import get_git_commit, get_git_is_dirty
from .session import GameRecord, Scoreboard

logger = logging.getLogger(__name__)

RECORDS_VERSION = "1.0.0"
CSV_NAME = "arena_games.csv"
PARQUET_NAME = "arena_games.parquet"
COLUMNS = sorted(["game", "x_player", "o_player", "moves", "plies", "final_board", "winner"])


@dataclass
class ExportArgs:
    out: Path
    format: str = "csv"  # one of: "csv", "parquet", "both"
    cli_argv: List[str] | None = None


def game_rows(records: List[GameRecord]) -> List[Dict[str, Any]]:
    rows: List[Dict[str, Any]] = []
    for i, rec in enumerate(records, start=1):
        if rec.outcome.status is Status.WIN:
            winner = rec.outcome.winner.symbol
        elif rec.outcome.status is Status.DRAW:
            winner = "draw"
        else:
            winner = ""
        rows.append({
            "game": i,
            "x_player": rec.x_name,
            "o_player": rec.o_name,
            "moves": " ".join(str(idx) for _, idx in rec.moves),
            "plies": len(rec.moves),
            "final_board": serialize_board(rec.board),
            "winner": winner,
        })
    return rows


def _schema_hash() -> str:
    return hashlib.sha256("\n".join(COLUMNS).encode("utf-8")).hexdigest()


def _sha256_file(path: Path) -> str:
    h = hashlib.sha256()
    with path.open('rb') as f:
        for chunk in iter(lambda: f.read(8192), b''):
            h.update(chunk)
    return h.hexdigest()


def _write_csv(path: Path, rows: List[Dict[str, Any]]) -> None:
    with path.open('w', newline='') as f:
        w = csv.DictWriter(f, fieldnames=COLUMNS)
        w.writeheader()
        for r in sorted(rows, key=lambda r: r["game"]):
            w.writerow(r)


def _have_parquet_deps() -> bool:
    return (importlib.util.find_spec("pandas") is not None
            and importlib.util.find_spec("pyarrow") is not None)


def _package_versions() -> Dict[str, str]:
    versions: Dict[str, str] = {}
    for pkg in ["numpy", "pandas", "pyarrow"]:
        if importlib.util.find_spec(pkg) is None:
            continue
        mod = __import__(pkg)
        ver = getattr(mod, "__version__", None)
        if ver:
            versions[pkg] = ver
    return versions


def run_export(records: List[GameRecord], score: Scoreboard, args: ExportArgs) -> Path:
    fmt = (args.format or "csv").lower()
    if fmt not in {"csv", "parquet", "both"}:
        raise ValueError(f"Unknown export format: {args.format}")

    want_parquet = fmt in {"parquet", "both"}
    have_parquet = _have_parquet_deps()
    if want_parquet and not have_parquet:
        msg = ("Parquet dependencies not available (install pandas and pyarrow). "
               "Use pip install .[parquet] to enable parquet support.")
        if fmt == "parquet":
            raise RuntimeError(msg)
        logger.warning("%s Proceeding with CSV only.", msg)

    args.out.mkdir(parents=True, exist_ok=True)
    rows = game_rows(records)
    files: Dict[str, str] = {}

    if fmt in {"csv", "both"}:
        csv_path = args.out / CSV_NAME
        _write_csv(csv_path, rows)
        files[CSV_NAME] = _sha256_file(csv_path)
        logger.info("Wrote %s (%d rows)", csv_path, len(rows))

    if want_parquet and have_parquet:
        import pandas as pd  # type: ignore

        pq_path = args.out / PARQUET_NAME
        df = pd.DataFrame(rows, columns=COLUMNS)
        df.to_parquet(pq_path)
        files[PARQUET_NAME] = _sha256_file(pq_path)
        logger.info("Wrote %s", pq_path)

    manifest = {
        "records_version": RECORDS_VERSION,
        "created_at": datetime.now(timezone.utc).isoformat(),
        "git_commit": get_git_commit(),
        "git_dirty": get_git_is_dirty(),
        "python_version": sys.version.split(" ")[0],
        "packages": _package_versions(),
        "cli_argv": args.cli_argv,
        "format": fmt,
        "row_count": len(rows),
        "schema_hash": _schema_hash(),
        "scoreboard": score.as_dict(),
        "files": files,
    }
    (args.out / "manifest.json").write_text(json.dumps(manifest, indent=2, sort_keys=True))
    logger.info("Wrote manifest.json to %s", args.out)
    return args.out
