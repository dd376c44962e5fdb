"""
Experiment tracking for arena runs (optional MLflow backend).

MLflow is imported only when tracking is requested; when it is missing or
fails, the run continues untracked with a warning.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, Optional

logger = logging.getLogger(__name__)


def _mlflow():
    try:
        import mlflow  # type: ignore
    except ImportError:
        return None
    return mlflow


@contextmanager
def maybe_mlflow_run(enabled: bool, run_name: str, log_dir: Optional[Path] = None) -> Iterator[bool]:
    """Yield True inside an active MLflow run, False otherwise."""
    mlflow = _mlflow() if enabled else None
    if enabled and mlflow is None:
        logger.warning("mlflow is not installed; continuing without tracking")
    if mlflow is None:
        yield False
        return
    try:
        if log_dir is not None:
            mlflow.set_tracking_uri((log_dir.resolve() / "mlruns").as_uri())
        run = mlflow.start_run(run_name=run_name)
    except Exception as e:
        logger.warning("Could not start mlflow run (%s: %s); continuing without tracking",
                       type(e).__name__, e)
        yield False
        return
    with run:
        yield True


def log_params(params: Dict[str, object]) -> None:
    mlflow = _mlflow()
    if mlflow is not None:
        mlflow.log_params(params)


def log_scoreboard(score: Dict[str, int]) -> None:
    mlflow = _mlflow()
    if mlflow is None:
        return
    total = sum(score.values())
    metrics = {k: float(v) for k, v in score.items()}
    if total:
        metrics["draw_rate"] = score.get("draws", 0) / total
    mlflow.log_metrics(metrics)


def log_artifact(path: Path, artifact_path: Optional[str] = None) -> None:
    mlflow = _mlflow()
    if mlflow is not None:
        mlflow.log_artifact(str(path), artifact_path=artifact_path)
