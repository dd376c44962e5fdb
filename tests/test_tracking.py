import logging

import pytest

import tictactoe.tracking as T


def test_disabled_run_yields_false():
    with T.maybe_mlflow_run(False, run_name="arena") as tracked:
        assert tracked is False


def test_missing_mlflow_degrades_with_warning(monkeypatch, caplog):
    monkeypatch.setattr(T, "_mlflow", lambda: None)
    with caplog.at_level(logging.WARNING):
        with T.maybe_mlflow_run(True, run_name="arena") as tracked:
            assert tracked is False
            T.log_params({"games": 1})
            T.log_scoreboard({"x_wins": 1, "o_wins": 0, "draws": 0})
    assert "mlflow is not installed" in caplog.text


def test_scoreboard_metrics_sent_to_backend(monkeypatch):
    logged = {}

    class FakeMlflow:
        @staticmethod
        def log_metrics(metrics):
            logged.update(metrics)

    monkeypatch.setattr(T, "_mlflow", lambda: FakeMlflow)
    T.log_scoreboard({"x_wins": 1, "o_wins": 0, "draws": 3})
    assert logged == {"x_wins": 1.0, "o_wins": 0.0, "draws": 3.0, "draw_rate": 0.75}


class _BrokenMlflow:
    def __init__(self, fail_on):
        self.fail_on = fail_on

    def set_tracking_uri(self, uri):
        if self.fail_on == "uri":
            raise RuntimeError("tracking server unreachable")

    def start_run(self, run_name=None):
        if self.fail_on == "start":
            raise RuntimeError("tracking server unreachable")
        return _Run()


class _Run:
    exited = False

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        _Run.exited = True
        return False


@pytest.mark.parametrize("fail_on", ["uri", "start"])
def test_backend_failure_degrades_with_warning(monkeypatch, caplog, tmp_path, fail_on):
    monkeypatch.setattr(T, "_mlflow", lambda: _BrokenMlflow(fail_on))
    with caplog.at_level(logging.WARNING):
        with T.maybe_mlflow_run(True, run_name="arena", log_dir=tmp_path) as tracked:
            assert tracked is False
    assert "tracking server unreachable" in caplog.text


def test_errors_inside_run_propagate(monkeypatch, tmp_path):
    monkeypatch.setattr(T, "_mlflow", lambda: _BrokenMlflow(None))
    _Run.exited = False
    with pytest.raises(KeyError):
        with T.maybe_mlflow_run(True, run_name="arena", log_dir=tmp_path) as tracked:
            assert tracked is True
            raise KeyError("boom")
    assert _Run.exited
