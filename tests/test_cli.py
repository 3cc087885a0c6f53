from __future__ import annotations

from pathlib import Path

import flask
import pytest
from typer.testing import CliRunner

from perfdash.cli import app

runner = CliRunner()


def test_list_jobs(two_run_workload: Path, results_root: Path) -> None:
    result = runner.invoke(app, ["list-jobs", "--results-dir", str(results_root)])
    assert result.exit_code == 0, result.output
    assert "density" in result.output
    assert "cluster-density (2 runs)" in result.output


def test_list_jobs_missing_dir(tmp_path: Path) -> None:
    result = runner.invoke(app, ["list-jobs", "--results-dir", str(tmp_path / "missing")])
    assert result.exit_code == 1


def test_export(two_run_workload: Path, results_root: Path, tmp_path: Path) -> None:
    out = tmp_path / "export"
    result = runner.invoke(
        app,
        ["export", "density", "cluster-density", "--results-dir", str(results_root), "--out", str(out), "--no-png"],
    )
    assert result.exit_code == 0, result.output
    assert (out / "density_cluster-density.csv").is_file()
    assert not list(out.glob("*.png"))


def test_export_unknown_workload(results_root: Path, tmp_path: Path) -> None:
    result = runner.invoke(
        app, ["export", "density", "nope", "--results-dir", str(results_root), "--out", str(tmp_path)]
    )
    assert result.exit_code == 1


def test_serve_bind_failure_exits_nonzero(results_root: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    calls = {}

    def _run(self, host=None, port=None, **kwargs):
        calls["addr"] = (host, port, kwargs.get("threaded"))
        raise OSError(98, "Address already in use")

    monkeypatch.setattr(flask.Flask, "run", _run)
    result = runner.invoke(app, ["serve", "--results-dir", str(results_root), "--port", "9191"])

    assert calls["addr"] == ("0.0.0.0", 9191, True)
    assert result.exit_code == 1


def test_serve_rejects_bad_config(tmp_path: Path) -> None:
    cfg = tmp_path / "perfdash.toml"
    cfg.write_text("port = 'nope'\n")
    result = runner.invoke(app, ["serve", "--config", str(cfg)])
    assert result.exit_code == 2


def test_top_level_flags_serve(results_root: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    calls = {}

    def _run(self, host=None, port=None, **kwargs):
        calls["addr"] = (host, port)

    monkeypatch.setattr(flask.Flask, "run", _run)
    result = runner.invoke(app, ["--results-dir", str(results_root), "--port", "9191"])

    assert result.exit_code == 0, result.output
    assert calls["addr"] == ("0.0.0.0", 9191)


def test_no_arguments_serves_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    calls = {}

    def _run(self, host=None, port=None, **kwargs):
        calls["addr"] = (host, port)

    monkeypatch.setattr(flask.Flask, "run", _run)
    monkeypatch.delenv("PERFDASH_PORT", raising=False)
    monkeypatch.delenv("PERFDASH_HOST", raising=False)
    result = runner.invoke(app, [])

    assert result.exit_code == 0, result.output
    assert calls["addr"] == ("0.0.0.0", 8080)
