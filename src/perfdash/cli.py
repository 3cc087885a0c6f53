from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from rich import print

from .data.aggregate import build_metric_groups
from .data.discovery import list_jobs as discover_jobs
from .data.exporters import check_stat, export_workload
from .data.loaders import load_runs
from .errors import AssetBundleError, ResultsDirError
from .log import install_tracebacks, setup_logging
from .settings import Settings, load_settings

logger = logging.getLogger(__name__)

app = typer.Typer(help="Browse performance test results in a web dashboard.")


def _settings(config: Optional[Path], **overrides) -> Settings:
    try:
        settings = load_settings(config, overrides)
    except (OSError, ValueError) as exc:
        print(f"[red]Invalid configuration: {exc}")
        raise typer.Exit(2)
    setup_logging(settings.log_level)
    return settings


@app.command()
def serve(
    results_dir: Optional[Path] = typer.Option(None, "--results-dir", help="Path to the directory holding results [default: results]"),
    port: Optional[int] = typer.Option(None, "--port", help="Port to listen on [default: 8080]"),
    host: Optional[str] = typer.Option(None, "--host", help="Interface to bind [default: 0.0.0.0]"),
    config: Optional[Path] = typer.Option(None, "--config", help="TOML or YAML config file"),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Log level [default: INFO]"),
) -> None:
    """Serve the dashboard."""
    settings = _settings(config, results_dir=results_dir, port=port, host=host, log_level=log_level)
    install_tracebacks()

    from .web.app import create_app

    try:
        web_app = create_app(settings)
    except AssetBundleError as exc:
        logger.critical("%s", exc)
        raise typer.Exit(1)

    if not settings.results_dir.is_dir():
        logger.warning("Results directory %s does not exist yet", settings.results_dir)
    print(f"[green]Server starting on {settings.host}:{settings.port}[/] (results: {settings.results_dir})")
    try:
        web_app.run(host=settings.host, port=settings.port, threaded=True)
    except OSError as exc:
        logger.critical("Cannot listen on %s:%d: %s", settings.host, settings.port, exc)
        raise typer.Exit(1)


@app.callback(invoke_without_command=True)
def default(
    ctx: typer.Context,
    results_dir: Optional[Path] = typer.Option(None, "--results-dir", help="Path to the directory holding results [default: results]"),
    port: Optional[int] = typer.Option(None, "--port", help="Port to listen on [default: 8080]"),
    host: Optional[str] = typer.Option(None, "--host", help="Interface to bind [default: 0.0.0.0]"),
    config: Optional[Path] = typer.Option(None, "--config", help="TOML or YAML config file"),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Log level [default: INFO]"),
) -> None:
    """Without a command, serve the dashboard."""
    if ctx.invoked_subcommand is None:
        serve(results_dir=results_dir, port=port, host=host, config=config, log_level=log_level)


@app.command("list-jobs")
def list_jobs_cmd(
    results_dir: Optional[Path] = typer.Option(None, "--results-dir", help="Path to the directory holding results"),
    config: Optional[Path] = typer.Option(None, "--config", help="TOML or YAML config file"),
) -> None:
    """List jobs and their workloads."""
    settings = _settings(config, results_dir=results_dir)
    try:
        jobs = discover_jobs(settings.results_dir)
    except ResultsDirError as exc:
        print(f"[red]{exc}")
        raise typer.Exit(1)
    if not jobs:
        print(f"[yellow]No jobs in {settings.results_dir}")
        return
    for job in jobs:
        print(f"[bold]{job.name}[/bold]")
        if not job.workloads:
            print("  (no workloads)")
        for wl in job.workloads:
            print(f"  - {wl.name} ({wl.run_count} runs)")


@app.command()
def export(
    job: str = typer.Argument(..., help="Job name"),
    workload: str = typer.Argument(..., help="Workload name"),
    results_dir: Optional[Path] = typer.Option(None, "--results-dir", help="Path to the directory holding results"),
    out: Path = typer.Option(Path("export"), "--out", help="Output directory"),
    stat: str = typer.Option("P99", "--stat", help="Statistic plotted in PNG charts"),
    png: bool = typer.Option(True, "--png/--no-png", help="Also render one PNG per metric"),
    config: Optional[Path] = typer.Option(None, "--config", help="TOML or YAML config file"),
) -> None:
    """Export a workload's chart series to CSV (and PNG)."""
    settings = _settings(config, results_dir=results_dir)
    try:
        stat = check_stat(stat)
    except ValueError as exc:
        print(f"[red]{exc}")
        raise typer.Exit(2)
    try:
        runs = load_runs(settings.results_dir / job / workload)
    except ResultsDirError as exc:
        print(f"[red]{exc}")
        raise typer.Exit(1)

    groups = build_metric_groups(runs)
    written = export_workload(
        groups, out, f"{job}_{workload}", stat=stat, png=png, max_points=settings.max_points
    )
    for path in written:
        print(f"- {path}")
    print(f"[green]Exported {len(groups)} metrics from {len(runs)} runs to {out}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
