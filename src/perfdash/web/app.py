"""Flask application serving the job list and job detail pages.

Every request rescans the results tree; nothing is cached between requests.
"""

from __future__ import annotations

import logging
from pathlib import Path

from flask import Flask, abort, redirect, render_template, url_for
from werkzeug.exceptions import HTTPException

from ..data.aggregate import build_metric_groups, to_payload
from ..data.discovery import list_jobs, list_workloads
from ..data.loaders import load_runs
from ..errors import AssetBundleError, ResultsDirError
from ..settings import Settings

logger = logging.getLogger(__name__)

PACKAGE_DIR = Path(__file__).resolve().parent
TEMPLATES_DIR = PACKAGE_DIR / "templates"
STATIC_DIR = PACKAGE_DIR / "static"

REQUIRED_ASSETS = (
    TEMPLATES_DIR / "base.html",
    TEMPLATES_DIR / "jobs.html",
    TEMPLATES_DIR / "job_detail.html",
    TEMPLATES_DIR / "error.html",
    STATIC_DIR / "css" / "style.css",
    STATIC_DIR / "js" / "charts.js",
)


def check_asset_bundle() -> None:
    missing = [str(p.relative_to(PACKAGE_DIR)) for p in REQUIRED_ASSETS if not p.is_file()]
    if missing:
        raise AssetBundleError(f"Missing packaged assets: {', '.join(missing)}")


def _safe_name(name: str) -> bool:
    return bool(name) and name not in (".", "..") and "/" not in name and "\\" not in name


def create_app(settings: Settings | None = None) -> Flask:
    check_asset_bundle()
    settings = settings or Settings()
    app = Flask(
        __name__,
        template_folder=str(TEMPLATES_DIR),
        static_folder=str(STATIC_DIR),
        static_url_path="/static",
    )

    @app.route("/")
    def job_list():
        try:
            jobs = list_jobs(settings.results_dir)
        except ResultsDirError as exc:
            logger.error("Error loading jobs: %s", exc)
            abort(500, description=str(exc))
        return render_template("jobs.html", jobs=jobs, results_dir=settings.results_dir)

    @app.route("/job/<job>", defaults={"workload": None})
    @app.route("/job/<job>/<workload>")
    def job_detail(job: str, workload: str | None):
        logger.debug("Job detail requested for %s/%s", job, workload or "")
        if not _safe_name(job) or (workload is not None and not _safe_name(workload)):
            abort(404, description="Invalid job or workload name")

        job_path = settings.results_dir / job
        try:
            workloads = list_workloads(job_path)
        except ResultsDirError as exc:
            logger.error("Error loading workloads for job %s: %s", job, exc)
            abort(404, description=f"Error loading job {job}: {exc.reason}")

        if workload is None:
            if len(workloads) == 1:
                return redirect(url_for("job_detail", job=job, workload=workloads[0].name))
            return render_template(
                "job_detail.html",
                job=job,
                workload=None,
                workloads=workloads,
                runs=[],
                groups=[],
                payload=[],
                max_points=settings.max_points,
            )

        try:
            runs = load_runs(job_path / workload)
        except ResultsDirError as exc:
            logger.error("Error loading runs for %s/%s: %s", job, workload, exc)
            abort(404, description=f"Error loading runs for {job}/{workload}: {exc.reason}")

        groups = build_metric_groups(runs)
        return render_template(
            "job_detail.html",
            job=job,
            workload=workload,
            workloads=workloads,
            runs=runs,
            groups=groups,
            payload=to_payload(groups),
            max_points=settings.max_points,
        )

    @app.errorhandler(HTTPException)
    def http_error(exc: HTTPException):
        return (
            render_template("error.html", code=exc.code, name=exc.name, message=exc.description),
            exc.code,
        )

    return app
