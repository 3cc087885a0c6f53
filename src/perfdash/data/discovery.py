"""Results tree discovery.

Layout on disk is `<root>/<job>/<workload>/<run>/`. Only directory listings
happen here; run contents are read by `loaders`.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List

from ..errors import ResultsDirError
from .model import Job, Workload

logger = logging.getLogger(__name__)


def _subdirs(path: Path) -> List[Path]:
    try:
        entries = list(path.iterdir())
    except OSError as exc:
        raise ResultsDirError(path, exc.strerror or str(exc)) from exc
    return sorted((p for p in entries if p.is_dir()), key=lambda p: p.name)


def _count_entries(path: Path) -> int:
    try:
        return len(os.listdir(path))
    except OSError as exc:
        logger.warning("Cannot count runs under %s: %s", path, exc)
        return 0


def list_workloads(job_path: str | Path) -> List[Workload]:
    job_dir = Path(job_path)
    return [
        Workload(name=d.name, path=d, run_count=_count_entries(d))
        for d in _subdirs(job_dir)
    ]


def list_jobs(root: str | Path) -> List[Job]:
    """List every job under `root` with its workloads.

    An unreadable root raises ResultsDirError. A job whose workloads cannot be
    listed is still returned, with no workloads.
    """
    root_dir = Path(root)
    jobs: List[Job] = []
    for job_dir in _subdirs(root_dir):
        job = Job(name=job_dir.name, path=job_dir)
        try:
            job.workloads = list_workloads(job_dir)
        except ResultsDirError as exc:
            logger.warning("Skipping workloads of job %s: %s", job.name, exc.reason)
        jobs.append(job)
    logger.debug("Discovered %d jobs under %s", len(jobs), root_dir)
    return jobs
