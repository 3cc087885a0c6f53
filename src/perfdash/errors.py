from __future__ import annotations

from pathlib import Path


class PerfDashError(Exception):
    """Base class for dashboard errors."""


class AssetBundleError(PerfDashError):
    """Templates or static assets shipped with the package are missing."""


class ResultsDirError(PerfDashError):
    """A results, job or workload directory could not be listed."""

    def __init__(self, path: str | Path, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Cannot read {self.path}: {reason}")


class RunLoadError(PerfDashError):
    """A single run could not be loaded; callers drop the run."""

    def __init__(self, run_path: str | Path, reason: str) -> None:
        self.run_path = Path(run_path)
        self.reason = reason
        super().__init__(f"{self.run_path}: {reason}")


class SummaryError(RunLoadError):
    pass


class MeasurementError(RunLoadError):
    pass
