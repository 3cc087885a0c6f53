from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping

import yaml

_ENV_PREFIX = "PERFDASH_"
_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


@dataclass(frozen=True)
class Settings:
    results_dir: Path = Path("results")
    host: str = "0.0.0.0"
    port: int = 8080
    max_points: int = 100
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        object.__setattr__(self, "results_dir", Path(self.results_dir))
        object.__setattr__(self, "port", _as_int("port", self.port, lo=0, hi=65535))
        object.__setattr__(self, "max_points", _as_int("max_points", self.max_points, lo=1))
        level = str(self.log_level).upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"Invalid log_level '{self.log_level}'")
        object.__setattr__(self, "log_level", level)

    @staticmethod
    def from_file(path: str | Path) -> "Settings":
        return Settings().merged(read_config_file(path))

    def merged(self, values: Mapping[str, Any]) -> "Settings":
        """Return a copy with the known, non-None keys of `values` applied."""
        known = {f.name for f in fields(self)}
        updates = {k: v for k, v in values.items() if k in known and v is not None}
        return replace(self, **updates) if updates else self

    def with_env(self, environ: Mapping[str, str] | None = None) -> "Settings":
        env = os.environ if environ is None else environ
        values: Dict[str, Any] = {}
        for f in fields(self):
            raw = env.get(_ENV_PREFIX + f.name.upper())
            if raw:
                values[f.name] = raw
        return self.merged(values)


def _as_int(name: str, value: Any, lo: int | None = None, hi: int | None = None) -> int:
    try:
        out = int(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid {name} '{value}'") from exc
    if (lo is not None and out < lo) or (hi is not None and out > hi):
        raise ValueError(f"{name} out of range: {out}")
    return out


def read_config_file(path: str | Path) -> Dict[str, Any]:
    """Read a TOML or YAML config file.

    Keys may sit at top level or under a `perfdash` table.
    """
    p = Path(path)
    text = p.read_text(encoding="utf-8")
    suffix = p.suffix.lower()
    if suffix == ".toml":
        import tomllib

        data = tomllib.loads(text)
    elif suffix in (".yaml", ".yml"):
        data = yaml.safe_load(text) or {}
    else:
        raise ValueError(f"Unsupported config format: {p.name} (use .toml or .yaml)")
    if not isinstance(data, dict):
        raise ValueError(f"Config file {p} must contain a mapping")
    section = data.get("perfdash")
    if isinstance(section, dict):
        return section
    return data


def load_settings(
    config_file: str | Path | None = None,
    overrides: Mapping[str, Any] | None = None,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """Defaults < config file < environment < explicit overrides."""
    settings = Settings.from_file(config_file) if config_file else Settings()
    settings = settings.with_env(environ)
    return settings.merged(overrides or {})
