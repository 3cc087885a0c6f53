from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

LOG_FORMAT = "%(name)s: %(message)s"


def setup_logging(level: str = "INFO", console: Console | None = None) -> None:
    """Route the root logger through rich. Safe to call more than once."""
    root = logging.getLogger()
    for handler in list(root.handlers):
        if isinstance(handler, RichHandler):
            root.removeHandler(handler)
    handler = RichHandler(
        console=console or Console(stderr=True),
        rich_tracebacks=True,
        show_path=False,
    )
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
    root.setLevel(level.upper())
    # werkzeug logs every request at INFO
    logging.getLogger("werkzeug").setLevel(max(root.level, logging.INFO))


def install_tracebacks() -> None:
    from rich.traceback import install

    install(show_locals=False, width=120, extra_lines=2, suppress=[])
