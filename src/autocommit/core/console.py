"""Terminal output and log routing.

Generated PR and commit content goes to ``console`` (stdout); status
lines, warnings and errors go to ``stderr_console`` so the generated text
can be piped on its own.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

APP_LOGGER = "autocommit"

# HTTP and SDK loggers that log every request at INFO/DEBUG.
CLIENT_LOGGERS = ("anthropic", "openai", "httpx", "httpcore")

console = Console()
stderr_console = Console(stderr=True)


def _resolve_level(level: str | int) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    # getLevelName returns "Level X" for names it does not know
    return resolved if isinstance(resolved, int) else logging.WARNING


def setup_logging(level: str | int = logging.WARNING, verbose: bool = False) -> logging.Logger:
    """Route autocommit logs to stderr and return the app logger.

    ``level`` comes from the ``log_level`` setting; an unrecognised name
    falls back to WARNING. ``--verbose`` forces DEBUG and prefixes each
    record with its logger name, and also lets the provider SDK and HTTP
    client loggers through. Otherwise those are held at WARNING so a
    normal run only shows pipeline status.

    Safe to call more than once; the previous handler is replaced.
    """
    app_level = logging.DEBUG if verbose else _resolve_level(level)

    handler = RichHandler(
        console=stderr_console,
        markup=False,
        show_path=False,
        show_time=verbose,
        rich_tracebacks=verbose,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s" if verbose else "%(message)s"))

    logger = logging.getLogger(APP_LOGGER)
    logger.handlers.clear()
    logger.addHandler(handler)
    logger.setLevel(app_level)
    logger.propagate = False

    for name in CLIENT_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if verbose else logging.WARNING)

    return logger


def get_logger(name: str | None = None) -> logging.Logger:
    return logging.getLogger(name or APP_LOGGER)
