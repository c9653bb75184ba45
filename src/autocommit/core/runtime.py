"""Per-invocation state shared by the CLI entrypoints.

The configuration is loaded once here and handed to commands explicitly;
nothing below the CLI reads the environment on its own.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from rich.markup import escape
from rich.panel import Panel

from autocommit.core.config import AppConfig, ConfigLoadResult, load_config
from autocommit.core.console import console, setup_logging


@dataclass
class AppState:
    config: AppConfig
    config_meta: ConfigLoadResult
    logger: logging.Logger


def bootstrap(config_path: Path | None = None, verbose: bool = False) -> AppState:
    """Load configuration, set up logging and report safe-mode fallbacks."""
    config, meta = load_config(config_path=config_path)
    logger = setup_logging(level=config.log_level, verbose=verbose)

    if meta.error:
        console.print(
            Panel(
                f"[bold red]Configuration Error - Safe Mode Active[/bold red]\n\n"
                f"Failed to load {meta.path}:\n{escape(meta.error)}\n\n"
                f"[yellow]Using environment and default settings.[/yellow]",
                border_style="red",
            )
        )
    else:
        logger.debug(
            "Loaded configuration from %s (env overrides: %s)",
            meta.path,
            sorted(meta.env_overrides),
        )

    return AppState(config=config, config_meta=meta, logger=logger)


__all__ = ["AppState", "bootstrap"]
