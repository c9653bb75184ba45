from __future__ import annotations

from pathlib import Path

import typer
from rich import box
from rich.panel import Panel
from rich.table import Table

from . import __version__
from .commands.commit import commit
from .commands.pr import pr
from .core.console import console
from .core.decorators import handle_exceptions
from .core.runtime import AppState, bootstrap

app = typer.Typer(help="autocommit: AI-written commit messages and pull requests.")
autopr_app = typer.Typer(add_completion=False)
autocommit_app = typer.Typer(add_completion=False)

_CONFIG_HELP = "Path to an autocommit config file (TOML or JSON)."
_VERBOSE_HELP = "Enable debug logging."


@app.callback()
@handle_exceptions
def main(
    ctx: typer.Context,
    config: Path | None = typer.Option(None, "--config", "-c", help=_CONFIG_HELP),
    verbose: bool = typer.Option(False, "--verbose", "-v", help=_VERBOSE_HELP),
) -> None:
    ctx.obj = bootstrap(config_path=config, verbose=verbose)


app.command("pr")(pr)
app.command("commit")(commit)


@app.command("config")
def show_config(ctx: typer.Context) -> None:
    """Show the active configuration and where it came from."""
    state: AppState = ctx.obj
    meta = state.config_meta

    table = Table(title="Config", box=box.SIMPLE, expand=True)
    table.add_column("Key", style="cyan", no_wrap=True)
    table.add_column("Value", style="white")

    for key, value in state.config.model_dump().items():
        table.add_row(key, str(value) if value is not None else "(unset)")

    console.print(table)

    meta_lines = [
        f"Path: {meta.path}",
        "File loaded: yes" if meta.file_loaded else "File loaded: no (using defaults + env)",
    ]
    if meta.env_overrides:
        meta_lines.append("Env overrides: " + ", ".join(sorted(meta.env_overrides)))

    console.print(Panel("\n".join(meta_lines), title="Config source", box=box.SIMPLE))


@app.command("version")
def show_version() -> None:
    """Print the autocommit version."""
    console.print(__version__)


@autopr_app.command()
@handle_exceptions
def autopr(
    ctx: typer.Context,
    yes: bool = typer.Option(False, "--yes", "-y", help="Create the PR without asking for confirmation."),
    dry_run: bool = typer.Option(False, "--dry-run", help="Preview the PR content without pushing or creating it."),
    config: Path | None = typer.Option(None, "--config", "-c", help=_CONFIG_HELP),
    verbose: bool = typer.Option(False, "--verbose", "-v", help=_VERBOSE_HELP),
) -> None:
    """Generate a PR title and description for this branch and open the PR."""
    ctx.obj = bootstrap(config_path=config, verbose=verbose)
    pr(ctx, yes=yes, dry_run=dry_run)


@autocommit_app.command()
@handle_exceptions
def autocommit(
    ctx: typer.Context,
    dry_run: bool = typer.Option(False, "--dry-run", help="Generate the message without committing."),
    config: Path | None = typer.Option(None, "--config", "-c", help=_CONFIG_HELP),
    verbose: bool = typer.Option(False, "--verbose", "-v", help=_VERBOSE_HELP),
) -> None:
    """Generate a commit message for the staged changes and commit them."""
    ctx.obj = bootstrap(config_path=config, verbose=verbose)
    commit(ctx, dry_run=dry_run)


def cli() -> None:
    app()


def autopr_cli() -> None:
    autopr_app()


def autocommit_cli() -> None:
    autocommit_app()


if __name__ == "__main__":
    cli()
