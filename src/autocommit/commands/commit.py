from __future__ import annotations

import asyncio

import typer
from rich.panel import Panel
from rich.text import Text

from autocommit.commit import CommitResult, run_commit_pipeline
from autocommit.core.console import console
from autocommit.core.decorators import handle_exceptions
from autocommit.core.runtime import AppState
from autocommit.git.client import AsyncRepo
from autocommit.providers.factory import get_provider


async def create_commit(state: AppState, *, dry_run: bool) -> CommitResult:
    provider = get_provider(state.config)
    repo = (await AsyncRepo.open()).unwrap()
    return await run_commit_pipeline(
        repo,
        provider,
        dry_run=dry_run,
        max_diff_size=state.config.max_diff_size,
        max_tokens=state.config.commit_max_tokens,
        on_status=lambda message: console.print(Text(message, style="dim")),
    )


@handle_exceptions
def commit(
    ctx: typer.Context,
    dry_run: bool = typer.Option(False, "--dry-run", help="Generate the message without committing."),
) -> None:
    """Generate a commit message for the staged changes and commit them."""
    state: AppState = ctx.obj
    result = asyncio.run(create_commit(state, dry_run=dry_run))

    console.print(Panel(Text(result.message), title="Generated commit message", border_style="cyan"))
    if not result.committed:
        console.print("[cyan]\\[dry-run] Would commit with the above message.[/cyan]")
        return
    if result.output:
        console.print(Text(result.output))
    console.print("[green]Commit successful![/green]")
