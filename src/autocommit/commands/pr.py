from __future__ import annotations

import asyncio

import typer
from rich import box
from rich.markdown import Markdown
from rich.panel import Panel
from rich.prompt import Prompt
from rich.text import Text

from autocommit.core.console import console
from autocommit.core.decorators import handle_exceptions
from autocommit.core.result import UserError
from autocommit.core.runtime import AppState
from autocommit.git.client import AsyncRepo
from autocommit.git.github import GitHubCLI
from autocommit.pr.models import PRContent
from autocommit.pr.pipeline import PRRunResult, PRRunStatus, run_pr_pipeline
from autocommit.providers.factory import get_provider


async def ask_operator(question: str) -> str:
    """Put *question* to the operator on the terminal; blank answers are allowed.

    Raises:
        UserError: stdin is closed or the prompt was interrupted
    """
    console.print()
    try:
        return Prompt.ask(
            Text(question, style="bold yellow"),
            console=console,
            default="",
            show_default=False,
        )
    except (EOFError, KeyboardInterrupt) as exc:
        reason = str(exc) or type(exc).__name__
        raise UserError(f"Failed to read input: {reason}") from exc


def render_preview(content: PRContent, revised: bool = False) -> None:
    title = "Updated PR Preview" if revised else "PR Preview"
    console.print(
        Panel(
            Markdown(content.body),
            title=Text(content.title, style="bold"),
            subtitle=title,
            box=box.ROUNDED,
            border_style="cyan",
        )
    )


def _print_status(message: str) -> None:
    console.print(Text(message, style="dim"))


def _report(result: PRRunResult) -> None:
    match result.status:
        case PRRunStatus.EXISTING:
            console.print(f"[yellow]A PR already exists for this branch:[/yellow] {result.url}")
        case PRRunStatus.DRY_RUN:
            console.print("[cyan]\\[dry-run] Would create PR with the above content.[/cyan]")
        case PRRunStatus.CANCELLED:
            console.print("[yellow]PR creation cancelled.[/yellow]")
        case PRRunStatus.CREATED:
            console.print(f"[green]PR created:[/green] {result.url}")


async def create_pull_request(state: AppState, *, yes: bool, dry_run: bool) -> PRRunResult:
    provider = get_provider(state.config)
    repo = (await AsyncRepo.open()).unwrap()
    return await run_pr_pipeline(
        repo,
        GitHubCLI(repo.path),
        provider,
        ask=ask_operator,
        auto_accept=yes,
        dry_run=dry_run,
        max_tokens=state.config.pr_max_tokens,
        on_update=render_preview,
        on_status=_print_status,
    )


@handle_exceptions
def pr(
    ctx: typer.Context,
    yes: bool = typer.Option(False, "--yes", "-y", help="Create the PR without asking for confirmation."),
    dry_run: bool = typer.Option(False, "--dry-run", help="Preview the PR content without pushing or creating it."),
) -> None:
    """Generate a PR title and description for this branch and open the PR."""
    state: AppState = ctx.obj
    result = asyncio.run(create_pull_request(state, yes=yes, dry_run=dry_run))
    _report(result)
