"""Commit-message pipeline: staged changes in, one generated commit out."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

from autocommit.core.console import get_logger
from autocommit.core.filters import MAX_DIFF_SIZE, truncate_diff
from autocommit.core.result import UserError
from autocommit.git.client import AsyncRepo
from autocommit.pr.interpreter import COMMIT_MAX_TOKENS, generate_commit_message
from autocommit.providers import LLMProvider

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class CommitResult:
    message: str
    staged_files: list[str] = field(default_factory=list)
    truncated: bool = False
    committed: bool = False
    output: str = ""


async def run_commit_pipeline(
    repo: AsyncRepo,
    provider: LLMProvider,
    *,
    dry_run: bool = False,
    max_diff_size: int = MAX_DIFF_SIZE,
    max_tokens: int = COMMIT_MAX_TOKENS,
    on_status: Callable[[str], None] | None = None,
) -> CommitResult:
    """Generate a commit message for the staged diff and commit it.

    Lockfiles are left out of both the file list and the diff. With
    *dry_run* the message is generated but nothing is committed.

    Raises:
        UserError: Nothing is staged, or the staged diff is empty
        GitError: A git command failed
    """

    def status(message: str) -> None:
        logger.info(message)
        if on_status is not None:
            on_status(message)

    staged = (await repo.staged_files()).unwrap()
    if not staged:
        raise UserError("No staged changes found. Stage your changes with 'git add' first.")
    status("Staged files:\n  " + "\n  ".join(staged))

    raw_diff = (await repo.staged_diff()).unwrap()
    if not raw_diff.strip():
        raise UserError("No diff content found in staged changes.")

    diff, truncated = truncate_diff(raw_diff, max_diff_size)
    if truncated:
        status(
            f"Note: Diff was truncated ({len(raw_diff.encode('utf-8'))} bytes -> {max_diff_size} bytes)"
        )

    message = await generate_commit_message(provider, diff, max_tokens=max_tokens)
    logger.debug("Generated commit message: %s", message)

    if dry_run:
        return CommitResult(message=message, staged_files=staged, truncated=truncated)

    output = (await repo.commit(message)).unwrap()
    return CommitResult(
        message=message,
        staged_files=staged,
        truncated=truncated,
        committed=True,
        output=output,
    )


__all__ = ["CommitResult", "run_commit_pipeline"]
