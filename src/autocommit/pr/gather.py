"""Collect the repository state a PR description is written from."""

from __future__ import annotations

import asyncio
from pathlib import Path

from autocommit.core.console import get_logger
from autocommit.core.result import UserError
from autocommit.git.client import AsyncRepo
from autocommit.pr.models import BranchContext, ChangeSet

logger = get_logger(__name__)

TEMPLATE_PATHS: tuple[str, ...] = (
    ".github/PULL_REQUEST_TEMPLATE.md",
    ".github/pull_request_template.md",
    "PULL_REQUEST_TEMPLATE.md",
    "pull_request_template.md",
)


async def resolve_branch_context(repo: AsyncRepo) -> BranchContext:
    """Determine the feature branch and the base branch it targets.

    Raises:
        UserError: HEAD is detached or the feature branch is the base branch
        GitError: The current branch could not be read
    """
    current = (await repo.current_branch()).unwrap()
    if not current:
        raise UserError("Not on a branch. Please checkout a branch first.")

    base = await repo.default_branch()
    if current == base:
        raise UserError(f"You are on the base branch ({base}). Create a feature branch first.")

    return BranchContext(current_branch=current, base_branch=base)


def _read_first_template(root: Path) -> str | None:
    for relative in TEMPLATE_PATHS:
        candidate = root / relative
        try:
            text = candidate.read_text(encoding="utf-8")
        except FileNotFoundError:
            continue
        except (OSError, UnicodeDecodeError) as exc:
            logger.debug("Skipping unreadable PR template %s: %s", candidate, exc)
            continue
        logger.debug("Using PR template %s", candidate)
        return text
    return None


async def read_pr_template(root: Path) -> str | None:
    """Return the first PR template found under *root*, or None."""
    return await asyncio.to_thread(_read_first_template, root)


async def gather_change_set(repo: AsyncRepo, base: str) -> tuple[ChangeSet, str | None]:
    """Fetch commits, diff, changed files and the PR template concurrently.

    Raises:
        UserError: No files differ from *base*
        GitError: A comparison failed even in its fallback window
    """
    commits, diff, files, template = await asyncio.gather(
        repo.commit_log(base),
        repo.diff(base),
        repo.changed_files(base),
        read_pr_template(repo.path),
    )

    changed_files = files.unwrap()
    if not changed_files:
        raise UserError("No changes found compared to base branch.")

    change_set = ChangeSet(
        commit_log=commits.unwrap(),
        diff=diff.unwrap(),
        changed_files=changed_files,
    )
    return change_set, template


__all__ = ["TEMPLATE_PATHS", "gather_change_set", "read_pr_template", "resolve_branch_context"]
