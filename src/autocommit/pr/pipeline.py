"""End-to-end pull-request pipeline.

Stages, in order:
    1. Resolve the feature and base branches
    2. Stop early if the branch already has an open PR
    3. Push the branch when the remote is missing it or is behind
    4. Gather commits, diff, changed files and the PR template concurrently
    5. Generate content and run the clarification/refinement loop
    6. Create the PR with the accepted content
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from autocommit.core.console import get_logger
from autocommit.core.result import AutocommitError
from autocommit.git.client import AsyncRepo
from autocommit.git.github import GitHubCLI
from autocommit.pr.gather import gather_change_set, resolve_branch_context
from autocommit.pr.interpreter import PR_MAX_TOKENS, generate_pr_content
from autocommit.pr.loop import Asker, LoopState, RefinementLoop, UpdateHook
from autocommit.pr.models import ChangeSet, PRContent
from autocommit.pr.prompting import build_pr_prompt
from autocommit.providers import LLMProvider

logger = get_logger(__name__)

StatusHook = Callable[[str], None]


class PRRunStatus(Enum):
    CREATED = "created"
    EXISTING = "existing"
    CANCELLED = "cancelled"
    DRY_RUN = "dry_run"


@dataclass(frozen=True, slots=True)
class PRRunResult:
    """What the pipeline did. ``url`` is set for CREATED and EXISTING."""

    status: PRRunStatus
    url: str | None = None
    content: PRContent | None = None


async def push_if_needed(repo: AsyncRepo, branch: str) -> bool:
    """Push *branch* when origin lacks it or it has unpushed commits.

    Returns True when a push happened.

    Raises:
        GitError: The push failed
    """
    needs_push = not await repo.remote_branch_exists(branch) or await repo.has_unpushed_commits()
    if not needs_push:
        return False
    (await repo.push_branch(branch)).unwrap()
    return True


async def run_pr_pipeline(
    repo: AsyncRepo,
    github: GitHubCLI,
    provider: LLMProvider,
    *,
    ask: Asker,
    auto_accept: bool = False,
    dry_run: bool = False,
    max_tokens: int = PR_MAX_TOKENS,
    on_update: UpdateHook | None = None,
    on_status: StatusHook | None = None,
) -> PRRunResult:
    """Generate and open a pull request for the checked-out branch.

    Every failure outside the documented fallbacks propagates as an
    AutocommitError subclass.
    """

    def status(message: str) -> None:
        logger.info(message)
        if on_status is not None:
            on_status(message)

    branches = await resolve_branch_context(repo)
    status(f"Current branch: {branches.current_branch}")
    status(f"Base branch: {branches.base_branch}")

    existing = await github.existing_pr()
    if existing:
        status(f"PR already exists: {existing}")
        return PRRunResult(PRRunStatus.EXISTING, url=existing)

    if not dry_run and await push_if_needed(repo, branches.current_branch):
        status(f"Pushed {branches.current_branch} to origin")

    change_set, template = await gather_change_set(repo, branches.base_branch)
    status(f"Found {len(change_set.changed_files)} changed files")

    async def generate(additional_context: str | None, previous: PRContent | None) -> PRContent:
        return await _generate(provider, change_set, template, additional_context, previous, max_tokens)

    initial = await generate(None, None)
    loop = RefinementLoop(
        ask=ask,
        generate=generate,
        auto_accept=auto_accept,
        dry_run=dry_run,
        on_update=on_update,
    )
    outcome = await loop.run(initial)

    if dry_run:
        return PRRunResult(PRRunStatus.DRY_RUN, content=outcome.content)
    if outcome.state is LoopState.CANCELLED:
        return PRRunResult(PRRunStatus.CANCELLED, content=outcome.content)
    if not outcome.accepted:
        raise AutocommitError(f"Refinement loop ended in state {outcome.state.value}")

    url = (
        await github.create_pr(
            title=outcome.content.title,
            body=outcome.content.body,
            base=branches.base_branch,
            head=branches.current_branch,
        )
    ).unwrap()
    status(f"PR created: {url}")
    return PRRunResult(PRRunStatus.CREATED, url=url, content=outcome.content)


async def _generate(
    provider: LLMProvider,
    change_set: ChangeSet,
    template: str | None,
    additional_context: str | None,
    previous: PRContent | None,
    max_tokens: int,
) -> PRContent:
    prompt = build_pr_prompt(
        change_set,
        template=template,
        additional_context=additional_context,
        previous=previous,
    )
    return await generate_pr_content(provider, prompt, max_tokens=max_tokens)


__all__ = [
    "PRRunResult",
    "PRRunStatus",
    "push_if_needed",
    "run_pr_pipeline",
]
