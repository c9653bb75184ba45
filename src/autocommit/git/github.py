"""GitHub access through the gh CLI."""

from __future__ import annotations

from pathlib import Path

from autocommit.core.console import get_logger
from autocommit.core.result import Err, GitError, Ok, Result
from autocommit.git.client import run_command

logger = get_logger(__name__)


class GitHubCLI:
    """Thin wrapper over the `gh pr` subcommands used by the PR pipeline."""

    def __init__(self, root: Path) -> None:
        self._root = root

    async def run_gh(self, *args: str) -> Result[str, GitError]:
        return await run_command("gh", *args, cwd=self._root)

    async def existing_pr(self) -> str | None:
        """Return the URL of the open PR for the current branch, if any."""
        match await self.run_gh("pr", "view", "--json", "url", "--jq", ".url"):
            case Ok(url) if url:
                return url
            case Ok(_):
                return None
            case Err(err):
                logger.debug("No existing PR found: %s", err.stderr)
                return None

    async def create_pr(self, *, title: str, body: str, base: str, head: str) -> Result[str, GitError]:
        """Open a PR and return what gh prints (the PR URL)."""
        return await self.run_gh(
            "pr",
            "create",
            "--title",
            title,
            "--body",
            body,
            "--base",
            base,
            "--head",
            head,
        )


__all__ = ["GitHubCLI"]
