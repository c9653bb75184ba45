from __future__ import annotations

import asyncio
import re
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import TypeVar

from autocommit.core.console import get_logger
from autocommit.core.filters import filter_lock_files, lock_file_exclusions
from autocommit.core.result import Err, GitError, Ok, Result, WorkspaceError

logger = get_logger(__name__)

T = TypeVar("T")

DEFAULT_BASE_BRANCH = "main"
# Window used when the base branch cannot be compared against.
FALLBACK_BASE = "HEAD~5"
_HEAD_BRANCH_PATTERN = re.compile(r"HEAD branch: (.+)")
_LOG_FORMAT = "--pretty=format:%s%n%b"


async def run_command(program: str, *args: str, cwd: Path) -> Result[str, GitError]:
    """Run *program* with asyncio and return stripped stdout, wrapping failures.

    A non-zero exit becomes ``Err(GitError)`` carrying the joined command line
    and the trimmed stderr. A missing executable or working directory is not a
    command failure and raises WorkspaceError instead.
    """
    if not cwd.exists():
        raise WorkspaceError("Repository path does not exist", context={"cwd": str(cwd)})

    command = " ".join((program, *args))
    logger.debug("Running %s", command)
    try:
        process = await asyncio.create_subprocess_exec(
            program,
            *args,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            stdin=asyncio.subprocess.DEVNULL,
            cwd=cwd,
        )
    except FileNotFoundError as exc:
        raise WorkspaceError(f"{program} executable not found on PATH", context={"cwd": str(cwd)}) from exc
    except OSError as exc:
        raise WorkspaceError(f"Failed to start {program}: {exc}", context={"cwd": str(cwd)}) from exc

    stdout, stderr = await process.communicate()
    if process.returncode != 0:
        message = stderr.decode("utf-8", errors="replace").strip()
        logger.debug("%s exited with %s: %s", command, process.returncode, message)
        return Err(
            GitError(
                message or f"{command} failed",
                command=command,
                stderr=message,
                context={"returncode": process.returncode},
            )
        )

    return Ok(stdout.decode("utf-8", errors="replace").strip())


async def with_fallback(
    primary: Callable[[], Awaitable[Result[T, GitError]]],
    secondary: Callable[[], Awaitable[Result[T, GitError]]],
) -> Result[T, GitError]:
    """Run *primary*; if it fails, run *secondary* and return its result as-is."""
    match await primary():
        case Ok(value):
            return Ok(value)
        case Err(err):
            logger.debug("Primary query failed, using fallback window: %s", err.stderr or err.message)
            return await secondary()


def _split_lines(output: str) -> list[str]:
    return list(dict.fromkeys(line for line in output.splitlines() if line))


class AsyncRepo:
    """Async git wrapper built on subprocess plumbing."""

    def __init__(self, root: Path) -> None:
        self._root = root

    @property
    def path(self) -> Path:
        return self._root

    @classmethod
    async def open(cls, path: Path | str = ".") -> Result[AsyncRepo, GitError]:
        root = Path(path).expanduser()
        match await run_command("git", "rev-parse", "--show-toplevel", cwd=root):
            case Ok(raw):
                return Ok(cls(Path(raw).resolve()))
            case Err(err):
                return Err(err)

    async def run_git(self, *args: str) -> Result[str, GitError]:
        """Public wrapper around git subprocess execution."""
        return await run_command("git", *args, cwd=self._root)

    # -------------------------------------------------------------------------
    # Branch state
    # -------------------------------------------------------------------------

    async def current_branch(self) -> Result[str, GitError]:
        """Return the checked-out branch name; empty when HEAD is detached."""
        return await self.run_git("branch", "--show-current")

    async def default_branch(self) -> str:
        """Best-effort detection of the remote's default branch.

        Any failure yields ``"main"``; detection must never stop a run.
        """
        match await self.run_git("remote", "show", "origin"):
            case Ok(output):
                found = _HEAD_BRANCH_PATTERN.search(output)
                if found and found.group(1).strip():
                    return found.group(1).strip()
                return DEFAULT_BASE_BRANCH
            case Err(err):
                logger.debug("Default branch detection failed: %s", err.stderr)
                return DEFAULT_BASE_BRANCH

    async def remote_branch_exists(self, branch: str, remote: str = "origin") -> bool:
        result = await self.run_git("ls-remote", "--exit-code", "--heads", remote, branch)
        return result.is_ok()

    async def has_unpushed_commits(self) -> bool:
        match await self.run_git("status", "-sb"):
            case Ok(status):
                return "ahead" in status
            case Err(_):
                return False

    async def push_branch(self, branch: str, remote: str = "origin") -> Result[None, GitError]:
        result = await self.run_git("push", "-u", remote, branch)
        return result.map(lambda _: None)

    # -------------------------------------------------------------------------
    # Staged changes
    # -------------------------------------------------------------------------

    async def staged_files(self) -> Result[list[str], GitError]:
        result = await self.run_git("diff", "--staged", "--name-only")
        return result.map(lambda out: filter_lock_files(_split_lines(out)))

    async def staged_diff(self) -> Result[str, GitError]:
        return await self.run_git("diff", "--staged", "--", ".", *lock_file_exclusions())

    async def commit(self, message: str) -> Result[str, GitError]:
        return await self.run_git("commit", "-m", message)

    # -------------------------------------------------------------------------
    # Branch comparison (each query falls back independently)
    # -------------------------------------------------------------------------

    async def commit_log(self, base: str) -> Result[str, GitError]:
        """Commit subjects and bodies on HEAD that are not on *base*, oldest first."""
        return await with_fallback(
            lambda: self.run_git("log", f"{base}..HEAD", _LOG_FORMAT, "--reverse"),
            lambda: self.run_git("log", f"{FALLBACK_BASE}..HEAD", _LOG_FORMAT, "--reverse"),
        )

    async def diff(self, base: str) -> Result[str, GitError]:
        exclusions = lock_file_exclusions()
        return await with_fallback(
            lambda: self.run_git("diff", f"{base}...HEAD", "--", ".", *exclusions),
            lambda: self.run_git("diff", FALLBACK_BASE, "HEAD", "--", ".", *exclusions),
        )

    async def changed_files(self, base: str) -> Result[list[str], GitError]:
        result = await with_fallback(
            lambda: self.run_git("diff", "--name-only", f"{base}...HEAD"),
            lambda: self.run_git("diff", "--name-only", FALLBACK_BASE, "HEAD"),
        )
        return result.map(lambda out: filter_lock_files(_split_lines(out)))


__all__ = [
    "AsyncRepo",
    "DEFAULT_BASE_BRANCH",
    "FALLBACK_BASE",
    "run_command",
    "with_fallback",
]
