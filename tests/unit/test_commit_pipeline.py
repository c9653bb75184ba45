from __future__ import annotations

from pathlib import Path

import pytest

from autocommit.commit import run_commit_pipeline
from autocommit.core.result import GitError, Ok, Result, UserError
from tests.mocks.fake_git import GitHandler, ScriptedRepo, git_failure
from tests.mocks.mock_provider import MockProvider


def staged_handler(
    files: str = "src/app.py",
    diff: str = "+print('hello')",
    commit_output: str = "[feat 1a2b3c] feat: greet",
) -> GitHandler:
    def handler(args: tuple[str, ...]) -> Result[str, GitError]:
        if args[:3] == ("diff", "--staged", "--name-only"):
            return Ok(files)
        if args[:2] == ("diff", "--staged"):
            return Ok(diff)
        if args[0] == "commit":
            return Ok(commit_output)
        return git_failure(args, "unexpected command")

    return handler


@pytest.mark.asyncio
async def test_commits_with_generated_message(tmp_path: Path) -> None:
    repo = ScriptedRepo(tmp_path, staged_handler())
    provider = MockProvider(["feat: greet the user\n"])

    result = await run_commit_pipeline(repo, provider)

    assert result.committed is True
    assert result.message == "feat: greet the user"
    assert result.output == "[feat 1a2b3c] feat: greet"
    assert ("commit", "-m", "feat: greet the user") in repo.calls
    assert "+print('hello')" in provider.prompts[0]


@pytest.mark.asyncio
async def test_no_staged_changes_halts_before_generation(tmp_path: Path) -> None:
    repo = ScriptedRepo(tmp_path, staged_handler(files=""))
    provider = MockProvider()

    with pytest.raises(UserError, match="No staged changes found"):
        await run_commit_pipeline(repo, provider)

    assert provider.call_count == 0
    assert not repo.called("commit")


@pytest.mark.asyncio
async def test_only_lock_files_staged_counts_as_nothing_staged(tmp_path: Path) -> None:
    repo = ScriptedRepo(tmp_path, staged_handler(files="package-lock.json\nyarn.lock"))
    with pytest.raises(UserError, match="No staged changes found"):
        await run_commit_pipeline(repo, MockProvider())


@pytest.mark.asyncio
async def test_blank_diff_is_user_error(tmp_path: Path) -> None:
    repo = ScriptedRepo(tmp_path, staged_handler(diff="   \n"))
    provider = MockProvider()

    with pytest.raises(UserError, match="No diff content found in staged changes."):
        await run_commit_pipeline(repo, provider)

    assert provider.call_count == 0


@pytest.mark.asyncio
async def test_large_diff_is_truncated(tmp_path: Path) -> None:
    repo = ScriptedRepo(tmp_path, staged_handler(diff="+" + "x" * 299))
    provider = MockProvider(["chore: bulk update"])
    statuses: list[str] = []

    result = await run_commit_pipeline(repo, provider, max_diff_size=100, on_status=statuses.append)

    assert result.truncated is True
    assert "(diff truncated, 200 characters omitted)" in provider.prompts[0]
    assert any("Diff was truncated (300 bytes -> 100 bytes)" in line for line in statuses)


@pytest.mark.asyncio
async def test_truncation_note_reports_bytes(tmp_path: Path) -> None:
    repo = ScriptedRepo(tmp_path, staged_handler(diff="+" + "é" * 100))
    statuses: list[str] = []

    await run_commit_pipeline(
        repo, MockProvider(["docs: accents"]), max_diff_size=100, on_status=statuses.append
    )

    assert any("Diff was truncated (201 bytes -> 100 bytes)" in line for line in statuses)


@pytest.mark.asyncio
async def test_dry_run_does_not_commit(tmp_path: Path) -> None:
    repo = ScriptedRepo(tmp_path, staged_handler())

    result = await run_commit_pipeline(repo, MockProvider(["fix: typo"]), dry_run=True)

    assert result.committed is False
    assert result.message == "fix: typo"
    assert not repo.called("commit")


@pytest.mark.asyncio
async def test_commit_failure_propagates(tmp_path: Path) -> None:
    def handler(args: tuple[str, ...]) -> Result[str, GitError]:
        if args[0] == "commit":
            return git_failure(args, "nothing added to commit")
        return staged_handler()(args)

    repo = ScriptedRepo(tmp_path, handler)
    with pytest.raises(GitError, match="nothing added to commit"):
        await run_commit_pipeline(repo, MockProvider(["fix: typo"]))
