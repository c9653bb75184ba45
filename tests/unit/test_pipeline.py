from __future__ import annotations

from pathlib import Path

import pytest

from autocommit.core.result import GitError, MalformedOutputError, UserError
from autocommit.pr.gather import gather_change_set, read_pr_template, resolve_branch_context
from autocommit.pr.pipeline import PRRunStatus, run_pr_pipeline
from tests.mocks.fake_git import FakeGitHub, ScriptedRepo, feature_branch_handler
from tests.mocks.mock_provider import MockProvider, pr_json


class Operator:
    def __init__(self, *answers: str) -> None:
        self.answers = list(answers)
        self.questions: list[str] = []

    async def __call__(self, question: str) -> str:
        self.questions.append(question)
        return self.answers.pop(0)


# ---------------------------------------------------------------------------
# Branch resolution and gathering
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_resolve_branch_context(tmp_path: Path) -> None:
    repo = ScriptedRepo(tmp_path, feature_branch_handler(base="develop"))
    context = await resolve_branch_context(repo)
    assert context.current_branch == "feature/login"
    assert context.base_branch == "develop"


@pytest.mark.asyncio
async def test_detached_head_is_user_error(tmp_path: Path) -> None:
    repo = ScriptedRepo(tmp_path, feature_branch_handler(branch=""))
    with pytest.raises(UserError, match="Not on a branch"):
        await resolve_branch_context(repo)


@pytest.mark.asyncio
async def test_on_base_branch_is_user_error(tmp_path: Path) -> None:
    repo = ScriptedRepo(tmp_path, feature_branch_handler(branch="main"))
    with pytest.raises(UserError, match=r"You are on the base branch \(main\)"):
        await resolve_branch_context(repo)


@pytest.mark.asyncio
async def test_template_lookup_order(tmp_path: Path) -> None:
    assert await read_pr_template(tmp_path) is None

    (tmp_path / "pull_request_template.md").write_text("root lower", encoding="utf-8")
    assert await read_pr_template(tmp_path) == "root lower"

    github_dir = tmp_path / ".github"
    github_dir.mkdir()
    (github_dir / "pull_request_template.md").write_text("github lower", encoding="utf-8")
    assert await read_pr_template(tmp_path) == "github lower"


@pytest.mark.asyncio
async def test_gather_change_set_filters_lock_files(tmp_path: Path) -> None:
    repo = ScriptedRepo(tmp_path, feature_branch_handler(changed="a.py\npoetry.lock\nb.py\na.py"))
    (tmp_path / "PULL_REQUEST_TEMPLATE.md").write_text("## What", encoding="utf-8")

    change_set, template = await gather_change_set(repo, "main")

    assert change_set.changed_files == ["a.py", "b.py"]
    assert change_set.commit_log == "feat: add login form"
    assert template == "## What"


@pytest.mark.asyncio
async def test_no_changes_is_user_error(tmp_path: Path) -> None:
    repo = ScriptedRepo(tmp_path, feature_branch_handler(changed="package-lock.json"))
    with pytest.raises(UserError, match="No changes found compared to base branch."):
        await gather_change_set(repo, "main")


# ---------------------------------------------------------------------------
# Full pipeline scenarios
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_creates_pr_after_acceptance(tmp_path: Path) -> None:
    repo = ScriptedRepo(tmp_path, feature_branch_handler())
    github = FakeGitHub(tmp_path)
    provider = MockProvider([pr_json(title="Add login form", body="## Summary\nLogin")])

    result = await run_pr_pipeline(repo, github, provider, ask=Operator("y"))

    assert result.status is PRRunStatus.CREATED
    assert result.url == "https://github.com/o/r/pull/1"
    assert github.created == [
        {"title": "Add login form", "body": "## Summary\nLogin", "base": "main", "head": "feature/login"}
    ]
    assert "src/login.py\nsrc/forms.py" in provider.prompts[0]


@pytest.mark.asyncio
async def test_existing_pr_short_circuits(tmp_path: Path) -> None:
    repo = ScriptedRepo(tmp_path, feature_branch_handler(remote_has_branch=False))
    github = FakeGitHub(tmp_path, existing="https://github.com/o/r/pull/3")
    provider = MockProvider()

    result = await run_pr_pipeline(repo, github, provider, ask=Operator())

    assert result.status is PRRunStatus.EXISTING
    assert result.url == "https://github.com/o/r/pull/3"
    assert provider.call_count == 0
    assert github.created == []
    assert not repo.called("push")


@pytest.mark.asyncio
async def test_operator_cancel_creates_nothing(tmp_path: Path) -> None:
    repo = ScriptedRepo(tmp_path, feature_branch_handler())
    github = FakeGitHub(tmp_path)

    result = await run_pr_pipeline(repo, github, MockProvider(), ask=Operator("n"))

    assert result.status is PRRunStatus.CANCELLED
    assert github.created == []


@pytest.mark.asyncio
async def test_malformed_output_halts_before_creation(tmp_path: Path) -> None:
    repo = ScriptedRepo(tmp_path, feature_branch_handler())
    github = FakeGitHub(tmp_path)
    operator = Operator()

    with pytest.raises(MalformedOutputError) as exc_info:
        await run_pr_pipeline(repo, github, MockProvider(["Here is a great PR!"]), ask=operator)

    assert exc_info.value.raw_text == "Here is a great PR!"
    assert github.created == []
    assert operator.questions == []


@pytest.mark.asyncio
async def test_unreachable_base_uses_fallback_window(tmp_path: Path) -> None:
    repo = ScriptedRepo(tmp_path, feature_branch_handler(base_unreachable=True))
    github = FakeGitHub(tmp_path)
    provider = MockProvider()

    result = await run_pr_pipeline(repo, github, provider, ask=Operator(), auto_accept=True)

    assert result.status is PRRunStatus.CREATED
    assert ("log", "HEAD~5..HEAD", "--pretty=format:%s%n%b", "--reverse") in repo.calls
    assert ("diff", "--name-only", "HEAD~5", "HEAD") in repo.calls
    assert any(call[:3] == ("diff", "HEAD~5", "HEAD") for call in repo.calls)
    assert "feat: add login form" in provider.prompts[0]


@pytest.mark.asyncio
@pytest.mark.parametrize("remote_has_branch,ahead", [(False, False), (True, True)])
async def test_pushes_when_remote_is_behind(tmp_path: Path, remote_has_branch: bool, ahead: bool) -> None:
    repo = ScriptedRepo(tmp_path, feature_branch_handler(remote_has_branch=remote_has_branch, ahead=ahead))

    await run_pr_pipeline(repo, FakeGitHub(tmp_path), MockProvider(), ask=Operator(), auto_accept=True)

    assert ("push", "-u", "origin", "feature/login") in repo.calls


@pytest.mark.asyncio
async def test_no_push_when_up_to_date(tmp_path: Path) -> None:
    repo = ScriptedRepo(tmp_path, feature_branch_handler())

    await run_pr_pipeline(repo, FakeGitHub(tmp_path), MockProvider(), ask=Operator(), auto_accept=True)

    assert not repo.called("push")


@pytest.mark.asyncio
async def test_failed_push_aborts_before_generation(tmp_path: Path) -> None:
    repo = ScriptedRepo(tmp_path, feature_branch_handler(remote_has_branch=False, push_error="rejected"))
    provider = MockProvider()

    with pytest.raises(GitError, match="git push -u origin feature/login"):
        await run_pr_pipeline(repo, FakeGitHub(tmp_path), provider, ask=Operator())

    assert provider.call_count == 0


@pytest.mark.asyncio
async def test_dry_run_never_pushes_or_creates(tmp_path: Path) -> None:
    repo = ScriptedRepo(tmp_path, feature_branch_handler(remote_has_branch=False))
    github = FakeGitHub(tmp_path)

    result = await run_pr_pipeline(repo, github, MockProvider(), ask=Operator(), dry_run=True)

    assert result.status is PRRunStatus.DRY_RUN
    assert result.content is not None
    assert not repo.called("push")
    assert github.created == []


@pytest.mark.asyncio
async def test_clarification_answer_feeds_next_prompt(tmp_path: Path) -> None:
    repo = ScriptedRepo(tmp_path, feature_branch_handler())
    provider = MockProvider(
        [
            pr_json(needs_clarification=True, question="Which ticket does this close?"),
            pr_json(title="Close AUTH-12"),
        ]
    )
    operator = Operator("AUTH-12", "yes")
    github = FakeGitHub(tmp_path)

    result = await run_pr_pipeline(repo, github, provider, ask=operator)

    assert result.status is PRRunStatus.CREATED
    assert operator.questions[0] == "Which ticket does this close?"
    assert "Additional context from user: AUTH-12" in provider.prompts[1]
    assert github.created[0]["title"] == "Close AUTH-12"


@pytest.mark.asyncio
async def test_feedback_uses_update_prompt(tmp_path: Path) -> None:
    repo = ScriptedRepo(tmp_path, feature_branch_handler())
    provider = MockProvider([pr_json(title="Long title"), pr_json(title="Short")])
    github = FakeGitHub(tmp_path)

    await run_pr_pipeline(repo, github, provider, ask=Operator("shorter title please", "y"))

    assert "Title: Long title" in provider.prompts[1]
    assert "User feedback: shorter title please" in provider.prompts[1]
    assert github.created[0]["title"] == "Short"
