"""Prompt construction for PR and commit generation.

Prompts are rendered from the Jinja2 templates shipped in
``autocommit/templates``. Both builders are pure: the same inputs always
produce the same text.
"""

from __future__ import annotations

from autocommit.core.filters import MAX_DIFF_SIZE, byte_prefix
from autocommit.core.templates import render_template
from autocommit.pr.models import ChangeSet, PRContent

NEW_PR_TEMPLATE = "pr_new.txt.j2"
UPDATE_PR_TEMPLATE = "pr_update.txt.j2"
COMMIT_TEMPLATE = "commit_message.txt.j2"


def build_pr_prompt(
    change_set: ChangeSet,
    template: str | None = None,
    additional_context: str | None = None,
    previous: PRContent | None = None,
) -> str:
    """Render the prompt for a new PR, or for revising *previous*.

    In update mode *additional_context* is the operator's feedback and the
    change set is not repeated.
    """
    if previous is not None:
        return render_template(
            UPDATE_PR_TEMPLATE,
            {"previous": previous, "feedback": additional_context or ""},
        )

    return render_template(
        NEW_PR_TEMPLATE,
        {
            "additional_context": additional_context,
            "template": template,
            "changed_files": change_set.changed_files,
            "commit_log": change_set.commit_log,
            "diff": byte_prefix(change_set.diff, MAX_DIFF_SIZE),
        },
    )


def build_commit_prompt(diff: str) -> str:
    """Render the commit-message prompt for an already truncated *diff*."""
    return render_template(COMMIT_TEMPLATE, {"diff": diff})


__all__ = ["build_commit_prompt", "build_pr_prompt"]
