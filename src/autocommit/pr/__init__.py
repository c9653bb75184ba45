"""Pull-request generation.

    - models: BranchContext, ChangeSet and the PRContent wire model
    - gather: Branch resolution and concurrent change gathering
    - prompting: Prompt rendering for new and revised PRs
    - interpreter: Model call and strict decoding of the reply
    - loop: Clarification and operator refinement state machine
    - pipeline: The end-to-end run
"""

from __future__ import annotations

from .models import BranchContext, ChangeSet, PRContent
from .pipeline import PRRunResult, PRRunStatus, run_pr_pipeline

__all__ = [
    "BranchContext",
    "ChangeSet",
    "PRContent",
    "PRRunResult",
    "PRRunStatus",
    "run_pr_pipeline",
]
