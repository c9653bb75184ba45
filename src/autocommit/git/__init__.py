"""Git and GitHub operations.

This package provides async wrappers around the git and gh CLIs:
    - run_command: Non-blocking command runner returning a Result
    - AsyncRepo: Branch state, staged changes and base comparisons
    - with_fallback: Primary/secondary query combinator
    - GitHubCLI: Existing-PR lookup and PR creation
"""

from __future__ import annotations

from .client import (
    DEFAULT_BASE_BRANCH,
    FALLBACK_BASE,
    AsyncRepo,
    run_command,
    with_fallback,
)
from .github import GitHubCLI

__all__ = [
    "AsyncRepo",
    "DEFAULT_BASE_BRANCH",
    "FALLBACK_BASE",
    "GitHubCLI",
    "run_command",
    "with_fallback",
]
