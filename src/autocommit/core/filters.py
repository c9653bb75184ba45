"""Lock-file filtering and diff truncation.

Dependency lockfiles produce enormous, meaningless diffs. They are kept away
from the model twice: as pathspec exclusions when git produces a diff, and by
filtering file lists after the fact.
"""

from __future__ import annotations

from collections.abc import Iterable

# Ceiling applied to diffs before they are embedded in a prompt.
MAX_DIFF_SIZE = 8000

LOCK_FILES: tuple[str, ...] = (
    "package-lock.json",
    "bun.lock",
    "bun.lockb",
    "yarn.lock",
    "pnpm-lock.yaml",
    "Gemfile.lock",
    "Cargo.lock",
    "poetry.lock",
    "composer.lock",
    "go.sum",
    "Pipfile.lock",
    "npm-shrinkwrap.json",
    "deno.lock",
    "flake.lock",
    "pdm.lock",
    "uv.lock",
)

_LOCK_FILE_SET = frozenset(LOCK_FILES)


def _basename(path: str) -> str:
    return path.rsplit("/", 1)[-1]


def is_lock_file(path: str) -> bool:
    """Return True if the final path segment is a known lockfile name."""
    return _basename(path) in _LOCK_FILE_SET


def filter_lock_files(files: Iterable[str]) -> list[str]:
    """Drop lockfiles from *files*, keeping the original order."""
    return [path for path in files if not is_lock_file(path)]


def lock_file_exclusions() -> list[str]:
    """Return git pathspec tokens (``:!<name>``) excluding every lockfile."""
    return [f":!{name}" for name in LOCK_FILES]


def byte_prefix(text: str, max_size: int) -> str:
    """Return at most the first *max_size* UTF-8 bytes of *text*.

    A multi-byte character split by the cut is dropped rather than mangled.
    """
    return text.encode("utf-8")[:max_size].decode("utf-8", errors="ignore")


def truncate_diff(diff: str, max_size: int = MAX_DIFF_SIZE) -> tuple[str, bool]:
    """Cut *diff* to *max_size* bytes and note how much was dropped.

    Returns:
        ``(text, truncated)``. When the diff fits, ``text`` is the input
        unchanged and ``truncated`` is False.
    """
    size = len(diff.encode("utf-8"))
    if size <= max_size:
        return diff, False
    omitted = size - max_size
    return f"{byte_prefix(diff, max_size)}\n\n... (diff truncated, {omitted} characters omitted)", True


__all__ = [
    "LOCK_FILES",
    "MAX_DIFF_SIZE",
    "byte_prefix",
    "filter_lock_files",
    "is_lock_file",
    "lock_file_exclusions",
    "truncate_diff",
]
