"""autocommit - AI-written commit messages and pull requests.

This package turns local repository state (staged changes, or a feature
branch compared with its base) into a commit message or a pull request
title and description generated by a language model.

Exports:
    __version__: Package version string.
"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.3.0"
