"""Core shared infrastructure for autocommit.

This package contains foundational utilities:
    - config: Application configuration management
    - console: Rich console output and logging
    - decorators: CLI error reporting
    - filters: Lock-file filtering and diff truncation
    - result: Result type and error hierarchy
    - runtime: Per-invocation CLI state
    - templates: Jinja2 prompt rendering
"""

from __future__ import annotations

from . import config, console

__all__ = ["config", "console"]
