"""
Unified Result types and error hierarchy for autocommit.

This module provides:
1. Result[T, E] type for explicit error handling at the command-runner seam
2. Domain-specific exception hierarchy shared by the commit and PR pipelines

Usage:
    from autocommit.core.result import Ok, Err, Result, GitError

    async def current_branch() -> Result[str, GitError]:
        ...

    match await current_branch():
        case Ok(name):
            print(name)
        case Err(err):
            print(err.stderr)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, TypeVar

T = TypeVar("T")
U = TypeVar("U")
E = TypeVar("E", bound=Exception)
F = TypeVar("F", bound=Exception)


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Represents a successful result containing a value."""

    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        """Return the contained value."""
        return self.value

    def unwrap_or(self, default: T) -> T:
        """Return the contained value (ignores default for Ok)."""
        return self.value

    def map(self, fn: Callable[[T], U]) -> Ok[U]:
        """Apply a function to the contained value."""
        return Ok(fn(self.value))

    def map_err(self, fn: Callable[[E], F]) -> Ok[T]:
        """No-op for Ok - returns self unchanged."""
        return self


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """Represents a failed result containing an error."""

    error: E

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> T:
        """Raise the contained error."""
        raise self.error

    def unwrap_or(self, default: T) -> T:
        """Return the default value."""
        return default

    def map(self, fn: Callable[[T], U]) -> Err[E]:
        """No-op for Err - returns self unchanged."""
        return self

    def map_err(self, fn: Callable[[E], F]) -> Err[F]:
        """Apply a function to the contained error."""
        return Err(fn(self.error))


# Type alias for Result
Result = Ok[T] | Err[E]


# ---------------------------------------------------------------------------
# Domain-specific error hierarchy
# ---------------------------------------------------------------------------


class AutocommitError(Exception):
    """Base exception for all autocommit errors.

    Everything raised by the pipelines derives from this class so the CLI
    layer can report any of them uniformly.
    """

    def __init__(self, message: str, *, context: dict | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            ctx_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} [{ctx_str}]"
        return self.message


class UserError(AutocommitError):
    """Raised when the repository is not in a state the tool can work with.

    Examples:
    - No staged changes
    - Not on a branch, or on the base branch
    - No changes compared to the base branch
    """

    def __str__(self) -> str:
        return self.message


class GitError(AutocommitError):
    """Raised when a git or gh command exits non-zero."""

    def __init__(
        self,
        message: str,
        *,
        command: str = "",
        stderr: str = "",
        context: dict | None = None,
    ) -> None:
        super().__init__(message, context=context)
        self.command = command
        self.stderr = stderr

    def __str__(self) -> str:
        if self.command:
            detail = f"\n{self.stderr}" if self.stderr else ""
            return f"Git command failed: {self.command}{detail}"
        return super().__str__()


class RemoteServiceError(AutocommitError):
    """Raised when the model provider returns a non-success outcome.

    Carries the HTTP-like status (when the provider reported one) and the
    response body so the operator can see what the service said.
    """

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        body: str = "",
        context: dict | None = None,
    ) -> None:
        super().__init__(message, context=context)
        self.status = status
        self.body = body

    def __str__(self) -> str:
        if self.status is not None:
            return f"API request failed with status {self.status}: {self.body or self.message}"
        return f"API error: {self.message}"


class MalformedOutputError(AutocommitError):
    """Raised when model output does not decode as the expected structure."""

    def __init__(self, raw_text: str, decode_error: str) -> None:
        super().__init__("Failed to parse API response as JSON")
        self.raw_text = raw_text
        self.decode_error = decode_error

    def __str__(self) -> str:
        return f"{self.message}: {self.decode_error}\nResponse: {self.raw_text}"


class ConfigurationError(AutocommitError):
    """Raised for configuration issues.

    Examples:
    - Missing API key
    - Invalid config values
    - Config file parse errors
    """


class WorkspaceError(AutocommitError):
    """Raised for local file or environment access failures.

    Examples:
    - Repository path does not exist
    - git or gh executable not found
    """


__all__ = [
    # Result types
    "Ok",
    "Err",
    "Result",
    # Error hierarchy
    "AutocommitError",
    "UserError",
    "GitError",
    "RemoteServiceError",
    "MalformedOutputError",
    "ConfigurationError",
    "WorkspaceError",
]
