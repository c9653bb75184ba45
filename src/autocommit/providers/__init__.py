"""
LLM Provider abstraction for autocommit.

This module provides a unified interface for the remote text-generation call
(Anthropic Claude, OpenAI GPT). Every provider takes a list of role-tagged
messages and an output budget and returns the first text segment of the
reply, or raises a ProviderError carrying the service's status and body.

Usage:
    from autocommit.providers.factory import get_provider

    provider = get_provider(config)
    response = await provider.complete(
        messages=[Message(role="user", content="Hello")],
        options=CompletionOptions(max_tokens=256),
    )
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING, Any, Protocol, TypeVar, runtime_checkable

from autocommit.core.result import RemoteServiceError

if TYPE_CHECKING:
    from autocommit.core.config import AppConfig


class ProviderType(Enum):
    """Supported LLM provider backends."""

    ANTHROPIC = auto()
    OPENAI = auto()


@dataclass(frozen=True, slots=True)
class Message:
    """A message in the conversation history."""

    role: str  # "user" or "assistant"
    content: str


@dataclass(frozen=True, slots=True)
class TokenUsage:
    """Token usage for a completion request."""

    prompt_tokens: int
    completion_tokens: int
    total_tokens: int | None = None

    def __post_init__(self) -> None:
        if self.total_tokens is None:
            object.__setattr__(
                self, "total_tokens", self.prompt_tokens + self.completion_tokens
            )


@dataclass(slots=True)
class CompletionResponse:
    """Response from an LLM completion request."""

    content: str
    model: str
    finish_reason: str | None = None
    usage: TokenUsage | None = None
    raw_response: Any = None  # Provider-specific response object


@dataclass(frozen=True, slots=True)
class CompletionOptions:
    """Options for completion requests.

    ``max_tokens`` is the output budget; each provider maps it to its own
    parameter name.
    """

    max_tokens: int | None = None


class ProviderError(RemoteServiceError):
    """Base exception for provider errors."""


class AuthenticationError(ProviderError):
    """Raised when authentication fails."""


class RateLimitError(ProviderError):
    """Raised when rate limit is exceeded."""


class ModelNotFoundError(ProviderError):
    """Raised when the requested model is not available."""


class ContextLengthError(ProviderError):
    """Raised when input exceeds model's context length."""


class EmptyResponseError(ProviderError):
    """Raised when the provider answers without any text content."""

    def __init__(self) -> None:
        super().__init__("Empty response from API")


@runtime_checkable
class LLMProvider(Protocol):
    """Protocol defining the interface for LLM providers."""

    @property
    def provider_type(self) -> ProviderType:
        """Return the provider type."""
        ...

    @property
    def default_model(self) -> str:
        """Return the default model ID for this provider."""
        ...

    async def complete(
        self,
        messages: list[Message],
        model: str | None = None,
        options: CompletionOptions | None = None,
    ) -> CompletionResponse:
        """Send a completion request and return the full response.

        Raises:
            ProviderError: On API errors or an empty reply
        """
        ...


class BaseLLMProvider(ABC):
    """Abstract base class for LLM providers."""

    def __init__(self, config: AppConfig) -> None:
        self._config = config

    @property
    @abstractmethod
    def provider_type(self) -> ProviderType:
        """Return the provider type."""
        ...

    @property
    @abstractmethod
    def default_model(self) -> str:
        """Return the default model ID."""
        ...

    @abstractmethod
    async def complete(
        self,
        messages: list[Message],
        model: str | None = None,
        options: CompletionOptions | None = None,
    ) -> CompletionResponse:
        """Send a completion request."""
        ...


ProviderT = TypeVar("ProviderT", bound=type[BaseLLMProvider])

PROVIDER_REGISTRY: dict[ProviderType, type[BaseLLMProvider]] = {}


def register_provider(ptype: ProviderType) -> Callable[[ProviderT], ProviderT]:
    """Class decorator adding a provider implementation to the registry."""

    def decorator(cls: ProviderT) -> ProviderT:
        PROVIDER_REGISTRY[ptype] = cls
        return cls

    return decorator


def infer_provider_type(model_id: str) -> ProviderType:
    """Infer the provider type from a model ID.

    Raises:
        ModelNotFoundError: If provider cannot be inferred
    """
    model_lower = model_id.lower()
    if model_lower.startswith("claude"):
        return ProviderType.ANTHROPIC
    if model_lower.startswith(("gpt-", "o1", "o3", "o4")):
        return ProviderType.OPENAI

    raise ModelNotFoundError(f"Cannot infer provider for model: {model_id}")


__all__ = [
    # Types
    "ProviderType",
    "Message",
    "CompletionResponse",
    "TokenUsage",
    "CompletionOptions",
    # Errors
    "ProviderError",
    "AuthenticationError",
    "RateLimitError",
    "ModelNotFoundError",
    "ContextLengthError",
    "EmptyResponseError",
    # Protocol and base
    "LLMProvider",
    "BaseLLMProvider",
    # Registry and helpers
    "PROVIDER_REGISTRY",
    "register_provider",
    "infer_provider_type",
]
