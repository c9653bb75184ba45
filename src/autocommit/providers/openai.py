"""
OpenAI provider implementation.

Selected when AUTOCOMMIT_MODEL names a GPT or o-series model.

Usage:
    from autocommit.providers.openai import OpenAIProvider

    provider = OpenAIProvider(config)
    response = await provider.complete(
        messages=[Message(role="user", content="Hello")],
        model="gpt-4o",
    )
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Protocol, cast

import openai

from autocommit.providers import (
    AuthenticationError,
    BaseLLMProvider,
    CompletionOptions,
    CompletionResponse,
    ContextLengthError,
    EmptyResponseError,
    Message,
    ModelNotFoundError,
    ProviderError,
    ProviderType,
    RateLimitError,
    TokenUsage,
    register_provider,
)

if TYPE_CHECKING:
    from autocommit.core.config import AppConfig

# Pattern to match potential API keys in error messages
_API_KEY_PATTERN = re.compile(
    r"""
    # OpenAI key pattern: sk-[base64 chars]
    sk-[A-Za-z0-9_\-]{20,}|
    # Generic API key patterns that might appear in error messages
    (?:api[_-]?key|secret|token|password|credential)
    \s*[=:]\s*
    ['"]?[A-Za-z0-9_\-]{16,}['"]?
    """,
    re.IGNORECASE | re.VERBOSE,
)

# o-series reasoning models take max_completion_tokens instead of max_tokens.
_REASONING_PREFIXES = ("o1", "o3", "o4")


def _redact_api_key(message: str, api_key: str | None = None) -> str:
    """Remove potential API keys from error messages to prevent leaking secrets."""
    if api_key and api_key in message:
        message = message.replace(api_key, "[REDACTED]")
    return _API_KEY_PATTERN.sub("[REDACTED]", message)


class _CompletionMessage(Protocol):
    content: str | None


class _CompletionChoice(Protocol):
    message: _CompletionMessage
    finish_reason: str | None


class _Usage(Protocol):
    prompt_tokens: int
    completion_tokens: int


class _CompletionResponse(Protocol):
    choices: list[_CompletionChoice]
    model: str
    usage: _Usage | None


class _CompletionsAPI(Protocol):
    async def create(self, **kwargs: object) -> object: ...


class _ChatAPI(Protocol):
    completions: _CompletionsAPI


class OpenAIClientProtocol(Protocol):
    chat: _ChatAPI


def _convert_messages_to_openai(messages: list[Message]) -> list[dict[str, object]]:
    return [{"role": msg.role, "content": msg.content} for msg in messages]


@register_provider(ProviderType.OPENAI)
class OpenAIProvider(BaseLLMProvider):
    """OpenAI provider implementation.

    The API key comes from the AppConfig passed in (OPENAI_API_KEY).
    """

    def __init__(self, config: AppConfig, client: OpenAIClientProtocol | None = None) -> None:
        super().__init__(config)
        self._client = client

    def _get_client(self) -> OpenAIClientProtocol:
        """Lazy-initialize the OpenAI client."""
        if self._client is not None:
            return self._client

        api_key = self._config.api_key_for("openai")
        client = openai.AsyncOpenAI(api_key=api_key)
        self._client = cast(OpenAIClientProtocol, client)
        return self._client

    @property
    def provider_type(self) -> ProviderType:
        return ProviderType.OPENAI

    @property
    def default_model(self) -> str:
        return self._config.model

    async def complete(
        self,
        messages: list[Message],
        model: str | None = None,
        options: CompletionOptions | None = None,
    ) -> CompletionResponse:
        """Send a completion request to OpenAI."""
        client = self._get_client()
        opts = options or CompletionOptions()

        model_id = model or self.default_model
        params: dict[str, object] = {
            "model": model_id,
            "messages": _convert_messages_to_openai(messages),
        }
        if opts.max_tokens:
            if model_id.startswith(_REASONING_PREFIXES):
                params["max_completion_tokens"] = opts.max_tokens
            else:
                params["max_tokens"] = opts.max_tokens

        try:
            response_obj = await client.chat.completions.create(**params)
        except openai.OpenAIError as exc:
            self._handle_api_error(exc)
            raise AssertionError("unreachable")

        response = cast(_CompletionResponse, response_obj)
        choice = response.choices[0] if response.choices else None
        if choice is None or not choice.message.content:
            raise EmptyResponseError()

        usage = None
        if response.usage:
            usage = TokenUsage(
                prompt_tokens=response.usage.prompt_tokens,
                completion_tokens=response.usage.completion_tokens,
            )

        return CompletionResponse(
            content=choice.message.content.strip(),
            model=response.model,
            finish_reason=choice.finish_reason,
            usage=usage,
            raw_response=response,
        )

    def _handle_api_error(self, exc: openai.OpenAIError) -> None:
        """Convert OpenAI exceptions to our error types.

        All error messages are redacted to prevent API key leakage.
        """
        key = self._config.openai_api_key
        secret = key.get_secret_value() if key else None
        safe_msg = _redact_api_key(str(exc), secret)

        if not isinstance(exc, openai.APIStatusError):
            raise ProviderError(safe_msg) from exc

        status = exc.status_code
        body = _redact_api_key(exc.response.text, secret)

        if isinstance(exc, openai.AuthenticationError):
            raise AuthenticationError(safe_msg, status=status, body=body) from exc
        if isinstance(exc, openai.RateLimitError):
            raise RateLimitError(safe_msg, status=status, body=body) from exc
        if isinstance(exc, openai.NotFoundError):
            raise ModelNotFoundError(safe_msg, status=status, body=body) from exc
        if isinstance(exc, openai.BadRequestError):
            msg_lower = safe_msg.lower()
            if "context" in msg_lower or "token" in msg_lower or "length" in msg_lower:
                raise ContextLengthError(safe_msg, status=status, body=body) from exc
        raise ProviderError(safe_msg, status=status, body=body) from exc


__all__ = ["OpenAIProvider"]
