"""
Anthropic Claude provider implementation.

Usage:
    from autocommit.providers.anthropic import AnthropicProvider

    provider = AnthropicProvider(config)
    response = await provider.complete(
        messages=[Message(role="user", content="Hello")],
        options=CompletionOptions(max_tokens=256),
    )
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Protocol, cast

import anthropic

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
    # Anthropic key pattern: sk-ant-[base64 chars]
    sk-ant-[A-Za-z0-9_\-]{20,}|
    # Generic API key patterns that might appear in error messages
    (?:api[_-]?key|secret|token|password|credential)
    \s*[=:]\s*
    ['"]?[A-Za-z0-9_\-]{16,}['"]?
    """,
    re.IGNORECASE | re.VERBOSE,
)

DEFAULT_MAX_TOKENS = 1024


def _redact_api_key(message: str, api_key: str | None = None) -> str:
    """Remove potential API keys from error messages to prevent leaking secrets."""
    if api_key and api_key in message:
        message = message.replace(api_key, "[REDACTED]")
    return _API_KEY_PATTERN.sub("[REDACTED]", message)


class _ContentBlock(Protocol):
    type: str
    text: str | None


class _Usage(Protocol):
    input_tokens: int
    output_tokens: int


class _MessageResponse(Protocol):
    content: list[_ContentBlock]
    model: str
    stop_reason: str | None
    usage: _Usage | None


class _MessagesAPI(Protocol):
    async def create(self, **kwargs: object) -> object: ...


class AnthropicClientProtocol(Protocol):
    messages: _MessagesAPI


def _convert_messages_to_anthropic(messages: list[Message]) -> list[dict[str, object]]:
    return [{"role": msg.role, "content": msg.content} for msg in messages]


def _first_text_segment(content_blocks: list[_ContentBlock]) -> str:
    """Return the first content block's text, trimmed."""
    if not content_blocks:
        raise EmptyResponseError()
    first = content_blocks[0]
    if first.type != "text" or first.text is None:
        raise EmptyResponseError()
    return first.text.strip()


@register_provider(ProviderType.ANTHROPIC)
class AnthropicProvider(BaseLLMProvider):
    """Anthropic Claude provider implementation.

    The API key comes from the AppConfig passed in, which reads
    ANTHROPIC_API_KEY from the environment or a .env file.
    """

    def __init__(self, config: AppConfig, client: AnthropicClientProtocol | None = None) -> None:
        super().__init__(config)
        self._client = client

    def _get_client(self) -> AnthropicClientProtocol:
        """Lazy-initialize the Anthropic client."""
        if self._client is not None:
            return self._client

        api_key = self._config.api_key_for("anthropic")
        client = anthropic.AsyncAnthropic(api_key=api_key)
        self._client = cast(AnthropicClientProtocol, client)
        return self._client

    @property
    def provider_type(self) -> ProviderType:
        return ProviderType.ANTHROPIC

    @property
    def default_model(self) -> str:
        return self._config.model

    async def complete(
        self,
        messages: list[Message],
        model: str | None = None,
        options: CompletionOptions | None = None,
    ) -> CompletionResponse:
        """Send a completion request to Anthropic."""
        client = self._get_client()
        opts = options or CompletionOptions()

        params: dict[str, object] = {
            "model": model or self.default_model,
            "messages": _convert_messages_to_anthropic(messages),
            "max_tokens": opts.max_tokens or DEFAULT_MAX_TOKENS,
        }

        try:
            response_obj = await client.messages.create(**params)
        except anthropic.AnthropicError as exc:
            self._handle_api_error(exc)
            raise AssertionError("unreachable")

        response = cast(_MessageResponse, response_obj)
        text_content = _first_text_segment(response.content)

        usage = None
        if response.usage:
            usage = TokenUsage(
                prompt_tokens=response.usage.input_tokens,
                completion_tokens=response.usage.output_tokens,
            )

        return CompletionResponse(
            content=text_content,
            model=response.model,
            finish_reason=response.stop_reason,
            usage=usage,
            raw_response=response,
        )

    def _handle_api_error(self, exc: anthropic.AnthropicError) -> None:
        """Convert Anthropic exceptions to our error types.

        All error messages are redacted to prevent API key leakage.
        """
        key = self._config.anthropic_api_key
        safe_msg = _redact_api_key(str(exc), key.get_secret_value() if key else None)

        if not isinstance(exc, anthropic.APIStatusError):
            raise ProviderError(safe_msg) from exc

        status = exc.status_code
        body = _redact_api_key(exc.response.text, key.get_secret_value() if key else None)

        if isinstance(exc, anthropic.AuthenticationError):
            raise AuthenticationError(safe_msg, status=status, body=body) from exc
        if isinstance(exc, anthropic.RateLimitError):
            raise RateLimitError(safe_msg, status=status, body=body) from exc
        if isinstance(exc, anthropic.NotFoundError):
            raise ModelNotFoundError(safe_msg, status=status, body=body) from exc
        if isinstance(exc, anthropic.BadRequestError):
            msg_lower = safe_msg.lower()
            if "context" in msg_lower or "token" in msg_lower:
                raise ContextLengthError(safe_msg, status=status, body=body) from exc
        raise ProviderError(safe_msg, status=status, body=body) from exc


__all__ = ["AnthropicProvider"]
