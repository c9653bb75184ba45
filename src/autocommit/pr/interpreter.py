"""Turn model replies into PR content and commit messages."""

from __future__ import annotations

from pydantic import ValidationError

from autocommit.core.console import get_logger
from autocommit.core.result import MalformedOutputError
from autocommit.pr.models import PRContent
from autocommit.pr.prompting import build_commit_prompt
from autocommit.providers import CompletionOptions, LLMProvider, Message

logger = get_logger(__name__)

PR_MAX_TOKENS = 1024
COMMIT_MAX_TOKENS = 256


async def _complete_text(
    provider: LLMProvider, prompt: str, max_tokens: int, model: str | None
) -> str:
    response = await provider.complete(
        messages=[Message(role="user", content=prompt)],
        model=model,
        options=CompletionOptions(max_tokens=max_tokens),
    )
    if response.usage:
        logger.debug(
            "Model %s used %s prompt / %s completion tokens",
            response.model,
            response.usage.prompt_tokens,
            response.usage.completion_tokens,
        )
    return response.content


async def generate_pr_content(
    provider: LLMProvider,
    prompt: str,
    max_tokens: int = PR_MAX_TOKENS,
    model: str | None = None,
) -> PRContent:
    """Make one model call and decode the reply strictly as PRContent.

    Decoding is strict: near-miss values such as ``"true"`` or ``1`` for a
    boolean are rejected, not coerced. There is no repair or retry; text
    that is not the expected JSON object raises MalformedOutputError with the raw reply attached.

    Raises:
        RemoteServiceError: The provider call failed or returned no text
        MalformedOutputError: The reply did not decode
    """
    raw = await _complete_text(provider, prompt, max_tokens, model)
    try:
        return PRContent.model_validate_json(raw, strict=True)
    except ValidationError as exc:
        raise MalformedOutputError(raw, str(exc)) from exc


async def generate_commit_message(
    provider: LLMProvider,
    diff: str,
    max_tokens: int = COMMIT_MAX_TOKENS,
    model: str | None = None,
) -> str:
    """Ask the model for a single-line commit message describing *diff*."""
    message = await _complete_text(provider, build_commit_prompt(diff), max_tokens, model)
    return message.strip()


__all__ = ["COMMIT_MAX_TOKENS", "PR_MAX_TOKENS", "generate_commit_message", "generate_pr_content"]
