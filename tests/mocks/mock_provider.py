"""Mock LLM provider for pipeline and loop tests.

Provides a deterministic provider that satisfies the LLMProvider protocol
without making real API calls.
"""

from __future__ import annotations

import json
from autocommit.providers import (
    CompletionOptions,
    CompletionResponse,
    Message,
    ProviderType,
    TokenUsage,
)


def pr_json(
    title: str = "Add feature",
    body: str = "## Summary\nAdds a feature",
    *,
    needs_clarification: bool = False,
    question: str | None = None,
) -> str:
    """Serialize a PR reply the way the model is asked to produce it."""
    return json.dumps(
        {
            "title": title,
            "body": body,
            "needsClarification": needs_clarification,
            "clarificationQuestion": question,
        }
    )


class MockProvider:
    """Deterministic mock LLM provider.

    Replies are returned in the order given; once exhausted, the last reply
    repeats. Every prompt received is recorded in ``prompts``.

    Usage:
        provider = MockProvider([pr_json(title="First"), pr_json(title="Second")])
        provider.simulate_error(RateLimitError("slow down", status=429), on_call=2)
    """

    def __init__(self, responses: list[str] | None = None) -> None:
        self._responses = list(responses or [pr_json()])
        self.prompts: list[str] = []
        self.options: list[CompletionOptions | None] = []
        self._simulated_error: Exception | None = None
        self._error_on_call: int | None = None
        self.call_count = 0

    def simulate_error(self, error: Exception, *, on_call: int | None = None) -> MockProvider:
        """Raise *error* on every call, or only on call number *on_call* (1-indexed)."""
        self._simulated_error = error
        self._error_on_call = on_call
        return self

    def _check_and_raise_error(self) -> None:
        if self._simulated_error is None:
            return
        if self._error_on_call is not None and self.call_count != self._error_on_call:
            return
        raise self._simulated_error

    @property
    def provider_type(self) -> ProviderType:
        return ProviderType.ANTHROPIC

    @property
    def default_model(self) -> str:
        return "mock-model"

    async def complete(
        self,
        messages: list[Message],
        model: str | None = None,
        options: CompletionOptions | None = None,
    ) -> CompletionResponse:
        self.call_count += 1
        self._check_and_raise_error()

        self.prompts.append(messages[-1].content if messages else "")
        self.options.append(options)

        index = min(self.call_count, len(self._responses)) - 1
        return CompletionResponse(
            content=self._responses[index],
            model=model or self.default_model,
            finish_reason="end_turn",
            usage=TokenUsage(prompt_tokens=100, completion_tokens=50),
        )

