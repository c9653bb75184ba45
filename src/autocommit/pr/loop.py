"""Clarification and refinement loop for generated PR content.

The loop is a small state machine. It never talks to git or the model
directly: questions go through an injected ``ask`` callable and new content
comes from an injected ``generate`` callable, so the whole conversation can
be driven from tests with plain coroutines.

States:
    GENERATED -> AWAITING_CLARIFICATION_ANSWER -> GENERATED ...
    GENERATED -> AWAITING_OPERATOR_DECISION -> REVISING -> AWAITING_OPERATOR_DECISION ...
    AWAITING_OPERATOR_DECISION -> ACCEPTED | CANCELLED
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum

from autocommit.core.console import get_logger
from autocommit.pr.models import PRContent

logger = get_logger(__name__)

DECISION_PROMPT = "Create PR with this content? (y/n/or provide feedback)"

_ACCEPT_ANSWERS = frozenset({"", "y", "yes"})
_CANCEL_ANSWERS = frozenset({"n", "no"})

# ask(question) -> operator's answer
Asker = Callable[[str], Awaitable[str]]
# generate(additional_context, previous) -> fresh content
ContentGenerator = Callable[[str | None, PRContent | None], Awaitable[PRContent]]
# on_update(content, revised) -> None
UpdateHook = Callable[[PRContent, bool], None]


class LoopState(Enum):
    """Where the conversation with the operator currently stands."""

    GENERATED = "generated"
    AWAITING_CLARIFICATION_ANSWER = "awaiting_clarification_answer"
    AWAITING_OPERATOR_DECISION = "awaiting_operator_decision"
    REVISING = "revising"
    ACCEPTED = "accepted"
    CANCELLED = "cancelled"


@dataclass(frozen=True, slots=True)
class LoopOutcome:
    """Final state of a loop run and the content it settled on."""

    state: LoopState
    content: PRContent

    @property
    def accepted(self) -> bool:
        return self.state is LoopState.ACCEPTED


class RefinementLoop:
    """Drive clarification rounds and operator review for one PR.

    Args:
        ask: Coroutine that puts a question to the operator and returns the
            answer.
        generate: Coroutine that produces new content. Called with the
            operator's answer and ``None`` for a clarification round, and
            with the feedback and the current content for a revision.
        auto_accept: Accept the content without a decision prompt.
        dry_run: Stop once clarification is settled; nothing is accepted.
        on_update: Called with each settled version of the content, with
            ``revised`` True after an operator revision.
    """

    def __init__(
        self,
        *,
        ask: Asker,
        generate: ContentGenerator,
        auto_accept: bool = False,
        dry_run: bool = False,
        on_update: UpdateHook | None = None,
    ) -> None:
        self._ask = ask
        self._generate = generate
        self._auto_accept = auto_accept
        self._dry_run = dry_run
        self._on_update = on_update
        self.state = LoopState.GENERATED
        self.rounds = 0

    def _transition(self, state: LoopState) -> None:
        logger.debug("Refinement loop: %s -> %s", self.state.value, state.value)
        self.state = state

    def _notify(self, content: PRContent, revised: bool) -> None:
        if self._on_update is not None:
            self._on_update(content, revised)

    async def clarify(self, content: PRContent) -> PRContent:
        """Answer the model's questions until it stops asking.

        An empty answer ends the sub-loop without another model call.
        """
        while (question := content.pending_question) is not None:
            self._transition(LoopState.AWAITING_CLARIFICATION_ANSWER)
            answer = (await self._ask(question)).strip()
            if not answer:
                self._transition(LoopState.GENERATED)
                return content.model_copy(update={"needs_clarification": False})

            self.rounds += 1
            content = await self._generate(answer, None)
            self._transition(LoopState.GENERATED)
        return content

    async def run(self, initial: PRContent) -> LoopOutcome:
        """Run the loop from freshly generated *initial* content."""
        self.state = LoopState.GENERATED
        content = await self.clarify(initial)
        self._notify(content, False)

        if self._dry_run:
            return LoopOutcome(self.state, content)

        if self._auto_accept:
            self._transition(LoopState.ACCEPTED)
            return LoopOutcome(self.state, content)

        while True:
            self._transition(LoopState.AWAITING_OPERATOR_DECISION)
            answer = (await self._ask(DECISION_PROMPT)).strip()
            choice = answer.lower()

            if choice in _ACCEPT_ANSWERS:
                self._transition(LoopState.ACCEPTED)
                return LoopOutcome(self.state, content)
            if choice in _CANCEL_ANSWERS:
                self._transition(LoopState.CANCELLED)
                return LoopOutcome(self.state, content)

            self._transition(LoopState.REVISING)
            self.rounds += 1
            content = await self._generate(answer, content)
            self._notify(content, True)


__all__ = [
    "DECISION_PROMPT",
    "LoopOutcome",
    "LoopState",
    "RefinementLoop",
]
