"""Data models for the pull-request pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field

from pydantic import BaseModel, ConfigDict, Field, field_validator


@dataclass(frozen=True)
class BranchContext:
    """The feature branch being described and the branch it targets."""

    current_branch: str
    base_branch: str


@dataclass(frozen=True)
class ChangeSet:
    """Everything gathered about the branch that is shown to the model."""

    commit_log: str
    diff: str
    changed_files: list[str] = field(default_factory=list)


class PRContent(BaseModel):
    """Title and body proposed by the model.

    Decoded strictly from the model's JSON reply: only the camelCase wire
    names are read, booleans must be JSON booleans, and unknown keys
    (snake_case spellings included) are ignored. The clarification fields
    may be missing or null.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    title: str
    body: str
    needs_clarification: bool = Field(default=False, alias="needsClarification")
    clarification_question: str | None = Field(default=None, alias="clarificationQuestion")

    @field_validator("needs_clarification", mode="before")
    @classmethod
    def _null_means_no(cls, value: object) -> object:
        return False if value is None else value

    @property
    def pending_question(self) -> str | None:
        """The question to put to the operator, if the model is asking one."""
        if self.needs_clarification and self.clarification_question:
            return self.clarification_question
        return None


__all__ = ["BranchContext", "ChangeSet", "PRContent"]
