"""Result types returned by storybook operations."""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class CleanupReport(BaseModel):
    """Outcome of best-effort asset cleanup.

    Reported next to the primary mutation's result; a failed deletion here
    never reverses or fails the mutation itself.
    """

    attempted: list[str] = Field(default_factory=list)
    failed: dict[str, str] = Field(default_factory=dict, description="Asset URL to error message")

    @property
    def ok(self) -> bool:
        return not self.failed


class TranslationState(str, Enum):
    """Lifecycle of one (page, language) translation."""
    MISSING = "missing"
    PENDING = "pending"
    CACHED = "cached"
    FAILED = "failed"


class BulkTranslationResult(BaseModel):
    """Summary of a translate-all-pages run."""

    storybook_id: str
    language: str
    translated: list[str] = Field(default_factory=list, description="Page ids translated in this run")
    skipped: list[str] = Field(default_factory=list, description="Page ids already cached")
    failed: dict[str, str] = Field(default_factory=dict, description="Page id to error message")

    @property
    def success(self) -> bool:
        return not self.failed

    @property
    def provider_calls(self) -> int:
        return len(self.translated) + len(self.failed)


class StoryDraftPage(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    text: str
    image_prompt: str = Field(default="", alias="imagePrompt")


class StoryDraft(BaseModel):
    """A generated story outline, not yet saved as a storybook."""

    title: str
    pages: list[StoryDraftPage] = Field(default_factory=list)


class OperationResult(BaseModel):
    """Success or failure of one operation, with a short human-readable message."""

    success: bool
    data: Optional[Any] = None
    error: Optional[str] = None
    error_code: Optional[str] = None

    @classmethod
    def ok(cls, data: Any = None) -> "OperationResult":
        return cls(success=True, data=data)

    @classmethod
    def failure(cls, message: str, code: str = "error") -> "OperationResult":
        return cls(success=False, error=message, error_code=code)
