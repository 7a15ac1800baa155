"""Storybook and page entities.

A storybook embeds its full ordered list of pages. Page ``order`` values are
kept as a contiguous 0-based sequence; ``renumber_pages`` is the only place
that assigns them.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from .languages import DEFAULT_LANGUAGE
from .user import utcnow

MAX_TITLE_LENGTH = 100
MAX_DESCRIPTION_LENGTH = 500
MAX_PAGE_TEXT_LENGTH = 1000


def new_id() -> str:
    return str(uuid.uuid4())


class StorybookPage(BaseModel):
    """One page of a storybook: an image, base text and cached translations."""

    id: str = Field(default_factory=new_id)
    storybook_id: str
    order: int = Field(default=0, ge=0, description="0-based position within the parent")
    image_url: str = Field(default="", description="URL of the page illustration")
    text: str = Field(default="", max_length=MAX_PAGE_TEXT_LENGTH)
    translations: dict[str, str] = Field(
        default_factory=dict,
        description="Language code to translated text; a missing key means not yet translated",
    )
    audio_url: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class Storybook(BaseModel):
    """A user-authored book: metadata plus its embedded, ordered pages."""

    id: str = Field(default_factory=new_id)
    user_id: str
    title: str = Field(min_length=1, max_length=MAX_TITLE_LENGTH)
    description: Optional[str] = Field(None, max_length=MAX_DESCRIPTION_LENGTH)
    cover_image: Optional[str] = None
    pages: list[StorybookPage] = Field(default_factory=list)
    page_count: int = Field(default=0, ge=0)
    language: str = Field(default=DEFAULT_LANGUAGE, description="Base language of the page text")
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    is_published: bool = False
    read_count: int = Field(default=0, ge=0)
    version: int = Field(default=0, ge=0, description="Incremented on every stored write")

    def find_page(self, page_id: str) -> Optional[StorybookPage]:
        for page in self.pages:
            if page.id == page_id:
                return page
        return None

    def sorted_pages(self) -> list[StorybookPage]:
        return sorted(self.pages, key=lambda page: page.order)

    def touch(self) -> None:
        self.updated_at = utcnow()

    def replace_pages(self, pages: list[StorybookPage]) -> None:
        """Store ``pages`` in their given sequence and restore the page invariants."""
        self.pages = renumber_pages(pages)
        self.page_count = len(self.pages)
        self.touch()


def renumber_pages(pages: list[StorybookPage]) -> list[StorybookPage]:
    """Assign ``order`` from each page's position in ``pages``.

    Every mutation of a storybook's page list goes through here, so that
    ``order`` is always the contiguous sequence ``0..len(pages) - 1``.
    """
    renumbered = []
    for index, page in enumerate(pages):
        if page.order != index:
            page = page.model_copy(update={"order": index})
        renumbered.append(page)
    return renumbered


class PageUpdate(BaseModel):
    """Fields that may be merged into an existing page; unset fields are left alone.

    Only ``audio_url`` may be cleared with an explicit ``None``.
    """

    text: Optional[str] = Field(None, max_length=MAX_PAGE_TEXT_LENGTH)
    image_url: Optional[str] = None
    audio_url: Optional[str] = None
    translations: Optional[dict[str, str]] = None

    @field_validator("text", "image_url", "translations")
    @classmethod
    def _not_null(cls, value):
        return _reject_null(value)


class StorybookUpdate(BaseModel):
    """Metadata fields that may be changed on a storybook.

    ``description`` may be cleared with an explicit ``None``; the other fields
    may only be omitted.
    """

    title: Optional[str] = Field(None, min_length=1, max_length=MAX_TITLE_LENGTH)
    description: Optional[str] = Field(None, max_length=MAX_DESCRIPTION_LENGTH)
    language: Optional[str] = Field(None, min_length=2, max_length=10)
    is_published: Optional[bool] = None

    @field_validator("title", "language", "is_published")
    @classmethod
    def _not_null(cls, value):
        return _reject_null(value)


def _reject_null(value):
    if value is None:
        raise ValueError("may be omitted but not null")
    return value
