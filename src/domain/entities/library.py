"""Library listing entities: filters, cursors and result pages."""

import base64
import binascii
import json
from datetime import datetime
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..errors import InvalidCursorError
from .storybook import Storybook


class SortBy(str, Enum):
    """Library sort orders."""
    RECENT = "recent"
    TITLE = "title"
    POPULAR = "popular"


class LibraryFilters(BaseModel):
    """Optional filters for the first page of a library listing."""

    search_query: str = Field(default="", max_length=100, description="Case-insensitive title substring")
    sort_by: SortBy = SortBy.RECENT


class LibraryCursor(BaseModel):
    """Position of the last storybook returned, in the listing's sort order.

    The cursor also remembers the filters it was produced with, so the next
    page continues the same listing.
    """

    model_config = ConfigDict(frozen=True)

    sort_by: SortBy
    search_query: str = ""
    storybook_id: str
    sort_value: Union[int, str]

    @classmethod
    def after(cls, storybook: Storybook, filters: LibraryFilters) -> "LibraryCursor":
        return cls(
            sort_by=filters.sort_by,
            search_query=filters.search_query,
            storybook_id=storybook.id,
            sort_value=sort_value(storybook, filters.sort_by),
        )

    @property
    def filters(self) -> LibraryFilters:
        return LibraryFilters(search_query=self.search_query, sort_by=self.sort_by)

    def position(self) -> tuple:
        """The cursor's place in the ascending key space of ``library_sort_key``."""
        if self.sort_by == SortBy.RECENT:
            timestamp = datetime.fromisoformat(str(self.sort_value)).timestamp()
            return (-timestamp, self.storybook_id)
        if self.sort_by == SortBy.TITLE:
            return (str(self.sort_value), self.storybook_id)
        return (-int(self.sort_value), self.storybook_id)

    def encode(self) -> str:
        return base64.urlsafe_b64encode(self.model_dump_json().encode("utf-8")).decode("ascii")

    @classmethod
    def decode(cls, token: str) -> "LibraryCursor":
        """Parse an opaque token.

        Raises:
            InvalidCursorError: If the token is not one this service produced.
        """
        try:
            raw = base64.urlsafe_b64decode(token.encode("ascii"))
            cursor = cls.model_validate(json.loads(raw))
            cursor.position()
            return cursor
        except (binascii.Error, UnicodeError, ValueError, ValidationError) as e:
            raise InvalidCursorError(f"Invalid library cursor: {e.__class__.__name__}") from e


class LibraryPage(BaseModel):
    """One page of a library listing."""

    items: list[Storybook] = Field(default_factory=list)
    cursor: Optional[str] = Field(None, description="Token for the next page, absent when exhausted")
    has_more: bool = False


def sort_value(storybook: Storybook, sort_by: SortBy) -> Union[int, str]:
    if sort_by == SortBy.RECENT:
        return storybook.updated_at.isoformat()
    if sort_by == SortBy.TITLE:
        return storybook.title.casefold()
    return storybook.read_count


def library_sort_key(storybook: Storybook, sort_by: SortBy) -> tuple:
    """Ascending sort key for a listing; ties break on storybook id."""
    if sort_by == SortBy.RECENT:
        return (-storybook.updated_at.timestamp(), storybook.id)
    if sort_by == SortBy.TITLE:
        return (storybook.title.casefold(), storybook.id)
    return (-storybook.read_count, storybook.id)


def matches_search(storybook: Storybook, search_query: str) -> bool:
    if not search_query:
        return True
    return search_query.casefold() in storybook.title.casefold()


def order_library(
    storybooks: list[Storybook],
    sort_by: SortBy,
    search_query: str = "",
    after: Optional[LibraryCursor] = None,
) -> list[Storybook]:
    """Filter and sort storybooks, dropping everything at or before ``after``."""
    matching = [book for book in storybooks if matches_search(book, search_query)]
    matching.sort(key=lambda book: library_sort_key(book, sort_by))
    if after is None:
        return matching
    position = after.position()
    return [book for book in matching if library_sort_key(book, sort_by) > position]
