"""Local in-memory implementation of the storybook repository."""

from typing import Dict, Optional

from ..domain.entities.library import LibraryCursor, SortBy, order_library
from ..domain.entities.storybook import Storybook
from ..domain.errors import ConflictError, StorybookNotFoundError
from ..domain.interfaces.storybook_repository import StorybookRepository


class LocalStorybookRepository(StorybookRepository):
    """Local in-memory implementation of the storybook repository.

    Stores deep copies so callers can never mutate stored documents without
    going through ``save_storybook``.
    """

    def __init__(self):
        """Initialize the local storybook repository with an empty dictionary."""
        self._storybooks: Dict[str, Storybook] = {}

    async def get_storybook(self, storybook_id: str) -> Storybook:
        if storybook_id not in self._storybooks:
            raise StorybookNotFoundError(storybook_id)
        return self._storybooks[storybook_id].model_copy(deep=True)

    async def create_storybook(self, storybook: Storybook) -> None:
        self.add_storybook(storybook)

    async def save_storybook(self, storybook: Storybook, expected_version: int) -> Storybook:
        stored = self._storybooks.get(storybook.id)
        if stored is None or stored.version != expected_version:
            raise ConflictError(storybook.id)
        saved = storybook.model_copy(deep=True, update={"version": expected_version + 1})
        self._storybooks[storybook.id] = saved
        return saved.model_copy(deep=True)

    async def delete_storybook(self, storybook_id: str) -> None:
        """Delete a storybook.

        Raises:
            StorybookNotFoundError: If the storybook does not exist.
        """
        if storybook_id not in self._storybooks:
            raise StorybookNotFoundError(storybook_id)
        del self._storybooks[storybook_id]

    async def query_storybooks(
        self,
        user_id: str,
        sort_by: SortBy,
        limit: int,
        search_query: str = "",
        after: Optional[LibraryCursor] = None,
    ) -> list[Storybook]:
        owned = [book for book in self._storybooks.values() if book.user_id == user_id]
        ordered = order_library(owned, sort_by, search_query, after)
        return [book.model_copy(deep=True) for book in ordered[:limit]]

    def add_storybook(self, storybook: Storybook) -> None:
        """Add or replace a storybook without a version check."""
        self._storybooks[storybook.id] = storybook.model_copy(deep=True)

    def clear(self) -> None:
        """Clear all storybooks from the dictionary."""
        self._storybooks.clear()

    def get_all_storybooks(self) -> Dict[str, Storybook]:
        return {key: book.model_copy(deep=True) for key, book in self._storybooks.items()}
