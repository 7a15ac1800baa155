"""Storybook repository interface."""

from typing import Optional, Protocol, runtime_checkable

from ..entities.library import LibraryCursor, SortBy
from ..entities.storybook import Storybook


@runtime_checkable
class StorybookRepository(Protocol):
    """Protocol for storybook document storage.

    Pages are embedded in the storybook document, so every page mutation is
    a whole-document write. Writes are compare-and-swap on ``version``.
    """

    async def get_storybook(self, storybook_id: str) -> Storybook:
        """Retrieve a storybook by ID.

        Raises:
            StorybookNotFoundError: If the storybook does not exist.
        """
        ...

    async def create_storybook(self, storybook: Storybook) -> None:
        """Store a new storybook document."""
        ...

    async def save_storybook(self, storybook: Storybook, expected_version: int) -> Storybook:
        """Replace a storybook if its stored version still equals ``expected_version``.

        Returns:
            Storybook: The stored document, with ``version`` incremented.

        Raises:
            ConflictError: If the stored version differs or the document is gone.
        """
        ...

    async def delete_storybook(self, storybook_id: str) -> None:
        """Delete a storybook document."""
        ...

    async def query_storybooks(
        self,
        user_id: str,
        sort_by: SortBy,
        limit: int,
        search_query: str = "",
        after: Optional[LibraryCursor] = None,
    ) -> list[Storybook]:
        """List up to ``limit`` of a user's storybooks in listing order, strictly after ``after``."""
        ...
