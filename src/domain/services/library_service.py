"""Cursor-based listing of a user's storybooks."""

import logging
from typing import Optional

from ..entities.library import LibraryCursor, LibraryFilters, LibraryPage
from ..entities.session import UserSession
from ..errors import InvalidCursorError, StorybookNotFoundError
from ..interfaces.storybook_repository import StorybookRepository

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20


class LibraryService:
    """Pages through a user's library, newest-updated first by default.

    Each fetch asks the repository for one row more than the page size; the
    extra row only signals ``has_more`` and is never returned.
    """

    def __init__(self, repository: StorybookRepository, page_size: int = DEFAULT_PAGE_SIZE):
        if page_size < 1:
            raise ValueError("page_size must be at least 1")
        self.repository = repository
        self.page_size = page_size

    async def fetch_first_page(
        self,
        session: UserSession,
        filters: Optional[LibraryFilters] = None,
    ) -> LibraryPage:
        """Fetch the first page of the session user's library."""
        session.ensure_active()
        filters = filters or LibraryFilters()
        return await self._fetch(session, filters, after=None)

    async def fetch_next_page(self, session: UserSession, cursor: str) -> LibraryPage:
        """Fetch the page following ``cursor``.

        Raises:
            InvalidCursorError: If the cursor is malformed or the storybook it
                points at no longer exists. Restart with ``fetch_first_page``.
        """
        session.ensure_active()
        position = LibraryCursor.decode(cursor)
        try:
            anchor = await self.repository.get_storybook(position.storybook_id)
        except StorybookNotFoundError as e:
            raise InvalidCursorError("Library cursor no longer resolves, reload from the start") from e
        if anchor.user_id != session.user_id:
            raise InvalidCursorError("Library cursor does not belong to this user")
        return await self._fetch(session, position.filters, after=position)

    async def refresh(
        self,
        session: UserSession,
        filters: Optional[LibraryFilters] = None,
    ) -> LibraryPage:
        """Discard any cursor and start the listing over."""
        return await self.fetch_first_page(session, filters)

    async def _fetch(
        self,
        session: UserSession,
        filters: LibraryFilters,
        after: Optional[LibraryCursor],
    ) -> LibraryPage:
        rows = await self.repository.query_storybooks(
            session.user_id,
            filters.sort_by,
            limit=self.page_size + 1,
            search_query=filters.search_query,
            after=after,
        )
        has_more = len(rows) > self.page_size
        items = rows[: self.page_size]
        cursor = None
        if has_more:
            cursor = LibraryCursor.after(items[-1], filters).encode()
        logger.info(
            f"Library page for user {session.user_id}: {len(items)} items "
            f"(sort={filters.sort_by.value}, has_more={has_more})"
        )
        return LibraryPage(items=items, cursor=cursor, has_more=has_more)
