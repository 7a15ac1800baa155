"""Mutations of a storybook's embedded page list."""

import logging
from typing import Optional, Union

from ..entities.results import CleanupReport
from ..entities.session import UserSession
from ..entities.storybook import PageUpdate, Storybook, StorybookPage
from ..entities.user import utcnow
from ..errors import IndexOutOfRangeError, PageNotFoundError, TooManyPagesError
from ..interfaces.asset_storage import AssetStorage
from ..interfaces.storybook_repository import StorybookRepository
from ..interfaces.user_repository import UserRepository
from .asset_cleanup import delete_assets_best_effort
from .storybook_writer import DEFAULT_WRITE_ATTEMPTS, load_owned_storybook, mutate_storybook

logger = logging.getLogger(__name__)

DEFAULT_MAX_PAGES = 50


class PageCollectionManager:
    """Adds, updates, deletes and reorders the pages of one storybook.

    Every operation is a read-modify-write of the whole parent document,
    retried on version conflicts. Page order is always restored through
    ``Storybook.replace_pages``.
    """

    def __init__(
        self,
        repository: StorybookRepository,
        asset_storage: AssetStorage,
        user_repository: Optional[UserRepository] = None,
        max_pages: int = DEFAULT_MAX_PAGES,
        max_write_attempts: int = DEFAULT_WRITE_ATTEMPTS,
    ):
        self.repository = repository
        self.asset_storage = asset_storage
        self.user_repository = user_repository
        self.max_pages = max_pages
        self.max_write_attempts = max_write_attempts

    async def fetch_pages(self, session: UserSession, storybook_id: str) -> list[StorybookPage]:
        """Return the storybook's pages sorted by ``order``."""
        storybook = await load_owned_storybook(self.repository, session, storybook_id)
        return storybook.sorted_pages()

    async def add_page(
        self,
        session: UserSession,
        storybook_id: str,
        image_url: str,
        text: str,
        insert_at_order: Optional[int] = None,
    ) -> str:
        """Insert a new, untranslated page and return its id.

        ``insert_at_order`` is clamped to ``[0, page_count]``; ``None`` appends.

        Raises:
            TooManyPagesError: If the book already holds ``max_pages`` pages.
        """
        page = StorybookPage(storybook_id=storybook_id, image_url=image_url, text=text)

        def insert(storybook: Storybook) -> str:
            pages = storybook.sorted_pages()
            if len(pages) >= self.max_pages:
                raise TooManyPagesError(self.max_pages)
            position = len(pages) if insert_at_order is None else max(0, min(insert_at_order, len(pages)))
            pages.insert(position, page)
            storybook.replace_pages(pages)
            return page.id

        page_id = await self._mutate(session, storybook_id, insert)
        logger.info(f"Added page {page_id} to storybook {storybook_id}")
        return page_id

    async def update_page(
        self,
        session: UserSession,
        storybook_id: str,
        page_id: str,
        fields: Union[PageUpdate, dict],
    ) -> StorybookPage:
        """Merge ``fields`` into the matching page.

        A replaced image is deleted from storage on a best-effort basis.

        Raises:
            PageNotFoundError: If no page in the storybook has ``page_id``.
        """
        update = fields if isinstance(fields, PageUpdate) else PageUpdate.model_validate(fields)
        changes = update.model_dump(exclude_unset=True)
        replaced_images: list[str] = []

        def merge(storybook: Storybook) -> StorybookPage:
            replaced_images.clear()
            pages = storybook.sorted_pages()
            index = _index_of(storybook, pages, page_id)
            page = pages[index]
            page_changes = dict(changes)
            if "translations" in page_changes:
                page_changes["translations"] = _without_base_language(
                    page_changes["translations"], storybook.language
                )
            if "image_url" in page_changes and page.image_url and page_changes["image_url"] != page.image_url:
                replaced_images.append(page.image_url)
            page_changes["updated_at"] = utcnow()
            pages[index] = page.model_copy(update=page_changes)
            storybook.replace_pages(pages)
            return pages[index]

        updated = await self._mutate(session, storybook_id, merge)
        if replaced_images:
            await delete_assets_best_effort(self.asset_storage, replaced_images)
        logger.info(f"Updated page {page_id} of storybook {storybook_id}: {sorted(changes)}")
        return updated

    async def set_page_translation(
        self,
        session: UserSession,
        storybook_id: str,
        page_id: str,
        language: str,
        text: str,
    ) -> StorybookPage:
        """Cache one translation, merging it into the page's current translations."""

        def store(storybook: Storybook) -> StorybookPage:
            if language == storybook.language:
                raise ValueError(f"'{language}' is the base language of storybook {storybook.id}")
            pages = storybook.sorted_pages()
            index = _index_of(storybook, pages, page_id)
            page = pages[index]
            translations = {**page.translations, language: text}
            pages[index] = page.model_copy(update={"translations": translations, "updated_at": utcnow()})
            storybook.replace_pages(pages)
            return pages[index]

        return await self._mutate(session, storybook_id, store)

    async def delete_page(self, session: UserSession, storybook_id: str, page_id: str) -> CleanupReport:
        """Remove a page, renumber the rest and clean up its image.

        Raises:
            PageNotFoundError: If no page in the storybook has ``page_id``.
        """
        removed: list[StorybookPage] = []

        def remove(storybook: Storybook) -> None:
            removed.clear()
            pages = storybook.sorted_pages()
            index = _index_of(storybook, pages, page_id)
            removed.append(pages.pop(index))
            storybook.replace_pages(pages)

        await self._mutate(session, storybook_id, remove)
        report = await delete_assets_best_effort(self.asset_storage, [removed[0].image_url])
        logger.info(f"Deleted page {page_id} from storybook {storybook_id}")
        return report

    async def reorder_page(self, session: UserSession, storybook_id: str, from_index: int, to_index: int) -> None:
        """Move the page at ``from_index`` to ``to_index``.

        Raises:
            IndexOutOfRangeError: If either index is outside ``[0, page_count)``.
        """

        def move(storybook: Storybook) -> None:
            pages = storybook.sorted_pages()
            for index in (from_index, to_index):
                if not 0 <= index < len(pages):
                    raise IndexOutOfRangeError(index, len(pages))
            page = pages.pop(from_index)
            pages.insert(to_index, page)
            storybook.replace_pages(pages)

        await self._mutate(session, storybook_id, move)
        logger.info(f"Moved page {from_index} -> {to_index} in storybook {storybook_id}")

    async def delete_storybook(self, session: UserSession, storybook_id: str) -> CleanupReport:
        """Delete every asset of a storybook, then the document itself.

        Asset failures are reported, not raised. Only a failure to delete the
        document propagates.
        """
        storybook = await load_owned_storybook(self.repository, session, storybook_id)
        urls = [page.image_url for page in storybook.sorted_pages()]
        if storybook.cover_image:
            urls.append(storybook.cover_image)
        report = await delete_assets_best_effort(self.asset_storage, urls)

        await self.repository.delete_storybook(storybook_id)
        logger.info(
            f"Deleted storybook {storybook_id} ({len(report.attempted)} assets, {len(report.failed)} failed)"
        )

        if self.user_repository is not None:
            try:
                await self.user_repository.adjust_storybook_count(session.user_id, -1)
            except Exception as e:
                logger.warning(f"Could not update storybook count for user {session.user_id}: {e}")
        return report

    async def _mutate(self, session, storybook_id, mutation):
        return await mutate_storybook(
            self.repository, session, storybook_id, mutation, max_attempts=self.max_write_attempts
        )


def _index_of(storybook: Storybook, pages: list[StorybookPage], page_id: str) -> int:
    for index, page in enumerate(pages):
        if page.id == page_id:
            return index
    raise PageNotFoundError(storybook.id, page_id)


def _without_base_language(translations: dict[str, str], base_language: str) -> dict[str, str]:
    return {language: text for language, text in translations.items() if language != base_language}
