"""Storybook lifecycle: creation, metadata edits, read counts and image uploads."""

import logging
import uuid
from typing import Optional, Union

from ..entities.languages import DEFAULT_LANGUAGE
from ..entities.results import CleanupReport
from ..entities.session import UserSession
from ..entities.storybook import Storybook, StorybookUpdate
from ..errors import InvalidAssetError
from ..interfaces.asset_storage import AssetStorage
from ..interfaces.storybook_repository import StorybookRepository
from ..interfaces.user_repository import UserRepository
from .asset_cleanup import delete_assets_best_effort
from .storybook_writer import DEFAULT_WRITE_ATTEMPTS, load_owned_storybook, mutate_storybook

logger = logging.getLogger(__name__)

MAX_IMAGE_BYTES = 10 * 1024 * 1024
IMAGE_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
}


def cover_path(storybook_id: str, extension: str) -> str:
    return f"storybooks/{storybook_id}/covers/{uuid.uuid4()}.{extension}"


def page_image_path(storybook_id: str, extension: str) -> str:
    return f"storybooks/{storybook_id}/pages/{uuid.uuid4()}.{extension}"


class StorybookService:
    """Creates storybooks and edits everything except their page list."""

    def __init__(
        self,
        repository: StorybookRepository,
        asset_storage: AssetStorage,
        user_repository: Optional[UserRepository] = None,
        max_write_attempts: int = DEFAULT_WRITE_ATTEMPTS,
    ):
        self.repository = repository
        self.asset_storage = asset_storage
        self.user_repository = user_repository
        self.max_write_attempts = max_write_attempts

    async def create_storybook(
        self,
        session: UserSession,
        title: str,
        description: Optional[str] = None,
        language: str = DEFAULT_LANGUAGE,
    ) -> Storybook:
        """Create an empty storybook owned by the session user."""
        session.ensure_active()
        storybook = Storybook(
            user_id=session.user_id,
            title=title,
            description=description,
            language=language,
        )
        await self.repository.create_storybook(storybook)
        logger.info(f"Created storybook {storybook.id} for user {session.user_id}")

        if self.user_repository is not None:
            try:
                await self.user_repository.adjust_storybook_count(session.user_id, 1)
            except Exception as e:
                logger.warning(f"Could not update storybook count for user {session.user_id}: {e}")
        return storybook

    async def fetch_storybook(self, session: UserSession, storybook_id: str) -> Storybook:
        """Fetch a storybook with its pages sorted by order.

        Raises:
            StorybookNotFoundError: If it is missing or owned by another user.
        """
        storybook = await load_owned_storybook(self.repository, session, storybook_id)
        storybook.pages = storybook.sorted_pages()
        return storybook

    async def update_storybook(
        self,
        session: UserSession,
        storybook_id: str,
        fields: Union[StorybookUpdate, dict],
    ) -> Storybook:
        """Merge metadata changes and refresh ``updated_at``."""
        update = fields if isinstance(fields, StorybookUpdate) else StorybookUpdate.model_validate(fields)
        changes = update.model_dump(exclude_unset=True)

        def apply(storybook: Storybook) -> Storybook:
            for name, value in changes.items():
                setattr(storybook, name, value)
            if "language" in changes:
                storybook.replace_pages([
                    page.model_copy(update={"translations": {
                        code: text for code, text in page.translations.items() if code != storybook.language
                    }})
                    for page in storybook.sorted_pages()
                ])
            storybook.touch()
            return storybook

        updated = await mutate_storybook(
            self.repository, session, storybook_id, apply, max_attempts=self.max_write_attempts
        )
        logger.info(f"Updated storybook {storybook_id}: {sorted(changes)}")
        return updated

    async def record_read(self, session: UserSession, storybook_id: str) -> int:
        """Increment the read count and return the new value."""

        def increment(storybook: Storybook) -> int:
            storybook.read_count += 1
            storybook.touch()
            return storybook.read_count

        return await mutate_storybook(
            self.repository, session, storybook_id, increment, max_attempts=self.max_write_attempts
        )

    async def upload_page_image(
        self,
        session: UserSession,
        storybook_id: str,
        data: bytes,
        content_type: str,
    ) -> str:
        """Upload an illustration for a page of ``storybook_id`` and return its URL."""
        await load_owned_storybook(self.repository, session, storybook_id)
        extension = _validate_image(data, content_type)
        url = await self.asset_storage.upload(data, page_image_path(storybook_id, extension), content_type)
        logger.info(f"Uploaded page image for storybook {storybook_id}: {url}")
        return url

    async def upload_cover_image(
        self,
        session: UserSession,
        storybook_id: str,
        data: bytes,
        content_type: str,
    ) -> tuple[str, CleanupReport]:
        """Upload a new cover, point the storybook at it and drop the old one."""
        await load_owned_storybook(self.repository, session, storybook_id)
        extension = _validate_image(data, content_type)
        url = await self.asset_storage.upload(data, cover_path(storybook_id, extension), content_type)

        def set_cover(storybook: Storybook) -> Optional[str]:
            previous = storybook.cover_image
            storybook.cover_image = url
            storybook.touch()
            return previous

        previous = await mutate_storybook(
            self.repository, session, storybook_id, set_cover, max_attempts=self.max_write_attempts
        )
        report = CleanupReport()
        if previous and previous != url:
            report = await delete_assets_best_effort(self.asset_storage, [previous])
        logger.info(f"Replaced cover of storybook {storybook_id}")
        return url, report


def _validate_image(data: bytes, content_type: str) -> str:
    if content_type not in IMAGE_EXTENSIONS:
        raise InvalidAssetError(f"Unsupported image type {content_type}")
    if not data:
        raise InvalidAssetError("Image is empty")
    if len(data) > MAX_IMAGE_BYTES:
        raise InvalidAssetError(f"Image is larger than {MAX_IMAGE_BYTES // (1024 * 1024)}MB")
    return IMAGE_EXTENSIONS[content_type]
