"""Storybook controller turning service calls into operation results."""

import logging
from typing import Any, Awaitable, Optional

from pydantic import BaseModel, ValidationError

from ..domain.entities import (
    SUPPORTED_LANGUAGES,
    LibraryFilters,
    OperationResult,
    UserSession,
)
from ..domain.errors import PageNotFoundError, StorybookError
from ..domain.services import (
    AuthService,
    LibraryService,
    PageCollectionManager,
    StoryGenerator,
    StorybookService,
    TranslationService,
    available_translations,
    get_page_translation,
)

logger = logging.getLogger(__name__)


class StorybookController:
    """
    Controller for coordinating storybook operations.

    This controller is injected with all services and handles the business
    logic for each endpoint, keeping the API layer thin. No method raises:
    every failure comes back as an ``OperationResult`` with a short message.
    """

    def __init__(
        self,
        auth_service: AuthService,
        library_service: LibraryService,
        storybook_service: StorybookService,
        page_manager: PageCollectionManager,
        translation_service: TranslationService,
        story_generator: StoryGenerator,
    ):
        self.auth_service = auth_service
        self.library_service = library_service
        self.storybook_service = storybook_service
        self.page_manager = page_manager
        self.translation_service = translation_service
        self.story_generator = story_generator

        logger.info("StorybookController initialized with services")

    def get_health_status(self) -> dict:
        """
        Get application health status.

        Returns:
            Dict containing health status information
        """
        return {
            "status": "healthy",
            "providers": {
                "storybook_repository": type(self.storybook_service.repository).__name__,
                "asset_storage": type(self.storybook_service.asset_storage).__name__,
                "translation_provider": type(self.translation_service.provider).__name__,
            },
        }

    def list_languages(self) -> OperationResult:
        return OperationResult.ok([language.model_dump() for language in SUPPORTED_LANGUAGES])

    # ===== Library =====

    async def fetch_library(self, session: UserSession, search_query: str = "", sort_by: str = "recent") -> OperationResult:
        return await self._run("load your library", self._library_first_page(session, search_query, sort_by))

    async def load_more(self, session: UserSession, cursor: str) -> OperationResult:
        return await self._run("load more storybooks", self.library_service.fetch_next_page(session, cursor))

    async def _library_first_page(self, session: UserSession, search_query: str, sort_by: str):
        filters = LibraryFilters(search_query=search_query, sort_by=sort_by)
        return await self.library_service.refresh(session, filters)

    # ===== Storybooks =====

    async def create_storybook(
        self,
        session: UserSession,
        title: str,
        description: Optional[str] = None,
        language: str = "en",
    ) -> OperationResult:
        return await self._run(
            "create the storybook",
            self.storybook_service.create_storybook(session, title, description, language),
        )

    async def fetch_storybook(self, session: UserSession, storybook_id: str) -> OperationResult:
        return await self._run("load the storybook", self.storybook_service.fetch_storybook(session, storybook_id))

    async def update_storybook(self, session: UserSession, storybook_id: str, fields: dict) -> OperationResult:
        return await self._run(
            "update the storybook",
            self.storybook_service.update_storybook(session, storybook_id, fields),
        )

    async def record_read(self, session: UserSession, storybook_id: str) -> OperationResult:
        return await self._run("record the read", self.storybook_service.record_read(session, storybook_id))

    async def delete_storybook(self, session: UserSession, storybook_id: str) -> OperationResult:
        return await self._run("delete the storybook", self.page_manager.delete_storybook(session, storybook_id))

    async def upload_cover_image(self, session: UserSession, storybook_id: str, data: bytes, content_type: str) -> OperationResult:
        return await self._run(
            "upload the cover image",
            self._upload_cover(session, storybook_id, data, content_type),
        )

    async def _upload_cover(self, session, storybook_id, data, content_type) -> dict:
        url, cleanup = await self.storybook_service.upload_cover_image(session, storybook_id, data, content_type)
        return {"url": url, "cleanup": cleanup}

    async def upload_page_image(self, session: UserSession, storybook_id: str, data: bytes, content_type: str) -> OperationResult:
        return await self._run(
            "upload the page image",
            self.storybook_service.upload_page_image(session, storybook_id, data, content_type),
        )

    # ===== Pages =====

    async def fetch_pages(self, session: UserSession, storybook_id: str) -> OperationResult:
        return await self._run("load the pages", self.page_manager.fetch_pages(session, storybook_id))

    async def add_page(
        self,
        session: UserSession,
        storybook_id: str,
        image_url: str,
        text: str,
        insert_at_order: Optional[int] = None,
    ) -> OperationResult:
        return await self._run(
            "add the page",
            self.page_manager.add_page(session, storybook_id, image_url, text, insert_at_order),
        )

    async def update_page(self, session: UserSession, storybook_id: str, page_id: str, fields: dict) -> OperationResult:
        return await self._run(
            "update the page",
            self.page_manager.update_page(session, storybook_id, page_id, fields),
        )

    async def delete_page(self, session: UserSession, storybook_id: str, page_id: str) -> OperationResult:
        return await self._run("delete the page", self.page_manager.delete_page(session, storybook_id, page_id))

    async def reorder_page(self, session: UserSession, storybook_id: str, from_index: int, to_index: int) -> OperationResult:
        return await self._run(
            "reorder the pages",
            self.page_manager.reorder_page(session, storybook_id, from_index, to_index),
        )

    # ===== Translations =====

    async def translate_page(self, session: UserSession, storybook_id: str, page_id: str, language: str) -> OperationResult:
        return await self._run(
            "translate the page",
            self.translation_service.translate_page(session, storybook_id, page_id, language),
        )

    async def translate_all_pages(self, session: UserSession, storybook_id: str, language: str) -> OperationResult:
        result = await self._run(
            "translate the storybook",
            self.translation_service.translate_all_pages(session, storybook_id, language),
        )
        if result.success and result.data["failed"]:
            failed = len(result.data["failed"])
            return OperationResult(
                success=False,
                data=result.data,
                error=f"{failed} page(s) could not be translated, try again to retry them",
                error_code="partial_failure",
            )
        return result

    async def get_page_translation(self, session: UserSession, storybook_id: str, page_id: str, language: str) -> OperationResult:
        return await self._run("load the translation", self._page_translation(session, storybook_id, page_id, language))

    async def _page_translation(self, session, storybook_id, page_id, language) -> dict:
        storybook = await self.storybook_service.fetch_storybook(session, storybook_id)
        page = storybook.find_page(page_id)
        if page is None:
            raise PageNotFoundError(storybook_id, page_id)
        return {
            "page_id": page_id,
            "language": language or storybook.language,
            "text": get_page_translation(page, language, storybook.language),
            "state": self.translation_service.translation_state(page, language).value,
            "available": available_translations(page, storybook.language),
        }

    # ===== Generation and profile =====

    async def generate_story(self, session: UserSession, prompt: str, language: str = "en") -> OperationResult:
        return await self._run("generate a story", self.story_generator.generate_story(session, prompt, language))

    async def update_profile(self, session: UserSession, fields: dict) -> OperationResult:
        return await self._run(
            "update your profile",
            self.auth_service.update_profile(session, fields),
        )

    async def _run(self, action: str, operation: Awaitable[Any]) -> OperationResult:
        try:
            value = await operation
        except StorybookError as e:
            logger.info(f"Could not {action}: {e}")
            return OperationResult.failure(str(e), e.code)
        except ValidationError as e:
            logger.info(f"Invalid input while trying to {action}: {e}")
            return OperationResult.failure(f"Invalid input: {_first_error(e)}", "invalid_input")
        except ValueError as e:
            logger.info(f"Could not {action}: {e}")
            return OperationResult.failure(str(e), "invalid_input")
        except Exception as e:
            logger.error(f"Error trying to {action}: {e}", exc_info=True)
            return OperationResult.failure(f"Could not {action}, please try again", "internal_error")
        return OperationResult.ok(_to_data(value))


def _to_data(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, (list, tuple)):
        return [_to_data(item) for item in value]
    if isinstance(value, dict):
        return {key: _to_data(item) for key, item in value.items()}
    return value


def _first_error(error: ValidationError) -> str:
    details = error.errors()
    if not details:
        return str(error)
    first = details[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    return f"{location}: {first.get('msg')}" if location else first.get("msg", "")
