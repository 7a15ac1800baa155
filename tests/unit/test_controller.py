"""Tests for StorybookController."""

from unittest.mock import AsyncMock

import pytest

from src.application.controller import StorybookController
from src.domain.services import (
    AuthService,
    IntervalGate,
    LibraryService,
    StoryGenerator,
    StorybookService,
    TranslationService,
)
from src.infrastructure.mock_translation_provider import MockTranslationProvider


@pytest.fixture
def provider():
    return MockTranslationProvider()


@pytest.fixture
def controller(repository, user_repository, asset_storage, page_manager, provider):
    """Create a controller over the local backends with an unpaced translator."""
    return StorybookController(
        auth_service=AuthService(user_repository),
        library_service=LibraryService(repository, page_size=2),
        storybook_service=StorybookService(repository, asset_storage, user_repository=user_repository),
        page_manager=page_manager,
        translation_service=TranslationService(page_manager, provider, gate=IntervalGate(0)),
        story_generator=StoryGenerator(provider),
    )


def test_health_status(controller):
    status = controller.get_health_status()

    assert status["status"] == "healthy"
    assert status["providers"]["storybook_repository"] == "LocalStorybookRepository"
    assert status["providers"]["translation_provider"] == "MockTranslationProvider"


def test_list_languages(controller):
    result = controller.list_languages()

    assert result.success
    assert {"code": "es", "name": "Spanish", "native_name": "Español"} in result.data


@pytest.mark.asyncio
async def test_create_and_fetch(controller, session):
    created = await controller.create_storybook(session, "Sea Song", "Waves", "fr")

    assert created.success
    assert created.data["title"] == "Sea Song"
    assert created.data["language"] == "fr"

    fetched = await controller.fetch_storybook(session, created.data["id"])
    assert fetched.success
    assert fetched.data["id"] == created.data["id"]


@pytest.mark.asyncio
async def test_not_found_becomes_failure(controller, session):
    result = await controller.fetch_storybook(session, "missing")

    assert not result.success
    assert result.error_code == "not_found"
    assert "missing" in result.error


@pytest.mark.asyncio
async def test_validation_errors_become_invalid_input(controller, session):
    result = await controller.create_storybook(session, "")

    assert not result.success
    assert result.error_code == "invalid_input"
    assert result.error.startswith("Invalid input")


@pytest.mark.asyncio
async def test_unknown_sort_is_invalid_input(controller, session):
    result = await controller.fetch_library(session, sort_by="alphabetical")

    assert not result.success
    assert result.error_code == "invalid_input"


@pytest.mark.asyncio
async def test_unexpected_errors_are_masked(controller, session):
    controller.storybook_service.fetch_storybook = AsyncMock(side_effect=RuntimeError("db exploded"))

    result = await controller.fetch_storybook(session, "book-1")

    assert not result.success
    assert result.error_code == "internal_error"
    assert "db exploded" not in result.error


@pytest.mark.asyncio
async def test_library_paging(controller, session, make_storybook):
    for index in range(3):
        make_storybook([], storybook_id=f"book-{index}", title=f"Book {index}")

    first = await controller.fetch_library(session, sort_by="title")
    assert [item["id"] for item in first.data["items"]] == ["book-0", "book-1"]
    assert first.data["has_more"] is True

    second = await controller.load_more(session, first.data["cursor"])
    assert [item["id"] for item in second.data["items"]] == ["book-2"]
    assert second.data["has_more"] is False
    assert second.data["cursor"] is None


@pytest.mark.asyncio
async def test_stale_cursor(controller, repository, session, make_storybook):
    for index in range(3):
        make_storybook([], storybook_id=f"book-{index}", title=f"Book {index}")
    first = await controller.fetch_library(session, sort_by="title")
    await repository.delete_storybook("book-1")

    result = await controller.load_more(session, first.data["cursor"])

    assert not result.success
    assert result.error_code == "invalid_cursor"


@pytest.mark.asyncio
async def test_page_lifecycle(controller, session, make_storybook):
    make_storybook(["A"])

    added = await controller.add_page(session, "book-1", "", "B")
    assert added.success
    new_page_id = added.data

    assert (await controller.reorder_page(session, "book-1", 1, 0)).success
    pages = await controller.fetch_pages(session, "book-1")
    assert [page["text"] for page in pages.data] == ["B", "A"]

    updated = await controller.update_page(session, "book-1", new_page_id, {"text": "Bee"})
    assert updated.data["text"] == "Bee"

    deleted = await controller.delete_page(session, "book-1", new_page_id)
    assert deleted.success
    assert [page["order"] for page in (await controller.fetch_pages(session, "book-1")).data] == [0]


@pytest.mark.asyncio
async def test_reorder_out_of_range(controller, session, make_storybook):
    make_storybook(["A"])

    result = await controller.reorder_page(session, "book-1", 0, 5)

    assert result.error_code == "index_out_of_range"


@pytest.mark.asyncio
async def test_page_translation_lookup(controller, session, make_storybook):
    make_storybook(["Hello"])

    before = await controller.get_page_translation(session, "book-1", "page-Hello", "es")
    assert before.data["text"] == "Hello"
    assert before.data["state"] == "missing"

    await controller.translate_page(session, "book-1", "page-Hello", "es")

    after = await controller.get_page_translation(session, "book-1", "page-Hello", "es")
    assert after.data["text"] == "[Spanish] Hello"
    assert after.data["state"] == "cached"
    assert after.data["available"] == ["es"]


@pytest.mark.asyncio
async def test_partial_translation_failure(controller, provider, session, make_storybook):
    make_storybook(["A", "B"])
    provider.fail_on.add("B")

    result = await controller.translate_all_pages(session, "book-1", "de")

    assert not result.success
    assert result.error_code == "partial_failure"
    assert result.data["translated"] == ["page-A"]
    assert list(result.data["failed"]) == ["page-B"]


@pytest.mark.asyncio
async def test_translate_into_base_language(controller, session, make_storybook):
    make_storybook(["A"])

    result = await controller.translate_all_pages(session, "book-1", "en")

    assert not result.success
    assert result.error_code == "invalid_input"


@pytest.mark.asyncio
async def test_delete_storybook_reports_cleanup(controller, repository, session, make_storybook):
    make_storybook(["A", "B"])

    result = await controller.delete_storybook(session, "book-1")

    assert result.success
    assert len(result.data["attempted"]) == 2
    assert result.data["failed"] == {}
    assert repository.get_all_storybooks() == {}


@pytest.mark.asyncio
async def test_update_profile(controller, session):
    result = await controller.update_profile(session, {"display_name": "New Name"})

    assert result.success
    assert result.data["display_name"] == "New Name"
