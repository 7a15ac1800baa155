"""Shared fixtures for storybook unit tests."""

from datetime import datetime, timezone

import pytest

from src.domain.entities.session import UserSession
from src.domain.entities.storybook import Storybook, StorybookPage
from src.domain.entities.user import User
from src.domain.services.page_collection_manager import PageCollectionManager
from src.infrastructure.local_asset_storage import LocalAssetStorage
from src.infrastructure.local_storybook_repository import LocalStorybookRepository
from src.infrastructure.local_user_repository import LocalUserRepository

BASE_TIME = datetime(2026, 1, 13, 10, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def user():
    """Create a sample user."""
    return User(id="user-abc", email="author@example.com", display_name="Author", storybook_count=1)


@pytest.fixture
def session(user):
    """Create an active session for the sample user."""
    return UserSession(user=user)


@pytest.fixture
def other_session():
    """Create a session for a different user."""
    return UserSession(user=User(id="user-other", email="other@example.com"))


@pytest.fixture
def repository():
    """Create a fresh LocalStorybookRepository for each test."""
    return LocalStorybookRepository()


@pytest.fixture
def user_repository(user):
    """Create a user repository holding the sample user."""
    users = LocalUserRepository()
    users.add_user(user)
    return users


@pytest.fixture
def asset_storage():
    """Create a fresh LocalAssetStorage for each test."""
    return LocalAssetStorage()


@pytest.fixture
def page_manager(repository, asset_storage, user_repository):
    """Create a page manager over the local backends."""
    return PageCollectionManager(repository, asset_storage, user_repository=user_repository)


@pytest.fixture
def make_storybook(repository, asset_storage, user):
    """Factory that stores a storybook whose pages carry the given texts.

    Each page gets an uploaded image so asset cleanup can be observed.
    """

    def _make(texts=(), storybook_id="book-1", user_id=None, **fields):
        pages = []
        for index, text in enumerate(texts):
            path = f"storybooks/{storybook_id}/pages/{index}.jpg"
            pages.append(StorybookPage(
                id=f"page-{text}",
                storybook_id=storybook_id,
                order=index,
                image_url=asset_storage.put(path, b"img", "image/jpeg"),
                text=text,
                created_at=BASE_TIME,
                updated_at=BASE_TIME,
            ))
        storybook = Storybook(
            id=storybook_id,
            user_id=user_id or user.id,
            title=fields.pop("title", "The Little Fox"),
            pages=pages,
            page_count=len(pages),
            created_at=BASE_TIME,
            updated_at=fields.pop("updated_at", BASE_TIME),
            **fields,
        )
        repository.add_storybook(storybook)
        return storybook

    return _make

