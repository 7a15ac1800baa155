"""Domain entities for the storybook library."""

from .languages import DEFAULT_LANGUAGE, SUPPORTED_LANGUAGES, Language, language_name
from .library import (
    LibraryCursor,
    LibraryFilters,
    LibraryPage,
    SortBy,
    library_sort_key,
    matches_search,
    order_library,
)
from .results import (
    BulkTranslationResult,
    CleanupReport,
    OperationResult,
    StoryDraft,
    StoryDraftPage,
    TranslationState,
)
from .session import UserSession
from .storybook import PageUpdate, Storybook, StorybookPage, StorybookUpdate, renumber_pages
from .user import User, UserProfileUpdate, utcnow

__all__ = [
    # User entities
    "User",
    "UserProfileUpdate",
    "UserSession",
    "utcnow",
    # Storybook entities
    "Storybook",
    "StorybookPage",
    "PageUpdate",
    "StorybookUpdate",
    "renumber_pages",
    # Library entities
    "LibraryCursor",
    "LibraryFilters",
    "LibraryPage",
    "SortBy",
    "library_sort_key",
    "matches_search",
    "order_library",
    # Language entities
    "Language",
    "DEFAULT_LANGUAGE",
    "SUPPORTED_LANGUAGES",
    "language_name",
    # Result entities
    "BulkTranslationResult",
    "CleanupReport",
    "OperationResult",
    "StoryDraft",
    "StoryDraftPage",
    "TranslationState",
]
