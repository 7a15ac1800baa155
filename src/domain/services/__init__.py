"""Domain services for the storybook library."""

from .auth_service import AuthService
from .library_service import LibraryService
from .pacing import IntervalGate
from .page_collection_manager import PageCollectionManager
from .story_generator import StoryGenerator
from .storybook_service import StorybookService
from .translation_service import TranslationService, available_translations, get_page_translation

__all__ = [
    "AuthService",
    "IntervalGate",
    "LibraryService",
    "PageCollectionManager",
    "StoryGenerator",
    "StorybookService",
    "TranslationService",
    "available_translations",
    "get_page_translation",
]
