"""Per-page translation caching and the translate-all-pages driver."""

import logging
from collections import OrderedDict
from typing import Optional

from ..entities.languages import DEFAULT_LANGUAGE, language_name
from ..entities.results import BulkTranslationResult, TranslationState
from ..entities.session import UserSession
from ..entities.storybook import StorybookPage
from ..errors import ConflictError, PageNotFoundError, ProviderError
from ..interfaces.translation_provider import TranslationProvider
from .page_collection_manager import PageCollectionManager
from .pacing import IntervalGate
from .prompting import TRANSLATION_MAX_TOKENS, TRANSLATION_TEMPERATURE, build_translation_prompt
from .storybook_writer import load_owned_storybook

logger = logging.getLogger(__name__)

DEFAULT_TRANSLATION_INTERVAL = 0.5
MAX_TRACKED_STATES = 1000


def get_page_translation(page: StorybookPage, language: Optional[str], base_language: str = DEFAULT_LANGUAGE) -> str:
    """Text to show or read aloud for ``page`` in ``language``.

    Falls back to the page's own text for the base language, an empty
    language, or a translation that has not been cached yet.
    """
    if not language or language == base_language:
        return page.text
    return page.translations.get(language, page.text)


def available_translations(page: StorybookPage, base_language: str = DEFAULT_LANGUAGE) -> list[str]:
    return sorted(language for language in page.translations if language != base_language)


class TranslationService:
    """Translates page text through the provider and caches it on the page.

    ``translate_page`` always calls the provider. ``translate_all_pages``
    skips pages that already hold a translation or have no text, and passes
    every provider request through an ``IntervalGate`` to stay under the rate
    limit. Failure states are kept for at most ``max_tracked_states`` pages.
    """

    def __init__(
        self,
        page_manager: PageCollectionManager,
        provider: TranslationProvider,
        gate: Optional[IntervalGate] = None,
        max_tracked_states: int = MAX_TRACKED_STATES,
    ):
        self.page_manager = page_manager
        self.provider = provider
        self.gate = gate or IntervalGate(DEFAULT_TRANSLATION_INTERVAL)
        self.max_tracked_states = max_tracked_states
        # Oldest entries are evicted first; an evicted page reads as missing.
        self._states: OrderedDict[tuple[str, str], TranslationState] = OrderedDict()

    def translation_state(self, page: StorybookPage, language: str) -> TranslationState:
        if language in page.translations:
            return TranslationState.CACHED
        return self._states.get((page.id, language), TranslationState.MISSING)

    async def translate_page(
        self,
        session: UserSession,
        storybook_id: str,
        page_id: str,
        target_language: str,
    ) -> str:
        """Translate one page and cache the result.

        Raises:
            ProviderError: If the provider fails; any cached translation is kept.
            PageNotFoundError: If the page is not in the storybook.
            ValueError: If ``target_language`` is the storybook's base language.
        """
        storybook = await load_owned_storybook(self.page_manager.repository, session, storybook_id)
        if target_language == storybook.language:
            raise ValueError(f"'{target_language}' is the base language of storybook {storybook_id}")
        page = storybook.find_page(page_id)
        if page is None:
            raise PageNotFoundError(storybook_id, page_id)
        if not page.text.strip():
            return page.text

        key = (page_id, target_language)
        self._set_state(key, TranslationState.PENDING)
        try:
            translated = await self.provider.complete(
                build_translation_prompt(language_name(target_language)),
                page.text,
                temperature=TRANSLATION_TEMPERATURE,
                max_tokens=TRANSLATION_MAX_TOKENS,
            )
        except ProviderError:
            self._set_state(key, TranslationState.FAILED)
            raise
        except Exception as e:
            self._set_state(key, TranslationState.FAILED)
            raise ProviderError(f"Translation failed: {e}") from e

        try:
            await self.page_manager.set_page_translation(
                session, storybook_id, page_id, target_language, translated
            )
        except Exception:
            self._set_state(key, TranslationState.FAILED)
            raise
        self._states.pop(key, None)
        logger.info(f"Translated page {page_id} of storybook {storybook_id} to {target_language}")
        return translated

    async def translate_all_pages(
        self,
        session: UserSession,
        storybook_id: str,
        target_language: str,
    ) -> BulkTranslationResult:
        """Translate every page that has no cached translation yet, in page order.

        A failing page is recorded and the run continues. Translations written
        before a failure are kept, so re-running only retries what is missing.
        """
        storybook = await load_owned_storybook(self.page_manager.repository, session, storybook_id)
        if target_language == storybook.language:
            raise ValueError(f"'{target_language}' is the base language of storybook {storybook_id}")

        result = BulkTranslationResult(storybook_id=storybook_id, language=target_language)
        for page in storybook.sorted_pages():
            if target_language in page.translations or not page.text.strip():
                result.skipped.append(page.id)
                continue
            await self.gate.wait()
            try:
                await self.translate_page(session, storybook_id, page.id, target_language)
            except (ProviderError, PageNotFoundError, ConflictError) as e:
                logger.warning(f"Could not translate page {page.id} to {target_language}: {e}")
                result.failed[page.id] = str(e)
                continue
            result.translated.append(page.id)

        logger.info(
            f"Bulk translation of storybook {storybook_id} to {target_language}: "
            f"{len(result.translated)} translated, {len(result.skipped)} skipped, {len(result.failed)} failed"
        )
        return result

    def _set_state(self, key: tuple[str, str], state: TranslationState) -> None:
        self._states[key] = state
        self._states.move_to_end(key)
        while len(self._states) > self.max_tracked_states:
            self._states.popitem(last=False)
