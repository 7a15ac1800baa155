"""Drafting new stories through the text-generation provider."""

import json
import logging

from pydantic import ValidationError

from ..entities.languages import DEFAULT_LANGUAGE, language_name
from ..entities.results import StoryDraft
from ..entities.session import UserSession
from ..errors import ProviderError
from ..interfaces.translation_provider import TranslationProvider
from .prompting import STORY_MAX_TOKENS, STORY_TEMPERATURE, build_story_prompt

logger = logging.getLogger(__name__)


class StoryGenerator:
    """Turns a free-text prompt into a titled, paged story draft."""

    def __init__(self, provider: TranslationProvider):
        self.provider = provider

    async def generate_story(self, session: UserSession, prompt: str, language: str = DEFAULT_LANGUAGE) -> StoryDraft:
        """Ask the provider for a story and parse its JSON reply.

        Raises:
            ProviderError: If the provider fails or replies with something
                that is not a story object.
        """
        session.ensure_active()
        if not prompt.strip():
            raise ValueError("Story prompt must not be empty")

        reply = await self.provider.complete(
            build_story_prompt(language_name(language)),
            prompt,
            temperature=STORY_TEMPERATURE,
            max_tokens=STORY_MAX_TOKENS,
        )
        try:
            draft = StoryDraft.model_validate(json.loads(_strip_code_fence(reply)))
        except (ValueError, ValidationError) as e:
            logger.error(f"Story generation returned malformed JSON: {e}")
            raise ProviderError("Story generation returned a malformed response") from e

        logger.info(f"Generated story '{draft.title}' with {len(draft.pages)} pages for user {session.user_id}")
        return draft


def _strip_code_fence(reply: str) -> str:
    text = reply.strip()
    if text.startswith("```"):
        text = text.split("\n", 1)[1] if "\n" in text else ""
        if text.rstrip().endswith("```"):
            text = text.rstrip()[:-3]
    return text.strip()
