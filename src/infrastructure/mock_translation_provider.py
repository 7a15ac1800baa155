"""Deterministic translation provider for local development and tests."""

import logging
import re
from typing import Callable, Optional

from ..domain.errors import ProviderError
from ..domain.interfaces.translation_provider import TranslationProvider

logger = logging.getLogger(__name__)

_TARGET_PATTERN = re.compile(r"Translate the following text to ([^.]+)\.")


def tag_with_language(system_prompt: str, user_text: str) -> str:
    """Default reply: the source text prefixed with the requested language name."""
    match = _TARGET_PATTERN.search(system_prompt)
    target = match.group(1) if match else "Unknown"
    return f"[{target}] {user_text}"


class MockTranslationProvider(TranslationProvider):
    """Answers without a network call and records every request.

    ``fail_on`` holds source texts whose translation should raise
    ``ProviderError``, for exercising partial failures.
    """

    def __init__(
        self,
        responder: Optional[Callable[[str, str], str]] = None,
        fail_on: Optional[set[str]] = None,
    ):
        self.responder = responder or tag_with_language
        self.fail_on = set(fail_on or ())
        self.calls: list[tuple[str, str]] = []

    async def complete(
        self,
        system_prompt: str,
        user_text: str,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> str:
        self.calls.append((system_prompt, user_text))
        if user_text in self.fail_on:
            logger.debug(f"Mock provider failing on request {len(self.calls)}")
            raise ProviderError("Simulated provider failure")
        return self.responder(system_prompt, user_text)
