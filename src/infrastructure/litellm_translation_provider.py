"""LiteLLM-powered implementation of the translation provider."""

import logging
from typing import Any, MutableMapping, Optional

from litellm import acompletion

from ..domain.errors import ProviderError
from ..domain.interfaces.translation_provider import TranslationProvider

logger = logging.getLogger(__name__)


class LiteLLMTranslationProvider(TranslationProvider):
    """Sends a system instruction and the source text to a chat model."""

    def __init__(
        self,
        model: str = "gpt-3.5-turbo",
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.model = model
        self._api_key = api_key
        self._timeout = timeout

    async def complete(
        self,
        system_prompt: str,
        user_text: str,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> str:
        """Invoke LiteLLM's ``acompletion`` and return the consolidated text.

        Raises:
            ProviderError: If the call fails or the response has no message content.
        """
        payload: MutableMapping[str, Any] = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_text},
            ],
        }
        if temperature is not None:
            payload["temperature"] = temperature
        if max_tokens is not None:
            payload["max_tokens"] = max_tokens
        if self._api_key is not None:
            payload["api_key"] = self._api_key
        if self._timeout is not None:
            payload["timeout"] = self._timeout

        try:
            response = await acompletion(**payload)
        except Exception as e:
            logger.error(f"LiteLLM completion failed ({self.model}): {e}")
            raise ProviderError(f"Translation provider request failed: {e}") from e

        try:
            message = response["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            raise ProviderError("Unexpected LiteLLM response format.") from exc
        if message is None:
            raise ProviderError("Translation provider returned an empty message.")

        return str(message).strip()
