"""Translation provider interface."""

from typing import Optional, Protocol, runtime_checkable


@runtime_checkable
class TranslationProvider(Protocol):
    """Protocol for a stateless text-completion endpoint."""

    async def complete(
        self,
        system_prompt: str,
        user_text: str,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> str:
        """Run one completion and return its text.

        Raises:
            ProviderError: On timeout, quota exhaustion or a malformed response.
        """
        ...
