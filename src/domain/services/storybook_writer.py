"""Shared read-modify-write helpers for storybook documents."""

import logging
from typing import Callable, TypeVar

from ..entities.session import UserSession
from ..entities.storybook import Storybook
from ..errors import ConflictError, StorybookNotFoundError
from ..interfaces.storybook_repository import StorybookRepository

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_WRITE_ATTEMPTS = 3


async def load_owned_storybook(
    repository: StorybookRepository,
    session: UserSession,
    storybook_id: str,
) -> Storybook:
    """Fetch a storybook the session's user owns.

    Books owned by other users are reported as missing.
    """
    session.ensure_active()
    storybook = await repository.get_storybook(storybook_id)
    if storybook.user_id != session.user_id:
        raise StorybookNotFoundError(storybook_id)
    return storybook


async def mutate_storybook(
    repository: StorybookRepository,
    session: UserSession,
    storybook_id: str,
    mutation: Callable[[Storybook], T],
    max_attempts: int = DEFAULT_WRITE_ATTEMPTS,
) -> T:
    """Apply ``mutation`` to a fresh copy of the storybook and store it.

    ``mutation`` edits the storybook in place and returns the operation's
    result. It may raise to abort; nothing is written in that case. A version
    conflict re-reads the document and re-applies the mutation, up to
    ``max_attempts`` times.

    Raises:
        ConflictError: If every attempt lost the race.
    """
    for attempt in range(1, max_attempts + 1):
        current = await load_owned_storybook(repository, session, storybook_id)
        working = current.model_copy(deep=True)
        result = mutation(working)
        try:
            await repository.save_storybook(working, expected_version=current.version)
        except ConflictError:
            logger.warning(
                f"Write conflict on storybook {storybook_id} (attempt {attempt}/{max_attempts})"
            )
            continue
        return result
    raise ConflictError(storybook_id)
