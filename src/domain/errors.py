"""Error taxonomy for the storybook library domain."""


class StorybookError(Exception):
    """Base class for every failure the storybook services surface.

    Each subclass carries a short ``code`` that the application layer uses to
    pick a response status without inspecting messages.
    """

    code = "storybook_error"


class StorybookNotFoundError(StorybookError, ValueError):
    """Raised when a storybook does not exist or is owned by someone else."""

    code = "not_found"

    def __init__(self, storybook_id: str):
        self.storybook_id = storybook_id
        super().__init__(f"Storybook with id {storybook_id} not found")


class PageNotFoundError(StorybookError, ValueError):
    """Raised when no page in the parent storybook matches the identifier."""

    code = "not_found"

    def __init__(self, storybook_id: str, page_id: str):
        self.storybook_id = storybook_id
        self.page_id = page_id
        super().__init__(f"Page with id {page_id} not found in storybook {storybook_id}")


class UserNotFoundError(StorybookError, ValueError):
    """Raised when a user document is missing."""

    code = "not_found"

    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__(f"User with id {user_id} not found")


class InvalidCursorError(StorybookError):
    """The pagination cursor no longer resolves; restart from the first page."""

    code = "invalid_cursor"


class IndexOutOfRangeError(StorybookError):
    """A page index fell outside ``[0, page_count)``."""

    code = "index_out_of_range"

    def __init__(self, index: int, page_count: int):
        self.index = index
        self.page_count = page_count
        super().__init__(f"Page index {index} is out of range for a book with {page_count} pages")


class TooManyPagesError(StorybookError):
    """Adding a page would exceed the configured per-book maximum."""

    code = "too_many_pages"

    def __init__(self, max_pages: int):
        self.max_pages = max_pages
        super().__init__(f"A storybook can hold at most {max_pages} pages")


class ProviderError(StorybookError):
    """The translation provider failed (timeout, quota, malformed response)."""

    code = "provider_error"


class ConflictError(StorybookError):
    """The storybook changed between read and write."""

    code = "conflict"

    def __init__(self, storybook_id: str):
        self.storybook_id = storybook_id
        super().__init__(f"Storybook {storybook_id} was modified concurrently, please retry")


class SessionClosedError(StorybookError):
    """The caller's session has been signed out."""

    code = "session_closed"

    def __init__(self):
        super().__init__("Session is signed out")


class InvalidAssetError(StorybookError):
    """An uploaded asset is too large, has an unsupported type, or an unknown URL."""

    code = "invalid_asset"
