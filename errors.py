"""Error types raised by the article source and the page cache."""
from typing import Optional


class FeedError(Exception):
    """Base class for news feed errors."""


class ArticleSourceError(FeedError):
    """A page fetch failed. Shown to the user."""


class NetworkError(ArticleSourceError):
    """The upstream API could not be reached."""

    def __str__(self) -> str:
        detail = super().__str__()
        return f"Network error: {detail}" if detail else "Network error"


class UpstreamError(ArticleSourceError):
    """The upstream API rejected the request (bad key, rate limit, ...)."""

    def __init__(self, status: int, message: Optional[str] = None):
        super().__init__(status, message)
        self.status = status
        self.message = message

    def __str__(self) -> str:
        if self.message:
            return f"Request failed with status {self.status}: {self.message}"
        return f"Request failed with status {self.status}"


class MalformedResponseError(ArticleSourceError):
    """The upstream response could not be parsed."""

    def __str__(self) -> str:
        detail = super().__str__()
        return f"Malformed response: {detail}" if detail else "Malformed response"


class CacheInvariantError(FeedError):
    """The page cache was used incorrectly. Logged, never shown to the user."""


class OutOfOrderPageError(CacheInvariantError):
    def __init__(self, expected: int, received: int):
        super().__init__(f"Expected page {expected}, received page {received}")
        self.expected = expected
        self.received = received


class AlreadyExhaustedError(CacheInvariantError):
    def __init__(self, page_number: int):
        super().__init__(f"Cannot append page {page_number}: the query is exhausted")
        self.page_number = page_number
