"""Append-only page store for the active query."""
import logging
from typing import List, Optional, Tuple

from errors import AlreadyExhaustedError, OutOfOrderPageError
from models import Article, Category, Page, QuerySpec

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class PageCache:
    """Pages fetched for the current query identity.

    Pages are contiguous starting at 1. ``reset`` drops everything and bumps
    ``generation``, which callers use to recognise results dispatched before
    the reset.
    """

    def __init__(self):
        self.query: Optional[QuerySpec] = None
        self.pages: List[Page] = []
        self.next_page_number = 1
        self.exhausted = False
        self.generation = 0

    def reset(self, query: QuerySpec):
        """Discard all pages and start over for ``query``."""
        self.query = query
        self.pages = []
        self.next_page_number = 1
        self.exhausted = False
        self.generation += 1
        logger.debug(f"Cache reset for {query.identity} (generation {self.generation})")

    def append(self, page: Page):
        """Append the next page; raises if it is not the expected one."""
        if self.exhausted:
            raise AlreadyExhaustedError(page.page_number)
        if page.page_number != self.next_page_number:
            raise OutOfOrderPageError(self.next_page_number, page.page_number)

        self.pages.append(page)
        if page.is_last:
            self.exhausted = True
        else:
            self.next_page_number += 1

    def flatten(self) -> List[Article]:
        """All articles in page order, then intra-page order."""
        return [article for page in self.pages for article in page.articles]

    @property
    def identity(self) -> Optional[Tuple[Category, str]]:
        return self.query.identity if self.query else None

    @property
    def page_count(self) -> int:
        return len(self.pages)

    @property
    def article_count(self) -> int:
        return sum(len(page.articles) for page in self.pages)

    @property
    def is_empty(self) -> bool:
        return not self.pages
