"""Pagination state machine driving the article feed."""
import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Set, Tuple

import config
from errors import ArticleSourceError, CacheInvariantError
from feed_projector import project
from models import Category, ControllerState, ControllerStatus, FeedView, QuerySpec
from page_cache import PageCache

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

Listener = Callable[[FeedView], None]


@dataclass(frozen=True)
class _Dispatch:
    """Stamp attached to a fetch when it is started."""
    query: QuerySpec
    generation: int
    page_number: int

    @property
    def identity(self) -> Tuple[Category, str]:
        return self.query.identity


class PaginationController:
    """Turns query changes and load-more events into page fetches.

    Only one query is active at a time. Every fetch carries the cache
    generation it was started for; a result arriving after the cache has been
    reset belongs to a superseded query and is dropped.

    The dispatching methods return the task running the fetch, or None when
    the call was a no-op. They must be called from a running event loop.
    """

    def __init__(self, source, page_size: int = config.PAGE_SIZE):
        self.source = source
        self.page_size = page_size
        self.cache = PageCache()
        self.state = ControllerState.idle()
        self._listeners: List[Listener] = []
        self._tasks: Set[asyncio.Task] = set()

    @property
    def query(self) -> Optional[QuerySpec]:
        return self.cache.query

    def set_query(self, query: QuerySpec) -> Optional[asyncio.Task]:
        """Switch to ``query``, or retry page 1 if the same query failed."""
        if query.identity == self.cache.identity and self.state.status != ControllerStatus.ERROR:
            logger.debug(f"Query {query.identity} unchanged, ignoring")
            return None

        self.cache.reset(query)
        return self._start(ControllerState.loading_first())

    def load_more(self) -> Optional[asyncio.Task]:
        """Fetch the next page when idle and more results exist."""
        if self.cache.query is None or self.cache.exhausted:
            return None
        if self.state.status != ControllerStatus.IDLE:
            logger.debug(f"load_more ignored in state {self.state.status.value}")
            return None
        return self._start(ControllerState.loading_more())

    def refresh(self) -> Optional[asyncio.Task]:
        """Drop the cached pages of the current query and fetch page 1 again."""
        if self.cache.query is None or self.state.status == ControllerStatus.LOADING_FIRST:
            return None
        self.cache.reset(self.cache.query)
        return self._start(ControllerState.loading_first())

    def view(self) -> FeedView:
        return project(self.state, self.cache)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener`` with a fresh FeedView after every state change."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def aclose(self):
        """Wait for fetches still in flight, then close the source."""
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
        close = getattr(self.source, "close", None)
        if close is not None:
            close()

    def _start(self, state: ControllerState) -> asyncio.Task:
        dispatch = _Dispatch(self.cache.query, self.cache.generation, self.cache.next_page_number)
        self._set_state(state)

        logger.info(f"Requesting page {dispatch.page_number} for {dispatch.identity}")
        task = asyncio.get_running_loop().create_task(self._run(dispatch))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run(self, dispatch: _Dispatch):
        try:
            page = await self.source.fetch_page(dispatch.query, dispatch.page_number, self.page_size)
        except ArticleSourceError as e:
            if self._is_stale(dispatch):
                return
            logger.warning(f"Page {dispatch.page_number} for {dispatch.identity} failed: {str(e)}")
            self._set_state(ControllerState.error(e))
            return
        except Exception as e:
            if self._is_stale(dispatch):
                return
            logger.error(f"Unexpected error fetching page {dispatch.page_number} for {dispatch.identity}: {str(e)}", exc_info=True)
            self._set_state(ControllerState.error(ArticleSourceError(f"Unexpected error: {str(e)}")))
            return

        if self._is_stale(dispatch):
            return

        try:
            self.cache.append(page)
        except CacheInvariantError as e:
            logger.error(f"Could not apply page {page.page_number} for {dispatch.identity}: {str(e)}", exc_info=True)
        self._set_state(ControllerState.exhausted() if self.cache.exhausted else ControllerState.idle())

    def _is_stale(self, dispatch: _Dispatch) -> bool:
        if dispatch.generation == self.cache.generation:
            return False
        logger.debug(
            f"Discarding page {dispatch.page_number} for {dispatch.identity}: "
            f"superseded by {self.cache.identity}"
        )
        return True

    def _set_state(self, state: ControllerState):
        self.state = state
        if not self._listeners:
            return
        view = self.view()
        for listener in list(self._listeners):
            try:
                listener(view)
            except Exception as e:
                logger.error(f"Feed listener failed: {str(e)}", exc_info=True)
