"""Derives the renderable feed from controller state and cached pages."""
from typing import List

from models import Article, ControllerState, ControllerStatus, FeedView
from page_cache import PageCache


def dedupe_articles(articles: List[Article]) -> List[Article]:
    """Drop repeated (url, published_at) pairs, keeping the first occurrence."""
    seen = set()
    unique = []
    for article in articles:
        if article.key in seen:
            continue
        seen.add(article.key)
        unique.append(article)
    return unique


def project(state: ControllerState, cache: PageCache) -> FeedView:
    status = state.status
    return FeedView(
        items=dedupe_articles(cache.flatten()),
        is_initial_loading=status == ControllerStatus.LOADING_FIRST,
        is_loading_more=status == ControllerStatus.LOADING_MORE,
        error_message=str(state.cause) if status == ControllerStatus.ERROR and state.cause else None,
        status=status,
        has_more=cache.query is not None and not cache.exhausted,
        query=cache.query,
    )
