"""Article source backed by the NewsAPI ``/everything`` endpoint."""
import asyncio
import logging
from typing import Any, Dict, List, Optional

import requests

import config
from errors import MalformedResponseError, NetworkError, UpstreamError
from models import Article, Page, QuerySpec

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def build_params(query: QuerySpec, page_number: int, page_size: int = config.PAGE_SIZE) -> Dict[str, Any]:
    """Build the upstream request parameters for one page of a query."""
    params = {
        "apiKey": config.NEWS_API_KEY,
        "q": query.search_term or config.FALLBACK_QUERY,
        "page": page_number,
        "pageSize": page_size,
    }

    sources = config.CATEGORY_SOURCES.get(query.category.value)
    if sources:
        params["sources"] = ",".join(sources)

    return params


class ArticleSource:
    """Fetches single pages of articles. No caching, no retries."""

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        base_url: str = config.NEWS_API_BASE_URL,
        timeout: float = config.REQUEST_TIMEOUT,
    ):
        self.session = session or requests.Session()
        self.session.headers.update({'User-Agent': config.USER_AGENT})
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout

    async def fetch_page(self, query: QuerySpec, page_number: int, page_size: int = config.PAGE_SIZE) -> Page:
        """Fetch one page for ``query``.

        Runs the blocking HTTP call in a worker thread. Raises NetworkError,
        UpstreamError or MalformedResponseError.
        """
        if page_number < 1:
            raise ValueError(f"page_number must be >= 1, got {page_number}")

        params = build_params(query, page_number, page_size)
        payload = await asyncio.to_thread(self._get, params)
        articles = self._parse_articles(payload)

        logger.info(
            f"Fetched page {page_number} for {query.category.value!r}/{params['q']!r}: "
            f"{len(articles)} articles"
        )
        return Page(page_number=page_number, articles=articles, is_last=len(articles) < page_size)

    def _get(self, params: Dict[str, Any]) -> Any:
        url = f"{self.base_url}/everything"
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.error(f"Network error fetching page {params['page']}: {str(e)}")
            raise NetworkError(str(e)) from e

        if not response.ok:
            message = self._error_message(response)
            logger.warning(f"Upstream rejected page {params['page']} with {response.status_code}: {message}")
            raise UpstreamError(response.status_code, message)

        try:
            payload = response.json()
        except (ValueError, RecursionError) as e:
            raise MalformedResponseError("response body is not valid JSON") from e

        # NewsAPI can report errors in the body
        if isinstance(payload, dict) and payload.get("status") == "error":
            raise UpstreamError(response.status_code, payload.get("message"))

        return payload

    def _error_message(self, response: requests.Response) -> Optional[str]:
        try:
            body = response.json()
        except (ValueError, RecursionError):
            return response.reason or None
        if isinstance(body, dict) and body.get("message"):
            return body["message"]
        return response.reason or None

    def _parse_articles(self, payload: Any) -> List[Article]:
        if not isinstance(payload, dict) or not isinstance(payload.get("articles"), list):
            raise MalformedResponseError("missing 'articles' array")

        articles = []
        for idx, raw in enumerate(payload["articles"]):
            if not isinstance(raw, dict):
                raise MalformedResponseError(f"article {idx} is not an object")
            try:
                articles.append(Article.from_api(raw))
            except (ValueError, OverflowError) as e:
                raise MalformedResponseError(f"article {idx} is invalid: {str(e)}") from e
        return articles

    def close(self):
        self.session.close()
