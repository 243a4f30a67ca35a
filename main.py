"""FastAPI application serving the news feed."""
from contextlib import asynccontextmanager
from typing import Optional
import logging
import os

from fastapi import FastAPI
from fastapi.requests import Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from article_source import ArticleSource
from models import Category, FeedView, QueryRequest, QuerySpec
from pagination_controller import PaginationController
import config

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

controller = PaginationController(ArticleSource())


@asynccontextmanager
async def lifespan(app: FastAPI):
    if not config.NEWS_API_KEY:
        logger.warning("NEWS_API_KEY is not set; upstream requests will be rejected")
    yield
    await controller.aclose()


app = FastAPI(title="NewsHub", lifespan=lifespan)

templates = Jinja2Templates(directory=os.path.join(os.path.dirname(__file__), "templates"))


async def _settle(task) -> FeedView:
    """Wait for a dispatched fetch, if any, and return the resulting view."""
    if task is not None:
        await task
    return controller.view()


@app.get("/", response_class=HTMLResponse)
async def home(request: Request, category: Optional[str] = None, q: Optional[str] = None, more: bool = False):
    """Feed page with search box and category picker."""
    if category is not None or q is not None or controller.query is None:
        try:
            selected = Category(category or Category.ALL.value)
        except ValueError:
            logger.warning(f"Unknown category {category!r}, showing all")
            selected = Category.ALL
        view = await _settle(controller.set_query(QuerySpec(category=selected, search_term=q or "")))
    else:
        view = controller.view()

    if more:
        view = await _settle(controller.load_more())

    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "view": view,
            "categories": list(Category),
            "active_category": view.query.category if view.query else Category.ALL,
            "search_term": view.query.search_term if view.query else "",
        }
    )


@app.post("/api/query")
async def set_query(request: QueryRequest) -> FeedView:
    """Change the active category / search term."""
    query = QuerySpec(category=request.category, search_term=request.search_term)
    return await _settle(controller.set_query(query))


@app.post("/api/load-more")
async def load_more() -> FeedView:
    """Fetch the next page of the active query."""
    return await _settle(controller.load_more())


@app.post("/api/refresh")
async def refresh() -> FeedView:
    """Re-fetch the active query from page 1."""
    return await _settle(controller.refresh())


@app.get("/api/feed")
async def get_feed() -> FeedView:
    """Current feed without triggering a fetch."""
    return controller.view()


@app.get("/api/categories")
async def get_categories():
    """Selectable categories."""
    return {
        "categories": [
            {
                "value": category.value,
                "label": category.label,
                "sources": config.CATEGORY_SOURCES.get(category.value, []),
            }
            for category in Category
        ]
    }


@app.get("/api/status")
async def get_status():
    """Get controller status."""
    cache = controller.cache
    return {
        "status": controller.state.status.value,
        "loading": controller.state.is_loading,
        "query": cache.query.model_dump(mode="json") if cache.query else None,
        "pages_loaded": cache.page_count,
        "articles_loaded": cache.article_count,
        "next_page_number": None if cache.exhausted else cache.next_page_number,
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=config.API_HOST, port=config.API_PORT)
