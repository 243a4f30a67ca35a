"""Configuration settings for the news feed client."""
import os
from dotenv import load_dotenv

load_dotenv()

# API Keys
NEWS_API_KEY = os.getenv("NEWS_API_KEY", "")

# NewsAPI Settings
NEWS_API_BASE_URL = os.getenv("NEWS_API_BASE_URL", "https://newsapi.org/v2")
REQUEST_TIMEOUT = float(os.getenv("NEWS_API_TIMEOUT", "15"))
USER_AGENT = "NewsHub/1.0 (+https://newsapi.org)"

# Pagination
PAGE_SIZE = 10
# The upstream endpoint rejects an empty query
FALLBACK_QUERY = "news"

# Upstream source ids per category; "all" searches without a source filter
CATEGORY_SOURCES = {
    "politics": ["bbc-news", "the-guardian-uk"],
    "tech": ["techcrunch", "wired"],
    "sports": ["espn", "bbc-sport"],
    "business": ["bloomberg", "financial-times"],
}

# API Settings
API_HOST = os.getenv("API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("API_PORT", "8000"))
