"""
Adapter for the NewsAPI "everything" search endpoint.

Each dashboard topic category maps to a boolean search query, and each region narrows the search to a fixed
set of publisher domains. Articles with missing fields or removed content are dropped before they reach the
enrichment step.
"""

from typing import Any, Dict, List, Optional

import httpx

from src.core.config import NEWS_API_URL
from src.core.entities import NewsArticle

from utils.logging_setup import get_logger
logger = get_logger(__name__, log_file="adapters.log")

CATEGORY_QUERIES = {
    "ai": "artificial intelligence recruitment OR ai hiring trends OR automation workforce",
    "labor": '"labor market" OR "employment trends" OR "workforce statistics"',
    "msp": '"managed service provider" OR "recruitment process outsourcing" OR MSP staffing',
    "stem": '"STEM recruitment" OR "engineering talent" OR "technology staffing"',
    "chomsky": '"workforce inequality" OR "labor rights" OR "worker conditions"',
    "all": "workforce solutions OR recruitment trends OR employment",
}

REGION_DOMAINS = {
    "uk": ["bbc.co.uk", "theguardian.com", "telegraph.co.uk", "ft.com"],
    "usa": ["wsj.com", "nytimes.com", "bloomberg.com", "reuters.com"],
    "eu": ["euronews.com", "politico.eu", "ft.com", "reuters.com"],
}

REGIONS = ("global",) + tuple(REGION_DOMAINS)


class NewsApiError(Exception):
    """The news API could not be reached or answered with something we cannot use."""


def build_query_params(category: str, region: str, page_size: int = 20) -> Dict[str, Any]:
    params = {
        "q": CATEGORY_QUERIES.get(category, CATEGORY_QUERIES["all"]),
        "language": "en",
        "sortBy": "relevancy",
        "pageSize": page_size,
    }
    domains = REGION_DOMAINS.get(region)
    if domains:
        params["domains"] = ",".join(domains)
    return params


def _is_usable(raw: Dict[str, Any]) -> bool:
    title = raw.get("title")
    return bool(title and raw.get("description") and raw.get("url")) and "Removed" not in title


def _to_article(raw: Dict[str, Any]) -> NewsArticle:
    source = raw.get("source") or {}
    return NewsArticle(
        title=raw["title"],
        description=raw["description"],
        url=raw["url"],
        source=(source.get("name") if isinstance(source, dict) else None) or "Unknown",
        published_at=raw.get("publishedAt"),
    )


class NewsApiClient:
    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = NEWS_API_URL,
        page_size: int = 20,
        max_articles: int = 12,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url
        self.page_size = page_size
        self.max_articles = max_articles
        self.timeout = timeout
        self._transport = transport

    async def search(self, category: str = "all", region: str = "global") -> List[NewsArticle]:
        """Fetch the latest articles for a topic category and region."""
        if not self.api_key:
            raise NewsApiError("NEWS_API_KEY is not configured")

        params = build_query_params(category, region, self.page_size)
        logger.info(f"📰 Searching news: category='{category}', region='{region}'")

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(self.base_url, params=params, headers={"X-Api-Key": self.api_key})
        except httpx.HTTPError as e:
            raise NewsApiError(f"NewsAPI request failed: {e}") from e

        if not response.is_success:
            raise NewsApiError(f"NewsAPI error: {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            raise NewsApiError("Invalid response format from NewsAPI") from e

        raw_articles = data.get("articles") if isinstance(data, dict) else None
        if not isinstance(raw_articles, list):
            raise NewsApiError("Invalid response format from NewsAPI")

        articles = [_to_article(raw) for raw in raw_articles if isinstance(raw, dict) and _is_usable(raw)]
        logger.info(f"✅ NewsAPI returned {len(raw_articles)} articles, {len(articles)} usable")
        return articles[:self.max_articles]
