from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional, Sequence

from ..models import Article
from ..utils.logging import get_logger
from ..utils.ratelimit import FixedIntervalLimiter
from .providers import SearchProvider

logger = get_logger("tw.fetchers.news")


def yesterday_iso(now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    return (now - timedelta(days=1)).date().isoformat()


class MultiSourceFetcher:
    """Query ranked search providers per keyword and merge results by URL.

    Providers are tried in order for each keyword; the next one is used only
    when the previous returned nothing (failure, empty result or missing key).
    """

    def __init__(
        self,
        providers: Sequence[SearchProvider],
        keywords: Sequence[str],
        *,
        limiter: Optional[FixedIntervalLimiter] = None,
        since: Callable[[], str] = yesterday_iso,
    ) -> None:
        self.providers = list(providers)
        self.keywords = list(keywords)
        self.limiter = limiter or FixedIntervalLimiter(0.3)
        self._since = since

    def _fetch_keyword(self, keyword: str, since_date: str) -> List[Article]:
        for provider in self.providers:
            articles = provider.search(keyword, since_date)
            if articles:
                return articles
            logger.debug("No results from %s for '%s'", provider.name, keyword)
        return []

    def fetch_latest_news(self) -> List[Article]:
        merged: Dict[str, Article] = {}
        since_date = self._since()

        for keyword in self.keywords:
            self.limiter.wait()
            try:
                articles = self._fetch_keyword(keyword, since_date)
            except Exception as exc:  # noqa: BLE001 - one keyword never aborts the rest
                logger.exception("Fetch failed for keyword '%s': %s", keyword, exc)
                continue

            for article in articles:
                if not article.title or not article.url:
                    continue
                merged.setdefault(article.url, article)

        results = list(merged.values())
        logger.info("News fetched: %d unique articles from %d keywords", len(results), len(self.keywords))
        return results
