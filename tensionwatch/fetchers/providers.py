from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import requests

from ..models import Article
from ..processors.normalize import (
    canonical_url,
    clean_html_to_text,
    normalize_plain_text,
    parse_date_to_iso,
)
from ..utils.logging import get_logger

logger = get_logger("tw.fetchers.providers")

_DEFAULT_HEADERS: Dict[str, str] = {"User-Agent": "tensionwatch/1.0"}

# NewsAPI's placeholder for articles withdrawn by the publisher
_REMOVED_TITLE = "[Removed]"


def _text(value: Any) -> Optional[str]:
    """Provider fields of the wrong type count as missing."""
    return value if isinstance(value, str) else None


class SearchProvider(ABC):
    """A keyword news search API.

    ``search`` never raises: transport errors, non-success responses and
    malformed payloads all yield an empty list.
    """

    name: str = "provider"

    def __init__(
        self,
        api_key: Optional[str],
        *,
        language: str = "en",
        page_size: int = 10,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.api_key = api_key
        self.language = language
        self.page_size = page_size
        self.timeout = timeout
        self._http = session or requests

    @property
    def available(self) -> bool:
        return bool(self.api_key)

    @abstractmethod
    def _request_params(self, keyword: str, since_date: str) -> Dict[str, Any]:
        """Query parameters for one keyword search."""

    @property
    @abstractmethod
    def url(self) -> str:
        """Search endpoint."""

    def _payload_ok(self, data: dict) -> bool:
        return True

    def search(self, keyword: str, since_date: str) -> List[Article]:
        if not self.available:
            logger.debug("%s has no API key; skipping '%s'", self.name, keyword)
            return []

        try:
            resp = self._http.get(
                self.url,
                params=self._request_params(keyword, since_date),
                headers=_DEFAULT_HEADERS,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.warning("%s request error for '%s': %s", self.name, keyword, exc)
            return []

        if resp.status_code >= 400:
            logger.warning("%s request failed (%s) for '%s'", self.name, resp.status_code, keyword)
            return []

        try:
            data = resp.json()
        except ValueError as exc:
            logger.warning("%s returned malformed JSON for '%s': %s", self.name, keyword, exc)
            return []

        if not isinstance(data, dict) or not self._payload_ok(data):
            logger.warning("%s returned an error payload for '%s'", self.name, keyword)
            return []

        raw_articles = data.get("articles") or []
        if not isinstance(raw_articles, list):
            return []

        articles: List[Article] = []
        for raw in raw_articles:
            try:
                article = self._to_article(raw)
            except (ValueError, TypeError) as exc:
                logger.warning("%s: skipping malformed article for '%s': %s", self.name, keyword, exc)
                continue
            if article is not None:
                articles.append(article)
        logger.debug("%s returned %d articles for '%s'", self.name, len(articles), keyword)
        return articles

    def _to_article(self, raw: Any) -> Optional[Article]:
        if not isinstance(raw, dict):
            return None
        title = normalize_plain_text(clean_html_to_text(_text(raw.get("title"))))
        url = canonical_url(_text(raw.get("url")))
        if not title or not url or title == _REMOVED_TITLE:
            return None
        source = raw.get("source") or {}
        source_name = _text(source.get("name")) if isinstance(source, dict) else None
        return Article(
            url=url,
            title=title,
            description=normalize_plain_text(clean_html_to_text(_text(raw.get("description")))),
            source=(source_name or "Unknown").strip(),
            published_at=parse_date_to_iso(_text(raw.get("publishedAt"))),
        )


class NewsAPIProvider(SearchProvider):
    """NewsAPI.org ``/v2/everything`` search (primary)."""

    name = "newsapi"

    @property
    def url(self) -> str:
        return "https://newsapi.org/v2/everything"

    def _request_params(self, keyword: str, since_date: str) -> Dict[str, Any]:
        return {
            "q": keyword,
            "language": self.language,
            "sortBy": "publishedAt",
            "pageSize": self.page_size,
            "from": since_date,
            "apiKey": self.api_key,
        }

    def _payload_ok(self, data: dict) -> bool:
        return data.get("status") == "ok"


class GNewsProvider(SearchProvider):
    """GNews ``/api/v4/search`` (fallback)."""

    name = "gnews"

    @property
    def url(self) -> str:
        return "https://gnews.io/api/v4/search"

    def _request_params(self, keyword: str, since_date: str) -> Dict[str, Any]:
        return {
            "q": keyword,
            "lang": self.language,
            "max": self.page_size,
            "sortby": "publishedAt",
            "from": f"{since_date}T00:00:00Z",
            "token": self.api_key,
        }
