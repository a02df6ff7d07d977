"""Content fetching layer: keyword search providers and the multi-source fetcher."""

from .news import MultiSourceFetcher
from .providers import GNewsProvider, NewsAPIProvider, SearchProvider

__all__ = ["MultiSourceFetcher", "GNewsProvider", "NewsAPIProvider", "SearchProvider"]
