"""Typed models used across the application."""

from .article import Article
from .event import (
    CATEGORIES,
    Alert,
    Category,
    Classification,
    NewsEvent,
    Severity,
    Subscriber,
    TensionSample,
    TITLE_LANGUAGES,
)

__all__ = [
    "Article",
    "CATEGORIES",
    "Alert",
    "Category",
    "Classification",
    "NewsEvent",
    "Severity",
    "Subscriber",
    "TensionSample",
    "TITLE_LANGUAGES",
]
