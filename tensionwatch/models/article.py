from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True, slots=True)
class Article:
    """A search result as returned by a news provider. Identity is the URL."""

    url: str
    title: str
    description: str
    source: str
    published_at: Optional[str] = None
