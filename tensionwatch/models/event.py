from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Literal, Optional

Category = Literal["military", "nuclear", "diplomatic", "economic", "cyber", "other"]
Severity = Literal["medium", "high", "critical"]

CATEGORIES: tuple[str, ...] = ("military", "nuclear", "diplomatic", "economic", "cyber", "other")

# Languages carried on every persisted event. "en" is the source language.
TITLE_LANGUAGES: tuple[str, ...] = ("en", "pt", "es", "ar", "fa")


@dataclass(slots=True)
class Classification:
    category: Category
    impact_score: float
    is_critical: bool
    summaries: Dict[str, str] = field(default_factory=dict)
    keywords: List[str] = field(default_factory=list)

    @property
    def summary_pt(self) -> str:
        return self.summaries.get("pt", "")

    @property
    def summary_en(self) -> str:
        return self.summaries.get("en", "")


@dataclass(slots=True)
class NewsEvent:
    """A classified article as persisted in the event store."""

    url: str
    title: str
    description: str
    source: str
    published_at: Optional[str]
    category: Category
    impact_score: float
    is_critical: bool
    tension_delta: float
    ai_summary: str = ""
    keywords: List[str] = field(default_factory=list)
    titles: Dict[str, str] = field(default_factory=dict)

    # Assigned by the store
    id: Optional[str] = None
    created_at: Optional[str] = None

    def to_row(self) -> dict:
        row = {
            "title": self.title,
            "description": self.description,
            "url": self.url,
            "source": self.source,
            "published_at": self.published_at,
            "category": self.category,
            "impact_score": self.impact_score,
            "is_critical": self.is_critical,
            "ai_summary": self.ai_summary,
            "keywords": list(self.keywords),
            "tension_delta": self.tension_delta,
        }
        for lang in TITLE_LANGUAGES:
            row[f"title_{lang}"] = self.titles.get(lang, self.title)
        return row

    @classmethod
    def from_row(cls, row: dict) -> "NewsEvent":
        titles = {lang: row[f"title_{lang}"] for lang in TITLE_LANGUAGES if row.get(f"title_{lang}")}
        return cls(
            url=row["url"],
            title=row.get("title") or "",
            description=row.get("description") or "",
            source=row.get("source") or "",
            published_at=row.get("published_at"),
            category=row.get("category") or "other",
            impact_score=float(row.get("impact_score") or 0.0),
            is_critical=bool(row.get("is_critical")),
            tension_delta=float(row.get("tension_delta") or 0.0),
            ai_summary=row.get("ai_summary") or "",
            keywords=list(row.get("keywords") or []),
            titles=titles,
            id=row.get("id"),
            created_at=row.get("created_at"),
        )


@dataclass(slots=True)
class TensionSample:
    value: float
    delta: float = 0.0
    notes: str = ""
    id: Optional[str] = None
    created_at: Optional[str] = None

    def to_row(self) -> dict:
        return {"tension_value": self.value, "delta": self.delta, "notes": self.notes}

    @classmethod
    def from_row(cls, row: dict) -> "TensionSample":
        return cls(
            value=float(row["tension_value"]),
            delta=float(row.get("delta") or 0.0),
            notes=row.get("notes") or "",
            id=row.get("id"),
            created_at=row.get("created_at"),
        )


@dataclass(slots=True)
class Alert:
    event_id: Optional[str]
    title: str
    message: str
    severity: Severity
    category: str
    is_active: bool = True
    notified_count: int = 0
    id: Optional[str] = None
    created_at: Optional[str] = None

    def to_row(self) -> dict:
        return {
            "event_id": self.event_id,
            "title": self.title,
            "message": self.message,
            "severity": self.severity,
            "category": self.category,
            "is_active": self.is_active,
            "notified_count": self.notified_count,
        }

    @classmethod
    def from_row(cls, row: dict) -> "Alert":
        return cls(
            event_id=row.get("event_id"),
            title=row["title"],
            message=row["message"],
            severity=row.get("severity") or "high",
            category=row.get("category") or "other",
            is_active=bool(row.get("is_active", True)),
            notified_count=int(row.get("notified_count") or 0),
            id=row.get("id"),
            created_at=row.get("created_at"),
        )


@dataclass(slots=True)
class Subscriber:
    """A user eligible for personal alert delivery."""

    id: str
    telegram_chat_id: Optional[str]
    alert_telegram_enabled: bool = False
    plan: str = "free"
