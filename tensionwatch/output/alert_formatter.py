from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from ..models import Alert, NewsEvent, Severity
from .telegram import escape_markdown

_SEVERITY_EMOJI = {
    "critical": "\U0001f534",  # red circle
    "high": "\U0001f7e0",  # orange circle
    "medium": "\U0001f7e1",  # yellow circle
}

DEFAULT_ALERT_MESSAGE = "Critical event detected in the Iran-USA conflict."


def severity_emoji(severity: Severity | str) -> str:
    return _SEVERITY_EMOJI.get(severity, _SEVERITY_EMOJI["medium"])


def alert_message(event: NewsEvent) -> str:
    """Portuguese summary, else the description, else a fixed notice."""
    return event.ai_summary or event.description or DEFAULT_ALERT_MESSAGE


def _timestamp(now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    return now.strftime("%d/%m/%Y %H:%M UTC")


def format_broadcast(alert: Alert, *, now: Optional[datetime] = None) -> str:
    """Channel-wide alert text (MarkdownV2)."""
    return (
        f"{severity_emoji(alert.severity)} *ALERT {escape_markdown(alert.severity.upper())}*\n\n"
        f"*{escape_markdown(alert.title)}*\n\n"
        f"{escape_markdown(alert.message)}\n\n"
        f"_{escape_markdown(_timestamp(now))}_"
    )


def format_personal(alert: Alert, *, now: Optional[datetime] = None) -> str:
    """Alert text for a subscriber's private chat (MarkdownV2)."""
    return (
        f"{severity_emoji(alert.severity)} *Personal alert*\n\n"
        f"*{escape_markdown(alert.title)}*\n\n"
        f"{escape_markdown(alert.message)}\n\n"
        f"Category: {escape_markdown(alert.category)}\n"
        f"_{escape_markdown(_timestamp(now))}_"
    )
