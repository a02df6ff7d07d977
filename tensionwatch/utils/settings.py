from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional


def _env(name: str) -> Optional[str]:
    value = os.getenv(name, "").strip()
    return value or None


@dataclass(slots=True)
class Settings:
    """Credentials and endpoints read from the environment (and ``.env``)."""

    news_api_key: Optional[str] = None
    gnews_api_key: Optional[str] = None
    telegram_bot_token: Optional[str] = None
    telegram_chat_id: Optional[str] = None
    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            news_api_key=_env("NEWS_API_KEY"),
            gnews_api_key=_env("GNEWS_API_KEY"),
            telegram_bot_token=_env("TELEGRAM_BOT_TOKEN"),
            telegram_chat_id=_env("TELEGRAM_CHAT_ID"),
            supabase_url=_env("SUPABASE_URL"),
            supabase_key=_env("SUPABASE_SERVICE_ROLE_KEY"),
        )

    @property
    def has_supabase(self) -> bool:
        return bool(self.supabase_url and self.supabase_key)

    @property
    def has_telegram(self) -> bool:
        return bool(self.telegram_bot_token)
