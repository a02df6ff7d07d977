from __future__ import annotations

import re
from typing import Optional

import requests

from ..utils.logging import get_logger

logger = get_logger("tw.output.telegram")

TELEGRAM_API_BASE = "https://api.telegram.org"

# Characters reserved by Telegram MarkdownV2
_MARKDOWN_V2_SPECIAL = re.compile(r"([_*\[\]()~`>#+\-=|{}.!\\])")


def escape_markdown(text: str | None) -> str:
    """Escape ``text`` so Telegram renders it literally under MarkdownV2."""
    if not text:
        return ""
    return _MARKDOWN_V2_SPECIAL.sub(r"\\\1", str(text))


class TelegramChannel:
    """Send messages through the Telegram Bot API.

    ``send`` never raises; a missing token, transport error or non-ok reply is
    logged and reported as ``False``.
    """

    channel = "telegram"

    def __init__(
        self,
        bot_token: Optional[str],
        *,
        timeout: float = 5.0,
        dry_run: bool = False,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.bot_token = bot_token
        self.timeout = timeout
        self.dry_run = dry_run
        self._http = session or requests

    @property
    def configured(self) -> bool:
        return bool(self.bot_token)

    def send(self, chat_id: str | int | None, text: str, *, parse_mode: str = "MarkdownV2") -> bool:
        if not chat_id:
            return False
        if self.dry_run:
            logger.info("[DRY-RUN] Would send Telegram message to %s: %s", chat_id, text[:120])
            return True
        if not self.bot_token:
            logger.debug("Telegram bot token not set; skipping message to %s", chat_id)
            return False

        url = f"{TELEGRAM_API_BASE}/bot{self.bot_token}/sendMessage"
        payload = {"chat_id": chat_id, "text": text, "parse_mode": parse_mode}
        try:
            resp = self._http.post(url, json=payload, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.error("Telegram send to %s failed: %s", chat_id, exc)
            return False

        if resp.status_code >= 400:
            logger.error("Telegram send to %s failed: HTTP %s %s", chat_id, resp.status_code, resp.text[:200])
            return False
        try:
            ok = bool(resp.json().get("ok"))
        except ValueError:
            ok = False
        if not ok:
            logger.error("Telegram send to %s rejected: %s", chat_id, resp.text[:200])
        return ok
