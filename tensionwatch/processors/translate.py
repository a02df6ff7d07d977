from __future__ import annotations

from typing import Dict

from ..utils.logging import get_logger
from .ai import AIClient, create_ai_client
from .ai.parsing import TRANSLATION_LANGUAGES, parse_translation_response

logger = get_logger("tw.processors.translate")


def _build_translation_prompt(title: str) -> str:
    return (
        "Translate this news headline into the requested languages.\n"
        "Return ONLY valid JSON (no markdown):\n\n"
        f'English headline: "{title}"\n\n'
        "{\n"
        '  "pt": "<Portuguese translation>",\n'
        '  "es": "<Spanish translation>",\n'
        '  "ar": "<Arabic translation>",\n'
        '  "fa": "<Persian translation>"\n'
        "}\n"
    )


def fallback_titles(title: str) -> Dict[str, str]:
    return {"en": title, **{lang: title for lang in TRANSLATION_LANGUAGES}}


class TranslationGateway:
    """Per-language titles for an article; the original title fills every gap."""

    def __init__(
        self,
        ai: AIClient | None = None,
        *,
        max_tokens: int = 300,
        timeout: float | None = None,
    ) -> None:
        self._ai = ai
        self.max_tokens = max_tokens
        self.timeout = timeout

    @property
    def ai(self) -> AIClient:
        if self._ai is None:
            self._ai = create_ai_client(timeout=self.timeout)
        return self._ai

    def translate(self, title: str) -> Dict[str, str]:
        titles = fallback_titles(title)
        try:
            raw = self.ai.complete(_build_translation_prompt(title), max_tokens=self.max_tokens)
            titles.update(parse_translation_response(raw))
        except Exception as exc:  # noqa: BLE001 - any failure keeps the original title
            logger.warning("Translation failed for '%s': %s; keeping original title", title[:60], exc)
        return titles
