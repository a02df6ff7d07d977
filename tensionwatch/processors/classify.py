from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..models import Classification
from ..utils.logging import get_logger
from .ai import AIClient, create_ai_client
from .ai.parsing import parse_classification_response

logger = get_logger("tw.processors.classify")

SAFE_DEFAULT_SCORE = 3.0
_SUMMARY_MAX_CHARS = 100


def _build_classification_prompt(title: str, description: str) -> str:
    return (
        "Classify this news item about the Iran / USA / Middle East conflict.\n\n"
        f"Title: {title}\n"
        f"Description: {description or 'N/A'}\n\n"
        "Return ONLY a valid JSON object (no markdown) with exactly these keys:\n"
        "{\n"
        '  "category": "military|nuclear|diplomatic|economic|cyber|other",\n'
        '  "impact_score": <number from 0.0 to 10.0>,\n'
        '  "is_critical": <true|false>,\n'
        '  "summary_pt": "<summary in Portuguese, max 100 chars>",\n'
        '  "summary_en": "<summary in English, max 100 chars>",\n'
        '  "keywords": ["keyword1", "keyword2", "keyword3"]\n'
        "}\n\n"
        "impact_score guide:\n"
        "- 9-10: direct military strike, nuclear weapon\n"
        "- 7-8: missile test, sweeping sanctions, serious cyber attack\n"
        "- 5-6: nuclear enrichment, troop movements, diplomatic rupture\n"
        "- 3-4: minor new sanctions, hostile statements\n"
        "- 1-2: routine political statements\n"
        "- 0: irrelevant to the conflict\n"
    )


@dataclass(frozen=True, slots=True)
class ClassificationResult:
    """Outcome of one gateway call: a validated classification or the reason it failed."""

    classification: Optional[Classification] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.classification is not None

    @classmethod
    def valid(cls, classification: Classification) -> "ClassificationResult":
        return cls(classification=classification)

    @classmethod
    def invalid(cls, reason: str) -> "ClassificationResult":
        return cls(error=reason)


def safe_default_classification(title: str) -> Classification:
    summary = (title or "")[:_SUMMARY_MAX_CHARS]
    return Classification(
        category="other",
        impact_score=SAFE_DEFAULT_SCORE,
        is_critical=False,
        summaries={"pt": summary, "en": summary},
        keywords=[],
    )


def resolve_classification(result: ClassificationResult, title: str) -> Classification:
    """Return the parsed classification, or the safe default for an invalid result."""
    if result.classification is not None:
        return result.classification
    logger.warning("Using safe default classification for '%s': %s", title[:60], result.error)
    return safe_default_classification(title)


class ClassificationGateway:
    """Sends article text to the reasoning service, one call per article, no retries."""

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

    def request(self, title: str, description: str) -> ClassificationResult:
        prompt = _build_classification_prompt(title, description)
        try:
            raw = self.ai.complete(prompt, max_tokens=self.max_tokens)
        except Exception as exc:  # noqa: BLE001 - transport errors become an invalid result
            return ClassificationResult.invalid(f"classifier call failed: {exc}")
        try:
            return ClassificationResult.valid(parse_classification_response(raw))
        except ValueError as exc:
            return ClassificationResult.invalid(str(exc))

    def classify(self, title: str, description: str) -> Classification:
        result = self.request(title, description)
        classification = resolve_classification(result, title)
        logger.debug(
            "Classified '%s' as %s (%.1f)", title[:60], classification.category, classification.impact_score
        )
        return classification
