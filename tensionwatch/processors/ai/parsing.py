from __future__ import annotations

import json
import re
from typing import Dict

from ...models import CATEGORIES, Classification

_FENCE_RE = re.compile(r"```(?:json)?", re.IGNORECASE)

TRANSLATION_LANGUAGES: tuple[str, ...] = ("pt", "es", "ar", "fa")


def strip_code_fences(raw: str) -> str:
    """Remove markdown code-fence markers wrapped around a JSON reply."""
    return _FENCE_RE.sub("", raw or "").strip()


def _load_object(raw: str) -> dict:
    if not raw or not raw.strip():
        raise ValueError("Empty AI response")

    cleaned = strip_code_fences(raw)
    try:
        obj = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in AI response: {exc}") from exc

    if not isinstance(obj, dict):
        raise ValueError("AI response is not a JSON object")
    return obj


def parse_classification_response(raw: str) -> Classification:
    """Parse and validate AI classification JSON.

    Expected object with keys:
      - category: one of CATEGORIES
      - impact_score: number, clamped to [0, 10]
      - is_critical: boolean
      - summary_pt, summary_en: strings (optional)
      - keywords: list of strings (optional)
    """
    obj = _load_object(raw)

    category_val = obj.get("category", "")
    if not isinstance(category_val, str):
        raise ValueError("'category' must be a string")
    category = category_val.strip().lower()
    if category not in CATEGORIES:
        raise ValueError(f"Invalid category '{category}'")

    score_val = obj.get("impact_score")
    if isinstance(score_val, bool):
        raise ValueError(f"Invalid impact_score '{score_val}'")
    try:
        score = float(score_val)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid impact_score '{score_val}': {exc}") from exc
    if score != score:  # NaN
        raise ValueError("impact_score is NaN")
    score = max(0.0, min(10.0, score))

    is_critical = obj.get("is_critical", False)
    if not isinstance(is_critical, bool):
        raise ValueError("'is_critical' must be a boolean")

    keywords_val = obj.get("keywords") or []
    if not isinstance(keywords_val, list):
        raise ValueError("'keywords' must be a list")
    keywords = []
    for kw in keywords_val:
        kw_str = str(kw).strip()
        if kw_str and kw_str not in keywords:
            keywords.append(kw_str)

    summaries = {
        lang: str(obj[f"summary_{lang}"]).strip()
        for lang in ("pt", "en")
        if obj.get(f"summary_{lang}")
    }

    return Classification(
        category=category,
        impact_score=score,
        is_critical=is_critical,
        summaries=summaries,
        keywords=keywords,
    )


def parse_translation_response(raw: str) -> Dict[str, str]:
    """Parse a ``{pt, es, ar, fa}`` translation map; blank entries are dropped."""
    obj = _load_object(raw)
    out: Dict[str, str] = {}
    for lang in TRANSLATION_LANGUAGES:
        val = obj.get(lang)
        if isinstance(val, str) and val.strip():
            out[lang] = val.strip()
    if not out:
        raise ValueError("Translation response has no usable languages")
    return out
