"""Tension index arithmetic.

All functions here are pure: they depend only on their arguments and the
module-level constant tables, so they can be called from anywhere and tested
without fixtures.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Iterable, Optional

from ..models import Severity, TensionSample

CATEGORY_WEIGHTS: dict[str, float] = {
    "military": 8,
    "nuclear": 6,
    "economic": 5,
    "cyber": 4,
    "diplomatic": 3,
    "other": 1,
}

# Title keywords that amplify a delta (x1.3). English, Portuguese, Arabic.
HIGH_TENSION_KEYWORDS: tuple[str, ...] = (
    "strike", "attack", "missile", "launched", "fired", "bomb",
    "retaliation", "war", "invasion", "nuclear weapon", "warhead",
    "ataque", "míssil", "guerra", "bomba", "retaliação",
    "ضربة", "صاروخ", "حرب",
)

# Title keywords that flip and halve a delta (x-0.5).
DEESCALATION_KEYWORDS: tuple[str, ...] = (
    "negotiation", "agreement", "deal", "ceasefire", "diplomacy",
    "talks", "peace", "accord", "dialogue",
    "negociação", "acordo", "cessar-fogo", "diplomacia", "paz",
)

# Title/description keywords that raise an alert regardless of score.
ALERT_KEYWORDS: tuple[str, ...] = (
    "strike", "missile", "retaliation", "attack", "nuclear weapon",
    "enrichment above 80", "warship", "blockade", "explosion",
    "ataque", "míssil", "retaliação", "bloqueio",
)

HIGH_TENSION_MULTIPLIER = 1.3
DEESCALATION_MULTIPLIER = -0.5

BASELINE = 60.0
GRAVITY = 0.02
MIN_TENSION = 0.0
MAX_TENSION = 100.0

ALERT_IMPACT_THRESHOLD = 8.0


@dataclass(frozen=True, slots=True)
class TensionLevel:
    level: str
    label: str
    color: str


# Checked top-down; the first threshold the value reaches wins.
_LEVELS: tuple[tuple[float, TensionLevel], ...] = (
    (90, TensionLevel("critical", "CRITICAL", "#ff2222")),
    (75, TensionLevel("high", "HIGH", "#ff6a00")),
    (55, TensionLevel("moderate", "MODERATE", "#ffb700")),
    (35, TensionLevel("low", "LOW", "#88cc44")),
)
_STABLE = TensionLevel("stable", "STABLE", "#00ff88")


@dataclass(frozen=True, slots=True)
class TensionStats:
    min: float
    max: float
    avg: float
    current: float


def _round2(value: float) -> float:
    # Half-up rounding; round() would use banker's rounding on exact halves.
    return math.floor(value * 100 + 0.5) / 100


def _contains_any(text: str, keywords: Iterable[str]) -> bool:
    return any(kw in text for kw in keywords)


def tension_delta(category: str, ai_score: float, title: str = "") -> float:
    """Compute the tension change contributed by a single event.

    The category weight is scaled by ``0.5 + ai_score / 10``. A high-tension
    keyword in the title multiplies by 1.3; a de-escalation keyword then
    multiplies by -0.5. A title matching both lists gets both factors.
    """
    title_lower = (title or "").lower()
    delta = CATEGORY_WEIGHTS.get(category, CATEGORY_WEIGHTS["other"]) * (0.5 + ai_score / 10)

    if _contains_any(title_lower, HIGH_TENSION_KEYWORDS):
        delta *= HIGH_TENSION_MULTIPLIER
    if _contains_any(title_lower, DEESCALATION_KEYWORDS):
        delta *= DEESCALATION_MULTIPLIER

    return _round2(delta)


def apply_tension_delta(current: float, delta: float) -> float:
    """Add ``delta`` and pull the result 2% of the way back toward the baseline."""
    raw = current + delta
    with_gravity = raw + (BASELINE - raw) * GRAVITY
    return min(MAX_TENSION, max(MIN_TENSION, _round2(with_gravity)))


def classify_tension_level(value: float) -> TensionLevel:
    for threshold, level in _LEVELS:
        if value >= threshold:
            return level
    return _STABLE


def _field(event: Any, name: str, default: Any = None) -> Any:
    if isinstance(event, dict):
        return event.get(name, default)
    return getattr(event, name, default)


def should_trigger_alert(event: Any) -> bool:
    """Return True when an event's score or wording warrants an alert.

    ``event`` may be a mapping or any object exposing ``impact_score``,
    ``title`` and ``description``.
    """
    score = float(_field(event, "impact_score", 0) or 0)
    text = f"{_field(event, 'title', '') or ''} {_field(event, 'description', '') or ''}".lower()
    return score >= ALERT_IMPACT_THRESHOLD or _contains_any(text, ALERT_KEYWORDS)


def alert_severity(impact_score: float) -> Severity:
    if impact_score >= 9:
        return "critical"
    if impact_score >= 7:
        return "high"
    return "medium"


def summarize_history(samples: Iterable[TensionSample]) -> Optional[TensionStats]:
    """Min/max/average over a chronologically ordered series; None if empty."""
    values = [s.value for s in samples]
    if not values:
        return None
    return TensionStats(
        min=min(values),
        max=max(values),
        avg=_round2(sum(values) / len(values)),
        current=values[-1],
    )
