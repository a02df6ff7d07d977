"""Processing: normalization, classification, translation and tension scoring."""

from .normalize import canonical_url, clean_html_to_text, normalize_plain_text, parse_date_to_iso
from .classify import ClassificationGateway, ClassificationResult, resolve_classification
from .translate import TranslationGateway
from .tension import (
    alert_severity,
    apply_tension_delta,
    classify_tension_level,
    should_trigger_alert,
    summarize_history,
    tension_delta,
)

__all__ = [
    "canonical_url",
    "clean_html_to_text",
    "normalize_plain_text",
    "parse_date_to_iso",
    "ClassificationGateway",
    "ClassificationResult",
    "resolve_classification",
    "TranslationGateway",
    "alert_severity",
    "apply_tension_delta",
    "classify_tension_level",
    "should_trigger_alert",
    "summarize_history",
    "tension_delta",
]
