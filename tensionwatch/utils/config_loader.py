from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List

import yaml


class ConfigError(Exception):
    """Raised when the configuration file is invalid or missing required fields."""


DEFAULT_KEYWORDS: List[str] = [
    "Iran USA conflict",
    "Iran nuclear program",
    "Iran sanctions",
    "Strait of Hormuz",
    "Iran missile",
    "IRGC",
    "JCPOA nuclear deal",
]


@dataclass(slots=True)
class WatchConfig:
    """Operational settings for the ingestion cycle (no secrets)."""

    keywords: List[str] = field(default_factory=lambda: list(DEFAULT_KEYWORDS))
    language: str = "en"
    page_size: int = 10
    provider_timeout_seconds: float = 10.0
    keyword_interval_seconds: float = 0.3
    article_interval_seconds: float = 0.5
    cycle_interval_seconds: float = 300.0
    initial_tension: float = 75.0
    classifier_timeout_seconds: float = 10.0
    notification_timeout_seconds: float = 5.0
    store_timeout_seconds: float = 10.0


def _positive_number(section: dict, key: str, *, allow_zero: bool = False) -> float | None:
    if key not in section or section[key] is None:
        return None
    val = section[key]
    if isinstance(val, bool) or not isinstance(val, (int, float)):
        raise ConfigError(f"'{key}' must be a number, got: {val!r}")
    if val < 0 or (val == 0 and not allow_zero):
        raise ConfigError(f"'{key}' must be {'>= 0' if allow_zero else '> 0'}, got: {val}")
    return float(val)


def _section(data: dict, name: str) -> dict:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigError(f"'{name}' must be a mapping in the YAML configuration")
    return section


def _validate_keywords(raw: Any) -> List[str]:
    if not isinstance(raw, list) or not all(isinstance(k, str) for k in raw):
        raise ConfigError("'keywords' must be a list of strings")
    keywords = [k.strip() for k in raw if k.strip()]
    if not keywords:
        raise ConfigError("'keywords' must contain at least one non-empty keyword")
    return keywords


def load_watch_config(path: Path | str) -> WatchConfig:
    """Load ``watch.yaml`` into a typed ``WatchConfig``.

    YAML structure (every key optional; defaults shown in config/watch.yaml):
      - keywords: list[string]
      - fetch: {language, page_size, timeout_seconds, keyword_interval_seconds}
      - cycle: {interval_minutes, article_interval_seconds, initial_tension}
      - timeouts: {classifier_seconds, notification_seconds, store_seconds}

    Unknown top-level keys are ignored for forward compatibility.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    try:
        with config_path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {config_path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError("Top-level YAML must be a mapping")

    cfg = WatchConfig()

    if data.get("keywords") is not None:
        cfg.keywords = _validate_keywords(data["keywords"])

    fetch = _section(data, "fetch")
    if fetch.get("language") is not None:
        cfg.language = str(fetch["language"]).strip() or cfg.language
    page_size = _positive_number(fetch, "page_size")
    if page_size is not None:
        if page_size != int(page_size) or page_size > 100:
            raise ConfigError(f"'page_size' must be an integer in 1..100, got: {page_size}")
        cfg.page_size = int(page_size)
    cfg.provider_timeout_seconds = _positive_number(fetch, "timeout_seconds") or cfg.provider_timeout_seconds
    keyword_interval = _positive_number(fetch, "keyword_interval_seconds", allow_zero=True)
    if keyword_interval is not None:
        cfg.keyword_interval_seconds = keyword_interval

    cycle = _section(data, "cycle")
    interval_minutes = _positive_number(cycle, "interval_minutes")
    if interval_minutes is not None:
        cfg.cycle_interval_seconds = interval_minutes * 60
    article_interval = _positive_number(cycle, "article_interval_seconds", allow_zero=True)
    if article_interval is not None:
        cfg.article_interval_seconds = article_interval
    initial = _positive_number(cycle, "initial_tension", allow_zero=True)
    if initial is not None:
        if initial > 100:
            raise ConfigError(f"'initial_tension' must be within 0..100, got: {initial}")
        cfg.initial_tension = initial

    timeouts = _section(data, "timeouts")
    cfg.notification_timeout_seconds = (
        _positive_number(timeouts, "notification_seconds") or cfg.notification_timeout_seconds
    )
    cfg.classifier_timeout_seconds = (
        _positive_number(timeouts, "classifier_seconds") or cfg.classifier_timeout_seconds
    )
    cfg.store_timeout_seconds = _positive_number(timeouts, "store_seconds") or cfg.store_timeout_seconds

    return cfg
