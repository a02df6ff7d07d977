from __future__ import annotations

import logging
import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from tensionwatch.utils.config_loader import DEFAULT_KEYWORDS, ConfigError, load_watch_config
from tensionwatch.utils.logging import REDACTED, RedactingFilter, redact
from tensionwatch.utils.settings import Settings

REPO_CONFIG = Path(__file__).resolve().parents[1] / "config" / "watch.yaml"


class WatchConfigTests(unittest.TestCase):
    def _load(self, text: str):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "watch.yaml"
            path.write_text(text, encoding="utf-8")
            return load_watch_config(path)

    def test_repository_config_loads(self) -> None:
        cfg = load_watch_config(REPO_CONFIG)
        self.assertEqual(cfg.keywords, DEFAULT_KEYWORDS)
        self.assertEqual(cfg.cycle_interval_seconds, 300)
        self.assertEqual(cfg.initial_tension, 75)
        self.assertEqual(cfg.keyword_interval_seconds, 0.3)
        self.assertEqual(cfg.article_interval_seconds, 0.5)
        self.assertEqual(cfg.classifier_timeout_seconds, 10)

    def test_empty_file_uses_defaults(self) -> None:
        cfg = self._load("")
        self.assertEqual(cfg.page_size, 10)
        self.assertEqual(cfg.provider_timeout_seconds, 10)

    def test_overrides(self) -> None:
        cfg = self._load(
            "keywords: [' Hormuz ', IRGC]\n"
            "fetch: {page_size: 20, keyword_interval_seconds: 0}\n"
            "cycle: {interval_minutes: 1}\n"
            "timeouts: {classifier_seconds: 6}\n"
        )
        self.assertEqual(cfg.keywords, ["Hormuz", "IRGC"])
        self.assertEqual(cfg.page_size, 20)
        self.assertEqual(cfg.keyword_interval_seconds, 0)
        self.assertEqual(cfg.cycle_interval_seconds, 60)
        self.assertEqual(cfg.classifier_timeout_seconds, 6)

    def test_invalid_files(self) -> None:
        for text in (
            "keywords: Hormuz\n",
            "keywords: []\n",
            "fetch: {page_size: 0}\n",
            "fetch: {page_size: 2.5}\n",
            "cycle: {initial_tension: 140}\n",
            "cycle: {interval_minutes: fast}\n",
            "fetch: [1, 2]\n",
            "- just\n- a list\n",
            "keywords: [unclosed\n",
        ):
            with self.subTest(text=text):
                with self.assertRaises(ConfigError):
                    self._load(text)

    def test_missing_file(self) -> None:
        with self.assertRaises(ConfigError) as ctx:
            load_watch_config("/nonexistent/watch.yaml")
        self.assertIn("not found", str(ctx.exception))


class SettingsTests(unittest.TestCase):
    def test_from_env(self) -> None:
        env = {
            "NEWS_API_KEY": "n",
            "TELEGRAM_BOT_TOKEN": " ",
            "SUPABASE_URL": "https://x.supabase.co",
            "SUPABASE_SERVICE_ROLE_KEY": "k",
        }
        with patch.dict(os.environ, env, clear=True):
            settings = Settings.from_env()
        self.assertEqual(settings.news_api_key, "n")
        self.assertIsNone(settings.gnews_api_key)
        self.assertFalse(settings.has_telegram)
        self.assertTrue(settings.has_supabase)


class RedactionTests(unittest.TestCase):
    def test_query_secrets_are_masked(self) -> None:
        text = redact("GET https://newsapi.org/v2/everything?q=Iran&apiKey=abc123def")
        self.assertNotIn("abc123def", text)
        self.assertIn(f"apiKey={REDACTED}", text)

    def test_bot_token_in_url_is_masked(self) -> None:
        text = redact("POST https://api.telegram.org/bot123456:AAH-secret_x/sendMessage failed")
        self.assertEqual(text, f"POST https://api.telegram.org/bot{REDACTED}/sendMessage failed")

    def test_env_secret_values_are_masked(self) -> None:
        with patch.dict(os.environ, {"ANTHROPIC_API_KEY": "sk-ant-very-secret"}):
            self.assertEqual(redact("key sk-ant-very-secret leaked"), f"key {REDACTED} leaked")

    def test_filter_rewrites_record(self) -> None:
        record = logging.LogRecord(
            "tw.test", logging.INFO, __file__, 1, "request to %s", ("https://gnews.io/?token=tok999",), None
        )
        self.assertTrue(RedactingFilter().filter(record))
        self.assertNotIn("tok999", record.getMessage())


if __name__ == "__main__":
    unittest.main()
