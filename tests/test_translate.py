from __future__ import annotations

import unittest

from tensionwatch.processors.ai.base import AIClient
from tensionwatch.processors.translate import TranslationGateway, fallback_titles


class FakeAI(AIClient):
    def __init__(self, reply: str = "", error: Exception | None = None) -> None:
        self.reply = reply
        self.error = error

    def complete(self, prompt: str, *, max_tokens: int = 300) -> str:
        if self.error is not None:
            raise self.error
        return self.reply


class TranslationGatewayTests(unittest.TestCase):
    title = "Iran tests new missile"

    def test_partial_reply_fills_gaps_with_original(self) -> None:
        reply = '```json\n{"pt": "Irã testa novo míssil", "es": "  ", "ar": "إيران تختبر صاروخا"}\n```'
        titles = TranslationGateway(FakeAI(reply)).translate(self.title)
        self.assertEqual(titles["en"], self.title)
        self.assertEqual(titles["pt"], "Irã testa novo míssil")
        self.assertEqual(titles["es"], self.title)
        self.assertEqual(titles["ar"], "إيران تختبر صاروخا")
        self.assertEqual(titles["fa"], self.title)

    def test_malformed_reply_uses_original_everywhere(self) -> None:
        titles = TranslationGateway(FakeAI("no json here")).translate(self.title)
        self.assertEqual(titles, fallback_titles(self.title))

    def test_transport_failure_uses_original_everywhere(self) -> None:
        titles = TranslationGateway(FakeAI(error=RuntimeError("boom"))).translate(self.title)
        self.assertEqual(set(titles), {"en", "pt", "es", "ar", "fa"})
        self.assertTrue(all(v == self.title for v in titles.values()))


if __name__ == "__main__":
    unittest.main()
