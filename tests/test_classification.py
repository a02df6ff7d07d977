from __future__ import annotations

import json
import os
import unittest
from unittest.mock import MagicMock, patch

import requests

from tensionwatch.processors.ai import create_ai_client
from tensionwatch.processors.ai.base import AIClient
from tensionwatch.processors.ai.parsing import parse_classification_response, strip_code_fences
from tensionwatch.processors.classify import (
    ClassificationGateway,
    ClassificationResult,
    resolve_classification,
    safe_default_classification,
)


class FakeAI(AIClient):
    def __init__(self, reply: str | None = None, error: Exception | None = None) -> None:
        self.reply = reply
        self.error = error
        self.prompts: list[str] = []

    def complete(self, prompt: str, *, max_tokens: int = 300) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.reply or ""


def _payload(**overrides) -> str:
    data = {
        "category": "military",
        "impact_score": 8.5,
        "is_critical": True,
        "summary_pt": "Ataque com míssil",
        "summary_en": "Missile attack",
        "keywords": ["missile", "strike", "missile"],
    }
    data.update(overrides)
    return json.dumps(data, ensure_ascii=False)


class ParsingTests(unittest.TestCase):
    def test_strip_code_fences(self) -> None:
        self.assertEqual(strip_code_fences('```json\n{"a": 1}\n```'), '{"a": 1}')
        self.assertEqual(strip_code_fences('```\n{"a": 1}\n```'), '{"a": 1}')
        self.assertEqual(strip_code_fences('{"a": 1}'), '{"a": 1}')

    def test_fenced_reply_parses(self) -> None:
        parsed = parse_classification_response(f"```json\n{_payload()}\n```")
        self.assertEqual(parsed.category, "military")
        self.assertEqual(parsed.impact_score, 8.5)
        self.assertTrue(parsed.is_critical)
        self.assertEqual(parsed.summary_pt, "Ataque com míssil")
        self.assertEqual(parsed.keywords, ["missile", "strike"])

    def test_score_is_clamped(self) -> None:
        self.assertEqual(parse_classification_response(_payload(impact_score=14)).impact_score, 10.0)
        self.assertEqual(parse_classification_response(_payload(impact_score=-2)).impact_score, 0.0)

    def test_category_is_case_insensitive(self) -> None:
        self.assertEqual(parse_classification_response(_payload(category="Cyber")).category, "cyber")

    def test_validation_errors(self) -> None:
        for bad in (
            _payload(category="space"),
            _payload(impact_score="high"),
            _payload(impact_score=True),
            _payload(is_critical="yes"),
            _payload(keywords="missile"),
            "[1, 2, 3]",
            "not json at all",
            "",
        ):
            with self.subTest(reply=bad):
                with self.assertRaises(ValueError):
                    parse_classification_response(bad)


class GatewayTests(unittest.TestCase):
    def test_valid_reply(self) -> None:
        ai = FakeAI(_payload())
        result = ClassificationGateway(ai).request("Missile strike", "desc")
        self.assertTrue(result.ok)
        self.assertEqual(result.classification.category, "military")
        self.assertEqual(len(ai.prompts), 1)
        self.assertIn("Missile strike", ai.prompts[0])

    def test_malformed_reply_falls_back_to_safe_default(self) -> None:
        title = "Officials meet in Geneva " * 10
        gateway = ClassificationGateway(FakeAI("Sure! Here is the classification: category military"))
        self.assertFalse(gateway.request(title, "").ok)

        classification = gateway.classify(title, "")
        self.assertEqual(classification.category, "other")
        self.assertEqual(classification.impact_score, 3.0)
        self.assertFalse(classification.is_critical)
        self.assertEqual(classification.keywords, [])
        self.assertEqual(classification.summary_pt, title[:100])
        self.assertEqual(classification.summary_en, title[:100])

    def test_transport_error_is_an_invalid_result(self) -> None:
        gateway = ClassificationGateway(FakeAI(error=requests.Timeout("read timed out")))
        result = gateway.request("t", "d")
        self.assertFalse(result.ok)
        self.assertIn("read timed out", result.error)
        self.assertEqual(gateway.classify("t", "d").category, "other")

    def test_resolve_keeps_valid_classification(self) -> None:
        parsed = parse_classification_response(_payload())
        self.assertIs(resolve_classification(ClassificationResult.valid(parsed), "t"), parsed)

    def test_resolve_invalid_uses_default(self) -> None:
        resolved = resolve_classification(ClassificationResult.invalid("bad"), "Title")
        self.assertEqual(resolved, safe_default_classification("Title"))


class ClientTimeoutTests(unittest.TestCase):
    def _post_timeout(self, backend: str, env: dict, reply: dict, **kwargs) -> float:
        resp = MagicMock()
        resp.json.return_value = reply
        with patch.dict(os.environ, env, clear=True):
            with patch(f"tensionwatch.processors.ai.{backend}.requests.post", return_value=resp) as post:
                create_ai_client(backend=backend, **kwargs).complete("prompt")
        return post.call_args.kwargs["timeout"]

    def test_default_timeout_is_ten_seconds(self) -> None:
        reply = {"content": [{"type": "text", "text": "{}"}]}
        self.assertEqual(self._post_timeout("anthropic", {"ANTHROPIC_API_KEY": "k"}, reply), 10.0)
        self.assertEqual(self._post_timeout("ollama", {}, {"response": "{}"}), 10.0)
        self.assertEqual(self._post_timeout("gemini", {"GOOGLE_API_KEY": "g"}, {"candidates": []}), 10.0)

    def test_explicit_timeout_wins(self) -> None:
        reply = {"content": [{"type": "text", "text": "{}"}]}
        env = {"ANTHROPIC_API_KEY": "k", "CLASSIFIER_TIMEOUT": "30"}
        self.assertEqual(self._post_timeout("anthropic", env, reply, timeout=7.5), 7.5)

    def test_gateway_passes_timeout_to_client(self) -> None:
        with patch("tensionwatch.processors.classify.create_ai_client") as factory:
            ClassificationGateway(timeout=6.0).ai
        factory.assert_called_once_with(timeout=6.0)


if __name__ == "__main__":
    unittest.main()
