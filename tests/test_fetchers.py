from __future__ import annotations

import unittest
from datetime import datetime, timezone
from unittest.mock import MagicMock

import requests

from tensionwatch.fetchers import GNewsProvider, MultiSourceFetcher, NewsAPIProvider
from tensionwatch.fetchers.news import yesterday_iso
from tensionwatch.models import Article
from tensionwatch.utils.ratelimit import FixedIntervalLimiter


def _article(url: str, title: str = "Title") -> Article:
    return Article(url=url, title=title, description="", source="Test")


class FakeProvider:
    def __init__(self, name: str, results: dict | None = None, error_for: set | None = None) -> None:
        self.name = name
        self.results = results or {}
        self.error_for = error_for or set()
        self.calls: list[str] = []

    def search(self, keyword: str, since_date: str) -> list[Article]:
        self.calls.append(keyword)
        if keyword in self.error_for:
            raise RuntimeError(f"{self.name} exploded")
        return list(self.results.get(keyword, []))


def _fetcher(providers, keywords) -> MultiSourceFetcher:
    return MultiSourceFetcher(
        providers, keywords, limiter=FixedIntervalLimiter(0), since=lambda: "2026-10-17"
    )


class MultiSourceFetcherTests(unittest.TestCase):
    def test_secondary_used_only_when_primary_empty(self) -> None:
        primary = FakeProvider("primary", {"iran": [_article("https://a.com/1")]})
        secondary = FakeProvider("secondary", {"hormuz": [_article("https://b.com/1")]})

        articles = _fetcher([primary, secondary], ["iran", "hormuz"]).fetch_latest_news()

        self.assertEqual([a.url for a in articles], ["https://a.com/1", "https://b.com/1"])
        self.assertEqual(secondary.calls, ["hormuz"])

    def test_duplicate_urls_keep_first_insertion(self) -> None:
        primary = FakeProvider(
            "primary",
            {
                "iran": [_article("https://a.com/1", "First"), _article("https://a.com/2")],
                "irgc": [_article("https://a.com/1", "Second")],
            },
        )
        articles = _fetcher([primary], ["iran", "irgc"]).fetch_latest_news()
        self.assertEqual(len(articles), 2)
        self.assertEqual(articles[0].title, "First")

    def test_failing_keyword_does_not_stop_others(self) -> None:
        primary = FakeProvider("primary", {"ok": [_article("https://a.com/1")]}, error_for={"bad"})
        articles = _fetcher([primary], ["bad", "ok"]).fetch_latest_news()
        self.assertEqual([a.url for a in articles], ["https://a.com/1"])
        self.assertEqual(primary.calls, ["bad", "ok"])

    def test_limiter_waits_once_per_keyword(self) -> None:
        limiter = MagicMock()
        fetcher = MultiSourceFetcher([FakeProvider("p")], ["a", "b", "c"], limiter=limiter, since=lambda: "x")
        fetcher.fetch_latest_news()
        self.assertEqual(limiter.wait.call_count, 3)

    def test_yesterday_is_a_utc_date(self) -> None:
        now = datetime(2026, 3, 1, 0, 30, tzinfo=timezone.utc)
        self.assertEqual(yesterday_iso(now), "2026-02-28")


def _response(status: int = 200, payload=None) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status
    resp.json.return_value = payload
    return resp


class NewsAPIProviderTests(unittest.TestCase):
    def test_parses_and_cleans_articles(self) -> None:
        session = MagicMock()
        session.get.return_value = _response(
            payload={
                "status": "ok",
                "articles": [
                    {
                        "title": "<b>Iran</b> &amp; US",
                        "url": "https://Example.com/a?utm_source=feed&id=7#top",
                        "description": "Talks  stall",
                        "source": {"name": "Reuters"},
                        "publishedAt": "2026-10-17T10:00:00Z",
                    },
                    {"title": "[Removed]", "url": "https://removed.com/x"},
                    {"title": "No url"},
                ],
            }
        )
        provider = NewsAPIProvider("key", session=session)

        articles = provider.search("Iran", "2026-10-17")

        self.assertEqual(len(articles), 1)
        art = articles[0]
        self.assertEqual(art.title, "Iran & US")
        self.assertEqual(art.url, "https://example.com/a?id=7")
        self.assertEqual(art.description, "Talks stall")
        self.assertEqual(art.source, "Reuters")
        self.assertEqual(art.published_at, "2026-10-17T10:00:00+00:00")

        params = session.get.call_args.kwargs["params"]
        self.assertEqual(params["q"], "Iran")
        self.assertEqual(params["sortBy"], "publishedAt")
        self.assertEqual(params["pageSize"], 10)
        self.assertEqual(params["from"], "2026-10-17")
        self.assertEqual(session.get.call_args.kwargs["timeout"], 10.0)

    def test_malformed_items_are_skipped(self) -> None:
        session = MagicMock()
        session.get.return_value = _response(
            payload={
                "status": "ok",
                "articles": [
                    {"title": "Valid", "url": "https://ok.example/a", "publishedAt": 1700000000},
                    {"title": "Broken host", "url": "http://[broken"},
                    {"title": 12345, "url": "https://ok.example/b"},
                    {"title": "Bad description", "url": "https://ok.example/c", "description": ["x"]},
                ],
            }
        )
        articles = NewsAPIProvider("key", session=session).search("Iran", "d")

        self.assertEqual([a.url for a in articles], ["https://ok.example/a", "https://ok.example/c"])
        self.assertIsNone(articles[0].published_at)
        self.assertEqual(articles[1].description, "")

    def test_malformed_primary_items_keep_valid_ones_per_keyword(self) -> None:
        session = MagicMock()
        session.get.return_value = _response(
            payload={
                "status": "ok",
                "articles": [
                    {"title": "Valid", "url": "https://ok.example/a"},
                    {"title": "Broken", "url": "http://[broken"},
                ],
            }
        )
        fallback = FakeProvider("gnews", {"Iran": [_article("https://g.example/1")]})
        fetcher = _fetcher([NewsAPIProvider("key", session=session), fallback], ["Iran"])

        self.assertEqual([a.url for a in fetcher.fetch_latest_news()], ["https://ok.example/a"])
        self.assertEqual(fallback.calls, [])

    def test_missing_key_skips_request(self) -> None:
        session = MagicMock()
        self.assertEqual(NewsAPIProvider(None, session=session).search("Iran", "2026-10-17"), [])
        session.get.assert_not_called()

    def test_errors_yield_empty_list(self) -> None:
        cases = [
            _response(status=429, payload={"status": "error"}),
            _response(payload={"status": "error", "message": "rate limited"}),
            _response(payload=["not", "a", "dict"]),
        ]
        for resp in cases:
            session = MagicMock()
            session.get.return_value = resp
            with self.subTest(status=resp.status_code):
                self.assertEqual(NewsAPIProvider("key", session=session).search("Iran", "d"), [])

    def test_transport_error_yields_empty_list(self) -> None:
        session = MagicMock()
        session.get.side_effect = requests.ConnectionError("down")
        self.assertEqual(NewsAPIProvider("key", session=session).search("Iran", "d"), [])

    def test_malformed_json_yields_empty_list(self) -> None:
        session = MagicMock()
        resp = _response()
        resp.json.side_effect = ValueError("no json")
        session.get.return_value = resp
        self.assertEqual(NewsAPIProvider("key", session=session).search("Iran", "d"), [])


class GNewsProviderTests(unittest.TestCase):
    def test_request_params(self) -> None:
        session = MagicMock()
        session.get.return_value = _response(
            payload={"articles": [{"title": "Hormuz", "url": "https://g.com/1", "source": {"name": "AP"}}]}
        )
        articles = GNewsProvider("tok", session=session).search("Hormuz", "2026-10-17")

        self.assertEqual([a.url for a in articles], ["https://g.com/1"])
        params = session.get.call_args.kwargs["params"]
        self.assertEqual(params["token"], "tok")
        self.assertEqual(params["lang"], "en")
        self.assertEqual(params["max"], 10)
        self.assertEqual(params["from"], "2026-10-17T00:00:00Z")


if __name__ == "__main__":
    unittest.main()
