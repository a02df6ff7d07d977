from __future__ import annotations

import time
from enum import Enum
from typing import List, Optional, Union

from .fetchers import MultiSourceFetcher
from .models import Article, NewsEvent, TensionSample
from .output.cycle_report import CycleReport
from .output.dispatcher import AlertDispatcher
from .processors.classify import ClassificationGateway
from .processors.tension import apply_tension_delta, should_trigger_alert, tension_delta
from .processors.translate import TranslationGateway
from .store import DuplicateKeyError, EventStore
from .utils.logging import get_logger
from .utils.ratelimit import FixedIntervalLimiter
from .utils.single_flight import SingleFlight

logger = get_logger("tw.orchestrator")

DEFAULT_INITIAL_TENSION = 75.0
ALERT_SCORE_THRESHOLD = 8.0


class ArticleSkip(str, Enum):
    """Why an article produced no stored event."""

    EXISTS = "exists"
    DUPLICATE = "duplicate"


class CycleOrchestrator:
    """One ingestion cycle: fetch, classify, persist, score, alert.

    ``run_cycle`` is single-flight: a call made while another cycle is running
    returns ``None`` without touching the fetcher, store or dispatcher.
    """

    def __init__(
        self,
        fetcher: MultiSourceFetcher,
        store: EventStore,
        classifier: ClassificationGateway,
        translator: TranslationGateway,
        dispatcher: AlertDispatcher,
        *,
        initial_tension: float = DEFAULT_INITIAL_TENSION,
        limiter: Optional[FixedIntervalLimiter] = None,
        guard: Optional[SingleFlight] = None,
    ) -> None:
        self.fetcher = fetcher
        self.store = store
        self.classifier = classifier
        self.translator = translator
        self.dispatcher = dispatcher
        self.initial_tension = initial_tension
        self.limiter = limiter or FixedIntervalLimiter(0.5)
        self.guard = guard or SingleFlight("news-cycle")

    @property
    def running(self) -> bool:
        return self.guard.running

    def run_cycle(self) -> Optional[CycleReport]:
        with self.guard.attempt() as acquired:
            if not acquired:
                logger.warning("News cycle already running; skipping this trigger")
                return None
            report = CycleReport()
            started = time.monotonic()
            logger.info("News cycle started")
            try:
                self._run(report)
            except Exception as exc:  # noqa: BLE001 - next tick proceeds regardless
                logger.exception("News cycle failed: %s", exc)
            finally:
                report.duration_seconds = time.monotonic() - started
            logger.info(
                "News cycle finished: fetched=%d, processed=%d, skipped=%d, duplicates=%d, errors=%d, alerts=%d/%d, tension=%.2f->%.2f, duration=%.1fs",
                report.fetched,
                report.processed,
                report.skipped_existing,
                report.duplicates,
                report.failed,
                report.alerts_created,
                report.alerts_queued,
                report.tension_before,
                report.tension_after,
                report.duration_seconds,
            )
            return report

    def _current_tension(self) -> float:
        latest = self.store.get_latest_tension_sample()
        return latest.value if latest is not None else self.initial_tension

    def _run(self, report: CycleReport) -> None:
        articles = self.fetcher.fetch_latest_news()
        report.fetched = len(articles)
        if not articles:
            logger.info("No new articles found")
            return

        tension = self._current_tension()
        report.tension_before = report.tension_after = tension
        queued: List[NewsEvent] = []

        for article in articles:
            try:
                outcome = self._process_article(article)
            except Exception as exc:  # noqa: BLE001 - one article never aborts the cycle
                report.failed += 1
                logger.error("Article processing error for %s: %s", article.url, exc)
                continue

            if outcome is ArticleSkip.EXISTS:
                report.skipped_existing += 1
                continue
            if outcome is ArticleSkip.DUPLICATE:
                report.duplicates += 1
                continue

            event: NewsEvent = outcome
            report.processed += 1
            tension = apply_tension_delta(tension, event.tension_delta)
            if event.is_critical or should_trigger_alert(event) or event.impact_score >= ALERT_SCORE_THRESHOLD:
                queued.append(event)

        report.tension_after = tension
        report.alerts_queued = len(queued)
        self.store.insert_tension_sample(
            TensionSample(
                value=tension,
                delta=round(tension - report.tension_before, 2),
                notes=f"Auto-update via news cycle: {len(articles)} articles processed",
            )
        )
        logger.info("Tension updated: %.2f", tension)

        if queued:
            dispatch = self.dispatcher.dispatch(queued)
            report.alerts_created = dispatch.alerts_created

    def _process_article(self, article: Article) -> Union[NewsEvent, ArticleSkip]:
        """Return the stored NewsEvent, or the reason nothing was stored."""
        if self.store.find_by_url(article.url) is not None:
            return ArticleSkip.EXISTS

        self.limiter.wait()
        classification = self.classifier.classify(article.title, article.description)
        titles = self.translator.translate(article.title)
        delta = tension_delta(classification.category, classification.impact_score, article.title)

        critical = classification.is_critical or should_trigger_alert(
            {
                "title": article.title,
                "description": article.description,
                "impact_score": classification.impact_score,
            }
        )
        event = NewsEvent(
            url=article.url,
            title=article.title,
            description=article.description,
            source=article.source,
            published_at=article.published_at,
            category=classification.category,
            impact_score=classification.impact_score,
            is_critical=critical,
            tension_delta=delta,
            ai_summary=classification.summary_pt,
            keywords=list(classification.keywords),
            titles=titles,
        )
        try:
            saved = self.store.insert_event(event)
        except DuplicateKeyError:
            logger.debug("Event already stored by a concurrent writer: %s", article.url)
            return ArticleSkip.DUPLICATE

        logger.info(
            "Event processed: '%s' category=%s score=%.1f delta=%.2f",
            article.title[:60],
            classification.category,
            classification.impact_score,
            delta,
        )
        return saved
