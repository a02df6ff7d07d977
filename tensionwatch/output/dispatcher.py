from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from ..models import Alert, NewsEvent
from ..processors.tension import alert_severity
from ..store import EventStore
from ..utils.logging import get_logger
from .alert_formatter import alert_message, format_broadcast, format_personal
from .telegram import TelegramChannel

logger = get_logger("tw.output.dispatcher")


@dataclass(slots=True)
class DispatchOutcome:
    alert: Optional[Alert] = None
    broadcast: bool = False
    personal_sent: int = 0
    personal_failed: int = 0
    already_delivered: int = 0
    error: Optional[str] = None


@dataclass(slots=True)
class DispatchReport:
    outcomes: List[DispatchOutcome] = field(default_factory=list)

    @property
    def alerts_created(self) -> int:
        return sum(1 for o in self.outcomes if o.alert is not None)

    @property
    def failed(self) -> int:
        return sum(1 for o in self.outcomes if o.error)


class AlertDispatcher:
    """Turn queued critical events into persisted alerts and Telegram messages.

    Alerts are handled one after another. A failure on one alert is logged and
    the next one proceeds; a failure for one subscriber never blocks the others.
    """

    def __init__(
        self,
        store: EventStore,
        channel: TelegramChannel,
        *,
        global_chat_id: Optional[str] = None,
    ) -> None:
        self.store = store
        self.channel = channel
        self.global_chat_id = global_chat_id

    def _build_alert(self, event: NewsEvent) -> Alert:
        return Alert(
            event_id=event.id,
            title=event.title,
            message=alert_message(event),
            severity=alert_severity(event.impact_score),
            category=event.category,
        )

    def _broadcast(self, alert: Alert) -> bool:
        if not (self.channel.configured or self.channel.dry_run) or not self.global_chat_id:
            return False
        return self.channel.send(self.global_chat_id, format_broadcast(alert))

    def _notify_subscribers(self, alert: Alert, outcome: DispatchOutcome) -> None:
        try:
            subscribers = self.store.list_eligible_subscribers()
        except Exception as exc:  # noqa: BLE001 - the alert itself is already stored
            logger.error("Cannot list subscribers for alert %s: %s", alert.id, exc)
            return
        if not subscribers:
            return
        text = format_personal(alert)
        for sub in subscribers:
            try:
                if not self.store.record_delivery(alert.id, sub.id, self.channel.channel):
                    outcome.already_delivered += 1
                    continue
                if self.channel.send(sub.telegram_chat_id, text):
                    outcome.personal_sent += 1
                else:
                    outcome.personal_failed += 1
            except Exception as exc:  # noqa: BLE001 - one recipient never blocks the rest
                outcome.personal_failed += 1
                logger.error("Alert %s delivery to user %s failed: %s", alert.id, sub.id, exc)

    def dispatch_one(self, event: NewsEvent) -> DispatchOutcome:
        outcome = DispatchOutcome()
        alert = self.store.insert_alert(self._build_alert(event))
        outcome.alert = alert
        logger.info("Alert created [%s]: %s", alert.severity, alert.title[:80])

        outcome.broadcast = self._broadcast(alert)
        self._notify_subscribers(alert, outcome)
        if outcome.personal_sent:
            try:
                self.store.add_notified_count(alert.id, outcome.personal_sent)
            except Exception as exc:  # noqa: BLE001 - the messages already went out
                outcome.error = f"notified_count update failed: {exc}"
                logger.error("Alert %s: %s", alert.id, outcome.error)
            logger.info("Alert %s sent to %d subscriber(s)", alert.id, outcome.personal_sent)
        return outcome

    def dispatch(self, events: Sequence[NewsEvent]) -> DispatchReport:
        report = DispatchReport()
        for event in events:
            try:
                report.outcomes.append(self.dispatch_one(event))
            except Exception as exc:  # noqa: BLE001 - continue with the remaining alerts
                logger.error("Alert dispatch failed for %s: %s", event.url, exc)
                report.outcomes.append(DispatchOutcome(error=str(exc)))
        return report
