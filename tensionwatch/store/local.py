from __future__ import annotations

import json
import os
import threading
import uuid
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional, Set, Tuple

from ..models import Alert, NewsEvent, Subscriber, TensionSample
from ..utils.logging import get_logger
from .base import DuplicateKeyError, EventStore, StoreError

logger = get_logger("tw.store.local")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _parse_ts(value: Optional[str]) -> datetime:
    if not value:
        return datetime.min.replace(tzinfo=timezone.utc)
    dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)


class LocalStore(EventStore):
    """In-process store for dry runs and tests.

    When ``store_path`` is given, the whole state is loaded from and written
    back to a JSON file after every write, so URL dedup and tension history
    survive restarts of a local run.
    """

    def __init__(self, *, store_path: Path | str | None = None) -> None:
        self.store_path = Path(store_path) if store_path else None
        self._lock = threading.RLock()
        self._events: Dict[str, NewsEvent] = {}
        self._samples: List[TensionSample] = []
        self._alerts: Dict[str, Alert] = {}
        self._subscribers: Dict[str, Subscriber] = {}
        self._deliveries: Set[Tuple[str, str, str]] = set()
        if self.store_path:
            self.store_path.parent.mkdir(parents=True, exist_ok=True)
            self._load()

    # ---------------- Persistence -----------------
    def _load(self) -> None:
        if not self.store_path or not self.store_path.exists():
            return
        try:
            data = json.loads(self.store_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise StoreError(f"Cannot read local store {self.store_path}: {exc}") from exc

        for row in data.get("events", []):
            event = NewsEvent(**row)
            self._events[event.url] = event
        self._samples = [TensionSample(**row) for row in data.get("tension_history", [])]
        for row in data.get("alerts", []):
            alert = Alert(**row)
            self._alerts[alert.id] = alert
        for row in data.get("subscribers", []):
            sub = Subscriber(**row)
            self._subscribers[sub.id] = sub
        self._deliveries = {tuple(d) for d in data.get("deliveries", [])}
        logger.debug("Loaded local store %s (%d events)", self.store_path, len(self._events))

    def _persist(self) -> None:
        if not self.store_path:
            return
        payload = {
            "events": [asdict(e) for e in self._events.values()],
            "tension_history": [asdict(s) for s in self._samples],
            "alerts": [asdict(a) for a in self._alerts.values()],
            "subscribers": [asdict(s) for s in self._subscribers.values()],
            "deliveries": sorted(list(d) for d in self._deliveries),
        }
        # Atomic swap: a crash leaves the previous snapshot intact
        tmp_path = self.store_path.with_name(self.store_path.name + ".tmp")
        tmp_path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
        os.replace(tmp_path, self.store_path)

    # ---------------- Events -----------------
    def find_by_url(self, url: str) -> Optional[NewsEvent]:
        with self._lock:
            return self._events.get(url)

    def insert_event(self, event: NewsEvent) -> NewsEvent:
        with self._lock:
            if event.url in self._events:
                raise DuplicateKeyError(f"news_events.url already exists: {event.url}")
            event.id = event.id or str(uuid.uuid4())
            event.created_at = event.created_at or _now_iso()
            self._events[event.url] = event
            self._persist()
            return event

    # ---------------- Tension history -----------------
    def insert_tension_sample(self, sample: TensionSample) -> TensionSample:
        with self._lock:
            sample.id = sample.id or str(uuid.uuid4())
            sample.created_at = sample.created_at or _now_iso()
            self._samples.append(sample)
            self._persist()
            return sample

    def get_latest_tension_sample(self) -> Optional[TensionSample]:
        with self._lock:
            return self._samples[-1] if self._samples else None

    def list_tension_samples(self, since: datetime, *, limit: int = 500) -> List[TensionSample]:
        with self._lock:
            rows = [s for s in self._samples if _parse_ts(s.created_at) >= since]
            return rows[:limit]

    # ---------------- Alerts -----------------
    def insert_alert(self, alert: Alert) -> Alert:
        with self._lock:
            alert.id = alert.id or str(uuid.uuid4())
            alert.created_at = alert.created_at or _now_iso()
            self._alerts[alert.id] = alert
            self._persist()
            return alert

    def deactivate_alert(self, alert_id: str) -> None:
        with self._lock:
            alert = self._alerts.get(alert_id)
            if alert is None:
                raise StoreError(f"Unknown alert: {alert_id}")
            alert.is_active = False
            self._persist()

    def add_notified_count(self, alert_id: str, count: int) -> None:
        with self._lock:
            alert = self._alerts.get(alert_id)
            if alert is None:
                raise StoreError(f"Unknown alert: {alert_id}")
            alert.notified_count += count
            self._persist()

    def get_alert(self, alert_id: str) -> Optional[Alert]:
        with self._lock:
            return self._alerts.get(alert_id)

    def list_alerts(self, *, active_only: bool = False) -> List[Alert]:
        with self._lock:
            return [a for a in self._alerts.values() if a.is_active or not active_only]

    # ---------------- Subscribers -----------------
    def add_subscriber(self, subscriber: Subscriber) -> None:
        with self._lock:
            self._subscribers[subscriber.id] = subscriber
            self._persist()

    def list_eligible_subscribers(self) -> List[Subscriber]:
        with self._lock:
            return [
                s
                for s in self._subscribers.values()
                if s.plan == "pro" and s.alert_telegram_enabled and s.telegram_chat_id
            ]

    def record_delivery(self, alert_id: str, recipient_id: str, channel: str) -> bool:
        with self._lock:
            key = (alert_id, recipient_id, channel)
            if key in self._deliveries:
                return False
            self._deliveries.add(key)
            self._persist()
            return True

    # ---------------- Introspection -----------------
    def list_events(self) -> List[NewsEvent]:
        with self._lock:
            return list(self._events.values())
