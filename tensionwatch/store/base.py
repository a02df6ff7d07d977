from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from ..models import Alert, NewsEvent, Subscriber, TensionSample


class StoreError(Exception):
    """A persistence call failed."""


class DuplicateKeyError(StoreError):
    """An insert violated a uniqueness constraint (the row already exists)."""


class EventStore(ABC):
    """CRUD contract for events, tension history, alerts and subscribers.

    Inserts rely on store-level uniqueness for conflict detection; no call
    spans more than one table transactionally.
    """

    @abstractmethod
    def find_by_url(self, url: str) -> Optional[NewsEvent]:
        """Return the stored event for ``url``, if any."""

    @abstractmethod
    def insert_event(self, event: NewsEvent) -> NewsEvent:
        """Persist a new event and return it with ``id``/``created_at`` set.

        Raises ``DuplicateKeyError`` if an event with the same URL exists.
        """

    @abstractmethod
    def insert_tension_sample(self, sample: TensionSample) -> TensionSample:
        """Append a sample to the tension history."""

    @abstractmethod
    def get_latest_tension_sample(self) -> Optional[TensionSample]:
        """Most recent tension sample, or None for an empty history."""

    @abstractmethod
    def list_tension_samples(self, since: datetime, *, limit: int = 500) -> List[TensionSample]:
        """Samples created at or after ``since``, oldest first."""

    @abstractmethod
    def insert_alert(self, alert: Alert) -> Alert:
        """Persist a new alert and return it with ``id``/``created_at`` set."""

    @abstractmethod
    def deactivate_alert(self, alert_id: str) -> None:
        """Mark an alert inactive. Alerts are never deleted."""

    @abstractmethod
    def add_notified_count(self, alert_id: str, count: int) -> None:
        """Add ``count`` to the alert's delivery counter."""

    @abstractmethod
    def list_eligible_subscribers(self) -> List[Subscriber]:
        """Pro subscribers with Telegram alerts enabled and a chat id registered."""

    @abstractmethod
    def record_delivery(self, alert_id: str, recipient_id: str, channel: str) -> bool:
        """Record that ``recipient_id`` is being sent ``alert_id`` on ``channel``.

        Returns False if that delivery was already recorded.
        """
