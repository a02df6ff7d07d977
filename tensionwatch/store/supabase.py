from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional

from postgrest.exceptions import APIError
from supabase import Client, create_client
from supabase.lib.client_options import ClientOptions

from ..models import Alert, NewsEvent, Subscriber, TensionSample
from ..utils.logging import get_logger
from .base import DuplicateKeyError, EventStore, StoreError

logger = get_logger("tw.store.supabase")

# PostgreSQL unique_violation
UNIQUE_VIOLATION = "23505"


def _rows(response: Any) -> List[dict]:
    data = getattr(response, "data", None)
    if data is None:
        return []
    return data if isinstance(data, list) else [data]


class SupabaseStore(EventStore):
    """Event store backed by Supabase tables via the service-role client.

    Tables: news_events, tension_history, alerts, alert_deliveries, users.
    """

    def __init__(
        self,
        url: str | None = None,
        key: str | None = None,
        *,
        timeout: float = 10.0,
        client: Optional[Client] = None,
    ) -> None:
        if client is None:
            if not url or not key:
                raise StoreError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY are required")
            options = ClientOptions(
                postgrest_client_timeout=timeout,
                auto_refresh_token=False,
                persist_session=False,
            )
            client = create_client(url, key, options=options)
        self.client = client

    def _execute(self, query: Any, what: str) -> Any:
        try:
            return query.execute()
        except APIError as exc:
            if getattr(exc, "code", None) == UNIQUE_VIOLATION:
                raise DuplicateKeyError(f"{what}: {exc.message}") from exc
            raise StoreError(f"{what} failed: {exc.message}") from exc
        except Exception as exc:  # noqa: BLE001 - transport errors surface as StoreError
            raise StoreError(f"{what} failed: {exc}") from exc

    # ---------------- Events -----------------
    def find_by_url(self, url: str) -> Optional[NewsEvent]:
        query = self.client.table("news_events").select("*").eq("url", url).limit(1)
        rows = _rows(self._execute(query, "find_by_url"))
        return NewsEvent.from_row(rows[0]) if rows else None

    def insert_event(self, event: NewsEvent) -> NewsEvent:
        query = self.client.table("news_events").insert(event.to_row())
        rows = _rows(self._execute(query, "insert_event"))
        if not rows:
            raise StoreError("insert_event returned no row")
        return NewsEvent.from_row(rows[0])

    # ---------------- Tension history -----------------
    def insert_tension_sample(self, sample: TensionSample) -> TensionSample:
        query = self.client.table("tension_history").insert(sample.to_row())
        rows = _rows(self._execute(query, "insert_tension_sample"))
        return TensionSample.from_row(rows[0]) if rows else sample

    def get_latest_tension_sample(self) -> Optional[TensionSample]:
        query = (
            self.client.table("tension_history")
            .select("id, tension_value, delta, notes, created_at")
            .order("created_at", desc=True)
            .limit(1)
        )
        rows = _rows(self._execute(query, "get_latest_tension_sample"))
        return TensionSample.from_row(rows[0]) if rows else None

    def list_tension_samples(self, since: datetime, *, limit: int = 500) -> List[TensionSample]:
        query = (
            self.client.table("tension_history")
            .select("id, tension_value, delta, notes, created_at")
            .gte("created_at", since.isoformat())
            .order("created_at")
            .limit(limit)
        )
        return [TensionSample.from_row(r) for r in _rows(self._execute(query, "list_tension_samples"))]

    # ---------------- Alerts -----------------
    def insert_alert(self, alert: Alert) -> Alert:
        query = self.client.table("alerts").insert(alert.to_row())
        rows = _rows(self._execute(query, "insert_alert"))
        if not rows:
            raise StoreError("insert_alert returned no row")
        return Alert.from_row(rows[0])

    def deactivate_alert(self, alert_id: str) -> None:
        query = self.client.table("alerts").update({"is_active": False}).eq("id", alert_id)
        self._execute(query, "deactivate_alert")

    def add_notified_count(self, alert_id: str, count: int) -> None:
        if count <= 0:
            return
        current = _rows(
            self._execute(
                self.client.table("alerts").select("notified_count").eq("id", alert_id).limit(1),
                "add_notified_count",
            )
        )
        if not current:
            raise StoreError(f"Unknown alert: {alert_id}")
        total = int(current[0].get("notified_count") or 0) + count
        self._execute(
            self.client.table("alerts").update({"notified_count": total}).eq("id", alert_id),
            "add_notified_count",
        )

    # ---------------- Subscribers -----------------
    def list_eligible_subscribers(self) -> List[Subscriber]:
        query = (
            self.client.table("users")
            .select("id, telegram_chat_id, alert_telegram_enabled, plan")
            .eq("plan", "pro")
            .eq("alert_telegram_enabled", True)
            .not_.is_("telegram_chat_id", "null")
        )
        return [
            Subscriber(
                id=str(r["id"]),
                telegram_chat_id=str(r["telegram_chat_id"]),
                alert_telegram_enabled=bool(r.get("alert_telegram_enabled")),
                plan=r.get("plan") or "pro",
            )
            for r in _rows(self._execute(query, "list_eligible_subscribers"))
        ]

    def record_delivery(self, alert_id: str, recipient_id: str, channel: str) -> bool:
        query = self.client.table("alert_deliveries").insert(
            {"alert_id": alert_id, "user_id": recipient_id, "channel": channel}
        )
        try:
            self._execute(query, "record_delivery")
        except DuplicateKeyError:
            return False
        return True
