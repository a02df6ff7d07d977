from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class CycleReport:
    fetched: int = 0
    skipped_existing: int = 0
    duplicates: int = 0
    processed: int = 0
    failed: int = 0
    alerts_queued: int = 0
    alerts_created: int = 0
    tension_before: float = 0.0
    tension_after: float = 0.0
    duration_seconds: float = 0.0

    @property
    def tension_change(self) -> float:
        return round(self.tension_after - self.tension_before, 2)

    def to_markdown(self) -> str:
        return (
            "### Cycle Summary\n\n"
            f"- Articles fetched: {self.fetched}\n"
            f"- Already stored: {self.skipped_existing}\n"
            f"- Duplicate conflicts: {self.duplicates}\n"
            f"- Events processed: {self.processed}\n"
            f"- Errors: {self.failed}\n"
            f"- Alerts queued/created: {self.alerts_queued}/{self.alerts_created}\n"
            f"- Tension: {self.tension_before:.2f} -> {self.tension_after:.2f}\n"
            f"- Duration: {self.duration_seconds:.1f}s\n"
        )
