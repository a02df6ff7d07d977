from __future__ import annotations

from abc import ABC, abstractmethod


class AIClient(ABC):
    """Abstract text-completion client used by the classification and translation gateways."""

    @abstractmethod
    def complete(self, prompt: str, *, max_tokens: int = 300) -> str:
        """Return the model's raw text reply to a single user prompt."""
