from __future__ import annotations

import os
from typing import Optional

from .base import AIClient


def create_ai_client(*, backend: Optional[str] = None, timeout: Optional[float] = None) -> AIClient:
    """Create an AI client based on CLASSIFIER_BACKEND env or explicit value.

    Supported values: "anthropic" (default), "gemini" or "ollama". ``timeout`` bounds
    every request the client makes.
    """
    selected = (backend or os.environ.get("CLASSIFIER_BACKEND", "anthropic")).lower()

    if selected == "anthropic":
        from .anthropic import AnthropicClient  # lazy import

        return AnthropicClient(timeout=timeout)
    if selected == "gemini":
        from .gemini import GeminiClient  # lazy import

        return GeminiClient(timeout=timeout)
    if selected == "ollama":
        from .ollama import OllamaClient  # lazy import

        return OllamaClient(timeout=timeout)

    raise ValueError(
        f"Unsupported CLASSIFIER_BACKEND '{selected}'. Use 'anthropic', 'gemini' or 'ollama'."
    )
