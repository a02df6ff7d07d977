from __future__ import annotations

import os
from typing import Optional

import requests

from .base import AIClient


class AnthropicClient(AIClient):
    """HTTP client for the Anthropic Messages API.

    Environment:
      - ANTHROPIC_API_KEY (required)
      - ANTHROPIC_MODEL (default: claude-sonnet-4-20250514)
      - CLASSIFIER_TIMEOUT (seconds, default: 10; overridden by the ``timeout`` argument)
    """

    API_URL = "https://api.anthropic.com/v1/messages"
    API_VERSION = "2023-06-01"

    def __init__(self, *, timeout: Optional[float] = None) -> None:
        self.api_key = os.environ.get("ANTHROPIC_API_KEY")
        if not self.api_key:
            raise RuntimeError("ANTHROPIC_API_KEY is required for Anthropic backend")
        self.model = os.environ.get("ANTHROPIC_MODEL", "claude-sonnet-4-20250514")
        self.timeout = timeout if timeout is not None else float(os.environ.get("CLASSIFIER_TIMEOUT", "10"))

    def complete(self, prompt: str, *, max_tokens: int = 300) -> str:
        headers = {
            "x-api-key": self.api_key,
            "anthropic-version": self.API_VERSION,
            "content-type": "application/json",
        }
        payload = {
            "model": self.model,
            "max_tokens": max_tokens,
            "messages": [{"role": "user", "content": prompt}],
        }
        resp = requests.post(self.API_URL, headers=headers, json=payload, timeout=self.timeout)
        resp.raise_for_status()
        data = resp.json()
        # Concatenate the text blocks of the reply
        blocks = data.get("content") or []
        text = "".join(b.get("text", "") for b in blocks if b.get("type") == "text")
        return text.strip()
