from __future__ import annotations

import os
from typing import Optional

import requests

from .base import AIClient


class GeminiClient(AIClient):
    """HTTP client for Gemini via Google AI Studio API.

    Environment:
      - GOOGLE_API_KEY (required)
      - GEMINI_MODEL (default: gemini-1.5-flash)
      - CLASSIFIER_TIMEOUT (seconds, default: 10; overridden by the ``timeout`` argument)
    """

    def __init__(self, *, timeout: Optional[float] = None) -> None:
        self.api_key = os.environ.get("GOOGLE_API_KEY")
        if not self.api_key:
            raise RuntimeError("GOOGLE_API_KEY is required for Gemini backend")
        self.model = os.environ.get("GEMINI_MODEL", "gemini-1.5-flash")
        self.timeout = timeout if timeout is not None else float(os.environ.get("CLASSIFIER_TIMEOUT", "10"))

    def complete(self, prompt: str, *, max_tokens: int = 300) -> str:
        url = (
            "https://generativelanguage.googleapis.com/v1beta/models/"
            f"{self.model}:generateContent"
        )
        payload = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {"temperature": 0.2, "maxOutputTokens": max_tokens},
        }
        resp = requests.post(
            url,
            params={"key": self.api_key},
            json=payload,
            timeout=self.timeout,
        )
        resp.raise_for_status()
        data = resp.json()
        candidates = data.get("candidates") or []
        if not candidates:
            return ""
        parts = candidates[0].get("content", {}).get("parts") or []
        return "".join(p.get("text", "") for p in parts).strip()
