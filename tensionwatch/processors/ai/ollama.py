from __future__ import annotations

import os
from typing import Optional

import requests

from .base import AIClient


class OllamaClient(AIClient):
    """HTTP client for a local Ollama server.

    Environment:
      - OLLAMA_HOST (default: http://localhost:11434)
      - OLLAMA_MODEL (default: llama3.1:8b-instruct)
      - CLASSIFIER_TIMEOUT (seconds, default: 10; overridden by the ``timeout`` argument)
    """

    def __init__(self, *, timeout: Optional[float] = None) -> None:
        self.host = os.environ.get("OLLAMA_HOST", "http://localhost:11434").rstrip("/")
        self.model = os.environ.get("OLLAMA_MODEL", "llama3.1:8b-instruct")
        self.timeout = timeout if timeout is not None else float(os.environ.get("CLASSIFIER_TIMEOUT", "10"))

    def complete(self, prompt: str, *, max_tokens: int = 300) -> str:
        payload = {
            "model": self.model,
            "prompt": prompt,
            "stream": False,
            "options": {"temperature": 0.2, "num_predict": max_tokens},
        }
        resp = requests.post(f"{self.host}/api/generate", json=payload, timeout=self.timeout)
        resp.raise_for_status()
        # Ollama returns {'response': '...'}
        return resp.json().get("response", "").strip()
