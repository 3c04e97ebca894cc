from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

import requests

from .models import GenerationRequest

log = logging.getLogger(__name__)


class GenerationError(RuntimeError):
    pass


class Generator(Protocol):
    def generate(self, request: GenerationRequest) -> str: ...


@dataclass(slots=True)
class OllamaConfig:
    base_url: str
    model: str
    timeout_s: int


class OllamaClient:
    def __init__(self, config: OllamaConfig):
        self.config = config
        self._base = config.base_url.rstrip("/")

    def is_available(self) -> bool:
        try:
            response = requests.get(f"{self._base}/api/tags", timeout=5)
            response.raise_for_status()
            models = response.json().get("models", [])
            return any(m.get("name") == self.config.model for m in models) or bool(models)
        except requests.RequestException as exc:
            log.debug("Ollama availability check failed: %s", exc)
            return False

    def generate(self, request: GenerationRequest) -> str:
        payload = {
            "model": self.config.model,
            "prompt": self.build_prompt(request),
            "stream": False,
        }
        try:
            response = requests.post(
                f"{self._base}/api/generate",
                json=payload,
                timeout=self.config.timeout_s,
            )
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as exc:
            raise GenerationError(f"Ollama request failed: {exc}") from exc
        except ValueError as exc:
            raise GenerationError(f"Ollama returned invalid JSON: {exc}") from exc
        text = data.get("response")
        if not isinstance(text, str):
            raise GenerationError("Malformed Ollama response")
        return text.strip()

    @staticmethod
    def build_prompt(request: GenerationRequest) -> str:
        lines = [
            "You are writing the one explainer of the day for a news site.",
            f"Date: {request.run_date.isoformat()}",
            f"Write in language: {request.language}",
            f"Lead story: {request.primary_title} ({request.primary_source}) {request.primary_url}",
            "Explain what happened, why it matters and what comes next in 4-6 short paragraphs.",
            "Cite sources inline with their bracketed numbers, e.g. [1].",
            "Use only the evidence listed below; avoid speculation.",
            "Plain text only, no title line.",
            "Sources:",
            *request.references,
        ]
        return "\n".join(lines)


def build_client(config: OllamaConfig) -> OllamaClient:
    client = OllamaClient(config)
    if not client.is_available():
        raise GenerationError(f"Ollama not available at {config.base_url}")
    return client
