from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from .models import PipelineOptions
from .score import SourceTrust

DEFAULT_SOURCE_TRUST: dict[str, float] = {
    "reuters": 0.95,
    "associated press": 0.95,
    "ap news": 0.93,
    "afp": 0.9,
    "bloomberg": 0.9,
    "bbc news": 0.88,
    "the guardian": 0.85,
    "npr": 0.85,
    "financial times": 0.85,
    "the new york times": 0.85,
    "the washington post": 0.85,
    "al jazeera english": 0.8,
}


class OllamaSettings(BaseModel):
    enabled: bool = True
    base_url: str = "http://127.0.0.1:11434"
    model: str = "phi3"
    timeout_s: int = 120


class Settings(BaseModel):
    user_agent: str = "daily-story/0.1"
    timeout_s: int = 10
    fetch_timeout_s: float = 30.0
    max_items_per_feed: int = 50
    window: str = "48h"
    dedup_threshold: float = Field(default=0.85, ge=0.0, le=1.0)
    cluster_threshold: float = Field(default=0.45, ge=0.0, le=1.0)
    cluster_strategy: Literal["greedy", "components"] = "greedy"
    language: str = "en"
    max_references: int = Field(default=10, ge=1)
    output_dir: str = "content/daily"
    source_trust: dict[str, float] = Field(default_factory=lambda: dict(DEFAULT_SOURCE_TRUST))
    default_trust: float = Field(default=0.55, ge=0.0, le=1.0)
    ollama: OllamaSettings = Field(default_factory=OllamaSettings)

    @field_validator("window")
    @classmethod
    def _check_window(cls, value: str) -> str:
        parse_duration(value)
        return value

    @field_validator("source_trust")
    @classmethod
    def _check_trust(cls, value: dict[str, float]) -> dict[str, float]:
        for name, weight in value.items():
            if not 0.0 <= weight <= 1.0:
                raise ValueError(f"Trust weight for {name!r} must be within [0, 1]")
        return value

    def window_delta(self) -> timedelta:
        return parse_duration(self.window)

    def pipeline_options(self, *, window: str | None = None) -> PipelineOptions:
        return PipelineOptions(
            window=parse_duration(window) if window else self.window_delta(),
            dedup_threshold=self.dedup_threshold,
            cluster_threshold=self.cluster_threshold,
            cluster_strategy=self.cluster_strategy,
            max_references=self.max_references,
        )

    def trust(self) -> SourceTrust:
        return SourceTrust(self.source_trust, default=self.default_trust)

    def output_path(self, base_path: Path | None = None) -> Path:
        return Path(base_path or ".") / self.output_dir


class SourceConfig(BaseModel):
    name: str
    url: str
    kind: Literal["rss", "newsapi"] = "rss"
    api_key_env: str | None = None


class AppConfig(BaseModel):
    settings: Settings = Field(default_factory=Settings)
    sources: list[SourceConfig] = Field(default_factory=list)


@dataclass(slots=True)
class ConfigLoadResult:
    config: AppConfig
    path: Path


def load_config(path: str | Path = "sources.yaml") -> ConfigLoadResult:
    cfg_path = Path(path)
    if not cfg_path.exists():
        raise FileNotFoundError(f"Config file not found: {cfg_path}")
    try:
        data = yaml.safe_load(cfg_path.read_text()) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {cfg_path}: {exc}") from exc
    try:
        config = AppConfig.model_validate(data)
    except ValidationError as exc:
        raise ValueError(f"Invalid config file {cfg_path}: {exc}") from exc
    return ConfigLoadResult(config=config, path=cfg_path)


def parse_duration(value: str) -> timedelta:
    amount, unit = _split_duration(value.strip())
    return _duration_to_timedelta(amount, unit)


def _split_duration(raw: str) -> tuple[int, str]:
    if len(raw) < 2:
        msg = "Duration format must be like '48h' or '2d'."
        raise ValueError(msg)
    digits = ""
    for ch in raw:
        if ch.isdigit():
            digits += ch
        else:
            if not digits:
                raise ValueError("Duration missing numeric value.")
            unit = raw[len(digits) :].strip().lower()
            return int(digits), unit
    raise ValueError("Missing time unit in duration.")


def _duration_to_timedelta(amount: int, unit: str) -> timedelta:
    match unit:
        case "s" | "sec" | "secs":
            return timedelta(seconds=amount)
        case "m" | "min" | "mins":
            return timedelta(minutes=amount)
        case "h" | "hr" | "hrs" | "hour" | "hours":
            return timedelta(hours=amount)
        case "d" | "day" | "days":
            return timedelta(days=amount)
        case "w" | "week" | "weeks":
            return timedelta(weeks=amount)
        case _:
            raise ValueError(f"Unsupported duration unit: {unit}")
