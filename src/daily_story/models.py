from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Mapping, Sequence

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


@dataclass(slots=True, frozen=True)
class Item:
    """One story fragment reported by one source.

    Adapters may hand over items with a blank title or url, or without a
    usable timestamp; normalization and windowing drop those.
    """

    title: str
    url: str
    source: str
    published_at: datetime | None = None
    description: str | None = None
    content: str | None = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Item":
        published = record.get("publishedAt", record.get("published_at"))
        return cls(
            title=_clean(record.get("title")),
            url=_clean(record.get("url")),
            source=_clean(record.get("source")),
            published_at=parse_timestamp(published),
            description=record.get("description") or None,
            content=record.get("content") or None,
        )

    def text_length(self) -> int:
        return len(self.description or "") + len(self.content or "")


@dataclass(slots=True)
class Cluster:
    items: list[Item]

    @property
    def anchor(self) -> Item:
        return self.items[0]

    def __len__(self) -> int:
        return len(self.items)


@dataclass(slots=True)
class ScoredCluster:
    cluster: Cluster
    group_score: float
    representative: Item
    item_scores: tuple[float, ...] = ()

    @property
    def items(self) -> list[Item]:
        return self.cluster.items


@dataclass(slots=True, frozen=True)
class GenerationRequest:
    references: tuple[str, ...]
    primary_title: str
    primary_source: str
    primary_url: str
    run_date: date
    language: str = "en"


@dataclass(slots=True, frozen=True)
class Document:
    filename: str
    front_matter: dict[str, str]
    body: str


@dataclass(slots=True)
class PipelineOptions:
    window: timedelta = timedelta(hours=48)
    dedup_threshold: float = 0.85
    cluster_threshold: float = 0.45
    cluster_strategy: str = "greedy"
    max_references: int = 10

    def clamp(self) -> "PipelineOptions":
        def _unit(value: float) -> float:
            return min(max(value, 0.0), 1.0)

        return PipelineOptions(
            window=self.window,
            dedup_threshold=_unit(self.dedup_threshold),
            cluster_threshold=_unit(self.cluster_threshold),
            cluster_strategy=self.cluster_strategy,
            max_references=max(1, self.max_references),
        )


def newest_first(items: Sequence[Item]) -> list[Item]:
    """Stable sort by publication time, undated items last."""
    return sorted(items, key=lambda item: as_utc(item.published_at or EPOCH), reverse=True)


def as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_timestamp(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        return as_utc(value)
    if not isinstance(value, str) or not value.strip():
        return None
    raw = value.strip()
    try:
        return as_utc(datetime.fromisoformat(raw.replace("Z", "+00:00")))
    except ValueError:
        pass
    try:
        return as_utc(parsedate_to_datetime(raw))
    except (TypeError, ValueError):
        return None


def _clean(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()
