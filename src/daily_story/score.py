from __future__ import annotations

from datetime import datetime
from math import exp, log
from typing import Mapping, Sequence

from .models import Cluster, Item, ScoredCluster, as_utc, utc_now

RECENCY_WEIGHT = 0.45
SOURCE_WEIGHT = 0.4
RICHNESS_WEIGHT = 0.15
RECENCY_DECAY_HOURS = 18.0
RICH_TEXT_CHARS = 400
CORROBORATION_WEIGHT = 0.1
DEFAULT_TRUST = 0.55


class SourceTrust:
    """Trust weight per publication name, looked up case-insensitively."""

    def __init__(self, weights: Mapping[str, float] | None = None, *, default: float = DEFAULT_TRUST):
        self.default = default
        self._weights = {name.strip().lower(): float(weight) for name, weight in (weights or {}).items()}

    def __getitem__(self, source: str) -> float:
        return self._weights.get(source.strip().lower(), self.default)

    def __contains__(self, source: object) -> bool:
        return isinstance(source, str) and source.strip().lower() in self._weights

    def __len__(self) -> int:
        return len(self._weights)


class Scorer:
    def __init__(self, trust: SourceTrust | None = None, *, now: datetime | None = None):
        self.trust = trust or SourceTrust()
        self.now = as_utc(now) if now else utc_now()

    def hours_since(self, item: Item) -> float:
        if item.published_at is None:
            raise ValueError(f"Item has no publication time: {item.url}")
        delta = self.now - as_utc(item.published_at)
        return max(delta.total_seconds() / 3600.0, 0.0)

    def recency(self, item: Item) -> float:
        return exp(-self.hours_since(item) / RECENCY_DECAY_HOURS)

    def source_prior(self, item: Item) -> float:
        return self.trust[item.source]

    @staticmethod
    def richness(item: Item) -> float:
        return 1.0 if item.text_length() > RICH_TEXT_CHARS else 0.6

    def score_item(self, item: Item) -> float:
        return (
            RECENCY_WEIGHT * self.recency(item)
            + SOURCE_WEIGHT * self.source_prior(item)
            + RICHNESS_WEIGHT * self.richness(item)
        )

    def group_score(self, cluster: Cluster) -> float:
        return combine_scores([self.score_item(item) for item in cluster.items])

    def score_cluster(self, cluster: Cluster) -> ScoredCluster:
        scores = tuple(self.score_item(item) for item in cluster.items)
        best_idx = 0
        for idx in range(1, len(scores)):
            if _outranks(cluster.items[idx], scores[idx], cluster.items[best_idx], scores[best_idx]):
                best_idx = idx
        return ScoredCluster(
            cluster=cluster,
            group_score=combine_scores(scores),
            representative=cluster.items[best_idx],
            item_scores=scores,
        )


def combine_scores(scores: Sequence[float]) -> float:
    """Best item score plus a sub-linear bonus for corroborating coverage."""
    return max(scores) + corroboration_bonus(len(scores))


def corroboration_bonus(size: int) -> float:
    return CORROBORATION_WEIGHT * log(size + 1)


def _outranks(candidate: Item, candidate_score: float, current: Item, current_score: float) -> bool:
    if candidate_score != current_score:
        return candidate_score > current_score
    if candidate.published_at is None or current.published_at is None:
        return False
    return as_utc(candidate.published_at) > as_utc(current.published_at)
