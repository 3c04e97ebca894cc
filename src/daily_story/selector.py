from __future__ import annotations

from typing import Sequence

from .models import Cluster, ScoredCluster
from .score import Scorer


class EmptyInputError(RuntimeError):
    """No items survived normalization and windowing."""


def select_story(clusters: Sequence[Cluster], scorer: Scorer) -> ScoredCluster:
    if not clusters:
        raise EmptyInputError("No items left to select from after filtering")
    best: ScoredCluster | None = None
    for cluster in clusters:
        scored = scorer.score_cluster(cluster)
        if best is None or scored.group_score > best.group_score:
            best = scored
    assert best is not None
    return best


def rank_clusters(clusters: Sequence[Cluster], scorer: Scorer) -> list[ScoredCluster]:
    scored = [scorer.score_cluster(cluster) for cluster in clusters]
    return sorted(scored, key=lambda entry: entry.group_score, reverse=True)
