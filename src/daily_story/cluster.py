from __future__ import annotations

from typing import Sequence

from .models import Cluster, Item
from .similarity import title_similarity

CLUSTER_THRESHOLD = 0.45
STRATEGIES = ("greedy", "components")


def cluster_items(
    items: Sequence[Item],
    *,
    threshold: float = CLUSTER_THRESHOLD,
    strategy: str = "greedy",
) -> list[Cluster]:
    """Group items that describe the same event across sources.

    ``greedy`` compares each item with every cluster anchor in order and joins
    the first match, so the partition depends on input order. ``components``
    links every pair at or above the threshold and returns connected
    components, which is order independent at O(n^2) comparisons.
    """
    if strategy == "greedy":
        return _greedy_clusters(items, threshold)
    if strategy == "components":
        return _component_clusters(items, threshold)
    raise ValueError(f"Unknown clustering strategy: {strategy}")


def _greedy_clusters(items: Sequence[Item], threshold: float) -> list[Cluster]:
    clusters: list[Cluster] = []
    for item in items:
        for cluster in clusters:
            if title_similarity(item.title, cluster.anchor.title) >= threshold:
                cluster.items.append(item)
                break
        else:
            clusters.append(Cluster(items=[item]))
    return clusters


def _component_clusters(items: Sequence[Item], threshold: float) -> list[Cluster]:
    parent = list(range(len(items)))

    def find(idx: int) -> int:
        while parent[idx] != idx:
            parent[idx] = parent[parent[idx]]
            idx = parent[idx]
        return idx

    for i in range(len(items)):
        for j in range(i + 1, len(items)):
            if title_similarity(items[i].title, items[j].title) >= threshold:
                root_i, root_j = find(i), find(j)
                if root_i != root_j:
                    parent[max(root_i, root_j)] = min(root_i, root_j)

    groups: dict[int, list[Item]] = {}
    for idx, item in enumerate(items):
        groups.setdefault(find(idx), []).append(item)
    return [Cluster(items=members) for members in groups.values()]
