from __future__ import annotations

from typing import Iterable, Sequence

from .models import Item, newest_first
from .similarity import title_similarity

DEDUP_THRESHOLD = 0.85


def dedupe_titles(items: Sequence[Item], *, threshold: float = DEDUP_THRESHOLD) -> list[Item]:
    """Collapse near-identical headlines, keeping the most recent phrasing."""
    kept: list[Item] = []
    for item in newest_first(items):
        if _has_similar_title(item.title, (prev.title for prev in kept), threshold):
            continue
        kept.append(item)
    return kept


def _has_similar_title(reference: str, past_titles: Iterable[str], threshold: float) -> bool:
    return any(title_similarity(reference, prev) >= threshold for prev in past_titles)
