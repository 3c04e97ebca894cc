from __future__ import annotations

from datetime import datetime, timedelta
from typing import Iterable

from .models import Item, as_utc

DEFAULT_WINDOW = timedelta(hours=48)


def within_window(
    items: Iterable[Item],
    *,
    now: datetime,
    window: timedelta = DEFAULT_WINDOW,
) -> list[Item]:
    """Keep items published at most ``window`` before ``now`` (inclusive)."""
    reference = as_utc(now)
    kept: list[Item] = []
    for item in items:
        if item.published_at is None:
            continue
        if reference - as_utc(item.published_at) <= window:
            kept.append(item)
    return kept
