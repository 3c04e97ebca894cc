from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable

import pytest

from daily_story.models import Item

NOW = datetime(2024, 1, 3, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def make_item() -> Callable[..., Item]:
    def _factory(**overrides) -> Item:
        data = {
            "title": overrides.get("title", "Sample Title"),
            "url": overrides.get("url", "https://example.com/a"),
            "source": overrides.get("source", "Example"),
            "published_at": overrides.get("published_at", NOW),
            "description": overrides.get("description", "Sample summary"),
            "content": overrides.get("content", None),
        }
        return Item(**data)

    return _factory
