from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from daily_story.brief import (
    LocalDigestGenerator,
    build_document,
    build_generation_request,
    format_reference,
    slugify,
)
from daily_story.models import Cluster, ScoredCluster
from daily_story.ollama_client import GenerationError

RUN_DATE = date(2024, 1, 3)


def _selection(items, representative=None):
    return ScoredCluster(cluster=Cluster(items=list(items)), group_score=1.0, representative=representative or items[0])


def test_format_reference(make_item):
    item = make_item(
        title="Senate passes bill",
        source="Reuters",
        url="https://r.com/1",
        published_at=datetime(2024, 1, 3, 9, 30, tzinfo=timezone.utc),
    )
    assert format_reference(1, item) == "[1] Senate passes bill — Reuters (2024-01-03T09:30:00+00:00) https://r.com/1"


def test_request_lists_ten_most_recent_items(make_item, now):
    items = [
        make_item(title=f"Story {idx}", url=f"https://e.com/{idx}", published_at=now - timedelta(hours=idx))
        for idx in range(12)
    ]
    selection = _selection(list(reversed(items)), representative=items[3])
    request = build_generation_request(selection, run_date=RUN_DATE)
    assert len(request.references) == 10
    assert request.references[0].startswith("[1] Story 0 ")
    assert request.references[-1].startswith("[10] Story 9 ")
    assert request.primary_title == "Story 3"
    assert request.primary_url == "https://e.com/3"
    assert request.run_date == RUN_DATE


@pytest.mark.parametrize(
    ("title", "expected"),
    [
        ("Senate Passes Bill!", "senate-passes-bill"),
        ("  -- Storm: 'Category 5' hits coast --  ", "storm-category-5-hits-coast"),
        ("!!!", "daily-story"),
        ("", "daily-story"),
    ],
)
def test_slugify(title, expected):
    assert slugify(title) == expected


def test_slugify_truncates_long_titles():
    slug = slugify("word " * 40)
    assert len(slug) <= 80
    assert not slug.endswith("-")
    assert slug.startswith("word-word")


def test_build_document(make_item):
    primary = make_item(title="Senate Passes Bill", source="Reuters", url="https://r.com/1")
    document = build_document(_selection([primary]), "  Body text.\n", run_date=RUN_DATE)
    assert document.filename == "2024-01-03-senate-passes-bill.md"
    assert document.front_matter == {
        "title": "Senate Passes Bill",
        "headline": "Senate Passes Bill",
        "date": "2024-01-03",
        "primarySource": "Reuters",
        "primaryUrl": "https://r.com/1",
    }
    assert document.body == "Body text."


def test_blank_body_is_rejected(make_item):
    with pytest.raises(GenerationError):
        build_document(_selection([make_item()]), "   ", run_date=RUN_DATE)


def test_local_digest_lists_references(make_item):
    items = [make_item(title="One", url="https://e.com/1"), make_item(title="Two", url="https://e.com/2")]
    request = build_generation_request(_selection(items), run_date=RUN_DATE)
    text = LocalDigestGenerator().generate(request)
    assert text.startswith("What happened: One")
    assert "- [1] One" in text
    assert "- [2] Two" in text
    assert "Primary source: Example (https://e.com/1)" in text
