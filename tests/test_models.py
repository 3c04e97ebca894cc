from __future__ import annotations

from datetime import datetime, timedelta, timezone

from daily_story.models import Item, PipelineOptions, newest_first, parse_timestamp


def test_from_record_accepts_adapter_fields():
    item = Item.from_record(
        {
            "title": "  Senate passes bill ",
            "url": "https://r.com/1",
            "source": "Reuters",
            "publishedAt": "2024-01-03T09:30:00Z",
            "description": "",
        }
    )
    assert item.title == "Senate passes bill"
    assert item.published_at == datetime(2024, 1, 3, 9, 30, tzinfo=timezone.utc)
    assert item.description is None
    assert item.content is None


def test_parse_timestamp_formats():
    expected = datetime(2024, 1, 3, 9, 30, tzinfo=timezone.utc)
    assert parse_timestamp("Wed, 03 Jan 2024 09:30:00 GMT") == expected
    assert parse_timestamp("2024-01-03T10:30:00+01:00") == expected
    assert parse_timestamp(datetime(2024, 1, 3, 9, 30)) == expected
    assert parse_timestamp("yesterday-ish") is None
    assert parse_timestamp(None) is None


def test_newest_first_puts_undated_items_last(make_item, now):
    undated = make_item(title="undated", published_at=None)
    old = make_item(title="old", published_at=now - timedelta(hours=5))
    new = make_item(title="new", published_at=now)
    assert [item.title for item in newest_first([undated, old, new])] == ["new", "old", "undated"]


def test_pipeline_options_clamp():
    opts = PipelineOptions(dedup_threshold=1.4, cluster_threshold=-0.2, max_references=0).clamp()
    assert opts.dedup_threshold == 1.0
    assert opts.cluster_threshold == 0.0
    assert opts.max_references == 1
