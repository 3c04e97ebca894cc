from __future__ import annotations

from datetime import timedelta
from math import exp, log

import pytest

from daily_story.models import Cluster
from daily_story.score import Scorer, SourceTrust, combine_scores

TRUST = SourceTrust({"Reuters": 0.95, "the guardian": 0.85})


def test_item_score_combines_factors(make_item, now):
    item = make_item(source="Reuters", description="x" * 500, published_at=now)
    scorer = Scorer(TRUST, now=now)
    assert scorer.score_item(item) == pytest.approx(0.45 * 1.0 + 0.4 * 0.95 + 0.15 * 1.0)


def test_unknown_source_uses_default_prior(make_item, now):
    scorer = Scorer(TRUST, now=now)
    assert scorer.source_prior(make_item(source="Some Blog")) == 0.55
    assert scorer.source_prior(make_item(source="  REUTERS ")) == 0.95


def test_recency_decays_exponentially(make_item, now):
    scorer = Scorer(TRUST, now=now)
    item = make_item(published_at=now - timedelta(hours=18))
    assert scorer.recency(item) == pytest.approx(exp(-1))


def test_score_strictly_decreases_with_age(make_item, now):
    scorer = Scorer(TRUST, now=now)
    scores = [
        scorer.score_item(make_item(published_at=now - timedelta(hours=hours)))
        for hours in (0, 0.5, 1, 6, 24, 48, 96)
    ]
    assert all(later < earlier for earlier, later in zip(scores, scores[1:]))


def test_richness_threshold(make_item):
    assert Scorer.richness(make_item(description="x" * 200, content="y" * 200)) == 0.6
    assert Scorer.richness(make_item(description="x" * 200, content="y" * 201)) == 1.0
    assert Scorer.richness(make_item(description=None, content=None)) == 0.6


def test_group_score_adds_corroboration_bonus(make_item, now):
    scorer = Scorer(TRUST, now=now)
    items = [make_item(url=f"https://e.com/{idx}", published_at=now - timedelta(hours=idx)) for idx in range(3)]
    cluster = Cluster(items=items)
    best = scorer.score_item(items[0])
    assert scorer.group_score(cluster) == pytest.approx(best + 0.1 * log(4))
    assert scorer.score_cluster(cluster).group_score == pytest.approx(scorer.group_score(cluster))


def test_combine_scores_matches_cluster_scoring(make_item, now):
    scorer = Scorer(TRUST, now=now)
    items = [make_item(url=f"https://e.com/{idx}", published_at=now - timedelta(hours=idx)) for idx in range(2)]
    scored = scorer.score_cluster(Cluster(items=items))
    assert combine_scores(scored.item_scores) == scored.group_score
    assert combine_scores([0.5]) == pytest.approx(0.5 + 0.1 * log(2))


def test_representative_is_highest_scoring_item(make_item, now):
    scorer = Scorer(TRUST, now=now)
    weak = make_item(title="weak", source="Some Blog", url="https://e.com/1")
    strong = make_item(title="strong", source="Reuters", url="https://e.com/2", published_at=now - timedelta(hours=1))
    scored = scorer.score_cluster(Cluster(items=[weak, strong]))
    assert scored.representative is strong
    assert len(scored.item_scores) == 2


def test_representative_ties_go_to_more_recent_item(make_item, now):
    scorer = Scorer(TRUST, now=now)
    sooner = make_item(title="sooner", url="https://e.com/1", published_at=now + timedelta(hours=1))
    later = make_item(title="later", url="https://e.com/2", published_at=now + timedelta(hours=2))
    scored = scorer.score_cluster(Cluster(items=[sooner, later]))
    assert scored.item_scores[0] == scored.item_scores[1]
    assert scored.representative is later


def test_source_trust_mapping():
    assert "reuters" in TRUST
    assert "REUTERS" in TRUST
    assert "Some Blog" not in TRUST
    assert len(TRUST) == 2
    assert SourceTrust(default=0.3)["anything"] == 0.3


def test_undated_items_cannot_be_scored(make_item, now):
    with pytest.raises(ValueError):
        Scorer(TRUST, now=now).score_item(make_item(published_at=None))
