from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Protocol, Sequence

from .brief import build_document, build_generation_request
from .cluster import cluster_items
from .config import AppConfig
from .dedupe import dedupe_titles
from .models import Cluster, Document, GenerationRequest, Item, PipelineOptions, ScoredCluster, as_utc, newest_first
from .normalize import normalize_items
from .ollama_client import Generator
from .score import Scorer
from .selector import select_story
from .sources import SourceAdapter, gather_items
from .window import within_window

log = logging.getLogger(__name__)


class DocumentStore(Protocol):
    def write(self, document: Document) -> Path: ...


@dataclass(slots=True)
class Selection:
    winner: ScoredCluster
    clusters: list[Cluster]
    counts: dict[str, int]
    options: PipelineOptions


@dataclass(slots=True)
class PipelineResult:
    selection: Selection
    request: GenerationRequest
    document: Document
    path: Path


def select_from_items(
    items: Sequence[Item],
    options: PipelineOptions,
    scorer: Scorer,
    *,
    now: datetime,
) -> Selection:
    opts = options.clamp()
    normalized = normalize_items(newest_first(items))
    recent = within_window(normalized, now=now, window=opts.window)
    deduped = dedupe_titles(recent, threshold=opts.dedup_threshold)
    clusters = cluster_items(deduped, threshold=opts.cluster_threshold, strategy=opts.cluster_strategy)
    counts = {
        "gathered": len(items),
        "normalized": len(normalized),
        "windowed": len(recent),
        "deduplicated": len(deduped),
        "clusters": len(clusters),
    }
    log.info(
        "Items: %(gathered)d gathered, %(normalized)d normalized, %(windowed)d in window, "
        "%(deduplicated)d after dedupe, %(clusters)d clusters",
        counts,
    )
    winner = select_story(clusters, scorer)
    log.info(
        "Selected %r from %s (%d items, group score %.3f)",
        winner.representative.title,
        winner.representative.source,
        len(winner.cluster),
        winner.group_score,
    )
    return Selection(winner=winner, clusters=clusters, counts=counts, options=opts)


def gather_and_select(
    app_config: AppConfig,
    adapters: Sequence[SourceAdapter],
    *,
    now: datetime,
    window: str | None = None,
) -> Selection:
    settings = app_config.settings
    options = settings.pipeline_options(window=window)
    now = as_utc(now)
    items = gather_items(
        adapters,
        since=now - options.window,
        language=settings.language,
        timeout_s=settings.fetch_timeout_s,
    )
    return select_from_items(items, options, Scorer(settings.trust(), now=now), now=now)


def run_pipeline(
    app_config: AppConfig,
    *,
    adapters: Sequence[SourceAdapter],
    generator: Generator,
    store: DocumentStore,
    now: datetime,
    run_date: date | None = None,
    window: str | None = None,
) -> PipelineResult:
    """Run one batch: gather, select, generate and write a single document.

    Raises EmptyInputError, GenerationError or PersistenceError; nothing is
    written unless generation returned a body.
    """
    settings = app_config.settings
    selection = gather_and_select(app_config, adapters, now=now, window=window)
    day = run_date or as_utc(now).date()
    request = build_generation_request(
        selection.winner,
        run_date=day,
        language=settings.language,
        max_references=selection.options.max_references,
    )
    body = generator.generate(request)
    document = build_document(selection.winner, body, run_date=day)
    path = store.write(document)
    return PipelineResult(selection=selection, request=request, document=document, path=path)
