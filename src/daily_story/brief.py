"""Turn a selected cluster into a generation request and a stored document."""

from __future__ import annotations

import re
from datetime import date

from .models import Document, GenerationRequest, Item, ScoredCluster, newest_first
from .ollama_client import GenerationError

MAX_REFERENCES = 10
MAX_SLUG_LENGTH = 80
FALLBACK_SLUG = "daily-story"


def format_reference(index: int, item: Item) -> str:
    published = item.published_at.isoformat() if item.published_at else "undated"
    return f"[{index}] {item.title} — {item.source} ({published}) {item.url}"


def build_generation_request(
    selection: ScoredCluster,
    *,
    run_date: date,
    language: str = "en",
    max_references: int = MAX_REFERENCES,
) -> GenerationRequest:
    recent = newest_first(selection.items)[:max_references]
    primary = selection.representative
    return GenerationRequest(
        references=tuple(format_reference(idx, item) for idx, item in enumerate(recent, start=1)),
        primary_title=primary.title,
        primary_source=primary.source,
        primary_url=primary.url,
        run_date=run_date,
        language=language,
    )


def slugify(title: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", title.lower()).strip("-")
    slug = slug[:MAX_SLUG_LENGTH].strip("-")
    return slug or FALLBACK_SLUG


def build_document(selection: ScoredCluster, body: str, *, run_date: date) -> Document:
    if not body or not body.strip():
        raise GenerationError("Generator returned an empty body")
    primary = selection.representative
    front_matter = {
        "title": primary.title,
        "headline": primary.title,
        "date": run_date.isoformat(),
        "primarySource": primary.source,
        "primaryUrl": primary.url,
    }
    return Document(
        filename=f"{run_date.isoformat()}-{slugify(primary.title)}.md",
        front_matter=front_matter,
        body=body.strip(),
    )


class LocalDigestGenerator:
    """Offline generator that lists the supporting coverage as a digest."""

    def generate(self, request: GenerationRequest) -> str:
        bullets = [f"- {reference}" for reference in request.references]
        return "\n".join(
            [
                f"What happened: {request.primary_title}",
                "",
                *bullets,
                "",
                f"Primary source: {request.primary_source} ({request.primary_url})",
            ]
        )
