from __future__ import annotations

from datetime import datetime, timezone
from typing import Sequence

from rich.console import Console
from rich.table import Table

from .models import GenerationRequest, ScoredCluster

console = Console(no_color=True)
MAX_ITEMS_PER_CLUSTER = 5


def set_color(enabled: bool) -> None:
    global console
    console = Console(no_color=not enabled)


def format_timestamp(dt: datetime | None) -> str:
    if not dt:
        return "(no timestamp)"
    utc_dt = dt.astimezone(timezone.utc)
    return utc_dt.strftime("%Y-%m-%d %H:%M UTC")


def print_counts(counts: dict[str, int]) -> None:
    console.print(", ".join(f"{name}: {value}" for name, value in counts.items()), highlight=False)


def print_ranked_clusters(
    ranked: Sequence[ScoredCluster],
    *,
    top: int = 3,
    max_items: int = MAX_ITEMS_PER_CLUSTER,
) -> None:
    if not ranked:
        console.print("No clusters to rank.")
        return
    for idx, scored in enumerate(ranked[:top], start=1):
        console.rule(f"#{idx} ({scored.group_score:.3f}): {scored.representative.title}")
        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Score")
        table.add_column("Source")
        table.add_column("Title")
        table.add_column("Published")
        for item, score in list(zip(scored.items, scored.item_scores))[:max_items]:
            table.add_row(f"{score:.3f}", item.source, item.title, format_timestamp(item.published_at))
        console.print(table)


def print_request(request: GenerationRequest) -> None:
    console.rule("Generation request")
    console.print(f"Primary: {request.primary_title} ({request.primary_source})", highlight=False, markup=False)
    console.print(request.primary_url, highlight=False)
    for reference in request.references:
        console.print(reference, highlight=False, markup=False)
