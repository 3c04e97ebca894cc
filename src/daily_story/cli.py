from __future__ import annotations

import logging
from datetime import date
from pathlib import Path

import typer

from .brief import LocalDigestGenerator, build_generation_request
from .config import AppConfig, load_config
from .models import utc_now
from .ollama_client import GenerationError, Generator, OllamaConfig, build_client
from .pipeline import gather_and_select, run_pipeline
from .render import print_counts, print_ranked_clusters, print_request, set_color
from .score import Scorer
from .selector import EmptyInputError, rank_clusters
from .sources import build_adapters
from .store import MarkdownStore, PersistenceError

app = typer.Typer(help="Pick the day's most significant story and write it up")


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )


def _load(config_path: Path) -> tuple[AppConfig, Path]:
    try:
        result = load_config(config_path)
    except (FileNotFoundError, ValueError) as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    return result.config, result.path.parent


def _parse_run_date(value: str | None) -> date | None:
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise typer.BadParameter("date must be YYYY-MM-DD") from exc


@app.command()
def run(
    config_path: Path = typer.Option(Path("sources.yaml"), "--config", help="Path to sources YAML"),
    window: str | None = typer.Option(None, help="Recency window like 48h or 2d"),
    run_date: str | None = typer.Option(None, "--date", help="Run date (YYYY-MM-DD), defaults to today UTC"),
    output_dir: Path | None = typer.Option(None, help="Directory for the written document"),
    llm: bool = typer.Option(True, "--llm/--no-llm", help="Generate with Ollama or write a local digest"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    _setup_logging(verbose)
    config, base_dir = _load(config_path)
    day = _parse_run_date(run_date)
    store = MarkdownStore(output_dir or config.settings.output_path(base_dir))
    try:
        generator = _build_generator(config, llm)
        result = run_pipeline(
            config,
            adapters=build_adapters(config),
            generator=generator,
            store=store,
            now=utc_now(),
            run_date=day,
            window=window,
        )
    except (EmptyInputError, GenerationError, PersistenceError, ValueError) as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    typer.echo(str(result.path))


@app.command()
def preview(
    config_path: Path = typer.Option(Path("sources.yaml"), "--config", help="Path to sources YAML"),
    window: str | None = typer.Option(None, help="Recency window like 48h or 2d"),
    top: int = typer.Option(3, help="Show this many ranked clusters"),
    color: bool = typer.Option(False, "--color/--no-color", help="Enable ANSI colors in output"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Show the ranked clusters and the generation request without writing anything."""
    _setup_logging(verbose)
    set_color(color)
    config, _ = _load(config_path)
    now = utc_now()
    try:
        selection = gather_and_select(config, build_adapters(config), now=now, window=window)
    except (EmptyInputError, ValueError) as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    scorer = Scorer(config.settings.trust(), now=now)
    print_counts(selection.counts)
    print_ranked_clusters(rank_clusters(selection.clusters, scorer), top=top)
    request = build_generation_request(
        selection.winner,
        run_date=now.date(),
        language=config.settings.language,
        max_references=selection.options.max_references,
    )
    print_request(request)


def _build_generator(config: AppConfig, llm_flag: bool) -> Generator:
    settings = config.settings.ollama
    if not (llm_flag and settings.enabled):
        return LocalDigestGenerator()
    ollama_config = OllamaConfig(
        base_url=settings.base_url,
        model=settings.model,
        timeout_s=settings.timeout_s,
    )
    return build_client(ollama_config)
