from __future__ import annotations

import logging
import os
import threading
import time
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, Protocol, Sequence

import feedparser
import requests

from .config import AppConfig, Settings, SourceConfig
from .models import Item, newest_first

log = logging.getLogger(__name__)

SessionFactory = Callable[[], requests.Session]


class AdapterError(RuntimeError):
    pass


class SourceAdapter(Protocol):
    name: str

    def fetch(self, since: datetime, language: str) -> Iterable[Item]: ...


class RssAdapter:
    def __init__(
        self,
        source: SourceConfig,
        settings: Settings,
        *,
        session_factory: SessionFactory | None = None,
        max_retries: int = 2,
    ):
        self.name = source.name
        self.url = source.url
        self.settings = settings
        self.session_factory = session_factory or requests.Session
        self.max_retries = max_retries

    def fetch(self, since: datetime, language: str) -> list[Item]:
        content = self._download()
        parsed = feedparser.parse(content)
        if parsed.bozo and parsed.bozo_exception:
            log.warning("Feed parser warning for %s: %s", self.url, parsed.bozo_exception)

        items: list[Item] = []
        for entry in parsed.entries[: self.settings.max_items_per_feed]:
            items.append(self._entry_to_item(entry))
        return items

    def _download(self) -> bytes:
        deadline = time.monotonic() + self.settings.fetch_timeout_s
        session = self.session_factory()
        try:
            for attempt in range(self.max_retries + 1):
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    raise AdapterError(f"Gave up on {self.url} after {self.settings.fetch_timeout_s:.1f}s")
                try:
                    response = session.get(
                        self.url,
                        headers={"User-Agent": self.settings.user_agent},
                        timeout=min(self.settings.timeout_s, remaining),
                    )
                    response.raise_for_status()
                    return response.content
                except requests.RequestException as exc:
                    log.warning(
                        "Failed to fetch %s (attempt %s/%s): %s", self.url, attempt + 1, self.max_retries + 1, exc
                    )
                    if attempt == self.max_retries:
                        raise AdapterError(f"Unable to fetch {self.url}: {exc}") from exc
        finally:
            session.close()
        raise AdapterError(f"Unable to fetch {self.url}")

    def _entry_to_item(self, entry: Any) -> Item:
        summary = entry.get("summary")
        return Item(
            title=(entry.get("title") or "").strip(),
            url=(entry.get("link") or "").strip(),
            source=self.name,
            published_at=_parse_struct_time(entry),
            description=summary.strip() if summary else None,
            content=_extract_content(entry),
        )


class NewsApiAdapter:
    """Adapter for NewsAPI-compatible JSON endpoints (``/v2/everything``)."""

    def __init__(
        self,
        source: SourceConfig,
        settings: Settings,
        *,
        session_factory: SessionFactory | None = None,
        api_key: str | None = None,
    ):
        self.name = source.name
        self.url = source.url
        self.settings = settings
        self.session_factory = session_factory or requests.Session
        self.api_key = api_key or (os.environ.get(source.api_key_env, "") if source.api_key_env else "")

    def fetch(self, since: datetime, language: str) -> list[Item]:
        params = {
            "language": language,
            "from": since.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
            "sortBy": "publishedAt",
            "pageSize": self.settings.max_items_per_feed,
        }
        headers = {"User-Agent": self.settings.user_agent}
        if self.api_key:
            headers["X-Api-Key"] = self.api_key
        session = self.session_factory()
        try:
            response = session.get(
                self.url,
                params=params,
                headers=headers,
                timeout=min(self.settings.timeout_s, self.settings.fetch_timeout_s),
            )
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as exc:
            raise AdapterError(f"Request to {self.name} failed: {exc}") from exc
        except ValueError as exc:
            raise AdapterError(f"Invalid JSON from {self.name}: {exc}") from exc
        finally:
            session.close()

        if data.get("status", "ok") != "ok":
            raise AdapterError(f"{self.name} returned {data.get('code')}: {data.get('message')}")
        return [self._article_to_item(article) for article in data.get("articles", [])]

    def _article_to_item(self, article: dict[str, Any]) -> Item:
        source = article.get("source")
        if isinstance(source, dict):
            source = source.get("name")
        return Item.from_record({**article, "source": source or self.name})


def build_adapters(
    config: AppConfig,
    *,
    session_factory: SessionFactory | None = None,
) -> list[SourceAdapter]:
    adapters: list[SourceAdapter] = []
    for source in config.sources:
        match source.kind:
            case "rss":
                adapters.append(RssAdapter(source, config.settings, session_factory=session_factory))
            case "newsapi":
                adapters.append(NewsApiAdapter(source, config.settings, session_factory=session_factory))
    return adapters


def gather_items(
    adapters: Sequence[SourceAdapter],
    *,
    since: datetime,
    language: str,
    timeout_s: float = 30.0,
) -> list[Item]:
    """Fetch every adapter concurrently and merge their items newest first.

    Each adapter runs on a daemon thread joined against a shared deadline, so
    a failing or slow adapter contributes no items and never keeps the
    process alive. Results are merged in adapter order before sorting, so
    completion order never matters.
    """
    if not adapters:
        return []
    results: list[list[Item] | None] = [None] * len(adapters)
    threads: list[threading.Thread] = []
    started = time.monotonic()
    for idx, adapter in enumerate(adapters):
        thread = threading.Thread(
            target=_fetch_isolated,
            args=(adapter, since, language, results, idx),
            name=f"adapter-{adapter.name}",
            daemon=True,
        )
        thread.start()
        threads.append(thread)

    items: list[Item] = []
    for idx, (adapter, thread) in enumerate(zip(adapters, threads)):
        thread.join(max(timeout_s - (time.monotonic() - started), 0.0))
        if thread.is_alive():
            log.warning("Source %s timed out after %.1fs", adapter.name, timeout_s)
            continue
        items.extend(results[idx] or [])
    log.info("Gathered %d items from %d sources", len(items), len(adapters))
    return newest_first(items)


def _fetch_isolated(
    adapter: SourceAdapter,
    since: datetime,
    language: str,
    results: list[list[Item] | None],
    idx: int,
) -> None:
    try:
        results[idx] = list(adapter.fetch(since, language))
    except Exception as exc:  # noqa: BLE001
        log.warning("Source %s failed: %s", adapter.name, exc)
        results[idx] = []


def _parse_struct_time(entry: Any) -> datetime | None:
    struct_time = entry.get("published_parsed") or entry.get("updated_parsed")
    if not struct_time:
        return None
    return datetime(*struct_time[:6], tzinfo=timezone.utc)


def _extract_content(entry: Any) -> str | None:
    contents = entry.get("content")
    if isinstance(contents, list) and contents:
        text = contents[0].get("value")
        if text:
            return text.strip()
    return None
