from __future__ import annotations

import logging
from typing import Iterable
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from .models import Item

log = logging.getLogger(__name__)

TRACKING_PARAMS = {
    "utm_source",
    "utm_medium",
    "utm_campaign",
    "utm_term",
    "utm_content",
    "utm_id",
    "utm_name",
    "utm_reader",
    "utm_place",
    "fbclid",
    "gclid",
    "mc_cid",
    "mc_eid",
    "icmpid",
    "cmpid",
    "ref",
}


def normalize_items(items: Iterable[Item]) -> list[Item]:
    """Drop malformed items and keep the first item seen for each url key.

    Callers sort their input first; ties are resolved by input order.
    """
    seen_keys: set[str] = set()
    unique: list[Item] = []
    for item in items:
        if not item.title.strip() or not item.url.strip():
            log.debug("Dropping malformed item from %s: %r", item.source or "unknown source", item.title or item.url)
            continue
        key = url_key(item.url)
        if key in seen_keys:
            continue
        seen_keys.add(key)
        unique.append(item)
    return unique


def url_key(url: str) -> str:
    """Identity key: trimmed, lower-cased url without tracking parameters."""
    raw = url.strip().lower()
    try:
        parts = urlsplit(raw)
    except ValueError:
        return raw
    if not parts.netloc:
        return raw
    path = parts.path.rstrip("/") or "/"
    return urlunsplit((parts.scheme, parts.netloc, path, _strip_tracking_params(parts.query), ""))


def _strip_tracking_params(query: str) -> str:
    if not query:
        return ""
    filtered = [
        (name, value)
        for name, value in parse_qsl(query, keep_blank_values=True)
        if name not in TRACKING_PARAMS and not name.startswith("utm_")
    ]
    return urlencode(filtered, doseq=True)
