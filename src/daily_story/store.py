from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

import yaml

from .models import Document

log = logging.getLogger(__name__)


class PersistenceError(RuntimeError):
    pass


class MarkdownStore:
    """Writes one Markdown file per document with a YAML front-matter block."""

    def __init__(self, root: Path):
        self.root = Path(root)

    def path_for(self, document: Document) -> Path:
        return self.root / document.filename

    def write(self, document: Document) -> Path:
        target = self.path_for(document)
        text = render_markdown(document)
        tmp_name: str | None = None
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w", encoding="utf-8", dir=self.root, suffix=".tmp", delete=False
            ) as handle:
                tmp_name = handle.name
                handle.write(text)
            os.replace(tmp_name, target)
        except OSError as exc:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise PersistenceError(f"Unable to write {target}: {exc}") from exc
        log.info("Wrote %s", target)
        return target


def render_markdown(document: Document) -> str:
    header = yaml.safe_dump(document.front_matter, sort_keys=False, allow_unicode=True)
    return f"---\n{header}---\n\n{document.body}\n"
