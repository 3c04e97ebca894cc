"""Daily story selection package."""

__all__ = [
    "cli",
    "config",
    "models",
    "sources",
    "normalize",
    "window",
    "similarity",
    "dedupe",
    "cluster",
    "score",
    "selector",
    "brief",
    "ollama_client",
    "store",
    "pipeline",
    "render",
]
