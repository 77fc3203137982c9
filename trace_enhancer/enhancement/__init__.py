"""Core enhancement pipeline: path rewriting, revisions, fetching, context windows."""

__all__ = [
    "content_fetcher",
    "context_window",
    "engine",
    "path_resolver",
    "revision_resolver",
]
