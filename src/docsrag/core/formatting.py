"""Summary formatting utilities for one-line tool summaries."""

from __future__ import annotations


def pluralize(count: int, singular: str, plural: str | None = None) -> str:
    """Return grammatically correct singular/plural form.

    Examples:
        pluralize(1, "collection") -> "1 collection"
        pluralize(3, "collection") -> "3 collections"
    """
    if plural is None:
        plural = singular + "s"
    word = singular if count == 1 else plural
    return f"{count} {word}"


def truncate_query(query: str, max_len: int = 20) -> str:
    """Truncate a query for display.

    Examples:
        "how do I configure the server" -> "how do I configur..."
        "short" -> "short"
    """
    if len(query) <= max_len:
        return query
    return query[: max_len - 3] + "..."


def format_duration(seconds: float) -> str:
    """Format a duration as "850ms" or "2.4s"."""
    if seconds < 1:
        return f"{round(seconds * 1000)}ms"
    return f"{seconds:.1f}s"
