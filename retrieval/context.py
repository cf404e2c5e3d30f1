"""Render accepted matches into one annotated context block."""

from __future__ import annotations

from core.models import QueryMatch

BLOCK_SEPARATOR = "\n\n---\n\n"


def format_match(position: int, match: QueryMatch) -> str:
    return f"[Document {position} - Relevance: {match.score * 100:.1f}%]\n{match.text}"


def assemble(matches: list[QueryMatch]) -> str | None:
    """Join matches in received order, or return None when there are none."""
    if not matches:
        return None
    return BLOCK_SEPARATOR.join(
        format_match(i, match) for i, match in enumerate(matches, start=1)
    )
