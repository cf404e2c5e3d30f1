"""Sentence-greedy text segmenter."""

from __future__ import annotations

import re

from core.config import settings
from core.errors import SegmentationError
from core.models import Chunk, Document

# A sentence is a run of text closed by terminators; trailing text without a
# terminator is its own unit so nothing is dropped.
_SENTENCE_PATTERN = re.compile(r"[^.!?]*[.!?]+|[^.!?]+\Z")


def split_sentences(text: str) -> list[str]:
    """Split text into sentence-like units, keeping surrounding whitespace."""
    units = _SENTENCE_PATTERN.findall(text)
    if not units:
        return [text]
    return [unit for unit in units if unit.strip()]


def segment(text: str, max_chunk_size: int | None = None) -> list[str]:
    """Greedily pack sentences into chunks of at most max_chunk_size chars.

    A buffer is closed when the next sentence would push it past the limit.
    A single sentence longer than the limit is emitted whole, never split.
    Empty or whitespace-only input yields no chunks.
    """
    if max_chunk_size is None:
        max_chunk_size = settings.chunk_size

    if not isinstance(text, str):
        raise SegmentationError(f"Expected text, got {type(text).__name__}")
    if max_chunk_size <= 0:
        raise SegmentationError(f"max_chunk_size must be positive, got {max_chunk_size}")

    if not text.strip():
        return []

    chunks: list[str] = []
    current = ""

    for sentence in split_sentences(text):
        if len(current) + len(sentence) > max_chunk_size and current.strip():
            chunks.append(current.strip())
            current = sentence
        else:
            current += sentence

    if current.strip():
        chunks.append(current.strip())

    return chunks


def chunk_id(document_id: str, ordinal: int) -> str:
    return f"{document_id}-chunk-{ordinal}"


def chunk_document(document: Document, max_chunk_size: int | None = None) -> list[Chunk]:
    """Segment a document into ordered Chunks with contiguous 0-based ordinals."""
    texts = segment(document.source_text, max_chunk_size)
    total = len(texts)
    return [
        Chunk(
            chunk_id=chunk_id(document.document_id, i),
            document_id=document.document_id,
            ordinal=i,
            text=text,
            total_chunks=total,
        )
        for i, text in enumerate(texts)
    ]
