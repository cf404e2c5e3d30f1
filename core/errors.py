"""Error taxonomy for ingestion, retrieval and provider calls."""

from __future__ import annotations


class RAGError(Exception):
    """Base class for all pipeline errors."""


class SegmentationError(RAGError):
    """Input text could not be segmented."""


class EmbeddingError(RAGError):
    """Embedding service unavailable or rejected the input."""


class VectorIndexError(RAGError):
    """Vector store unavailable or rejected a read/write."""


class ProviderError(RAGError):
    """A language-model backend failed to produce an answer.

    ``kind`` is one of ``no_answer`` (reply had no usable answer field),
    ``provider_error`` (backend reported an explicit error), ``timeout`` or
    ``transport``.
    """

    def __init__(self, provider_id: str, kind: str, message: str):
        super().__init__(message)
        self.provider_id = provider_id
        self.kind = kind


class UnsupportedAttachmentError(RAGError):
    """Attachment type is not handled (globally or by a given provider)."""

    def __init__(self, message: str, provider_id: str = "", kind: str = ""):
        super().__init__(message)
        self.provider_id = provider_id
        self.kind = kind
