"""Confidence-gated retrieval of knowledge-base context."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from core.config import settings
from core.errors import EmbeddingError, VectorIndexError
from core.models import RetrievalResult
from retrieval.context import assemble

if TYPE_CHECKING:
    from ingestion.embedder import Embedder
    from storage.vector_store import VectorIndex

logger = logging.getLogger(__name__)


class Retriever:
    """Embeds a query, fetches top-K matches and gates them on mean score."""

    def __init__(
        self,
        embedder: Embedder,
        store: VectorIndex,
        confidence_threshold: float | None = None,
    ):
        """Initialize retriever.

        Args:
            embedder: Embedding client, same model as used for ingestion
            store: Vector index to search
            confidence_threshold: Mean score a result set must exceed to be
                used (default: settings.confidence_threshold)
        """
        self.embedder = embedder
        self.store = store
        if confidence_threshold is None:
            confidence_threshold = settings.confidence_threshold
        self.confidence_threshold = confidence_threshold

    def retrieve(self, query: str, top_k: int | None = None) -> RetrievalResult:
        """Retrieve context for a query.

        Never raises for embedding or index failures: those come back as a
        rejected result with ``failure_reason`` set, so the chat turn can carry
        on without knowledge-base context.

        Args:
            query: User message
            top_k: Number of nearest chunks to fetch (default: settings.top_k)

        Returns:
            RetrievalResult, accepted only when matches exist and their mean
            score is strictly above the confidence threshold
        """
        if top_k is None:
            top_k = settings.top_k

        try:
            query_embedding = self.embedder.embed(query)
            matches = self.store.query(query_embedding, top_k=top_k)
        except (EmbeddingError, VectorIndexError) as e:
            logger.error("Retrieval failed, continuing without context: %s", e)
            return RetrievalResult(accepted=False, confidence=0.0, failure_reason=str(e))

        if not matches:
            logger.info("No matches for query: %s", query)
            return RetrievalResult(accepted=False, confidence=0.0, match_count=0)

        confidence = sum(m.score for m in matches) / len(matches)
        accepted = confidence > self.confidence_threshold

        if accepted:
            logger.info(
                "Knowledge-base context accepted (confidence: %.1f%%, %d matches)",
                confidence * 100,
                len(matches),
            )
        else:
            logger.warning(
                "Knowledge-base context rejected (confidence: %.1f%% <= %.1f%%)",
                confidence * 100,
                self.confidence_threshold * 100,
            )

        return RetrievalResult(
            accepted=accepted,
            context_text=assemble(matches) if accepted else None,
            confidence=confidence,
            match_count=len(matches),
            matches=matches,
        )
