"""In-process vector index backed by numpy, for local runs and tests."""

from __future__ import annotations

import logging
import threading

import numpy as np

from core.config import settings
from core.errors import VectorIndexError
from core.models import QueryMatch, VectorRecord
from storage.vector_store import match_from_attributes

logger = logging.getLogger(__name__)


class InMemoryVectorStore:
    """Replace-by-id record store with brute-force cosine search.

    Scores are mapped from [-1, 1] to [0, 1] the way Neo4j reports cosine
    similarity, so the confidence threshold means the same on both backends.
    """

    def __init__(self):
        self._records: dict[str, VectorRecord] = {}
        self._lock = threading.Lock()

    def upsert(self, records: list[VectorRecord]) -> int:
        if not records:
            return 0
        for record in records:
            if not record.embedding:
                raise VectorIndexError(f"Record {record.id} has no embedding")
        with self._lock:
            for record in records:
                self._records[record.id] = record
        logger.info("Upserted %d records to in-memory store", len(records))
        return len(records)

    def query(self, vector: list[float], top_k: int | None = None) -> list[QueryMatch]:
        if top_k is None:
            top_k = settings.top_k

        with self._lock:
            records = list(self._records.values())
        if not records or top_k <= 0:
            return []

        query_vec = np.array(vector, dtype=float)
        query_norm = np.linalg.norm(query_vec)
        if query_norm == 0:
            logger.warning("Query embedding has zero norm, no matches")
            return []

        scored = []
        for record in records:
            record_vec = np.array(record.embedding, dtype=float)
            if record_vec.shape != query_vec.shape:
                raise VectorIndexError(
                    f"Dimension mismatch: query {query_vec.shape[0]}, "
                    f"record {record.id} {record_vec.shape[0]}"
                )
            record_norm = np.linalg.norm(record_vec)
            if record_norm == 0:
                continue
            cosine = float(np.dot(query_vec, record_vec) / (query_norm * record_norm))
            scored.append(((1.0 + cosine) / 2.0, record))

        scored.sort(key=lambda item: item[0], reverse=True)
        return [
            match_from_attributes(record.id, score, record.attributes)
            for score, record in scored[:top_k]
        ]

    def count(self) -> int:
        with self._lock:
            return len(self._records)

    def delete_all(self) -> int:
        with self._lock:
            count = len(self._records)
            self._records.clear()
        logger.info("Deleted %d chunks from in-memory store", count)
        return count

    def close(self) -> None:
        pass
