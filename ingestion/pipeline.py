"""Ingestion pipeline: segment -> embed -> upsert."""

from __future__ import annotations

import logging
import re
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING

from core.config import settings
from core.models import Chunk, Document, IngestResult, VectorRecord
from ingestion.chunker import chunk_document
from ingestion.loader import load_file

if TYPE_CHECKING:
    from ingestion.embedder import Embedder
    from storage.vector_store import VectorIndex

logger = logging.getLogger(__name__)


def generate_document_id(filename: str | None = None) -> str:
    """Build a unique id like ``doc-1718000000000-reportpdf``."""
    stem = re.sub(r"[^a-z0-9]", "", filename or "", flags=re.IGNORECASE) or "text"
    return f"doc-{int(time.time() * 1000)}-{stem}"


def build_record(chunk: Chunk, embedding: list[float], metadata: dict[str, str]) -> VectorRecord:
    """One VectorRecord per chunk; reserved attributes override caller metadata."""
    return VectorRecord(
        id=chunk.chunk_id,
        embedding=embedding,
        attributes={
            **metadata,
            "documentId": chunk.document_id,
            "chunkIndex": chunk.ordinal,
            "totalChunks": chunk.total_chunks,
            "text": chunk.text,
        },
    )


class Ingestor:
    """Persists documents into the vector index."""

    def __init__(self, embedder: Embedder, store: VectorIndex, chunk_size: int | None = None):
        self.embedder = embedder
        self.store = store
        self.chunk_size = chunk_size if chunk_size is not None else settings.chunk_size

    def ingest(
        self,
        document_id: str | None,
        text: str,
        metadata: dict[str, str] | None = None,
    ) -> IngestResult:
        """Segment, embed and upsert one document.

        Raises EmbeddingError if any chunk fails to embed and VectorIndexError
        if the batch upsert fails. Nothing is written unless every chunk
        embedded successfully.
        """
        document = Document(
            document_id=document_id or generate_document_id(),
            source_text=text,
            metadata=metadata or {},
        )

        chunks = chunk_document(document, self.chunk_size)
        if not chunks:
            logger.info("Document %s has no content, nothing stored", document.document_id)
            return IngestResult(document_id=document.document_id, chunks_stored=0)

        logger.info("Storing document: %s (%d chunks)", document.document_id, len(chunks))

        embeddings = self.embedder.embed_many([chunk.text for chunk in chunks])
        records = [
            build_record(chunk, embedding, document.metadata)
            for chunk, embedding in zip(chunks, embeddings)
        ]

        stored = self.store.upsert(records)
        logger.info("Document stored successfully: %s", document.document_id)
        return IngestResult(document_id=document.document_id, chunks_stored=stored)

    def ingest_file(
        self,
        file_path: str,
        document_id: str | None = None,
        metadata: dict[str, str] | None = None,
    ) -> IngestResult:
        """Extract text from a file and ingest it with upload metadata."""
        path = Path(file_path)
        text = load_file(file_path)
        metadata = {
            **(metadata or {}),
            "filename": path.name,
            "uploadDate": datetime.now(timezone.utc).isoformat(),
        }
        return self.ingest(document_id or generate_document_id(path.name), text, metadata)
