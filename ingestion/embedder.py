"""OpenAI embedding client shared by ingestion and retrieval."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor

import httpx
import openai

from core.config import settings
from core.errors import EmbeddingError

logger = logging.getLogger(__name__)


def default_client(api_key: str | None = None, http_client: httpx.Client | None = None) -> openai.OpenAI:
    """OpenAI client for embeddings. Failed calls are not retried."""
    return openai.OpenAI(
        api_key=api_key if api_key is not None else settings.openai_api_key,
        max_retries=0,
        http_client=http_client,
    )


class Embedder:
    """Maps text to a fixed-length vector with one embedding model.

    Ingestion and retrieval must share an instance (or at least the model) so
    queries land in the same embedding space as stored chunks.
    """

    def __init__(
        self,
        client: openai.OpenAI | None = None,
        model: str | None = None,
        concurrency: int | None = None,
    ):
        self.client = client or default_client()
        self.model = model or settings.embedding_model
        self.concurrency = max(1, concurrency or settings.embedding_concurrency)

    def embed(self, text: str) -> list[float]:
        """Embed a single text. Raises EmbeddingError on any service failure."""
        try:
            response = self.client.embeddings.create(model=self.model, input=text)
        except openai.OpenAIError as e:
            logger.error("Embedding request failed: %s", e)
            raise EmbeddingError(f"Embedding request failed: {e}") from e

        if not response.data:
            raise EmbeddingError("Embedding service returned no vectors")
        return list(response.data[0].embedding)

    def embed_many(self, texts: list[str]) -> list[list[float]]:
        """Embed texts concurrently; output order matches input order."""
        if not texts:
            return []
        if self.concurrency == 1 or len(texts) == 1:
            return [self.embed(text) for text in texts]

        workers = min(self.concurrency, len(texts))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            # map() yields in submission order and re-raises the first failure
            vectors = list(pool.map(self.embed, texts))

        logger.debug("Embedded %d texts with %d workers", len(texts), workers)
        return vectors
