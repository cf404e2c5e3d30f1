"""Process-wide embedding client and vector index handles."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING

from core.config import Settings, settings

if TYPE_CHECKING:
    from ingestion.embedder import Embedder
    from storage.vector_store import VectorIndex

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Resources:
    """Expensive clients, built once and injected into pipeline components."""

    embedder: Embedder
    store: VectorIndex


_resources: Resources | None = None
_lock = threading.Lock()


def build_resources(config: Settings | None = None) -> Resources:
    """Construct the embedder and the configured vector index backend."""
    config = config or settings

    from ingestion.embedder import Embedder, default_client

    embedder = Embedder(
        client=default_client(config.openai_api_key),
        model=config.embedding_model,
        concurrency=config.embedding_concurrency,
    )

    if config.vector_backend == "memory":
        from storage.memory_store import InMemoryVectorStore

        store = InMemoryVectorStore()
    elif config.vector_backend == "neo4j":
        from storage.vector_store import VectorStore

        store = VectorStore(
            uri=config.neo4j_uri,
            auth=(config.neo4j_user, config.neo4j_password),
            dimensions=config.embedding_dimensions,
        )
        store.init_index()
    else:
        raise ValueError(f"Unknown vector backend: {config.vector_backend!r}")

    logger.info("Initialized %s vector index", config.vector_backend)
    return Resources(embedder=embedder, store=store)


def init_resources(resources: Resources | None = None) -> Resources:
    """Install process-wide resources at startup (or install the given ones)."""
    global _resources
    with _lock:
        _resources = resources or build_resources()
        return _resources


def get_resources() -> Resources:
    """Return the shared resources, building them on first use.

    Concurrent first callers block on the lock; only one builds.
    """
    global _resources
    if _resources is None:
        with _lock:
            if _resources is None:
                _resources = build_resources()
    return _resources


def reset_resources() -> None:
    global _resources
    with _lock:
        _resources = None
