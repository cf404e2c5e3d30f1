"""Neo4j Vector Index store for the knowledge base."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Protocol

from neo4j.exceptions import DriverError, Neo4jError

from core.config import settings
from core.errors import VectorIndexError
from core.models import QueryMatch, VectorRecord

if TYPE_CHECKING:
    from neo4j import Driver

logger = logging.getLogger(__name__)

INDEX_NAME = "nomad_chunks_index"
NODE_LABEL = "KnowledgeChunk"
EMBEDDING_PROPERTY = "embedding"


class VectorIndex(Protocol):
    """Contract shared by every vector index backend."""

    def upsert(self, records: list[VectorRecord]) -> int: ...

    def query(self, vector: list[float], top_k: int) -> list[QueryMatch]: ...

    def count(self) -> int: ...

    def delete_all(self) -> int: ...


def match_from_attributes(chunk_id: str, score: float, attributes: dict) -> QueryMatch:
    """Build a QueryMatch from stored record attributes."""
    chunk_index = attributes.get("chunkIndex")
    return QueryMatch(
        chunk_id=chunk_id,
        score=float(score),
        text=attributes.get("text", ""),
        document_id=attributes.get("documentId", ""),
        chunk_index=int(chunk_index) if chunk_index is not None else None,
        filename=attributes.get("filename"),
    )


class VectorStore:
    """Neo4j-backed vector store with cosine similarity search."""

    def __init__(
        self,
        driver: Driver | None = None,
        uri: str | None = None,
        auth: tuple[str, str] | None = None,
        dimensions: int | None = None,
    ):
        if driver is None:
            from neo4j import GraphDatabase

            self._driver = GraphDatabase.driver(
                uri or settings.neo4j_uri,
                auth=auth or (settings.neo4j_user, settings.neo4j_password),
            )
        else:
            self._driver = driver
        self.dimensions = dimensions or settings.embedding_dimensions

    def close(self) -> None:
        self._driver.close()

    def init_index(self) -> None:
        """Create vector index in Neo4j if it doesn't exist."""
        try:
            with self._driver.session() as session:
                session.run(
                    f"""
                    CREATE VECTOR INDEX {INDEX_NAME} IF NOT EXISTS
                    FOR (n:{NODE_LABEL})
                    ON (n.{EMBEDDING_PROPERTY})
                    OPTIONS {{
                        indexConfig: {{
                            `vector.dimensions`: $dimensions,
                            `vector.similarity_function`: 'cosine'
                        }}
                    }}
                    """,
                    dimensions=self.dimensions,
                )
        except (Neo4jError, DriverError) as e:
            raise VectorIndexError(f"Failed to create vector index: {e}") from e
        logger.info("Vector index '%s' initialized", INDEX_NAME)

    def upsert(self, records: list[VectorRecord]) -> int:
        """Replace-by-id a batch of records in one statement. Returns count."""
        if not records:
            return 0

        rows = [
            {
                "id": record.id,
                "embedding": record.embedding,
                "text": record.text,
                "document_id": record.attributes.get("documentId", ""),
                "chunk_index": record.attributes.get("chunkIndex"),
                "attributes": json.dumps(record.attributes, default=str),
            }
            for record in records
        ]

        try:
            with self._driver.session() as session:
                session.run(
                    f"""
                    UNWIND $rows AS row
                    MERGE (c:{NODE_LABEL} {{id: row.id}})
                    SET c.text = row.text,
                        c.document_id = row.document_id,
                        c.chunk_index = row.chunk_index,
                        c.{EMBEDDING_PROPERTY} = row.embedding,
                        c.attributes = row.attributes
                    """,
                    rows=rows,
                )
        except (Neo4jError, DriverError) as e:
            logger.error("Upsert of %d records failed: %s", len(records), e)
            raise VectorIndexError(f"Vector upsert failed: {e}") from e

        logger.info("Upserted %d records to vector store", len(records))
        return len(records)

    def query(self, vector: list[float], top_k: int | None = None) -> list[QueryMatch]:
        """Return the top_k nearest records by cosine similarity, best first."""
        if top_k is None:
            top_k = settings.top_k

        try:
            with self._driver.session() as session:
                result = session.run(
                    f"""
                    CALL db.index.vector.queryNodes(
                        '{INDEX_NAME}', $top_k, $embedding
                    )
                    YIELD node, score
                    RETURN node.id AS id,
                           node.attributes AS attributes,
                           score
                    ORDER BY score DESC
                    """,
                    top_k=top_k,
                    embedding=vector,
                )
                matches = [
                    match_from_attributes(
                        record["id"] or "",
                        record["score"],
                        json.loads(record["attributes"] or "{}"),
                    )
                    for record in result
                ]
        except (Neo4jError, DriverError) as e:
            logger.error("Vector query failed: %s", e)
            raise VectorIndexError(f"Vector query failed: {e}") from e

        return matches

    def delete_all(self) -> int:
        """Delete all chunk nodes. Returns count deleted."""
        try:
            with self._driver.session() as session:
                result = session.run(
                    f"""
                    MATCH (c:{NODE_LABEL})
                    WITH collect(c) AS nodes, count(c) AS total
                    FOREACH (n IN nodes | DETACH DELETE n)
                    RETURN total
                    """
                )
                record = result.single()
                count = record["total"] if record else 0
        except (Neo4jError, DriverError) as e:
            raise VectorIndexError(f"Failed to clear vector store: {e}") from e

        logger.info("Deleted %d chunks from vector store", count)
        return count

    def count(self) -> int:
        """Return total number of chunks."""
        try:
            with self._driver.session() as session:
                result = session.run(
                    f"MATCH (c:{NODE_LABEL}) RETURN count(c) AS total"
                )
                record = result.single()
        except (Neo4jError, DriverError) as e:
            raise VectorIndexError(f"Failed to count chunks: {e}") from e
        return record["total"] if record else 0
