"""Unit tests for vector index backends (mock Neo4j driver, in-memory store)."""

import json
from unittest.mock import MagicMock, patch

import pytest
from neo4j.exceptions import ServiceUnavailable

from core.errors import VectorIndexError
from core.models import VectorRecord
from storage.memory_store import InMemoryVectorStore
from storage.vector_store import INDEX_NAME, NODE_LABEL, VectorStore


def _record(record_id, embedding, text="chunk text", document_id="doc-1", index=0):
    return VectorRecord(
        id=record_id,
        embedding=embedding,
        attributes={
            "documentId": document_id,
            "chunkIndex": index,
            "totalChunks": 1,
            "text": text,
            "filename": "source.txt",
        },
    )


@pytest.fixture
def mock_driver():
    driver = MagicMock()
    session = MagicMock()
    driver.session.return_value.__enter__ = MagicMock(return_value=session)
    driver.session.return_value.__exit__ = MagicMock(return_value=False)
    return driver, session


@pytest.fixture
def store(mock_driver):
    driver, _ = mock_driver
    return VectorStore(driver=driver)


class TestVectorStoreInit:
    def test_init_index(self, store, mock_driver):
        _, session = mock_driver
        store.init_index()
        session.run.assert_called_once()
        query = session.run.call_args[0][0]
        assert "CREATE VECTOR INDEX" in query
        assert INDEX_NAME in query
        assert NODE_LABEL in query

    def test_init_index_wraps_driver_errors(self, store, mock_driver):
        _, session = mock_driver
        session.run.side_effect = ServiceUnavailable("neo4j down")

        with pytest.raises(VectorIndexError):
            store.init_index()

    def test_custom_driver(self):
        driver = MagicMock()
        vs = VectorStore(driver=driver)
        assert vs._driver is driver


class TestUpsert:
    def test_upsert_empty_list(self, store, mock_driver):
        _, session = mock_driver
        assert store.upsert([]) == 0
        session.run.assert_not_called()

    def test_upsert_batch_in_one_statement(self, store, mock_driver):
        _, session = mock_driver
        records = [_record("doc-1-chunk-0", [0.1, 0.2]), _record("doc-1-chunk-1", [0.3, 0.4], index=1)]

        assert store.upsert(records) == 2

        session.run.assert_called_once()
        query = session.run.call_args[0][0]
        assert "UNWIND $rows" in query
        assert "MERGE" in query
        rows = session.run.call_args[1]["rows"]
        assert [row["id"] for row in rows] == ["doc-1-chunk-0", "doc-1-chunk-1"]
        assert rows[1]["chunk_index"] == 1
        assert rows[0]["text"] == "chunk text"
        assert json.loads(rows[0]["attributes"])["filename"] == "source.txt"

    def test_upsert_wraps_driver_errors(self, store, mock_driver):
        _, session = mock_driver
        session.run.side_effect = ServiceUnavailable("neo4j down")

        with pytest.raises(VectorIndexError, match="upsert failed"):
            store.upsert([_record("c1", [0.1])])


class TestQuery:
    def test_query_maps_records_to_matches(self, store, mock_driver):
        _, session = mock_driver
        attributes = json.dumps(
            {"documentId": "doc-1", "chunkIndex": 2, "text": "Paris.", "filename": "geo.txt"}
        )
        session.run.return_value = [
            {"id": "doc-1-chunk-2", "attributes": attributes, "score": 0.91},
        ]

        matches = store.query([0.1, 0.2], top_k=3)

        assert len(matches) == 1
        match = matches[0]
        assert match.chunk_id == "doc-1-chunk-2"
        assert match.score == pytest.approx(0.91)
        assert match.text == "Paris."
        assert match.document_id == "doc-1"
        assert match.chunk_index == 2
        assert match.filename == "geo.txt"
        assert session.run.call_args[1]["top_k"] == 3

    def test_query_empty_index(self, store, mock_driver):
        _, session = mock_driver
        session.run.return_value = []
        assert store.query([0.1], top_k=3) == []

    def test_query_wraps_driver_errors(self, store, mock_driver):
        _, session = mock_driver
        session.run.side_effect = ServiceUnavailable("neo4j down")

        with pytest.raises(VectorIndexError):
            store.query([0.1], top_k=3)


class TestMaintenance:
    def test_count(self, store, mock_driver):
        _, session = mock_driver
        session.run.return_value.single.return_value = {"total": 7}
        assert store.count() == 7

    def test_count_no_record(self, store, mock_driver):
        _, session = mock_driver
        session.run.return_value.single.return_value = None
        assert store.count() == 0

    def test_delete_all(self, store, mock_driver):
        _, session = mock_driver
        session.run.return_value.single.return_value = {"total": 4}
        assert store.delete_all() == 4

    def test_close(self, store, mock_driver):
        driver, _ = mock_driver
        store.close()
        driver.close.assert_called_once()

    def test_count_wraps_driver_errors(self, store, mock_driver):
        _, session = mock_driver
        session.run.side_effect = ServiceUnavailable("neo4j down")

        with pytest.raises(VectorIndexError):
            store.count()


class TestInMemoryVectorStore:
    def test_query_orders_by_similarity(self):
        mem = InMemoryVectorStore()
        mem.upsert(
            [
                _record("far", [0.0, 1.0], text="far"),
                _record("near", [1.0, 0.1], text="near"),
                _record("same", [1.0, 0.0], text="same"),
            ]
        )

        matches = mem.query([1.0, 0.0], top_k=2)

        assert [m.chunk_id for m in matches] == ["same", "near"]
        assert matches[0].score == pytest.approx(1.0)
        assert 0.5 < matches[1].score < 1.0

    def test_scores_are_in_unit_interval(self):
        mem = InMemoryVectorStore()
        mem.upsert([_record("opposite", [-1.0, 0.0])])

        [match] = mem.query([1.0, 0.0], top_k=1)

        assert match.score == pytest.approx(0.0)

    def test_upsert_replaces_by_id(self):
        mem = InMemoryVectorStore()
        mem.upsert([_record("c1", [1.0, 0.0], text="old")])
        mem.upsert([_record("c1", [1.0, 0.0], text="new")])

        assert mem.count() == 1
        assert mem.query([1.0, 0.0], top_k=1)[0].text == "new"

    def test_empty_store_returns_no_matches(self):
        assert InMemoryVectorStore().query([1.0, 0.0], top_k=3) == []

    def test_dimension_mismatch_raises(self):
        mem = InMemoryVectorStore()
        mem.upsert([_record("c1", [1.0, 0.0, 0.0])])

        with pytest.raises(VectorIndexError):
            mem.query([1.0, 0.0], top_k=1)

    def test_record_without_embedding_rejected(self):
        with pytest.raises(VectorIndexError):
            InMemoryVectorStore().upsert([_record("c1", [])])

    def test_delete_all(self):
        mem = InMemoryVectorStore()
        mem.upsert([_record("c1", [1.0]), _record("c2", [0.5])])

        assert mem.delete_all() == 2
        assert mem.count() == 0


class TestConnectionSettings:
    def test_explicit_connection_settings(self):
        with patch("neo4j.GraphDatabase.driver") as mock_driver_factory:
            vs = VectorStore(uri="bolt://kb:7687", auth=("reader", "secret"), dimensions=768)

        mock_driver_factory.assert_called_once_with("bolt://kb:7687", auth=("reader", "secret"))
        assert vs.dimensions == 768

    def test_index_created_with_configured_dimensions(self, mock_driver):
        driver, session = mock_driver
        VectorStore(driver=driver, dimensions=768).init_index()

        assert session.run.call_args[1]["dimensions"] == 768
