"""Tests for the document / chunk / vector Repository."""

from __future__ import annotations

import pytest

from studydeck.db.models import Document, DocumentChunk, DocumentStatus
from studydeck.db.repository import Repository
from studydeck.db.vectors import ensure_vec_table


@pytest.fixture
def repo(tmp_db):
    return Repository(tmp_db)


@pytest.fixture
def table(tmp_db):
    return ensure_vec_table(tmp_db, "test_model", 3)


def _doc(doc_id: str = "d1", name: str = "notes.txt") -> Document:
    return Document(id=doc_id, name=name, status=DocumentStatus.PROCESSING)


def _chunk(document_id: str = "d1", index: int = 0, content: str = "text") -> DocumentChunk:
    return DocumentChunk(document_id=document_id, chunk_index=index, content=content)


# ------------------------------------------------------------------
# Documents
# ------------------------------------------------------------------


def test_add_and_get_document(repo):
    repo.add_document(_doc())
    doc = repo.get_document("d1")
    assert doc.name == "notes.txt"
    assert doc.status == DocumentStatus.PROCESSING
    assert doc.total_chunks == 0
    assert doc.created_at is not None


def test_get_missing_document(repo):
    assert repo.get_document("nope") is None


def test_list_documents_newest_first(repo):
    repo.add_document(_doc("d1", "first"))
    repo.add_document(_doc("d2", "second"))
    assert [d.id for d in repo.list_documents()] == ["d2", "d1"]


def test_update_document_status(repo):
    repo.add_document(_doc())
    repo.update_document_status("d1", DocumentStatus.READY, total_chunks=4)
    doc = repo.get_document("d1")
    assert doc.status == DocumentStatus.READY
    assert doc.total_chunks == 4

    repo.update_document_status("d1", DocumentStatus.ERROR, error_message="boom")
    doc = repo.get_document("d1")
    assert doc.status == DocumentStatus.ERROR
    assert doc.total_chunks == 4
    assert doc.error_message == "boom"


def test_delete_document_cascades(repo, table, tmp_db):
    repo.add_document(_doc())
    chunk_id = repo.add_chunk(_chunk())
    repo.add_embedding(table, chunk_id, [1.0, 0.0, 0.0])

    assert repo.delete_document("d1") is True
    assert repo.count_chunks("d1") == 0
    assert tmp_db.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0] == 0


def test_delete_missing_document(repo):
    assert repo.delete_document("nope") is False


# ------------------------------------------------------------------
# Chunks
# ------------------------------------------------------------------


def test_add_and_list_chunks(repo):
    repo.add_document(_doc())
    repo.add_chunk(_chunk(index=1, content="second"))
    first_id = repo.add_chunk(_chunk(index=0, content="first"))

    chunks = repo.list_chunks("d1")
    assert [c.content for c in chunks] == ["first", "second"]
    assert repo.get_chunk(first_id).chunk_index == 0
    assert repo.count_chunks("d1") == 2


def test_get_missing_chunk(repo):
    assert repo.get_chunk(999) is None


def test_delete_chunks_by_document(repo, table, tmp_db):
    repo.add_document(_doc())
    chunk_id = repo.add_chunk(_chunk())
    repo.add_embedding(table, chunk_id, [0.0, 1.0, 0.0])

    repo.delete_chunks_by_document("d1")
    assert repo.count_chunks("d1") == 0
    assert repo.get_document("d1") is not None
    assert tmp_db.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0] == 0


# ------------------------------------------------------------------
# Vectors
# ------------------------------------------------------------------


def test_search_vec_orders_by_distance(repo, table):
    repo.add_document(_doc())
    near = repo.add_chunk(_chunk(index=0, content="near"))
    far = repo.add_chunk(_chunk(index=1, content="far"))
    repo.add_embedding(table, near, [1.0, 0.1, 0.0])
    repo.add_embedding(table, far, [0.0, 1.0, 0.0])

    rows = repo.search_vec(table, [1.0, 0.0, 0.0], limit=5)
    assert [chunk.content for chunk, _, _ in rows] == ["near", "far"]
    assert rows[0][1] == "notes.txt"
    assert rows[0][2] < rows[1][2]


def test_search_vec_respects_limit(repo, table):
    repo.add_document(_doc())
    for i in range(4):
        chunk_id = repo.add_chunk(_chunk(index=i, content=f"c{i}"))
        repo.add_embedding(table, chunk_id, [1.0, float(i), 0.0])
    assert len(repo.search_vec(table, [1.0, 0.0, 0.0], limit=2)) == 2


def test_delete_embeddings_by_document_counts_rows(repo, table, tmp_db):
    other = ensure_vec_table(tmp_db, "other_model", 3)
    repo.add_document(_doc())
    chunk_id = repo.add_chunk(_chunk())
    repo.add_embedding(table, chunk_id, [1.0, 0.0, 0.0])
    repo.add_embedding(other, chunk_id, [0.0, 0.0, 1.0])

    assert repo.delete_embeddings_by_document("d1") == 2
    assert repo.delete_embeddings_by_document("unknown") == 0


def test_search_vec_passes_limit_as_knn_k(repo, table, tmp_db):
    repo.add_document(_doc())
    for i in range(3):
        chunk_id = repo.add_chunk(_chunk(index=i, content=f"c{i}"))
        repo.add_embedding(table, chunk_id, [1.0, float(i), 0.0])

    statements: list[str] = []
    tmp_db.set_trace_callback(statements.append)
    try:
        rows = repo.search_vec(table, [1.0, 0.0, 0.0], limit=2)
    finally:
        tmp_db.set_trace_callback(None)

    assert [chunk.content for chunk, _, _ in rows] == ["c0", "c1"]
    knn = [s for s in statements if "MATCH" in s]
    assert len(knn) == 1
    assert "AND k =" in knn[0]
    assert "LIMIT" not in knn[0]
