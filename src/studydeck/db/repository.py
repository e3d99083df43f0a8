"""Repository for documents, their chunks and chunk embeddings.

Vec tables are model-managed (ensure_vec_table); the repository handles
read + write against whichever table the caller names.
"""

from __future__ import annotations

import json
import sqlite3

from studydeck.db.models import Document, DocumentChunk, DocumentStatus
from studydeck.db.vectors import list_vec_tables

_DOCUMENT_COLUMNS = (
    "id, name, file_path, file_type, status, total_chunks, error_message, "
    "created_at, updated_at"
)


class Repository:
    """Data access layer for documents, chunks and vector rows.

    Wraps an open sqlite3.Connection; the connection is owned by the caller
    and must be closed after use.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        """Initialise with an open database connection.

        Args:
            conn: An open sqlite3.Connection with sqlite-vec loaded and schema
                initialised (see studydeck.db.schema.initialize).
        """
        self._conn = conn

    @property
    def conn(self) -> sqlite3.Connection:
        return self._conn

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    def add_document(self, document: Document) -> None:
        self._conn.execute(
            """
            INSERT INTO documents (id, name, file_path, file_type, status, total_chunks)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                document.id,
                document.name,
                document.file_path,
                document.file_type,
                DocumentStatus(document.status).value,
                document.total_chunks,
            ),
        )
        self._conn.commit()

    def get_document(self, document_id: str) -> Document | None:
        row = self._conn.execute(
            f"SELECT {_DOCUMENT_COLUMNS} FROM documents WHERE id = ?",
            (document_id,),
        ).fetchone()
        return _row_to_document(row) if row else None

    def list_documents(self) -> list[Document]:
        """Return all documents, newest first."""
        rows = self._conn.execute(
            f"SELECT {_DOCUMENT_COLUMNS} FROM documents ORDER BY created_at DESC, rowid DESC"
        ).fetchall()
        return [_row_to_document(r) for r in rows]

    def update_document_status(
        self,
        document_id: str,
        status: DocumentStatus,
        *,
        total_chunks: int | None = None,
        error_message: str | None = None,
    ) -> None:
        """Set *status* (and optionally chunk count / error) on a document."""
        self._conn.execute(
            """
            UPDATE documents
            SET status = ?,
                total_chunks = COALESCE(?, total_chunks),
                error_message = ?,
                updated_at = datetime('now')
            WHERE id = ?
            """,
            (DocumentStatus(status).value, total_chunks, error_message, document_id),
        )
        self._conn.commit()

    def delete_document(self, document_id: str) -> bool:
        """Delete a document, its vectors and (by cascade) its chunks.

        Returns:
            True if a document row was deleted.
        """
        self.delete_embeddings_by_document(document_id)
        cur = self._conn.execute("DELETE FROM documents WHERE id = ?", (document_id,))
        self._conn.commit()
        return cur.rowcount > 0

    # ------------------------------------------------------------------
    # Chunks
    # ------------------------------------------------------------------

    def add_chunk(self, chunk: DocumentChunk, *, commit: bool = True) -> int:
        """Insert a chunk row. Returns the new chunk id."""
        cur = self._conn.execute(
            """
            INSERT INTO document_chunks (document_id, chunk_index, content, page_number)
            VALUES (?, ?, ?, ?)
            """,
            (chunk.document_id, chunk.chunk_index, chunk.content, chunk.page_number),
        )
        if commit:
            self._conn.commit()
        return cur.lastrowid

    def get_chunk(self, chunk_id: int) -> DocumentChunk | None:
        row = self._conn.execute(
            """
            SELECT id, document_id, chunk_index, content, page_number, created_at
            FROM document_chunks WHERE id = ?
            """,
            (chunk_id,),
        ).fetchone()
        return _row_to_chunk(row) if row else None

    def list_chunks(self, document_id: str) -> list[DocumentChunk]:
        """Return the chunks of *document_id* in chunk_index order."""
        rows = self._conn.execute(
            """
            SELECT id, document_id, chunk_index, content, page_number, created_at
            FROM document_chunks WHERE document_id = ? ORDER BY chunk_index
            """,
            (document_id,),
        ).fetchall()
        return [_row_to_chunk(r) for r in rows]

    def count_chunks(self, document_id: str) -> int:
        return self._conn.execute(
            "SELECT COUNT(*) FROM document_chunks WHERE document_id = ?", (document_id,)
        ).fetchone()[0]

    def delete_chunks_by_document(self, document_id: str, *, commit: bool = True) -> None:
        """Delete chunk rows and their vectors for *document_id*."""
        self.delete_embeddings_by_document(document_id, commit=False)
        self._conn.execute(
            "DELETE FROM document_chunks WHERE document_id = ?", (document_id,)
        )
        if commit:
            self._conn.commit()

    # ------------------------------------------------------------------
    # Vec embeddings
    # ------------------------------------------------------------------

    def add_embedding(
        self, table: str, chunk_id: int, embedding: list[float], *, commit: bool = True
    ) -> None:
        """Insert an embedding into a vec table with rowid = chunk id."""
        self._conn.execute(
            f"INSERT INTO {table}(rowid, embedding) VALUES (?, ?)",
            (chunk_id, json.dumps(embedding)),
        )
        if commit:
            self._conn.commit()

    def search_vec(
        self, table: str, embedding: list[float], limit: int = 5
    ) -> list[tuple[DocumentChunk, str, float]]:
        """Nearest-neighbour search.

        Returns:
            ``(chunk, document_name, distance)`` tuples sorted by distance.
        """
        vec_rows = self._conn.execute(
            f"SELECT rowid, distance FROM {table} "
            "WHERE embedding MATCH ? AND k = ? ORDER BY distance",
            (json.dumps(embedding), limit),
        ).fetchall()

        results: list[tuple[DocumentChunk, str, float]] = []
        for vec_row in vec_rows:
            row = self._conn.execute(
                """
                SELECT c.id, c.document_id, c.chunk_index, c.content, c.page_number,
                       c.created_at, d.name AS document_name
                FROM document_chunks c JOIN documents d ON d.id = c.document_id
                WHERE c.id = ?
                """,
                (vec_row["rowid"],),
            ).fetchone()
            if row is not None:
                results.append((_row_to_chunk(row), row["document_name"], vec_row["distance"]))
        return results

    def delete_embeddings_by_document(self, document_id: str, *, commit: bool = True) -> int:
        """Delete the vectors of *document_id* from every vec table.

        Returns the total number of embedding rows deleted across all vec tables.
        """
        chunk_ids = [
            r[0]
            for r in self._conn.execute(
                "SELECT id FROM document_chunks WHERE document_id = ?", (document_id,)
            ).fetchall()
        ]
        if not chunk_ids:
            return 0

        total_deleted = 0
        placeholders = ",".join("?" * len(chunk_ids))
        for table in list_vec_tables(self._conn):
            cur = self._conn.execute(
                f"DELETE FROM [{table}] WHERE rowid IN ({placeholders})",  # noqa: S608
                chunk_ids,
            )
            total_deleted += cur.rowcount

        if commit:
            self._conn.commit()
        return total_deleted


# ------------------------------------------------------------------
# Row → model helpers
# ------------------------------------------------------------------

def _row_to_document(row: sqlite3.Row) -> Document:
    return Document(
        id=row["id"],
        name=row["name"],
        file_path=row["file_path"],
        file_type=row["file_type"],
        status=DocumentStatus(row["status"]),
        total_chunks=row["total_chunks"],
        error_message=row["error_message"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _row_to_chunk(row: sqlite3.Row) -> DocumentChunk:
    return DocumentChunk(
        id=row["id"],
        document_id=row["document_id"],
        chunk_index=row["chunk_index"],
        content=row["content"],
        page_number=row["page_number"],
        created_at=row["created_at"],
    )
