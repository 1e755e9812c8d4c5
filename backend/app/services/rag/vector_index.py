"""
In-Memory Vector Index

Holds one DocumentVectorSet per document id and answers top-K queries by
brute-force cosine similarity over every stored chunk of that document.

How it works:
1. add_document() embeds all chunks in one batched call, then builds a new
   DocumentVectorSet and swaps it into the mapping under a write lock.
2. similarity_search() embeds the query and takes a reference to the
   current set; a concurrent re-ingestion replaces the reference, never
   the contents, so a query sees the old set or the new one, never a mix.
3. Scores are sorted descending with a stable sort, so equal scores keep
   chunkIndex order.

Cost is O(n*d) per query over n chunks of dimension d. Corpora are one
classroom's documents, so no approximate index is used.
"""

import asyncio
from typing import Sequence

import numpy as np

from app.core.exceptions import DimensionMismatchError, InvalidConfigurationError
from app.services.rag.embedder import Embedder
from app.services.rag.models import Chunk, DocumentVectorSet, EmbeddedChunk


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Cosine similarity of two vectors.

    A zero vector on either side yields 0.0 instead of NaN.
    """
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    if a.shape != b.shape:
        raise DimensionMismatchError(a.shape[0], b.shape[0])
    denominator = np.linalg.norm(a) * np.linalg.norm(b)
    if denominator == 0:
        return 0.0
    return float(np.clip(np.dot(a, b) / denominator, -1.0, 1.0))


def _cosine_scores(matrix: np.ndarray, query: np.ndarray) -> np.ndarray:
    """Cosine similarity of each matrix row against the query; zero rows score 0."""
    denominators = np.linalg.norm(matrix, axis=1) * np.linalg.norm(query)
    dots = matrix @ query
    scores = np.divide(
        dots,
        denominators,
        out=np.zeros_like(dots),
        where=denominators != 0,
    )
    return np.clip(scores, -1.0, 1.0)


class VectorIndex:
    """Per-document store of embedded chunks with linear-scan search."""

    def __init__(self, embedder: Embedder):
        self.embedder = embedder
        self._documents: dict[str, DocumentVectorSet] = {}
        self._dimension: int | None = None
        self._write_lock = asyncio.Lock()

    @property
    def dimension(self) -> int | None:
        """Vector length shared by every stored chunk, or None when empty."""
        return self._dimension

    async def add_document(self, document_id: str, chunks: Sequence[Chunk]) -> None:
        """
        Embed every chunk and store the set under document_id.

        Any prior set for the id is replaced in one step. If embedding fails
        the prior set stays in place untouched.

        Raises:
            EmbeddingProviderError: If the embedding call fails
            DimensionMismatchError: If vectors disagree with each other or
                with vectors already in the index
        """
        ordered = sorted(chunks, key=lambda c: c.chunkIndex)
        vectors = await self.embedder.embed_batch([c.content for c in ordered])

        embedded = tuple(
            EmbeddedChunk(
                id=f"{document_id}_{chunk.chunkIndex}",
                content=chunk.content,
                embedding=tuple(vector),
                metadata={
                    "document_id": document_id,
                    "chunk_index": chunk.chunkIndex,
                    "offset": chunk.offset,
                    "page": chunk.page,
                },
            )
            for chunk, vector in zip(ordered, vectors)
        )

        dimension = len(vectors[0]) if vectors else 0
        if embedded:
            matrix = np.array([c.embedding for c in embedded], dtype=np.float64)
        else:
            matrix = np.zeros((0, 0), dtype=np.float64)
        vector_set = DocumentVectorSet(
            document_id=document_id,
            chunks=embedded,
            matrix=matrix,
            dimension=dimension,
        )

        async with self._write_lock:
            if embedded:
                self._check_dimension(dimension, exclude=document_id)
            self._documents[document_id] = vector_set
            self._refresh_dimension()

        print(
            f"[VectorIndex] Stored {len(embedded)} chunks for document "
            f"{document_id} (dim={dimension})"
        )

    async def similarity_search_with_scores(
        self,
        document_id: str,
        query: str,
        top_k: int = 3,
    ) -> list[tuple[EmbeddedChunk, float]]:
        """
        Return up to top_k (chunk, score) pairs, highest score first.

        An unknown document id yields an empty list.
        """
        if top_k < 1:
            raise InvalidConfigurationError("top_k must be at least 1", {"top_k": top_k})

        vector_set = self._documents.get(document_id)
        if vector_set is None or not vector_set.chunks:
            return []

        query_vector = np.asarray(await self.embedder.embed(query), dtype=np.float64)
        if query_vector.shape[0] != vector_set.dimension:
            raise DimensionMismatchError(
                vector_set.dimension,
                query_vector.shape[0],
                {"document_id": document_id},
            )

        scores = _cosine_scores(vector_set.matrix, query_vector)
        order = np.argsort(-scores, kind="stable")[:top_k]
        return [(vector_set.chunks[i], float(scores[i])) for i in order]

    async def similarity_search(
        self,
        document_id: str,
        query: str,
        top_k: int = 3,
    ) -> list[EmbeddedChunk]:
        """Return up to top_k chunks of document_id most similar to query."""
        results = await self.similarity_search_with_scores(document_id, query, top_k)
        return [chunk for chunk, _ in results]

    async def remove_document(self, document_id: str) -> None:
        """Drop every chunk of document_id. Unknown ids are a no-op."""
        async with self._write_lock:
            removed = self._documents.pop(document_id, None)
            self._refresh_dimension()
        if removed is not None:
            print(f"[VectorIndex] Removed document {document_id}")

    def has_document(self, document_id: str) -> bool:
        return document_id in self._documents

    def document_ids(self) -> list[str]:
        return list(self._documents)

    def get_chunks(self, document_id: str) -> tuple[EmbeddedChunk, ...]:
        vector_set = self._documents.get(document_id)
        return vector_set.chunks if vector_set else ()

    def stats(self) -> dict:
        """Return index status info for the /rag/status endpoint."""
        documents = list(self._documents.values())
        return {
            "document_count": len(documents),
            "chunk_count": sum(len(d.chunks) for d in documents),
            "dimension": self._dimension,
        }

    def _check_dimension(self, dimension: int, exclude: str) -> None:
        for other_id, other in self._documents.items():
            if other_id != exclude and other.chunks and other.dimension != dimension:
                raise DimensionMismatchError(
                    other.dimension, dimension, {"document_id": exclude}
                )

    def _refresh_dimension(self) -> None:
        dimensions = {d.dimension for d in self._documents.values() if d.chunks}
        self._dimension = dimensions.pop() if dimensions else None
