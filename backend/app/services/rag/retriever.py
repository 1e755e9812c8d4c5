"""
RAG Retriever Service

Fetches the chunks relevant to a query from each of a set of documents.

How retrieval works:
1. For each document id, the vector index embeds the query and returns
   that document's top-K chunks by cosine similarity.
2. Results are concatenated document by document, in the order the ids
   were given. There is no cross-document re-ranking, so a weak match in
   an earlier document precedes a strong match in a later one.
3. The chunk contents are joined with blank lines into one context block.
"""

from typing import Sequence

from app.services.rag.models import EmbeddedChunk
from app.services.rag.vector_index import VectorIndex

CONTEXT_SEPARATOR = "\n\n"


async def retrieve_chunks(
    index: VectorIndex,
    query: str,
    document_ids: Sequence[str],
    top_k: int = 3,
) -> list[EmbeddedChunk]:
    """
    Retrieve relevant chunks from every listed document.

    Args:
        index: The vector index holding the documents
        query: Natural language query to embed
        document_ids: Documents to search, in priority order
        top_k: Chunks to take from each document

    Returns:
        Chunks grouped by document, each group sorted by descending score.
        Unknown document ids contribute nothing.
    """
    chunks: list[EmbeddedChunk] = []
    for document_id in document_ids:
        chunks.extend(await index.similarity_search(document_id, query, top_k))

    print(
        f"[RAG] Retrieved {len(chunks)} chunks from "
        f"{len(document_ids)} document(s) for: {query[:80]}"
    )
    return chunks


def build_context(chunks: Sequence[EmbeddedChunk]) -> str:
    """Join chunk contents with blank lines, preserving order."""
    return CONTEXT_SEPARATOR.join(chunk.content for chunk in chunks)
