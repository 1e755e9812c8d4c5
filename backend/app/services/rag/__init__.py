"""
RAG (Retrieval-Augmented Generation) Pipeline

Grounds tutor responses in teacher-approved curriculum documents by:
1. Ingesting uploaded documents into an in-memory vector index
2. Retrieving the most similar chunks per document at query time
3. Injecting those chunks into a mode-specific, grade-adaptive prompt
"""

from app.services.rag.chunker import chunk_text
from app.services.rag.embedder import Embedder, create_embedder
from app.services.rag.ingest import ingest_document
from app.services.rag.orchestrator import RetrievalOrchestrator
from app.services.rag.vector_index import VectorIndex, cosine_similarity

__all__ = [
    "chunk_text",
    "Embedder",
    "create_embedder",
    "ingest_document",
    "RetrievalOrchestrator",
    "VectorIndex",
    "cosine_similarity",
]
