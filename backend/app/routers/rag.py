"""
RAG Admin Router

Provides an endpoint to check the state of the in-memory vector index.
"""

from fastapi import APIRouter
from pydantic import BaseModel

from app.core.dependencies import VectorIndexDep

router = APIRouter()


class RAGStatusResponse(BaseModel):
    document_count: int
    chunk_count: int
    dimension: int | None = None
    document_ids: list[str]
    embedding_provider: str
    embedding_model: str


@router.get("/status", response_model=RAGStatusResponse)
async def rag_status(index: VectorIndexDep):
    """Check the status of the vector index."""
    return RAGStatusResponse(
        **index.stats(),
        document_ids=index.document_ids(),
        embedding_provider=index.embedder.provider_name,
        embedding_model=index.embedder.model,
    )
