"""
FastAPI dependencies for the process-wide tutor components.

The components are built once in the app lifespan (app.main) and stored
on app.state; routers receive them through these functions, and tests
swap them with app.dependency_overrides.
"""

from typing import Annotated

from fastapi import Depends, Request

from app.services.rag.orchestrator import RetrievalOrchestrator
from app.services.rag.vector_index import VectorIndex


def get_vector_index(request: Request) -> VectorIndex:
    return request.app.state.vector_index


def get_retrieval_orchestrator(request: Request) -> RetrievalOrchestrator:
    return request.app.state.retrieval_orchestrator


VectorIndexDep = Annotated[VectorIndex, Depends(get_vector_index)]
OrchestratorDep = Annotated[RetrievalOrchestrator, Depends(get_retrieval_orchestrator)]
