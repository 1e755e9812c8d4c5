"""
Retrieval data types.

Chunk is what the chunker produces from one document's flattened text.
EmbeddedChunk is a Chunk after one embedding call, as stored in the index.
"""

from dataclasses import dataclass, field
from typing import Any

import numpy as np
from pydantic import BaseModel, ConfigDict


class Chunk(BaseModel):
    model_config = ConfigDict(frozen=True)

    content: str
    chunkIndex: int
    offset: int = 0  # Start position in the normalized text
    page: int | None = None


@dataclass(frozen=True)
class EmbeddedChunk:
    id: str
    content: str
    embedding: tuple[float, ...]
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class DocumentVectorSet:
    """All embedded chunks of one document, in chunkIndex order.

    The matrix holds one row per chunk so a query is scored in a single
    matrix-vector product. Instances are never mutated; re-ingestion swaps
    in a new one.
    """

    document_id: str
    chunks: tuple[EmbeddedChunk, ...]
    matrix: np.ndarray
    dimension: int


class IngestionResult(BaseModel):
    document_id: str
    chunk_count: int
    character_count: int
