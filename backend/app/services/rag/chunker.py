"""
Fixed-size character chunker.

Slides a window of chunk_size characters over whitespace-normalized text,
advancing by chunk_size - overlap each step. Windows are raw character
offsets with no sentence awareness, so a chunk may end mid-word.
"""

import re

from app.core.exceptions import InvalidConfigurationError
from app.services.rag.models import Chunk

WHITESPACE_PATTERN = re.compile(r"\s+")


def normalize_text(text: str) -> str:
    """Collapse whitespace runs to single spaces and trim."""
    return WHITESPACE_PATTERN.sub(" ", text).strip()


def chunk_text(
    text: str,
    chunk_size: int = 1000,
    overlap: int = 200,
    page: int | None = None,
) -> list[Chunk]:
    """
    Split text into overlapping fixed-size chunks.

    A window that would start on a separator space starts one character
    later, and chunking stops once a window reaches the end of the text.
    For "A B C D E" with chunk_size=5, overlap=2 this yields
    ["A B C", "C D E"].

    Args:
        text: Extracted document text
        chunk_size: Window length in characters
        overlap: Characters shared by consecutive windows
        page: Optional page number recorded on every chunk

    Returns:
        Chunks with chunkIndex starting at 0

    Raises:
        InvalidConfigurationError: If the window would not advance
    """
    if chunk_size <= 0:
        raise InvalidConfigurationError(
            "chunk_size must be positive", {"chunk_size": chunk_size}
        )
    if overlap < 0 or overlap >= chunk_size:
        raise InvalidConfigurationError(
            "overlap must satisfy 0 <= overlap < chunk_size",
            {"chunk_size": chunk_size, "overlap": overlap},
        )

    clean = normalize_text(text)
    step = chunk_size - overlap
    chunks: list[Chunk] = []
    start = 0

    # Windows sit on a fixed grid of multiples of step; a window that lands on
    # a space is nudged one character right without moving the grid.
    while start < len(clean):
        window_start = start + 1 if clean[start] == " " else start
        end = window_start + chunk_size
        content = clean[window_start:end].strip()
        if content:
            chunks.append(
                Chunk(
                    content=content,
                    chunkIndex=len(chunks),
                    offset=window_start,
                    page=page,
                )
            )
        if end >= len(clean):
            break
        start += step

    return chunks
