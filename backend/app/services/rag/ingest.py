"""
Curriculum Document Ingestion

Turns an uploaded curriculum document into searchable chunks.

How it works:
1. EXTRACT – PDF bytes are read with PyMuPDF (fast, no system deps);
             anything else is decoded as UTF-8 text
2. SPLIT   – chunk_text() cuts the flattened text into overlapping
             fixed-size windows (1000 chars, 200 overlap by default)
3. EMBED   – every chunk is embedded in one batched call
4. STORE   – the VectorIndex swaps the new chunk set in under the
             document id, replacing any earlier upload of that document
"""

import pymupdf

from app.core.exceptions import DocumentExtractionError
from app.services.rag.chunker import chunk_text
from app.services.rag.models import IngestionResult
from app.services.rag.vector_index import VectorIndex

PDF_MAGIC = b"%PDF"


def is_pdf(data: bytes, content_type: str | None = None) -> bool:
    return content_type == "application/pdf" or data.startswith(PDF_MAGIC)


def extract_pdf_text(data: bytes) -> str:
    """Extract the text of every page, joined by newlines."""
    try:
        with pymupdf.open(stream=data, filetype="pdf") as document:
            pages = [page.get_text() for page in document]
    except Exception as e:
        raise DocumentExtractionError(
            f"Failed to extract text from PDF: {e}",
            {"size": len(data)},
        ) from e
    print(f"[Ingest] Extracted {len(pages)} page(s) from PDF")
    return "\n".join(pages)


def extract_text(data: bytes, content_type: str | None = None) -> str:
    """
    Turn raw document bytes into plain text.

    Raises:
        DocumentExtractionError: If the PDF is corrupt or the text is not UTF-8
    """
    if is_pdf(data, content_type):
        return extract_pdf_text(data)
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise DocumentExtractionError(
            "Document is neither a PDF nor UTF-8 text",
            {"content_type": content_type},
        ) from e


async def ingest_document(
    index: VectorIndex,
    document_id: str,
    data: bytes,
    content_type: str | None = None,
    chunk_size: int = 1000,
    overlap: int = 200,
) -> IngestionResult:
    """
    Extract, chunk, embed and store one document.

    Args:
        index: Target vector index
        document_id: Identifier the chunks are stored under
        data: Raw uploaded bytes
        content_type: MIME type reported by the upload, if any
        chunk_size: Chunk window length in characters
        overlap: Characters shared by consecutive chunks

    Returns:
        IngestionResult with the number of chunks stored
    """
    text = extract_text(data, content_type)
    chunks = chunk_text(text, chunk_size=chunk_size, overlap=overlap)
    print(
        f"[Ingest] Document {document_id}: {len(text)} chars -> "
        f"{len(chunks)} chunks (size={chunk_size}, overlap={overlap})"
    )

    await index.add_document(document_id, chunks)

    return IngestionResult(
        document_id=document_id,
        chunk_count=len(chunks),
        character_count=len(text),
    )
