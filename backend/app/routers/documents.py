"""
Documents Router

Ingests uploaded curriculum documents into the vector index and removes
them again. Classroom ownership checks happen upstream of this service.
"""

from fastapi import APIRouter, File, HTTPException, Response, UploadFile, status

from app.core.config import get_settings
from app.core.dependencies import VectorIndexDep
from app.services.rag.ingest import ingest_document
from app.services.rag.models import IngestionResult

router = APIRouter()
settings = get_settings()


@router.post("/{document_id}", response_model=IngestionResult)
async def upload_document(
    document_id: str,
    index: VectorIndexDep,
    file: UploadFile = File(...),
):
    """Extract, chunk and embed a document, replacing any earlier upload."""
    data = await file.read()
    if len(data) > settings.max_upload_size:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File exceeds maximum size of {settings.max_upload_size} bytes",
        )
    if not data:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Uploaded file is empty",
        )

    return await ingest_document(
        index,
        document_id,
        data,
        content_type=file.content_type,
        chunk_size=settings.chunk_size,
        overlap=settings.chunk_overlap,
    )


@router.delete("/{document_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_document(document_id: str, index: VectorIndexDep):
    """Drop every chunk of a document. Deleting an unknown id succeeds."""
    await index.remove_document(document_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
