from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager

from app.core.config import get_settings
from app.core.exceptions import (
    DimensionMismatchError,
    DocumentExtractionError,
    EmbeddingProviderError,
    EmptyGenerationError,
    GenerationProviderError,
    InvalidConfigurationError,
    MalformedGenerationError,
    TutorError,
    UnknownModelError,
)
from app.routers import documents, models, rag, tutor
from app.services.llm.orchestrator import LLMOrchestrator
from app.services.rag.embedder import create_embedder
from app.services.rag.orchestrator import RetrievalOrchestrator
from app.services.rag.vector_index import VectorIndex


settings = get_settings()

# Typed core errors -> HTTP status codes
ERROR_STATUS_CODES: dict[type[TutorError], int] = {
    InvalidConfigurationError: status.HTTP_400_BAD_REQUEST,
    UnknownModelError: status.HTTP_400_BAD_REQUEST,
    DocumentExtractionError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    EmbeddingProviderError: status.HTTP_502_BAD_GATEWAY,
    GenerationProviderError: status.HTTP_502_BAD_GATEWAY,
    MalformedGenerationError: status.HTTP_502_BAD_GATEWAY,
    EmptyGenerationError: status.HTTP_502_BAD_GATEWAY,
    DimensionMismatchError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: one vector index and orchestrator per process
    embedder = create_embedder(settings)
    vector_index = VectorIndex(embedder)
    llm = LLMOrchestrator(
        default_model_id=settings.default_model_id,
        timeout_seconds=settings.provider_timeout_seconds,
        json_fix_retries=settings.quiz_json_fix_retries,
    )
    app.state.vector_index = vector_index
    app.state.retrieval_orchestrator = RetrievalOrchestrator(
        vector_index,
        llm,
        chat_top_k=settings.chat_top_k,
        quiz_top_k=settings.quiz_top_k,
    )
    print(
        f"[App] Tutor ready: embeddings={embedder.provider_name}/{embedder.model} "
        f"default_model={settings.default_model_id}"
    )
    yield
    # Shutdown: index content is in-memory only, nothing to flush


app = FastAPI(
    title="Curriculum Tutor API",
    description="AI study assistant grounded in teacher-approved curriculum documents",
    version="1.0.0",
    lifespan=lifespan,
)
# Avoid 307 redirects for trailing slash (e.g. /models/ -> /models) that can cause redirect loops behind nginx
app.router.redirect_slashes = False

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        settings.frontend_url,
        "http://localhost:5173",
        "http://localhost",
        "http://127.0.0.1",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(TutorError)
async def tutor_error_handler(request: Request, exc: TutorError):
    status_code = ERROR_STATUS_CODES.get(
        type(exc), status.HTTP_500_INTERNAL_SERVER_ERROR
    )
    print(f"[App] {type(exc).__name__} on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status_code,
        content={
            "error": type(exc).__name__,
            "detail": exc.message,
            "details": exc.details,
        },
    )


# Include routers
app.include_router(documents.router, prefix="/documents", tags=["Documents"])
app.include_router(tutor.router, prefix="/tutor", tags=["Tutor"])
app.include_router(models.router, prefix="/models", tags=["Models"])
app.include_router(rag.router, prefix="/rag", tags=["RAG"])


@app.get("/health")
async def health_check():
    return {"status": "healthy"}
