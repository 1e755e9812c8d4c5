from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # Providers
    openai_api_key: str = ""
    gemini_api_key: str = ""
    default_model_id: str = "gpt-4o"  # Must be a key of MODEL_REGISTRY

    # Embeddings
    embedding_provider: str = "openai"  # "openai" or "gemini"
    openai_embedding_model: str = "text-embedding-3-small"
    gemini_embedding_model: str = "text-embedding-004"
    embedding_batch_size: int = 64

    # Chunking
    chunk_size: int = 1000
    chunk_overlap: int = 200

    # Retrieval depth per document
    chat_top_k: int = 3
    quiz_top_k: int = 5

    # External calls
    provider_timeout_seconds: float = 30.0
    embedding_max_attempts: int = 1  # 1 = no retry
    embedding_retry_initial_wait: float = 1.0
    embedding_retry_max_wait: float = 10.0
    quiz_json_fix_retries: int = 1  # 0 disables the JSON fix-up re-ask

    # URLs
    frontend_url: str = "http://localhost:5173"

    # Upload settings
    max_upload_size: int = 10 * 1024 * 1024  # 10MB

    class Config:
        env_file = ".env"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    return Settings()
