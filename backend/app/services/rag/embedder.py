"""
Embedding Providers

Maps text to fixed-length float vectors through an external embedding model.

The abstract Embedder owns everything provider-independent:
- batching (embedding_batch_size texts per request)
- a bounded per-call timeout
- an optional bounded retry with exponential backoff (tenacity)
- validation of the provider's output at the boundary

Concrete providers only implement _embed_raw().
"""

import asyncio
import math
from abc import ABC, abstractmethod
from numbers import Real
from typing import Any, Sequence

from google import genai
from langchain_openai import OpenAIEmbeddings
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from app.core.config import Settings
from app.core.exceptions import DimensionMismatchError, EmbeddingProviderError


class _TransientEmbeddingError(Exception):
    """Internal marker for provider failures that may be retried."""


class Embedder(ABC):
    """Abstract base class for embedding providers."""

    provider_name: str = "base"

    def __init__(
        self,
        model: str,
        timeout_seconds: float = 30.0,
        max_attempts: int = 1,
        retry_initial_wait: float = 1.0,
        retry_max_wait: float = 10.0,
        batch_size: int = 64,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        self.model = model
        self.timeout_seconds = timeout_seconds
        self.max_attempts = max_attempts
        self.retry_initial_wait = retry_initial_wait
        self.retry_max_wait = retry_max_wait
        self.batch_size = batch_size

    @abstractmethod
    async def _embed_raw(self, texts: list[str]) -> Any:
        """
        Call the provider for a batch of texts.

        Returns:
            Whatever the provider returned; validated by the caller
        """
        ...

    async def embed(self, text: str) -> list[float]:
        """Embed a single text."""
        vectors = await self.embed_batch([text])
        return vectors[0]

    async def embed_batch(self, texts: Sequence[str]) -> list[list[float]]:
        """
        Embed many texts, preserving input order.

        Raises:
            EmbeddingProviderError: On provider failure, timeout or malformed output
            DimensionMismatchError: If vectors in the result disagree on length
        """
        texts = list(texts)
        if not texts:
            return []

        batches = [
            texts[i : i + self.batch_size]
            for i in range(0, len(texts), self.batch_size)
        ]
        tasks = [asyncio.ensure_future(self._embed_with_retry(b)) for b in batches]
        try:
            results = await asyncio.gather(*tasks)
        except Exception:
            # One failed batch fails the call; stop the others from calling out
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
        vectors = [vector for batch in results for vector in batch]

        dimension = len(vectors[0])
        for vector in vectors:
            if len(vector) != dimension:
                raise DimensionMismatchError(
                    dimension, len(vector), {"model": self.model}
                )
        return vectors

    async def _embed_with_retry(self, texts: list[str]) -> list[list[float]]:
        retrying = AsyncRetrying(
            retry=retry_if_exception_type(_TransientEmbeddingError),
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential_jitter(
                initial=self.retry_initial_wait, max=self.retry_max_wait
            ),
            before_sleep=lambda state: print(
                f"[Embedder] Retry {state.attempt_number}/{self.max_attempts} "
                f"after: {state.outcome.exception()}"
            ),
            reraise=True,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    raw = await self._call_provider(texts)
        except _TransientEmbeddingError as e:
            raise EmbeddingProviderError(
                f"Failed to generate embedding: {e}",
                {"provider": self.provider_name, "model": self.model},
            ) from e

        return self._validate(raw, expected_count=len(texts))

    async def _call_provider(self, texts: list[str]) -> Any:
        try:
            return await asyncio.wait_for(
                self._embed_raw(texts), timeout=self.timeout_seconds
            )
        except asyncio.TimeoutError as e:
            raise _TransientEmbeddingError(
                f"timed out after {self.timeout_seconds}s"
            ) from e
        except Exception as e:
            raise _TransientEmbeddingError(str(e) or type(e).__name__) from e

    def _validate(self, raw: Any, expected_count: int) -> list[list[float]]:
        """Convert provider output into a list of finite float vectors."""
        if not isinstance(raw, Sequence) or isinstance(raw, (str, bytes)):
            raise EmbeddingProviderError(
                "Embedding response is not a list of vectors",
                {"provider": self.provider_name, "type": type(raw).__name__},
            )
        if len(raw) != expected_count:
            raise EmbeddingProviderError(
                "Embedding response has the wrong number of vectors",
                {"expected": expected_count, "actual": len(raw)},
            )

        vectors = []
        for position, vector in enumerate(raw):
            if (
                not isinstance(vector, Sequence)
                or isinstance(vector, (str, bytes))
                or len(vector) == 0
            ):
                raise EmbeddingProviderError(
                    "Embedding vector is empty or not a sequence",
                    {"position": position},
                )
            values = []
            for value in vector:
                if isinstance(value, bool) or not isinstance(value, Real):
                    raise EmbeddingProviderError(
                        "Embedding vector contains non-numeric values",
                        {"position": position, "value": repr(value)[:50]},
                    )
                value = float(value)
                if not math.isfinite(value):
                    raise EmbeddingProviderError(
                        "Embedding vector contains non-finite values",
                        {"position": position},
                    )
                values.append(value)
            vectors.append(values)
        return vectors


class OpenAIEmbedder(Embedder):
    """Embeddings via OpenAI text-embedding-3-small (1536 dims by default)."""

    provider_name = "openai"

    def __init__(self, api_key: str, model: str = "text-embedding-3-small", **kwargs):
        super().__init__(model=model, **kwargs)
        self.api_key = api_key
        self._client: OpenAIEmbeddings | None = None

    @property
    def client(self) -> OpenAIEmbeddings:
        # Created on first use so the app can start without a key configured
        if self._client is None:
            # SDK retries are disabled; retry policy is ours and explicit
            self._client = OpenAIEmbeddings(
                model=self.model,
                api_key=self.api_key,
                max_retries=0,
                request_timeout=self.timeout_seconds,
            )
        return self._client

    async def _embed_raw(self, texts: list[str]) -> Any:
        return await self.client.aembed_documents(texts)


class GeminiEmbedder(Embedder):
    """Embeddings via Google Gemini text-embedding-004 (768 dims)."""

    provider_name = "gemini"

    def __init__(self, api_key: str, model: str = "text-embedding-004", **kwargs):
        super().__init__(model=model, **kwargs)
        self.api_key = api_key
        self._client: genai.Client | None = None

    @property
    def client(self) -> genai.Client:
        if self._client is None:
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    async def _embed_raw(self, texts: list[str]) -> Any:
        response = await self.client.aio.models.embed_content(
            model=self.model,
            contents=texts,
        )
        if not response.embeddings:
            return []
        return [embedding.values for embedding in response.embeddings]


def create_embedder(settings: Settings) -> Embedder:
    """Create the embedder selected by settings.embedding_provider."""
    common = {
        "timeout_seconds": settings.provider_timeout_seconds,
        "max_attempts": settings.embedding_max_attempts,
        "retry_initial_wait": settings.embedding_retry_initial_wait,
        "retry_max_wait": settings.embedding_retry_max_wait,
        "batch_size": settings.embedding_batch_size,
    }
    if settings.embedding_provider == "openai":
        return OpenAIEmbedder(
            api_key=settings.openai_api_key,
            model=settings.openai_embedding_model,
            **common,
        )
    elif settings.embedding_provider == "gemini":
        return GeminiEmbedder(
            api_key=settings.gemini_api_key,
            model=settings.gemini_embedding_model,
            **common,
        )
    else:
        raise ValueError(f"Unknown embedding provider: {settings.embedding_provider}")
