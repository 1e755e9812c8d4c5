"""
Test suite for the Embedder base class and its provider adapters.

Covers boundary validation of provider output, batching order,
bounded retry with tenacity, timeouts, and the OpenAI/Gemini adapters
with their SDK clients mocked out.
"""

import asyncio
import math
from types import SimpleNamespace
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from app.core.config import Settings
from app.core.exceptions import DimensionMismatchError, EmbeddingProviderError
from app.services.rag.embedder import (
    Embedder,
    GeminiEmbedder,
    OpenAIEmbedder,
    create_embedder,
)


class RawEmbedder(Embedder):
    """Embedder whose provider output is driven by a list of outcomes."""

    provider_name = "raw"

    def __init__(self, outcomes: list[Any], **kwargs):
        kwargs.setdefault("retry_initial_wait", 0.0)
        kwargs.setdefault("retry_max_wait", 0.0)
        super().__init__(model="raw-model", **kwargs)
        self.outcomes = list(outcomes)
        self.call_count = 0

    async def _embed_raw(self, texts: list[str]) -> Any:
        self.call_count += 1
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        if callable(outcome):
            return await outcome(texts)
        return outcome


class TestEmbedderValidation:
    """Test suite for validation of provider output."""

    @pytest.mark.asyncio
    async def test_embed_returns_float_vector(self) -> None:
        """Should convert ints to floats and return one vector."""
        embedder = RawEmbedder([[[1, 2.5, 0]]])

        vector = await embedder.embed("cells")

        assert vector == [1.0, 2.5, 0.0]
        assert all(isinstance(v, float) for v in vector)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "raw",
        [
            None,
            "not a list",
            [],
            [[]],
            [[0.1, "0.2"]],
            [[0.1, None]],
            [[True, 0.2]],
            [[0.1, math.nan]],
            [[0.1, math.inf]],
            [[[0.1], [0.2]]],
        ],
    )
    async def test_malformed_output_raises(self, raw: Any) -> None:
        """Should raise EmbeddingProviderError for malformed shapes or values."""
        embedder = RawEmbedder([raw])

        with pytest.raises(EmbeddingProviderError):
            await embedder.embed("cells")

    @pytest.mark.asyncio
    async def test_wrong_vector_count_raises(self) -> None:
        """Should reject a response with fewer vectors than texts."""
        embedder = RawEmbedder([[[0.1, 0.2]]])

        with pytest.raises(EmbeddingProviderError, match="wrong number"):
            await embedder.embed_batch(["a", "b"])

    @pytest.mark.asyncio
    async def test_mixed_lengths_raise_dimension_mismatch(self) -> None:
        """Vectors of different lengths in one result are fatal."""
        embedder = RawEmbedder([[[0.1, 0.2], [0.1, 0.2, 0.3]]])

        with pytest.raises(DimensionMismatchError) as exc_info:
            await embedder.embed_batch(["a", "b"])

        assert exc_info.value.expected == 2
        assert exc_info.value.actual == 3

    @pytest.mark.asyncio
    async def test_empty_batch_makes_no_call(self) -> None:
        """Should return [] without calling the provider."""
        embedder = RawEmbedder([])

        assert await embedder.embed_batch([]) == []
        assert embedder.call_count == 0


class TestEmbedderBatching:
    """Test suite for batch splitting and order preservation."""

    @pytest.mark.asyncio
    async def test_batches_preserve_input_order(self) -> None:
        """Results should follow input order even when batches finish out of order."""

        async def slow(texts: list[str]) -> list[list[float]]:
            await asyncio.sleep(0.05)
            return [[float(t)] for t in texts]

        async def fast(texts: list[str]) -> list[list[float]]:
            return [[float(t)] for t in texts]

        embedder = RawEmbedder([slow, fast, fast], batch_size=2)

        vectors = await embedder.embed_batch(["1", "2", "3", "4", "5"])

        assert vectors == [[1.0], [2.0], [3.0], [4.0], [5.0]]
        assert embedder.call_count == 3


class TestEmbedderBatchFailure:
    """Test suite for sibling batches when one batch fails."""

    @pytest.mark.asyncio
    async def test_failed_batch_cancels_siblings(self) -> None:
        """No provider call should complete after the error reaches the caller."""
        finished: list[str] = []

        class SlowEmbedder(Embedder):
            provider_name = "slow"

            async def _embed_raw(self, texts: list[str]) -> Any:
                if texts == ["bad"]:
                    raise RuntimeError("bad input")
                await asyncio.sleep(0.05)
                finished.extend(texts)
                return [[0.1, 0.2] for _ in texts]

        embedder = SlowEmbedder(model="slow-model", batch_size=1, max_attempts=3, retry_max_wait=0.0)

        with pytest.raises(EmbeddingProviderError):
            await embedder.embed_batch(["bad", "ok1", "ok2"])
        await asyncio.sleep(0.2)

        assert finished == []


class TestEmbedderRetry:
    """Test suite for bounded retry and timeouts."""

    @pytest.mark.asyncio
    async def test_single_attempt_by_default(self) -> None:
        """With max_attempts=1 a provider failure is raised immediately."""
        embedder = RawEmbedder([RuntimeError("rate limited"), [[0.1]]])

        with pytest.raises(EmbeddingProviderError, match="rate limited"):
            await embedder.embed("cells")

        assert embedder.call_count == 1

    @pytest.mark.asyncio
    async def test_transient_failures_are_retried(self) -> None:
        """Should succeed on the third attempt when allowed three."""
        embedder = RawEmbedder(
            [RuntimeError("503"), RuntimeError("503"), [[0.3, 0.4]]],
            max_attempts=3,
        )

        vector = await embedder.embed("cells")

        assert vector == [0.3, 0.4]
        assert embedder.call_count == 3

    @pytest.mark.asyncio
    async def test_retries_are_bounded(self) -> None:
        """Should give up after max_attempts and raise EmbeddingProviderError."""
        embedder = RawEmbedder([RuntimeError("down")] * 3, max_attempts=2)

        with pytest.raises(EmbeddingProviderError):
            await embedder.embed("cells")

        assert embedder.call_count == 2

    @pytest.mark.asyncio
    async def test_malformed_output_is_not_retried(self) -> None:
        """Malformed data is not transient and should fail on the first attempt."""
        embedder = RawEmbedder([[["x"]], [[0.1]]], max_attempts=3)

        with pytest.raises(EmbeddingProviderError):
            await embedder.embed("cells")

        assert embedder.call_count == 1

    @pytest.mark.asyncio
    async def test_timeout_raises_provider_error(self) -> None:
        """A provider call exceeding the timeout should raise EmbeddingProviderError."""

        async def hang(texts: list[str]) -> list[list[float]]:
            await asyncio.sleep(1)
            return [[0.1]]

        embedder = RawEmbedder([hang], timeout_seconds=0.01)

        with pytest.raises(EmbeddingProviderError, match="timed out"):
            await embedder.embed("cells")

    def test_invalid_retry_settings_raise(self) -> None:
        """max_attempts and batch_size must be positive."""
        with pytest.raises(ValueError):
            RawEmbedder([], max_attempts=0)
        with pytest.raises(ValueError):
            RawEmbedder([], batch_size=0)


class TestProviderAdapters:
    """Test suite for the OpenAI and Gemini adapters."""

    @pytest.mark.asyncio
    async def test_openai_embedder_uses_aembed_documents(self) -> None:
        """Should call OpenAIEmbeddings.aembed_documents with the batch."""
        embedder = OpenAIEmbedder(api_key="test-key")
        embedder._client = MagicMock()
        embedder._client.aembed_documents = AsyncMock(return_value=[[0.1, 0.2], [0.3, 0.4]])

        vectors = await embedder.embed_batch(["a", "b"])

        assert vectors == [[0.1, 0.2], [0.3, 0.4]]
        embedder._client.aembed_documents.assert_awaited_once_with(["a", "b"])

    @pytest.mark.asyncio
    async def test_openai_errors_become_provider_errors(self) -> None:
        """SDK exceptions should surface as EmbeddingProviderError."""
        embedder = OpenAIEmbedder(api_key="test-key")
        embedder._client = MagicMock()
        embedder._client.aembed_documents = AsyncMock(side_effect=ConnectionError("reset"))

        with pytest.raises(EmbeddingProviderError, match="reset"):
            await embedder.embed("a")

    @pytest.mark.asyncio
    async def test_gemini_embedder_reads_values(self) -> None:
        """Should unpack response.embeddings[i].values."""
        embedder = GeminiEmbedder(api_key="test-key")
        response = SimpleNamespace(
            embeddings=[SimpleNamespace(values=[0.5, 0.5]), SimpleNamespace(values=[1.0, 0.0])]
        )
        embedder._client = MagicMock()
        embedder._client.aio.models.embed_content = AsyncMock(return_value=response)

        vectors = await embedder.embed_batch(["a", "b"])

        assert vectors == [[0.5, 0.5], [1.0, 0.0]]
        embedder._client.aio.models.embed_content.assert_awaited_once_with(
            model="text-embedding-004", contents=["a", "b"]
        )

    @pytest.mark.asyncio
    async def test_gemini_missing_embeddings_is_malformed(self) -> None:
        """A response without embeddings should fail validation."""
        embedder = GeminiEmbedder(api_key="test-key")
        embedder._client = MagicMock()
        embedder._client.aio.models.embed_content = AsyncMock(
            return_value=SimpleNamespace(embeddings=None)
        )

        with pytest.raises(EmbeddingProviderError, match="wrong number"):
            await embedder.embed("a")


class TestCreateEmbedder:
    """Test suite for the settings-driven factory."""

    def test_creates_openai_embedder(self) -> None:
        settings = Settings(embedding_provider="openai", embedding_max_attempts=3)

        embedder = create_embedder(settings)

        assert isinstance(embedder, OpenAIEmbedder)
        assert embedder.model == "text-embedding-3-small"
        assert embedder.max_attempts == 3

    def test_creates_gemini_embedder(self) -> None:
        settings = Settings(embedding_provider="gemini")

        embedder = create_embedder(settings)

        assert isinstance(embedder, GeminiEmbedder)
        assert embedder.model == "text-embedding-004"

    def test_unknown_provider_raises(self) -> None:
        with pytest.raises(ValueError, match="Unknown embedding provider"):
            create_embedder(Settings(embedding_provider="cohere"))
