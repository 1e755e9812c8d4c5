"""
Shared test fixtures and configuration for the entire test suite.

Provides: deterministic fake embedders, a scripted fake LLM provider,
and sample quiz payloads. No fixture touches the network.
"""

import asyncio
import json
import zlib
from typing import Any, Callable

import pytest

from app.core.exceptions import EmptyGenerationError
from app.services.llm.base import LLMProvider
from app.services.llm.orchestrator import LLMOrchestrator
from app.services.rag.embedder import Embedder
from app.services.rag.vector_index import VectorIndex


class HashingEmbedder(Embedder):
    """Bag-of-words embedder: each word adds 1.0 to a crc32-selected slot.

    Identical texts get identical vectors, and texts sharing words point in
    similar directions, which is enough to exercise ranking.
    """

    provider_name = "fake"

    def __init__(self, dimension: int = 32, delay: float = 0.0, **kwargs):
        kwargs.setdefault("retry_max_wait", 0.0)
        super().__init__(model="fake-hashing", **kwargs)
        self.dimension = dimension
        self.delay = delay
        self.calls: list[list[str]] = []

    async def _embed_raw(self, texts: list[str]) -> Any:
        self.calls.append(list(texts))
        if self.delay:
            await asyncio.sleep(self.delay)
        vectors = []
        for text in texts:
            vector = [0.0] * self.dimension
            for word in text.lower().split():
                vector[zlib.crc32(word.encode()) % self.dimension] += 1.0
            vectors.append(vector)
        return vectors


class ScriptedEmbedder(Embedder):
    """Returns a fixed vector per text; unknown texts get `default`."""

    provider_name = "scripted"

    def __init__(self, vectors: dict[str, list[float]], default: list[float], **kwargs):
        kwargs.setdefault("retry_max_wait", 0.0)
        super().__init__(model="fake-scripted", **kwargs)
        self.vectors = vectors
        self.default = default

    async def _embed_raw(self, texts: list[str]) -> Any:
        return [self.vectors.get(text, self.default) for text in texts]


class FakeProvider(LLMProvider):
    """LLM provider that replays scripted responses and records calls.

    A scripted response may be a string or an exception instance to raise.
    """

    provider_name = "fake"

    def __init__(self, responses: list[Any] | None = None):
        self.responses = list(responses or [])
        self.calls: list[dict] = []

    async def chat(
        self,
        system_prompt: str,
        messages: list[dict],
        model: str,
        max_output_tokens: int = 800,
        temperature: float = 0.7,
        json_mode: bool = False,
    ) -> str:
        self.calls.append(
            {
                "system_prompt": system_prompt,
                "messages": messages,
                "model": model,
                "max_output_tokens": max_output_tokens,
                "temperature": temperature,
                "json_mode": json_mode,
            }
        )
        response = self.responses.pop(0) if self.responses else "ok"
        if isinstance(response, Exception):
            raise response
        if not response:
            raise EmptyGenerationError("Empty response from fake provider")
        return response


def build_quiz_payload(question_count: int = 5, **overrides) -> dict:
    """Build a quiz dict in the wire format the model is asked for."""
    questions = []
    for i in range(question_count):
        question = {
            "question": f"Question {i + 1}?",
            "options": ["Option A", "Option B", "Option C", "Option D"],
            "correctAnswer": i % 4,
            "explanation": f"Explanation {i + 1}",
        }
        question.update(overrides)
        questions.append(question)
    return {"questions": questions}


@pytest.fixture
def hashing_embedder() -> HashingEmbedder:
    """Provide a deterministic 32-dim embedder."""
    return HashingEmbedder()


@pytest.fixture
def make_scripted_embedder() -> Callable[..., ScriptedEmbedder]:
    """Provide a factory for embedders with hand-picked vectors."""
    return ScriptedEmbedder


@pytest.fixture
def vector_index(hashing_embedder: HashingEmbedder) -> VectorIndex:
    """Provide an empty vector index over the hashing embedder."""
    return VectorIndex(hashing_embedder)


@pytest.fixture
def fake_provider() -> FakeProvider:
    """Provide a fake provider with no scripted responses."""
    return FakeProvider()


@pytest.fixture
def make_llm() -> Callable[..., LLMOrchestrator]:
    """Provide a factory for an LLMOrchestrator bound to a given fake provider."""

    def _make(provider: FakeProvider, json_fix_retries: int = 1, timeout_seconds: float = 5.0):
        return LLMOrchestrator(
            default_model_id="gpt-4o",
            timeout_seconds=timeout_seconds,
            json_fix_retries=json_fix_retries,
            provider_resolver=lambda model_id: (provider, f"api-{model_id}"),
        )

    return _make


@pytest.fixture
def valid_quiz_json() -> str:
    """Provide a valid 5-question quiz as a JSON string."""
    return json.dumps(build_quiz_payload())


@pytest.fixture
def quiz_payload() -> Callable[..., dict]:
    """Provide the quiz payload builder."""
    return build_quiz_payload


@pytest.fixture
def make_provider() -> Callable[..., FakeProvider]:
    """Provide a factory for fake providers with scripted responses."""
    return FakeProvider


@pytest.fixture
def make_hashing_embedder() -> Callable[..., HashingEmbedder]:
    """Provide a factory for hashing embedders with custom settings."""
    return HashingEmbedder
