"""
LLM Provider Abstraction Layer

Provides a unified interface for multiple LLM providers (OpenAI, Gemini)
with a model registry and shared orchestration logic.
"""

from app.services.llm.orchestrator import LLMOrchestrator
from app.services.llm.registry import MODEL_REGISTRY, get_provider, list_models
from app.services.llm.models import GeneratedResult, Quiz, TutorMode

__all__ = [
    "LLMOrchestrator",
    "MODEL_REGISTRY",
    "get_provider",
    "list_models",
    "GeneratedResult",
    "Quiz",
    "TutorMode",
]
