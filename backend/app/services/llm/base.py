"""
Abstract base class for all LLM providers.

Each provider implements the API-specific translation layer.
JSON extraction, parsing, and retry logic are handled by the orchestrator.
"""

from abc import ABC, abstractmethod


class LLMProvider(ABC):
    """Abstract base class for all LLM providers."""

    provider_name: str = "base"

    @abstractmethod
    async def chat(
        self,
        system_prompt: str,
        messages: list[dict],
        model: str,
        max_output_tokens: int = 800,
        temperature: float = 0.7,
        json_mode: bool = False,
    ) -> str:
        """
        Send system prompt + conversation to the LLM and return raw text.

        Args:
            system_prompt: The system prompt
            messages: List of message dicts with "role" ("user"/"assistant") and "content"
            model: The API model identifier (e.g., "gpt-4o", "gemini-2.5-flash")
            max_output_tokens: Maximum tokens in the response
            temperature: Sampling temperature
            json_mode: Ask the API for a JSON object response

        Returns:
            Raw text response from the LLM

        Raises:
            EmptyGenerationError: If the API returned no text
        """
        ...
