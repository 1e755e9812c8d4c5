"""
LLM Orchestrator

Shared logic for all providers:
- Bounded timeout on every provider call
- Provider failures converted to GenerationProviderError
- JSON extraction from LLM responses
- Explicit, bounded re-ask with a JSON-fix prompt on quiz validation failure
- Parsing raw text into Quiz

The orchestrator delegates the actual API call to the selected provider,
keeping provider implementations clean and focused on API translation.
"""

import asyncio
import json
import re
from typing import Callable

from pydantic import ValidationError

from app.core.exceptions import (
    GenerationProviderError,
    MalformedGenerationError,
    TutorError,
)
from app.services.llm.base import LLMProvider
from app.services.llm.models import Quiz
from app.services.llm.registry import get_provider

ProviderResolver = Callable[[str], tuple[LLMProvider, str]]


class LLMOrchestrator:
    """Orchestrates LLM calls with shared parsing and retry logic."""

    def __init__(
        self,
        default_model_id: str,
        timeout_seconds: float = 30.0,
        json_fix_retries: int = 1,
        provider_resolver: ProviderResolver = get_provider,
    ):
        self.default_model_id = default_model_id
        self.timeout_seconds = timeout_seconds
        self.json_fix_retries = json_fix_retries
        self.provider_resolver = provider_resolver

    def resolve_model_id(self, model_id: str | None) -> str:
        return model_id or self.default_model_id

    async def generate_text(
        self,
        system_prompt: str,
        messages: list[dict],
        model_id: str | None = None,
        max_output_tokens: int = 800,
        temperature: float = 0.7,
    ) -> str:
        """
        Generate a free-text reply.

        Raises:
            UnknownModelError: If model_id is not registered
            GenerationProviderError: If the provider call fails or times out
            EmptyGenerationError: If the provider returned no text
        """
        model_id = self.resolve_model_id(model_id)
        provider, api_model = self.provider_resolver(model_id)

        content = await self._call_provider(
            provider,
            system_prompt=system_prompt,
            messages=messages,
            model=api_model,
            max_output_tokens=max_output_tokens,
            temperature=temperature,
        )
        print(f"[LLM] model={model_id} provider={provider.provider_name}")
        return content.strip()

    async def generate_quiz(
        self,
        system_prompt: str,
        messages: list[dict],
        model_id: str | None = None,
        max_output_tokens: int = 3000,
        temperature: float = 0.8,
    ) -> Quiz:
        """
        Generate a quiz and validate it against the Quiz schema.

        Raises:
            MalformedGenerationError: If output still fails validation after
                json_fix_retries re-asks
        """
        model_id = self.resolve_model_id(model_id)
        provider, api_model = self.provider_resolver(model_id)

        content = await self._call_provider(
            provider,
            system_prompt=system_prompt,
            messages=messages,
            model=api_model,
            max_output_tokens=max_output_tokens,
            temperature=temperature,
            json_mode=True,
        )
        print(f"[LLM] model={model_id} provider={provider.provider_name} (quiz)")

        attempts_left = self.json_fix_retries
        while True:
            try:
                return self._parse_quiz(content)
            except MalformedGenerationError as e:
                if attempts_left <= 0:
                    raise
                attempts_left -= 1
                print(f"[LLM] Quiz output invalid, asking for a fix: {e.message}")
                content = await self._retry_with_json_fix(
                    provider, api_model, system_prompt, messages, content, str(e)
                )

    async def _call_provider(self, provider: LLMProvider, **kwargs) -> str:
        try:
            return await asyncio.wait_for(
                provider.chat(**kwargs), timeout=self.timeout_seconds
            )
        except TutorError:
            raise
        except asyncio.TimeoutError as e:
            raise GenerationProviderError(
                f"Generation timed out after {self.timeout_seconds}s",
                {"provider": provider.provider_name, "model": kwargs.get("model")},
            ) from e
        except Exception as e:
            raise GenerationProviderError(
                f"{provider.provider_name} API error: {e}",
                {"provider": provider.provider_name, "model": kwargs.get("model")},
            ) from e

    def _parse_quiz(self, content: str) -> Quiz:
        json_str = self._extract_json(content)
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise MalformedGenerationError(
                f"Quiz output is not valid JSON: {e}",
                {"content": content[:200]},
            ) from e
        try:
            return Quiz.model_validate(data)
        except ValidationError as e:
            raise MalformedGenerationError(
                f"Quiz output failed validation: {e.error_count()} error(s)",
                {"errors": e.errors(include_url=False, include_context=False, include_input=False)},
            ) from e

    def _extract_json(self, content: str) -> str:
        """Extract JSON from response, handling markdown code blocks."""
        # Try to find JSON in code blocks
        code_block_pattern = r"```(?:json)?\s*([\s\S]*?)```"
        matches = re.findall(code_block_pattern, content)
        if matches:
            return matches[0].strip()

        # Try to find raw JSON object
        json_pattern = r"\{[\s\S]*\}"
        matches = re.findall(json_pattern, content)
        if matches:
            # Return the longest match (most likely the full JSON)
            return max(matches, key=len)

        # Return as-is and let JSON parser handle it
        return content.strip()

    async def _retry_with_json_fix(
        self,
        provider: LLMProvider,
        api_model: str,
        system_prompt: str,
        messages: list[dict],
        previous_response: str,
        error: str,
    ) -> str:
        """Re-ask once with a fix prompt when the quiz JSON is invalid."""
        fix_prompt = (
            f"Your previous response did not match the required quiz format. The error was: {error}\n\n"
            f"Respond with ONLY a JSON object holding exactly 5 questions, each with exactly 4 options, "
            f"an integer correctAnswer from 0 to 3 and an explanation. No markdown code blocks or commentary.\n"
            f"Your previous response was:\n{previous_response[:500]}...\n\n"
            f"Respond with the corrected JSON only."
        )

        retry_messages = messages + [
            {"role": "assistant", "content": previous_response},
            {"role": "user", "content": fix_prompt},
        ]

        return await self._call_provider(
            provider,
            system_prompt=system_prompt,
            messages=retry_messages,
            model=api_model,
            max_output_tokens=3000,
            temperature=0.1,
            json_mode=True,
        )
