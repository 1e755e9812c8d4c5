"""
OpenAI Responses API Provider

Handles GPT-5.x models using the newer Responses API format:
- client.responses.create()
- input (not messages)
- text={"format": {"type": "json_object"}} for JSON mode
- response.output_text
"""

from openai import AsyncOpenAI

from app.core.config import get_settings
from app.core.exceptions import EmptyGenerationError
from app.services.llm.base import LLMProvider

settings = get_settings()


class OpenAIResponsesProvider(LLMProvider):
    """Provider for OpenAI Responses API (GPT-5.x models)."""

    provider_name = "openai_responses"

    def __init__(self):
        self.client = AsyncOpenAI(
            api_key=settings.openai_api_key,
            timeout=settings.provider_timeout_seconds,
            max_retries=0,
        )

    async def chat(
        self,
        system_prompt: str,
        messages: list[dict],
        model: str,
        max_output_tokens: int = 800,
        temperature: float = 0.7,
        json_mode: bool = False,
    ) -> str:
        # GPT-5.x reasoning models reject temperature, so it is not forwarded
        input_messages = [{"role": "system", "content": system_prompt}] + messages

        extra = {}
        if json_mode:
            extra["text"] = {"format": {"type": "json_object"}}

        response = await self.client.responses.create(
            model=model,
            input=input_messages,
            max_output_tokens=max_output_tokens,
            **extra,
        )

        content = response.output_text
        if not content or not content.strip():
            raise EmptyGenerationError(
                "Empty response from OpenAI Responses API",
                {"model": model},
            )
        return content
