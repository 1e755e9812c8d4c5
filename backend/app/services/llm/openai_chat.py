"""
OpenAI Chat Completions API Provider

Handles GPT-4o, GPT-4o-mini, and other Chat Completions API models:
- client.chat.completions.create()
- messages (not input)
- response_format={"type": "json_object"} for JSON mode
- response.choices[0].message.content
"""

from openai import AsyncOpenAI

from app.core.config import get_settings
from app.core.exceptions import EmptyGenerationError
from app.services.llm.base import LLMProvider

settings = get_settings()


class OpenAIChatProvider(LLMProvider):
    """Provider for OpenAI Chat Completions API (GPT-4o, GPT-4o-mini, etc.)."""

    provider_name = "openai_chat"

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
        chat_messages = [{"role": "system", "content": system_prompt}] + messages

        extra = {}
        if json_mode:
            extra["response_format"] = {"type": "json_object"}

        response = await self.client.chat.completions.create(
            model=model,
            messages=chat_messages,
            max_completion_tokens=max_output_tokens,
            temperature=temperature,
            **extra,
        )

        content = response.choices[0].message.content if response.choices else None
        if not content or not content.strip():
            raise EmptyGenerationError(
                "Empty response from OpenAI Chat Completions API",
                {"model": model},
            )
        return content
