"""
Google Gemini Provider

Handles gemini-2.5-flash / gemini-2.5-pro through the google-genai SDK:
- client.aio.models.generate_content()
- contents with "user" / "model" roles (assistant turns become "model")
- system prompt via GenerateContentConfig.system_instruction
- response_mime_type="application/json" for JSON mode
- response.text
"""

from google import genai
from google.genai import types

from app.core.config import get_settings
from app.core.exceptions import EmptyGenerationError
from app.services.llm.base import LLMProvider

settings = get_settings()

ROLE_MAP = {"user": "user", "assistant": "model"}


class GeminiProvider(LLMProvider):
    """Provider for Google Gemini models."""

    provider_name = "gemini"

    def __init__(self):
        self.client = genai.Client(
            api_key=settings.gemini_api_key,
            http_options=types.HttpOptions(
                timeout=int(settings.provider_timeout_seconds * 1000)
            ),
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
        contents = [
            types.Content(
                role=ROLE_MAP.get(msg["role"], "user"),
                parts=[types.Part(text=msg["content"])],
            )
            for msg in messages
        ]

        config = types.GenerateContentConfig(
            system_instruction=system_prompt,
            max_output_tokens=max_output_tokens,
            temperature=temperature,
            response_mime_type="application/json" if json_mode else None,
        )

        response = await self.client.aio.models.generate_content(
            model=model,
            contents=contents,
            config=config,
        )

        content = response.text
        if not content or not content.strip():
            raise EmptyGenerationError(
                "Empty response from Gemini API",
                {"model": model},
            )
        return content
