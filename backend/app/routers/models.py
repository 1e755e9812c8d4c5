"""
Models Router

Exposes the available AI models to the frontend, optionally filtered by
provider, with the server's default model flagged.
"""

from typing import Literal

from fastapi import APIRouter
from pydantic import BaseModel

from app.core.config import get_settings
from app.services.llm.registry import list_models


router = APIRouter()
settings = get_settings()

ProviderType = Literal["openai_responses", "openai_chat", "gemini"]


class ModelInfo(BaseModel):
    id: str
    display_name: str
    tier: str
    provider: ProviderType
    description: str
    is_default: bool = False


@router.get("", response_model=list[ModelInfo])
async def get_available_models(provider: ProviderType | None = None):
    """Return the available AI models, default model first."""
    models = [
        ModelInfo(**info, is_default=info["id"] == settings.default_model_id)
        for info in list_models()
        if provider is None or info["provider"] == provider
    ]
    # Stable sort keeps registry order after the default
    return sorted(models, key=lambda m: not m.is_default)
