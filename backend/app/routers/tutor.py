"""
Tutor Router

Single query endpoint for chat, quiz, hint and answer modes.
"""

from fastapi import APIRouter
from pydantic import BaseModel, Field, model_validator

from app.core.dependencies import OrchestratorDep
from app.services.llm.models import (
    ConversationTurn,
    GeneratedResult,
    GenerationOptions,
    TutorMode,
)

router = APIRouter()


# Schemas
class TutorQueryRequest(BaseModel):
    query: str = ""
    document_ids: list[str] = Field(min_length=1)
    conversation_history: list[ConversationTurn] = []
    mode: TutorMode = TutorMode.CHAT
    model_id: str | None = None
    grade_level: int | None = Field(default=None, ge=0, le=12)
    subject: str | None = None
    topic: str | None = None

    @model_validator(mode="after")
    def _query_required_outside_quiz(self):
        if self.mode != TutorMode.QUIZ and not self.query.strip():
            raise ValueError(f"query must not be empty in {self.mode.value} mode")
        return self


@router.post("/query", response_model=GeneratedResult)
async def tutor_query(request: TutorQueryRequest, orchestrator: OrchestratorDep):
    """Answer a student query grounded in the given documents."""
    options = GenerationOptions(
        model_id=request.model_id,
        grade_level=request.grade_level,
        subject=request.subject,
        topic=request.topic,
    )
    return await orchestrator.answer_query(
        request.query,
        request.document_ids,
        conversation_history=request.conversation_history,
        mode=request.mode,
        options=options,
    )
