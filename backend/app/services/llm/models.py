"""
Pydantic models for tutor requests and LLM output.

These are shared across all providers; the orchestrator parses
raw LLM text into these models.
"""

from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, StrictInt, model_validator


class TutorMode(str, Enum):
    CHAT = "chat"
    QUIZ = "quiz"
    HINT = "hint"
    ANSWER = "answer"


class ConversationTurn(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: Literal["user", "assistant"]
    content: str


class QuizQuestion(BaseModel):
    question: Annotated[str, Field(min_length=1)]
    options: Annotated[list[str], Field(min_length=4, max_length=4)]
    correctAnswer: Annotated[StrictInt, Field(ge=0, le=3)]
    explanation: str


class Quiz(BaseModel):
    questions: Annotated[list[QuizQuestion], Field(min_length=5, max_length=5)]


class GenerationOptions(BaseModel):
    model_id: str | None = None  # Falls back to settings.default_model_id
    grade_level: int | None = Field(default=None, ge=0, le=12)  # 0 = Kindergarten
    subject: str | None = None
    topic: str | None = None  # Quiz scope
    top_k: int | None = Field(default=None, ge=1)  # Overrides the per-mode default


class GeneratedResult(BaseModel):
    mode: TutorMode
    text: str | None = None
    quiz: Quiz | None = None
    sources_used: list[str] = []
    model_id: str

    @model_validator(mode="after")
    def _exactly_one_payload(self):
        if (self.text is None) == (self.quiz is None):
            raise ValueError("Exactly one of text or quiz must be set")
        return self
