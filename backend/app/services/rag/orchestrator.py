"""
Retrieval Orchestrator

Answers a student query against a set of curriculum documents:
1. RETRIEVE – top-K chunks per document from the vector index
2. CONTEXT  – chunk contents joined by blank lines
3. PROMPT   – mode-specific, grade-adaptive system prompt + history + user turn
4. GENERATE – text for chat/hint/answer, validated Quiz for quiz mode

Every failure is raised as a typed error; no placeholder text is returned.
"""

from typing import Sequence

from app.core.exceptions import InvalidConfigurationError
from app.services.llm.models import (
    ConversationTurn,
    GeneratedResult,
    GenerationOptions,
    TutorMode,
)
from app.services.llm.orchestrator import LLMOrchestrator
from app.services.policy_compiler import compile_policy, compile_user_prompt
from app.services.rag.retriever import build_context, retrieve_chunks
from app.services.rag.vector_index import VectorIndex

DEFAULT_QUIZ_QUERY = "general knowledge"

# Output token budgets per mode
MAX_OUTPUT_TOKENS = {
    TutorMode.CHAT: 500,
    TutorMode.HINT: 150,
    TutorMode.ANSWER: 800,
    TutorMode.QUIZ: 3000,
}


class RetrievalOrchestrator:
    """Combines vector retrieval with a generative model call."""

    def __init__(
        self,
        index: VectorIndex,
        llm: LLMOrchestrator,
        chat_top_k: int = 3,
        quiz_top_k: int = 5,
    ):
        self.index = index
        self.llm = llm
        self.chat_top_k = chat_top_k
        self.quiz_top_k = quiz_top_k

    async def answer_query(
        self,
        query: str,
        document_ids: Sequence[str],
        conversation_history: Sequence[ConversationTurn] = (),
        mode: TutorMode = TutorMode.CHAT,
        options: GenerationOptions | None = None,
    ) -> GeneratedResult:
        """
        Retrieve context for query and generate a mode-specific result.

        Args:
            query: The student's message (the quiz topic fallback in quiz mode)
            document_ids: Documents the student may draw on
            conversation_history: Prior turns; only used in chat mode
            mode: chat, quiz, hint or answer
            options: Model, grade, subject, quiz topic and top-K override

        Returns:
            GeneratedResult with text (or quiz) and the chunk contents used

        Raises:
            InvalidConfigurationError: If query is blank outside quiz mode
            EmbeddingProviderError, DimensionMismatchError: On retrieval failure
            GenerationProviderError, EmptyGenerationError,
            MalformedGenerationError, UnknownModelError: On generation failure
        """
        mode = TutorMode(mode)
        options = options or GenerationOptions()
        if mode != TutorMode.QUIZ and not query.strip():
            raise InvalidConfigurationError(
                "query must not be empty", {"mode": mode.value}
            )

        top_k = options.top_k or (
            self.quiz_top_k if mode == TutorMode.QUIZ else self.chat_top_k
        )
        search_query = query
        if mode == TutorMode.QUIZ:
            search_query = options.topic or query or DEFAULT_QUIZ_QUERY

        chunks = await retrieve_chunks(self.index, search_query, document_ids, top_k)
        context = build_context(chunks)
        sources = [chunk.content for chunk in chunks]

        system_prompt = compile_policy(
            mode,
            context,
            grade_level=options.grade_level,
            subject=options.subject,
        )
        messages = []
        if mode == TutorMode.CHAT:
            messages.extend(
                {"role": turn.role, "content": turn.content}
                for turn in conversation_history
            )
        messages.append(
            {"role": "user", "content": compile_user_prompt(mode, query, options.topic)}
        )

        model_id = self.llm.resolve_model_id(options.model_id)
        print(f"[Tutor] mode={mode.value} model={model_id} sources={len(sources)}")

        if mode == TutorMode.QUIZ:
            quiz = await self.llm.generate_quiz(
                system_prompt,
                messages,
                model_id=model_id,
                max_output_tokens=MAX_OUTPUT_TOKENS[mode],
            )
            return GeneratedResult(
                mode=mode, quiz=quiz, sources_used=sources, model_id=model_id
            )

        text = await self.llm.generate_text(
            system_prompt,
            messages,
            model_id=model_id,
            max_output_tokens=MAX_OUTPUT_TOKENS[mode],
        )
        return GeneratedResult(
            mode=mode, text=text, sources_used=sources, model_id=model_id
        )
