"""
Policy Compiler Service

Converts the tutor mode, the student's grade level and the retrieved
curriculum context into clear, minimal LLM instructions.
"""

from app.services.llm.models import TutorMode


def get_grade_description(grade_level: int | None) -> str:
    """Convert a grade level (0 = Kindergarten) to a human-readable description."""
    if grade_level is None:
        return "a student"
    if grade_level == 0:
        return "a Kindergarten student (ages 5-6)"
    return f"a Grade {grade_level} student (ages {grade_level + 5}-{grade_level + 6})"


def get_reading_level_instruction(grade_level: int | None) -> str:
    """Get instruction that pitches vocabulary and sentence length at the grade."""
    if grade_level is None:
        return "Use clear, friendly language suitable for a school student."
    elif grade_level <= 2:
        return "Use very short sentences and simple everyday words. Explain with familiar objects and pictures in words."
    elif grade_level <= 5:
        return "Use short sentences and simple words. Introduce new terms one at a time with a concrete example."
    elif grade_level <= 8:
        return "Use clear explanations. You may use subject vocabulary, but define any term the student may not know."
    else:
        return "You may use precise subject terminology and abstract reasoning appropriate for high school."


def get_mode_instruction(mode: TutorMode) -> str:
    """Get the rules specific to each tutor mode."""
    if mode == TutorMode.QUIZ:
        return """Create exactly 5 multiple-choice questions based only on the curriculum context.
Each question must have exactly 4 options with only one correct answer.

Output Format:
You must respond with valid JSON only, with this structure:
{
  "questions": [
    {
      "question": "Question text",
      "options": ["Option A", "Option B", "Option C", "Option D"],
      "correctAnswer": 0,
      "explanation": "Explanation of the correct answer"
    }
  ]
}
"correctAnswer" is the 0-based index (0-3) of the correct option."""
    elif mode == TutorMode.HINT:
        return """Provide a helpful hint for the student's question.
The hint must guide the student toward the answer WITHOUT giving the answer away.
Ask a guiding question or point to the relevant idea in the material. Be concise and encouraging."""
    elif mode == TutorMode.ANSWER:
        return """Provide a complete and detailed answer to the student's question.
Include explanations, worked examples, and any relevant details from the material
that help the student understand the topic thoroughly."""
    else:  # CHAT
        return """Answer the student's questions accurately and helpfully using the curriculum context.
If the context doesn't contain relevant information, say so and give general guidance
rather than inventing facts about the material."""


def compile_policy(
    mode: TutorMode,
    context: str,
    grade_level: int | None = None,
    subject: str | None = None,
) -> str:
    """
    Compile mode, grade and retrieved context into the LLM system prompt.

    Args:
        mode: The tutor mode
        context: Retrieved chunk contents joined by blank lines
        grade_level: The student's grade (0 = Kindergarten, 1-12)
        subject: Optional classroom subject

    Returns:
        System prompt string for the LLM
    """
    grade_desc = get_grade_description(grade_level)
    subject_line = f"Subject: {subject}\n" if subject else ""

    policy = f"""You are a helpful AI study assistant tutoring {grade_desc}.
{subject_line}
Only use the teacher-approved curriculum material below as your source of facts.

{get_reading_level_instruction(grade_level)}

{get_mode_instruction(mode)}

Curriculum context from the uploaded documents:
{context if context else "(no matching material was found)"}"""

    return policy.strip()


def compile_user_prompt(mode: TutorMode, query: str, topic: str | None = None) -> str:
    """
    Compile the final user turn for a mode.

    Args:
        mode: The tutor mode
        query: The student's message or question
        topic: Optional quiz topic

    Returns:
        User prompt string
    """
    if mode == TutorMode.QUIZ:
        scope = f' on the topic of "{topic}"' if topic else ""
        return f"Create the 5-question quiz{scope}. Respond with valid JSON only."
    elif mode == TutorMode.HINT:
        return f"""Question: {query}

Please provide a hint that will help me think about this question."""
    elif mode == TutorMode.ANSWER:
        return f"""Question: {query}

Please provide a complete and detailed answer."""
    return query
