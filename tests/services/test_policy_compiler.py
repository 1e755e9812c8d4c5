"""
Test suite for the grade-adaptive policy compiler.
"""

import pytest

from app.services.llm.models import TutorMode
from app.services.policy_compiler import (
    compile_policy,
    compile_user_prompt,
    get_grade_description,
    get_reading_level_instruction,
)


class TestGradeDescription:
    @pytest.mark.parametrize(
        "grade,expected",
        [
            (None, "a student"),
            (0, "a Kindergarten student (ages 5-6)"),
            (1, "a Grade 1 student (ages 6-7)"),
            (12, "a Grade 12 student (ages 17-18)"),
        ],
    )
    def test_descriptions(self, grade, expected) -> None:
        assert get_grade_description(grade) == expected

    def test_reading_level_bands_differ(self) -> None:
        bands = {get_reading_level_instruction(g) for g in (1, 4, 7, 11)}

        assert len(bands) == 4


class TestCompilePolicy:
    def test_includes_grade_subject_and_context(self) -> None:
        policy = compile_policy(
            TutorMode.CHAT, "Cells are small.\n\nCells divide.", grade_level=6, subject="Biology"
        )

        assert policy.startswith("You are a helpful AI study assistant tutoring a Grade 6 student")
        assert "Subject: Biology" in policy
        assert policy.endswith("Cells are small.\n\nCells divide.")

    def test_empty_context_is_marked(self) -> None:
        policy = compile_policy(TutorMode.ANSWER, "")

        assert "(no matching material was found)" in policy
        assert "Subject:" not in policy

    def test_quiz_policy_describes_json_format(self) -> None:
        policy = compile_policy(TutorMode.QUIZ, "Context")

        assert "exactly 5 multiple-choice questions" in policy
        assert '"correctAnswer": 0' in policy

    def test_modes_produce_different_policies(self) -> None:
        policies = {compile_policy(mode, "Context") for mode in TutorMode}

        assert len(policies) == len(TutorMode)


class TestCompileUserPrompt:
    def test_chat_passes_query_through(self) -> None:
        assert compile_user_prompt(TutorMode.CHAT, "What is a cell?") == "What is a cell?"

    def test_hint_and_answer_wrap_question(self) -> None:
        hint = compile_user_prompt(TutorMode.HINT, "Why is the sky blue?")
        answer = compile_user_prompt(TutorMode.ANSWER, "Why is the sky blue?")

        assert hint.startswith("Question: Why is the sky blue?")
        assert "hint" in hint
        assert answer.endswith("complete and detailed answer.")

    def test_quiz_prompt_names_topic(self) -> None:
        assert 'topic of "fractions"' in compile_user_prompt(TutorMode.QUIZ, "", "fractions")
        assert "topic" not in compile_user_prompt(TutorMode.QUIZ, "")
