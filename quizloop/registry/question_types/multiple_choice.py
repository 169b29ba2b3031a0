"""
Multiple choice question type.

- Four options labelled A-D, exactly one correct.
- All-or-nothing scoring, no partial credit.
"""

from __future__ import annotations

from typing import Any

from rich import box
from rich.console import Console, Group
from rich.table import Table
from rich.text import Text

from quizloop.registry import HandlerBundle, register_question_type
from quizloop.registry.formatters.multiple_choice import MultipleChoiceFormatter
from quizloop.types import MC_OPTION_LETTERS, QuestionEvaluationResult, QuestionType, QuestionTypeMetadata

from . import parse_questions_json, question_index_of, question_panel

TAG = QuestionType.MULTIPLE_CHOICE.value


def validate_multiple_choice_response(response: Any) -> bool:
    """Check for ``{"questionType": "multiple-choice", "response": {"selectedOption": "A".."D"}}``."""
    if not isinstance(response, dict) or response.get("questionType") != TAG:
        return False
    payload = response.get("response")
    return (
        isinstance(payload, dict)
        and isinstance(payload.get("selectedOption"), str)
        and payload["selectedOption"] in MC_OPTION_LETTERS
    )


def selected_option(response: Any) -> str | None:
    """Selected letter from a tagged or flat legacy response."""
    if not isinstance(response, dict):
        return None
    payload = response.get("response")
    if isinstance(payload, dict) and isinstance(payload.get("selectedOption"), str):
        return payload["selectedOption"]
    if isinstance(response.get("answer"), str):
        return response["answer"]
    return None


def calculate_multiple_choice_score(question: dict, response: Any) -> QuestionEvaluationResult:
    """Score 1.0 when the selected letter is the correct one, else 0.0."""
    correct_answer = (question.get("content") or {}).get("correctAnswer")
    is_correct = correct_answer is not None and selected_option(response) == correct_answer

    return QuestionEvaluationResult(
        question_index=question_index_of(response),
        question_type=TAG,
        is_correct=is_correct,
        score=1.0 if is_correct else 0.0,
        correct_answer=correct_answer,
        feedback="Correct! Well done." if is_correct else f"Incorrect. The correct answer is {correct_answer}.",
    )


def no_selection_evaluation(question: dict, question_index: int | None = None) -> QuestionEvaluationResult:
    correct_answer = (question.get("content") or {}).get("correctAnswer")
    return QuestionEvaluationResult(
        question_index=question_index,
        question_type=TAG,
        is_correct=False,
        score=0.0,
        correct_answer=correct_answer,
        feedback=f"No answer selected. The correct answer is {correct_answer}.",
    )


def present_multiple_choice(question: dict, console: Console) -> None:
    """Display the question with its lettered options."""
    options = (question.get("content") or {}).get("options") or []

    table = Table(box=box.MINIMAL, show_header=False)
    table.add_column("Letter", style="cyan", justify="right", width=4)
    table.add_column("Option", style="white")
    for letter, option in zip(MC_OPTION_LETTERS, options):
        table.add_row(f"[{letter}]", str(option))

    body = Group(Text(question.get("question", "")), table)
    console.print(question_panel(question, "MULTIPLE CHOICE", body))


def parse_generated_multiple_choice(ai_response: str) -> list[dict]:
    return parse_questions_json(ai_response, TAG, (TAG,))


def generate_sample_multiple_choice_question() -> dict:
    """Sample question for debugging and tests."""
    return {
        "id": "sample-multiple-choice-1",
        "type": TAG,
        "question": "What did the speaker decide to do on the sunny day?",
        "difficulty": "easy",
        "explanation": "The speaker says they went to the park with friends at [01:15-01:30].",
        "context": {
            "startTime": 75,
            "endTime": 90,
            "text": "It was a beautiful sunny day, so I decided to go to the park with my friends.",
        },
        "content": {
            "options": [
                "Stay at home",
                "Go to the park with friends",
                "Visit the museum",
                "Go shopping",
            ],
            "correctAnswer": "B",
        },
    }


MULTIPLE_CHOICE_BUNDLE = HandlerBundle(
    validator=validate_multiple_choice_response,
    scorer=calculate_multiple_choice_score,
    presenter=present_multiple_choice,
    formatter=MultipleChoiceFormatter(),
    empty_evaluator=no_selection_evaluation,
    response_parser=parse_generated_multiple_choice,
    sample_factory=generate_sample_multiple_choice_question,
    metadata=QuestionTypeMetadata(
        type=TAG,
        display_name="Multiple Choice",
        description="Select the correct answer from 4 options (A, B, C, D)",
        complexity="low",
        icon="check-square",
        features=[
            "Single correct answer selection",
            "Four option format (A-D)",
            "Immediate feedback",
        ],
    ),
    is_enabled=True,
    is_production=True,
)

register_question_type(TAG, MULTIPLE_CHOICE_BUNDLE)
