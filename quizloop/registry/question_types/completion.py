"""
Completion (fill-in-the-blank) question type.

The template contains ``___`` markers; each blank has its own set of
accepted answers. Every blank is worth the same share of the score, so
partially filled templates earn partial credit.

Registered under both ``completion`` and the ``fill-blank`` alias used by
stored questions.
"""

from __future__ import annotations

import re
from typing import Any

from rich import box
from rich.console import Console, Group
from rich.table import Table
from rich.text import Text

from quizloop.config import get_settings
from quizloop.registry import HandlerBundle, register_question_type
from quizloop.registry.answers import (
    accepted_answers,
    answer_value,
    blank_id,
    find_blank_answer,
    matches_accepted,
    normalize_completion_answers,
    question_blanks,
)
from quizloop.registry.formatters.completion import CompletionFormatter
from quizloop.types import PartialCredit, QuestionEvaluationResult, QuestionType, QuestionTypeMetadata

from . import parse_questions_json, question_index_of, question_panel

TAG = QuestionType.COMPLETION.value
ALIAS_TAG = QuestionType.FILL_BLANK.value
COMPLETION_TAGS = (TAG, ALIAS_TAG)

NO_ANSWERS_FEEDBACK = "No answers provided - unable to evaluate response."

# Score bands for feedback; lower bound inclusive
GOOD_WORK_THRESHOLD = 0.7
PARTIAL_CREDIT_THRESHOLD = 0.4

BLANK_MARKER = re.compile(r"_{3,}")


def validate_completion_response(response: Any) -> bool:
    """Check for ``{"questionType": ..., "response": {"answers": [{blankId, value}, ...]}}``."""
    if not isinstance(response, dict) or response.get("questionType") not in COMPLETION_TAGS:
        return False
    payload = response.get("response")
    if not isinstance(payload, dict) or not isinstance(payload.get("answers"), list):
        return False
    return all(
        isinstance(answer, dict)
        and isinstance(answer.get("blankId"), str)
        and isinstance(answer.get("value"), str)
        for answer in payload["answers"]
    )


def completion_feedback(correct: int, total: int, score: float) -> str:
    """Feedback text for a completion score. Review screens style on these bands."""
    if score == 1.0:
        return "Excellent! All blanks filled correctly."
    if score >= GOOD_WORK_THRESHOLD:
        return f"Good work! {correct} out of {total} blanks correct."
    if score >= PARTIAL_CREDIT_THRESHOLD:
        return f"Partial credit. {correct} out of {total} blanks correct. Review the incorrect answers."
    return f"More practice needed. Only {correct} out of {total} blanks correct."


def no_answers_evaluation(question: dict, question_index: int | None = None) -> QuestionEvaluationResult:
    """All-incorrect evaluation used when no answers could be found."""
    blanks = question_blanks(question)
    return QuestionEvaluationResult(
        question_index=question_index,
        question_type=TAG,
        is_correct=False,
        score=0.0,
        feedback=NO_ANSWERS_FEEDBACK,
        partial_credit=PartialCredit(
            earned=0,
            possible=len(blanks),
            details=[f"blank-{blank_id(blank, i)}-incorrect" for i, blank in enumerate(blanks)],
        ),
    )


def calculate_completion_score(question: dict, response: Any) -> QuestionEvaluationResult:
    """
    Grade each blank independently and award partial credit.

    Never raises: responses without any recognizable answers get the
    all-incorrect "no answers" evaluation.
    """
    blanks = question_blanks(question)
    answers = normalize_completion_answers(
        response, heuristic_scan=get_settings().heuristic_answer_scan
    )
    if answers is None:
        return no_answers_evaluation(question, question_index_of(response))

    correct_count = 0
    details: list[str] = []
    for index, blank in enumerate(blanks):
        value = answer_value(find_blank_answer(answers, blank, index))
        is_correct = matches_accepted(
            value, accepted_answers(blank), bool(blank.get("caseSensitive", False))
        )
        if is_correct:
            correct_count += 1
        details.append(f"blank-{blank_id(blank, index)}-{'correct' if is_correct else 'incorrect'}")

    total = len(blanks)
    score = correct_count / total if total > 0 else 0.0

    return QuestionEvaluationResult(
        question_index=question_index_of(response),
        question_type=TAG,
        is_correct=score == 1.0,
        score=score,
        feedback=completion_feedback(correct_count, total, score),
        partial_credit=PartialCredit(earned=correct_count, possible=total, details=details),
    )


def _format_template(template: str) -> Text:
    """Template text with numbered, highlighted blanks."""
    result = Text()
    last_end = 0
    for number, match in enumerate(BLANK_MARKER.finditer(template), start=1):
        result.append(template[last_end:match.start()])
        result.append(f" [{number}: ____] ", style="bold yellow")
        last_end = match.end()
    result.append(template[last_end:])
    return result


def present_completion(question: dict, console: Console) -> None:
    """Display the template with highlighted blanks and any hints."""
    content = question.get("content") or {}
    parts: list[Any] = [Text(question.get("question", "")), Text()]
    parts.append(_format_template(str(content.get("template", ""))))

    hints = [(i, b.get("hint")) for i, b in enumerate(question_blanks(question), start=1) if b.get("hint")]
    if hints:
        table = Table(box=box.MINIMAL, show_header=False)
        table.add_column("Blank", style="cyan", justify="right", width=4)
        table.add_column("Hint", style="dim")
        for number, hint in hints:
            table.add_row(f"[{number}]", hint)
        parts.append(table)

    console.print(question_panel(question, "FILL THE BLANKS", Group(*parts)))


def parse_generated_completion(ai_response: str) -> list[dict]:
    return parse_questions_json(ai_response, TAG, COMPLETION_TAGS)


def generate_sample_completion_question() -> dict:
    """Sample question for debugging and tests."""
    return {
        "id": "sample-completion-1",
        "type": TAG,
        "question": "Complete the sentences based on what you heard in the conversation.",
        "difficulty": "medium",
        "explanation": "The speaker mentioned the weather conditions and his plans for the day at [01:15-01:30].",
        "context": {
            "startTime": 75,
            "endTime": 90,
            "text": "It was a beautiful sunny day, so I decided to go to the park with my friends.",
        },
        "content": {
            "template": "It was a beautiful ___ day, so I decided to go to the ___ with my friends.",
            "blanks": [
                {
                    "id": "blank-1",
                    "position": 18,
                    "acceptedAnswers": ["sunny", "nice", "lovely", "clear"],
                    "caseSensitive": False,
                    "hint": "Weather condition",
                },
                {
                    "id": "blank-2",
                    "position": 65,
                    "acceptedAnswers": ["park", "garden"],
                    "caseSensitive": False,
                    "hint": "Place to visit outdoors",
                },
            ],
        },
    }


COMPLETION_BUNDLE = HandlerBundle(
    validator=validate_completion_response,
    scorer=calculate_completion_score,
    presenter=present_completion,
    formatter=CompletionFormatter(),
    empty_evaluator=no_answers_evaluation,
    response_parser=parse_generated_completion,
    sample_factory=generate_sample_completion_question,
    metadata=QuestionTypeMetadata(
        type=TAG,
        display_name="Fill in the Blanks",
        description="Complete missing words or phrases in sentences",
        complexity="low",
        icon="edit",
        features=[
            "Multiple accepted answers per blank",
            "Case sensitive/insensitive options",
            "Hints for each blank",
            "Partial credit scoring",
            "Progressive feedback",
        ],
    ),
    # Staged rollout: enabled, not yet production
    is_enabled=True,
    is_production=False,
)

register_question_type(TAG, COMPLETION_BUNDLE)
register_question_type(ALIAS_TAG, COMPLETION_BUNDLE)
