"""
Evaluation service for the live quiz loop.

Wraps registry dispatch with the engine's never-raise policy: unknown or
disabled types and malformed responses all produce a well-formed zero
evaluation instead of an exception, so one bad question cannot abort a
quiz.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable

from loguru import logger

from quizloop.migration import auto_migrate_question, auto_migrate_response
from quizloop.registry import QuestionTypeRegistry, get_registry
from quizloop.registry.question_types import no_answer_evaluation, question_index_of
from quizloop.results import format_result, format_structured_answer
from quizloop.types import QuestionEvaluationResult, ResultDisplay, StructuredAnswer


def _fallback(question: dict, question_index: int | None, feedback: str) -> QuestionEvaluationResult:
    return QuestionEvaluationResult(
        question_index=question_index,
        question_type=str(question.get("type", "")),
        is_correct=False,
        score=0.0,
        feedback=feedback,
    )


def evaluate_response(
    question: Any,
    response: Any,
    registry: QuestionTypeRegistry | None = None,
    question_index: int | None = None,
) -> QuestionEvaluationResult:
    """
    Evaluate one response.

    Both sides are auto-migrated from the legacy shape first. A response
    that fails its type's validator is never scored; it gets the type's
    "no answer" evaluation.
    """
    registry = registry or get_registry()
    question = auto_migrate_question(question)
    if not isinstance(question, dict):
        question = {}
    response = auto_migrate_response(response)
    if question_index is None:
        question_index = question_index_of(response)

    question_type = str(question.get("type", ""))
    if not registry.is_registered(question_type):
        logger.warning(f"Cannot evaluate unsupported question type: {question_type!r}")
        return _fallback(question, question_index, f"Unsupported question type: {question_type}")

    if not registry.is_enabled(question_type):
        return _fallback(question, question_index, f"Question type '{question_type}' is currently disabled.")

    bundle = registry.get_bundle(question_type)
    try:
        is_valid = response is not None and bool(bundle.validator(response))
    except Exception as e:
        logger.exception(f"Validator for {question_type!r} failed on question {question.get('id')!r}: {e}")
        is_valid = False
    if not is_valid:
        logger.debug(f"Response for question {question_index} failed {question_type} validation")
        empty = bundle.empty_evaluator or no_answer_evaluation
        return empty(question, question_index)

    try:
        evaluation = bundle.scorer(question, response)
    except Exception as e:
        logger.exception(f"Scorer for {question_type!r} failed on question {question.get('id')!r}: {e}")
        return _fallback(question, question_index, "Unable to evaluate response.")
    if evaluation.question_index is None:
        evaluation.question_index = question_index
    return evaluation


@dataclass
class QuestionOutcome:
    """Evaluation plus display and persistence records for one question."""
    question_index: int
    evaluation: QuestionEvaluationResult
    display: ResultDisplay
    structured: StructuredAnswer
    answered: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "questionIndex": self.question_index,
            "evaluation": self.evaluation.to_dict(),
            "display": self.display.to_dict(),
            "structuredAnswer": self.structured.to_dict(),
            "answered": self.answered,
        }


@dataclass
class QuizResult:
    """Graded quiz attempt."""
    outcomes: list[QuestionOutcome] = field(default_factory=list)

    @property
    def total_questions(self) -> int:
        return len(self.outcomes)

    @property
    def correct_count(self) -> int:
        return sum(1 for o in self.outcomes if o.evaluation.is_correct)

    @property
    def total_score(self) -> float:
        return sum(o.evaluation.score for o in self.outcomes)

    @property
    def percentage(self) -> int:
        if not self.outcomes:
            return 0
        return round(self.total_score / self.total_questions * 100)

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalQuestions": self.total_questions,
            "correctAnswers": self.correct_count,
            "totalScore": self.total_score,
            "percentage": self.percentage,
            "results": [o.to_dict() for o in self.outcomes],
        }


def grade_quiz(
    questions: list[Any],
    submissions: Iterable[tuple[int, Any]],
    registry: QuestionTypeRegistry | None = None,
) -> QuizResult:
    """
    Grade a quiz attempt.

    ``submissions`` are ``(question_index, response)`` pairs in the order
    they were observed; the last one per index wins. Unanswered questions
    are graded as "no answer".
    """
    registry = registry or get_registry()
    latest: dict[int, Any] = {}
    for index, response in submissions:
        latest[index] = response

    result = QuizResult()
    for index, raw_question in enumerate(questions):
        question = auto_migrate_question(raw_question)
        if not isinstance(question, dict):
            question = {}
        response = latest.get(index)
        evaluation = evaluate_response(question, response, registry=registry, question_index=index)
        migrated_response = auto_migrate_response(response) if response is not None else {}
        result.outcomes.append(
            QuestionOutcome(
                question_index=index,
                evaluation=evaluation,
                display=format_result(question, migrated_response, evaluation, registry=registry),
                structured=format_structured_answer(question, migrated_response, evaluation, registry=registry),
                answered=response is not None,
            )
        )

    stray = set(latest) - set(range(len(questions)))
    if stray:
        logger.warning(f"Ignoring responses for unknown question indexes: {sorted(stray)}")
    return result


def parse_generated_questions(
    question_type: str, ai_response: str, registry: QuestionTypeRegistry | None = None
) -> list[dict]:
    """Parse a generation-pipeline payload with the type's response parser."""
    registry = registry or get_registry()
    if not registry.is_registered(question_type):
        logger.warning(f"No parser for unsupported question type: {question_type!r}")
        return []
    parser = registry.get_bundle(question_type).response_parser
    if parser is None:
        logger.warning(f"Question type {question_type!r} has no generated-question parser")
        return []
    return parser(ai_response)
