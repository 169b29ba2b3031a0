"""
Result display dispatch.

Looks up the formatter registered for a question's type and turns an
evaluated answer into display strings (``format_result``) or a persistence
record (``format_structured_answer``). Types without a formatter, and
formatters that fail, fall back to a generic JSON rendering so that result
screens always render.
"""

from __future__ import annotations

import json
from typing import Any

from loguru import logger

from quizloop.registry import QuestionTypeRegistry, get_registry
from quizloop.types import QuestionEvaluationResult, ResultDisplay, StructuredAnswer, as_payload


def _raw_payload(response: Any) -> Any:
    if isinstance(response, dict) and response.get("response") is not None:
        return response["response"]
    return response


def _to_json(value: Any) -> str:
    return json.dumps(value, default=str, ensure_ascii=False)


class GenericFormatter:
    """Fallback formatter for types without a registered formatter."""

    def format_user_answer(self, question: dict, response: Any) -> str:
        return _to_json(_raw_payload(response))

    def format_correct_answer(self, question: dict, evaluation: QuestionEvaluationResult | None = None) -> str:
        if evaluation is not None and evaluation.correct_answer is not None:
            correct = evaluation.correct_answer
            return correct if isinstance(correct, str) else _to_json(correct)
        return "See explanation"

    def format_explanation(self, question: dict, evaluation: QuestionEvaluationResult) -> str:
        return evaluation.feedback or question.get("explanation") or "No explanation available"

    def format_structured_answer(
        self, question: dict, response: Any, evaluation: QuestionEvaluationResult
    ) -> StructuredAnswer:
        return StructuredAnswer(
            type=str(question.get("type", "")),
            raw=_raw_payload(response),
            display_text=self.format_user_answer(question, response),
            metadata={"isCorrect": evaluation.is_correct, "score": evaluation.score},
        )


_generic = GenericFormatter()


def _formatter_for(question: dict, registry: QuestionTypeRegistry):
    key = str(question.get("type", ""))
    if not registry.is_registered(key):
        return None
    return registry.get_bundle(key).formatter


def generic_result(question: dict, response: Any, evaluation: QuestionEvaluationResult) -> ResultDisplay:
    return ResultDisplay(
        user_answer=_generic.format_user_answer(question, response),
        correct_answer=_generic.format_correct_answer(question, evaluation),
        explanation=_generic.format_explanation(question, evaluation),
        is_correct=evaluation.is_correct,
        score=evaluation.score,
    )


def format_result(
    question: Any,
    response: Any,
    evaluation: QuestionEvaluationResult,
    registry: QuestionTypeRegistry | None = None,
) -> ResultDisplay:
    """Format an evaluated answer for the results screen. Never raises."""
    registry = registry or get_registry()
    question = as_payload(question)
    if not isinstance(question, dict):
        question = {}
    response = as_payload(response)

    formatter = _formatter_for(question, registry)
    if formatter is None:
        return generic_result(question, response, evaluation)

    try:
        return ResultDisplay(
            user_answer=formatter.format_user_answer(question, response),
            correct_answer=formatter.format_correct_answer(question),
            explanation=formatter.format_explanation(question, evaluation),
            is_correct=evaluation.is_correct,
            score=evaluation.score,
            details=evaluation.partial_credit,
        )
    except Exception as e:
        logger.warning(f"Formatter for '{question.get('type')}' failed, using generic display: {e}")
        return generic_result(question, response, evaluation)


def format_structured_answer(
    question: Any,
    response: Any,
    evaluation: QuestionEvaluationResult,
    registry: QuestionTypeRegistry | None = None,
) -> StructuredAnswer:
    """Build the persistence record for an evaluated answer. Never raises."""
    registry = registry or get_registry()
    question = as_payload(question)
    if not isinstance(question, dict):
        question = {}
    response = as_payload(response)

    formatter = _formatter_for(question, registry)
    if formatter is not None:
        try:
            return formatter.format_structured_answer(question, response, evaluation)
        except Exception as e:
            logger.warning(f"Structured formatter for '{question.get('type')}' failed: {e}")
    return _generic.format_structured_answer(question, response, evaluation)


def has_formatter(question_type: str, registry: QuestionTypeRegistry | None = None) -> bool:
    return _formatter_for({"type": question_type}, registry or get_registry()) is not None
