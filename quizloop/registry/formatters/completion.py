"""
Result formatter for completion/fill-blank questions.
"""

from __future__ import annotations

from typing import Any

from quizloop.config import get_settings
from quizloop.registry.answers import (
    accepted_answers,
    answer_value,
    find_blank_answer,
    normalize_completion_answers,
    question_blanks,
)
from quizloop.types import QuestionEvaluationResult, StructuredAnswer

SEPARATOR = " • "


def _submitted_answers(response: Any) -> list:
    """Answers as the scorer sees them, so review and grade agree."""
    return normalize_completion_answers(
        response, heuristic_scan=get_settings().heuristic_answer_scan
    ) or []


def _sorted_blanks(question: dict) -> list[dict]:
    return sorted(question_blanks(question), key=lambda b: b.get("position") or 0)


class CompletionFormatter:
    """
    Formats blank answers for the results screen.

    A single blank shows as ``"value"``; several blanks show numbered in
    template order: ``1:"sunny" • 2:"park"``.
    """

    def format_user_answer(self, question: dict, response: Any) -> str:
        answers = _submitted_answers(response)
        if not answers:
            return "No answer provided"

        blanks = _sorted_blanks(question)
        if len(blanks) == 1:
            value = answer_value(find_blank_answer(answers, blanks[0], 0)) or "(empty)"
            return f'"{value}"'

        return SEPARATOR.join(
            f'{i + 1}:"{answer_value(find_blank_answer(answers, blank, i)) or "(empty)"}"'
            for i, blank in enumerate(blanks)
        )

    def format_correct_answer(self, question: dict) -> str:
        blanks = _sorted_blanks(question)
        if len(blanks) == 1:
            accepted = accepted_answers(blanks[0])
            if not accepted:
                return '"???"'
            extra = len(accepted) - 1
            return f'"{accepted[0]}" (+{extra} more)' if extra > 0 else f'"{accepted[0]}"'

        return SEPARATOR.join(
            f'{i + 1}:"{(accepted_answers(blank) or ["???"])[0]}"'
            for i, blank in enumerate(blanks)
        )

    def format_explanation(self, question: dict, evaluation: QuestionEvaluationResult) -> str:
        return evaluation.feedback or question.get("explanation") or "No explanation available"

    def format_structured_answer(
        self, question: dict, response: Any, evaluation: QuestionEvaluationResult
    ) -> StructuredAnswer:
        answers = _submitted_answers(response)
        credit = evaluation.partial_credit
        return StructuredAnswer(
            type=str(question.get("type", "completion")),
            raw=response.get("response", response) if isinstance(response, dict) else response,
            display_text=self.format_user_answer(question, response),
            metadata={
                "blankCount": len(question_blanks(question)),
                "answeredCount": sum(
                    1 for a in answers if isinstance(a, dict) and answer_value(a)
                ),
                "earned": credit.earned if credit else 0,
                "possible": credit.possible if credit else len(question_blanks(question)),
                "score": evaluation.score,
                "isCorrect": evaluation.is_correct,
            },
        )
