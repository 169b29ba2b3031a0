"""
Result formatter for multiple-choice questions.
"""

from __future__ import annotations

from typing import Any

from quizloop.types import MC_OPTION_LETTERS, QuestionEvaluationResult, StructuredAnswer

DEFAULT_EXPLANATION = "Select the best answer from the options provided."


def _option_text(question: dict, letter: str) -> str | None:
    options = (question.get("content") or {}).get("options") or []
    if letter not in MC_OPTION_LETTERS:
        return None
    index = MC_OPTION_LETTERS.index(letter)
    if index < len(options) and options[index]:
        return str(options[index])
    return None


def _decorate(question: dict, letter: str) -> str:
    """``"B. option text"``, or the bare letter when the text is missing."""
    text = _option_text(question, letter)
    return f"{letter}. {text}" if text else letter


class MultipleChoiceFormatter:
    """Formats multiple-choice answers as lettered options."""

    def format_user_answer(self, question: dict, response: Any) -> str:
        payload = response.get("response") if isinstance(response, dict) else None
        selected = payload.get("selectedOption") if isinstance(payload, dict) else None
        if not selected:
            return "No answer selected"
        return _decorate(question, str(selected))

    def format_correct_answer(self, question: dict) -> str:
        correct = (question.get("content") or {}).get("correctAnswer")
        if not correct:
            return "Unknown"
        return _decorate(question, str(correct))

    def format_explanation(self, question: dict, evaluation: QuestionEvaluationResult) -> str:
        return question.get("explanation") or evaluation.feedback or DEFAULT_EXPLANATION

    def format_structured_answer(
        self, question: dict, response: Any, evaluation: QuestionEvaluationResult
    ) -> StructuredAnswer:
        payload = response.get("response") if isinstance(response, dict) else None
        content = question.get("content") or {}
        return StructuredAnswer(
            type=str(question.get("type", "multiple-choice")),
            raw=payload if payload is not None else response,
            display_text=self.format_user_answer(question, response),
            metadata={
                "optionCount": len(content.get("options") or []),
                "selectedOption": payload.get("selectedOption") if isinstance(payload, dict) else None,
                "correctAnswer": content.get("correctAnswer"),
                "isCorrect": evaluation.is_correct,
                "score": evaluation.score,
            },
        )
