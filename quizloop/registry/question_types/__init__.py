"""
Built-in question types.

Each module builds a HandlerBundle and registers it on import.
"""

from __future__ import annotations

import json
from typing import Any

from loguru import logger
from pydantic import ValidationError
from rich import box
from rich.panel import Panel

from quizloop.migration import auto_migrate_question
from quizloop.types import QuestionEvaluationResult, parse_question

NO_ANSWER_FEEDBACK = "No answer provided."


def no_answer_evaluation(question: dict, question_index: int | None = None) -> QuestionEvaluationResult:
    """Zero-score evaluation for a missing or unusable response."""
    return QuestionEvaluationResult(
        question_index=question_index,
        question_type=str(question.get("type", "")),
        is_correct=False,
        score=0.0,
        feedback=NO_ANSWER_FEEDBACK,
    )


def question_index_of(response: Any) -> int | None:
    if isinstance(response, dict) and isinstance(response.get("questionIndex"), int):
        return response["questionIndex"]
    return None


def question_panel(question: dict, title: str, body: Any = None) -> Panel:
    """Standard panel wrapping a question's prompt."""
    return Panel(
        body if body is not None else question.get("question", "No question"),
        title=f"[bold cyan]{title}[/bold cyan]",
        subtitle=f"[dim]{question.get('difficulty', 'medium')}[/dim]",
        border_style="cyan",
        box=box.HEAVY,
        padding=(1, 2),
    )


def parse_questions_json(ai_response: str, default_type: str, accepted_types: tuple[str, ...]) -> list[dict]:
    """
    Parse a generation-pipeline payload ``{"questions": [...]}``.

    Invalid questions are logged and dropped; a payload that is not JSON
    yields an empty list.
    """
    try:
        parsed = json.loads(ai_response)
    except (ValueError, TypeError, RecursionError) as e:
        logger.error(f"Failed to parse generated questions: {e}")
        return []

    items = parsed.get("questions", []) if isinstance(parsed, dict) else parsed
    if not isinstance(items, list):
        return []

    questions = []
    for item in items:
        if not isinstance(item, dict):
            continue
        candidate = auto_migrate_question({"type": default_type, **item})
        if candidate.get("type") not in accepted_types:
            logger.warning(f"Skipping generated question of type {candidate.get('type')!r}")
            continue
        try:
            questions.append(parse_question(candidate).to_payload())
        except ValidationError as e:
            logger.warning(f"Skipping invalid generated question {item.get('id')!r}: {e.error_count()} errors")
    return questions
