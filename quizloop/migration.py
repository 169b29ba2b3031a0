"""
Conversion between the legacy flat question shape and tagged question types.

Before the registry existed every question was multiple choice and stored
flat: ``{id, question, options, correctAnswer, ...}`` with responses
``{questionIndex, answer}``. Ingress paths call ``auto_migrate_question`` /
``auto_migrate_response`` so the rest of the engine only sees tagged shapes.
"""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any

from loguru import logger

from quizloop.errors import MigrationError
from quizloop.types import QuestionType, as_payload

COMPLETION_TAGS = (QuestionType.COMPLETION.value, QuestionType.FILL_BLANK.value)


def is_legacy_question(question: Any) -> bool:
    """Check if a question dict is in the flat multiple-choice shape."""
    return (
        isinstance(question, dict)
        and isinstance(question.get("id"), str)
        and isinstance(question.get("question"), str)
        and isinstance(question.get("options"), list)
        and isinstance(question.get("correctAnswer"), str)
        and (question.get("type") is None or isinstance(question.get("type"), str))
        and not question.get("content")
    )


def is_legacy_response(response: Any) -> bool:
    """Check if a response dict is in the flat ``{questionIndex, answer}`` shape."""
    return (
        isinstance(response, dict)
        and isinstance(response.get("questionIndex"), int)
        and not isinstance(response.get("questionIndex"), bool)
        and isinstance(response.get("answer"), str)
        and not response.get("questionType")
    )


def migrate_legacy_question(legacy: dict) -> dict:
    """Convert a legacy question to the tagged multiple-choice shape."""
    migrated: dict[str, Any] = {
        "id": legacy["id"],
        "type": QuestionType.MULTIPLE_CHOICE.value,
        "question": legacy["question"],
        "difficulty": legacy.get("difficulty") or "medium",
        "explanation": legacy.get("explanation") or "",
        "content": {
            "options": list(legacy["options"]),
            "correctAnswer": legacy["correctAnswer"],
        },
    }
    if legacy.get("context"):
        migrated["context"] = legacy["context"]
    return migrated


def migrate_legacy_response(legacy: dict, question_type: str = QuestionType.MULTIPLE_CHOICE.value) -> dict:
    """
    Convert a legacy response to the tagged shape.

    Only multiple choice ever had a legacy shape; any other ``question_type``
    raises MigrationError.
    """
    if question_type != QuestionType.MULTIPLE_CHOICE.value:
        raise MigrationError(f"Migration not implemented for question type: {question_type}")

    return {
        "questionIndex": legacy["questionIndex"],
        "questionType": QuestionType.MULTIPLE_CHOICE.value,
        "timestamp": datetime.now().isoformat(),
        "response": {"selectedOption": legacy["answer"]},
    }


def migrate_legacy_questions(legacy_questions: list[dict]) -> list[dict]:
    return [migrate_legacy_question(q) for q in legacy_questions]


def migrate_legacy_responses(
    legacy_responses: list[dict], question_type: str = QuestionType.MULTIPLE_CHOICE.value
) -> list[dict]:
    return [migrate_legacy_response(r, question_type) for r in legacy_responses]


def auto_migrate_question(question: Any) -> Any:
    """Migrate a question if it is in the legacy shape; tagged input passes through."""
    question = as_payload(question)
    if is_legacy_question(question):
        logger.debug(f"Migrating legacy question {question.get('id')}")
        return migrate_legacy_question(question)
    return question


def auto_migrate_response(response: Any) -> Any:
    """Migrate a response if it is in the legacy shape; tagged input passes through."""
    response = as_payload(response)
    if is_legacy_response(response):
        return migrate_legacy_response(response)
    return response


def convert_to_legacy_response(response: Any) -> dict:
    """
    Convert a tagged response back to ``{questionIndex, answer}``.

    Only multiple choice can be downgraded; newer types have no legacy
    representation and raise MigrationError.
    """
    response = as_payload(response)
    question_type = response.get("questionType")
    if question_type == QuestionType.MULTIPLE_CHOICE.value:
        return {
            "questionIndex": response.get("questionIndex"),
            "answer": (response.get("response") or {}).get("selectedOption"),
        }
    raise MigrationError(f"Legacy conversion not implemented for question type: {question_type}")


def convert_response_to_legacy_format(response: Any) -> str:
    """
    Flatten a tagged response to the string stored in the legacy ``answer`` field.

    Multiple choice stores the bare letter, completion stores
    ``{"answers": [...]}`` as JSON, anything else stores its payload as JSON.
    """
    response = as_payload(response)
    question_type = response.get("questionType")
    payload = response.get("response")

    if question_type == QuestionType.MULTIPLE_CHOICE.value:
        return str((payload or {}).get("selectedOption", ""))

    if question_type in COMPLETION_TAGS:
        if isinstance(payload, dict) and "answers" in payload:
            return json.dumps({"answers": payload["answers"]})
        return json.dumps(payload)

    return json.dumps(payload)
