"""
Answer extraction helpers for blank-based question types.

Completion responses reach the engine from several producers (the quiz UI,
stored results, older clients that stringified the payload). These helpers
pull the ``[{blankId, value}, ...]`` list out of any of those shapes and
resolve which submitted answer belongs to which blank.
"""

from __future__ import annotations

import json
from typing import Any

from loguru import logger

# Envelope fields that never hold answers
RESERVED_RESPONSE_KEYS = frozenset({"questionIndex", "questionType", "timestamp"})


def _answers_in(parsed: Any) -> list | None:
    """Answers list from a decoded JSON value, if it has one of the known shapes."""
    if isinstance(parsed, list):
        return parsed
    if isinstance(parsed, dict) and isinstance(parsed.get("answers"), list):
        return parsed["answers"]
    return None


def _load_json(text: str) -> Any:
    try:
        return json.loads(text)
    except (ValueError, TypeError, RecursionError) as e:
        logger.debug(f"Response string is not JSON: {type(e).__name__}")
        return None


def _scan_fields(response: dict) -> list | None:
    # TODO: drop this scan once every client submits {"response": {"answers": [...]}}
    for key, value in response.items():
        if key in RESERVED_RESPONSE_KEYS:
            continue
        if (
            isinstance(value, list)
            and value
            and isinstance(value[0], dict)
            and ("blankId" in value[0] or "value" in value[0])
        ):
            logger.debug(f"Found completion answers under unexpected field '{key}'")
            return value
        if isinstance(value, dict) and isinstance(value.get("answers"), list):
            logger.debug(f"Found completion answers nested under '{key}'")
            return value["answers"]
    return None


def normalize_completion_answers(response: Any, heuristic_scan: bool = True) -> list | None:
    """
    Extract the submitted blank answers from a completion response.

    Tries, in order:
    1. ``{"response": {"answers": [...]}}`` (canonical)
    2. A bare answers array: ``{"answers": [...]}``, ``{"response": [...]}``
       or the response itself being a list
    3. A JSON string holding either shape, in ``answer``, ``response`` or as
       the whole response
    4. Any other own field holding something answer-shaped (when
       ``heuristic_scan`` is on)

    Returns:
        The answers list (possibly empty), or None when nothing matched.
    """
    if isinstance(response, str):
        return _answers_in(_load_json(response))
    if isinstance(response, list):
        return response
    if not isinstance(response, dict):
        return None

    inner = response.get("response")
    if isinstance(inner, dict) and isinstance(inner.get("answers"), list):
        return inner["answers"]

    if isinstance(response.get("answers"), list):
        return response["answers"]
    if isinstance(inner, list):
        return inner

    for key in ("answer", "response"):
        if isinstance(response.get(key), str):
            found = _answers_in(_load_json(response[key]))
            if found is not None:
                return found

    if heuristic_scan:
        return _scan_fields(response)
    return None


def blank_id(blank: dict, index: int) -> str:
    """Identifier of a blank, falling back to ``blank-<index>``."""
    return str(blank.get("id") or f"blank-{index}")


def find_blank_answer(answers: list, blank: dict, index: int) -> dict | None:
    """
    Find the submitted answer for a blank.

    Matches by the blank's own id, then by the ``blank-<index>`` form. When
    the id drifted between generation and submission, falls back to the
    answer at the same position.
    """
    for candidate in (blank_id(blank, index), f"blank-{index}"):
        for answer in answers:
            if isinstance(answer, dict) and answer.get("blankId") == candidate:
                return answer

    if index < len(answers) and isinstance(answers[index], dict):
        return answers[index]
    return None


def answer_value(answer: dict | None) -> str:
    """Trimmed submitted value; missing or null values read as empty."""
    if not answer:
        return ""
    value = answer.get("value")
    if value is None:
        return ""
    return str(value).strip()


def accepted_answers(blank: dict) -> list[str]:
    """
    Acceptance set for a blank.

    Either the explicit ``acceptedAnswers`` list, or the primary ``answer``
    plus its ``alternatives``.
    """
    explicit = blank.get("acceptedAnswers")
    if isinstance(explicit, list) and explicit:
        return [str(a) for a in explicit if a is not None]

    primary = blank.get("answer")
    if primary is None:
        return []
    accepted = [str(primary)]
    alternatives = blank.get("alternatives")
    if isinstance(alternatives, list):
        accepted.extend(str(a) for a in alternatives if a is not None)
    return accepted


def matches_accepted(value: str, accepted: list[str], case_sensitive: bool) -> bool:
    """Compare a submitted value against every accepted answer (both trimmed)."""
    submitted = value.strip()
    if not case_sensitive:
        submitted = submitted.casefold()
    for candidate in accepted:
        expected = candidate.strip()
        if not case_sensitive:
            expected = expected.casefold()
        if expected == submitted:
            return True
    return False


def question_blanks(question: dict) -> list:
    """Blanks of a completion question, in declared order."""
    content = question.get("content") if isinstance(question, dict) else None
    blanks = content.get("blanks") if isinstance(content, dict) else None
    if not isinstance(blanks, list):
        return []
    return [b for b in blanks if isinstance(b, dict)]
