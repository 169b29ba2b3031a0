"""
Question factory for terminal display.

Delegates to the presenter registered for a question's type. Unknown,
disabled and failing types render a visible placeholder panel instead of
raising, so one bad question never takes down the whole quiz screen.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from loguru import logger
from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from quizloop.migration import auto_migrate_question
from quizloop.registry import QuestionTypeRegistry, get_registry


class RenderOutcome(str, Enum):
    RENDERED = "rendered"
    UNSUPPORTED = "unsupported"
    DISABLED = "disabled"
    ERROR = "error"


def _placeholder(title: str, message: str, detail: str, color: str) -> Panel:
    return Panel(
        f"{escape(message)}\n[dim]{escape(detail)}[/dim]",
        title=f"[bold {color}]{title}[/bold {color}]",
        border_style=color,
        box=box.ROUNDED,
        padding=(1, 2),
    )


def unsupported_panel(question_type: str) -> Panel:
    return _placeholder(
        "UNSUPPORTED QUESTION TYPE",
        f"Question type '{question_type}' is not registered in the system.",
        "This question type may need to be implemented or enabled.",
        "dark_orange",
    )


def disabled_panel(question_type: str) -> Panel:
    return _placeholder(
        "DISABLED QUESTION TYPE",
        f"Question type '{question_type}' is currently disabled.",
        "Contact your administrator to enable this question type.",
        "grey50",
    )


def error_panel(question_type: str, error: Exception) -> Panel:
    return _placeholder(
        "QUESTION RENDERING ERROR",
        f"Failed to render question of type '{question_type}'.",
        str(error),
        "red",
    )


def render_question(
    question: Any,
    console: Console,
    registry: QuestionTypeRegistry | None = None,
) -> RenderOutcome:
    """Render a question, or the placeholder for why it cannot be rendered."""
    registry = registry or get_registry()
    question = auto_migrate_question(question)
    if not isinstance(question, dict):
        question = {}
    question_type = str(question.get("type", ""))

    if not registry.is_registered(question_type):
        console.print(unsupported_panel(question_type))
        return RenderOutcome.UNSUPPORTED

    if not registry.is_enabled(question_type):
        console.print(disabled_panel(question_type))
        return RenderOutcome.DISABLED

    try:
        registry.get_bundle(question_type).presenter(question, console)
    except Exception as e:
        logger.error(f"Presenter for {question_type!r} failed on question {question.get('id')!r}: {e}")
        console.print(error_panel(question_type, e))
        return RenderOutcome.ERROR
    return RenderOutcome.RENDERED


def can_render_question(question: Any, registry: QuestionTypeRegistry | None = None) -> bool:
    registry = registry or get_registry()
    question = auto_migrate_question(question)
    question_type = str(question.get("type", "")) if isinstance(question, dict) else ""
    return registry.is_registered(question_type) and registry.is_enabled(question_type)


def get_available_question_types(registry: QuestionTypeRegistry | None = None) -> list[dict[str, Any]]:
    """Enabled types with their metadata, for type pickers."""
    registry = registry or get_registry()
    return [
        {"type": key, "metadata": registry.get_bundle(key).metadata}
        for key in registry.get_enabled_types()
    ]
