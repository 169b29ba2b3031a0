"""
Question type registry.

Each question type (multiple-choice, completion, ...) has its own module under
``question_types`` that builds a handler bundle with:
- validate(): Check a submitted response's shape
- score(): Grade a response, with partial credit where the type supports it
- present(): Display the question in the terminal
- a result formatter for review screens and persistence

Importing this package registers every built-in type on the process registry.
"""

from __future__ import annotations

from loguru import logger

from quizloop.config import Settings, get_settings
from quizloop.types import QuestionType, type_key

from .base import HandlerBundle, QuestionTypeRegistry, ResultFormatter

_registry = QuestionTypeRegistry()

# Built-in registrations, replayed by install_default_types()
_DEFAULT_REGISTRATIONS: list[tuple[str, HandlerBundle]] = []


def get_registry() -> QuestionTypeRegistry:
    """Get the process-wide registry."""
    return _registry


def register_question_type(question_type: str | QuestionType, bundle: HandlerBundle) -> None:
    """Register a built-in question type on the process registry."""
    _DEFAULT_REGISTRATIONS.append((type_key(question_type), bundle))
    _registry.register(question_type, bundle)


def install_default_types(registry: QuestionTypeRegistry) -> QuestionTypeRegistry:
    """Register every built-in question type on ``registry``."""
    for key, bundle in _DEFAULT_REGISTRATIONS:
        registry.register(key, bundle)
    return registry


def apply_settings(registry: QuestionTypeRegistry, settings: Settings | None = None) -> None:
    """Apply rollout overrides from the environment."""
    settings = settings or get_settings()
    for key in settings.get_disabled_types():
        registry.set_enabled(key, False)
    for key in settings.get_production_types():
        registry.set_production_ready(key, True)


# Import question types to trigger registration
from .question_types import multiple_choice  # noqa: E402
from .question_types import completion  # noqa: E402

# Additional types register here as they are implemented:
# matching, short-answer, diagram-labelling

apply_settings(_registry)
logger.debug(
    f"Question types initialized: registered={_registry.get_all_types()} "
    f"enabled={_registry.get_enabled_types()} production={_registry.get_production_types()}"
)

__all__ = [
    "HandlerBundle",
    "QuestionTypeRegistry",
    "ResultFormatter",
    "apply_settings",
    "get_registry",
    "install_default_types",
    "register_question_type",
]
