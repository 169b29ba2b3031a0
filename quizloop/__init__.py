"""
quizloop: question type registry and evaluation engine.

Components:
- types: Question, response and evaluation models shared by every type
- registry: Handler bundles per question type (validator, scorer, presenter, formatter)
- evaluation: Never-raise scoring for the live quiz loop
- results: Review-screen and persistence formatting
- migration: Legacy multiple-choice shape conversion
- presentation: Terminal rendering with placeholder fallbacks

Types usable in a quiz right now: ``get_registry().get_enabled_types()``.
"""

from .errors import MigrationError, QuestionEngineError, UnregisteredTypeError
from .evaluation import QuizResult, evaluate_response, grade_quiz, parse_generated_questions
from .migration import auto_migrate_question, auto_migrate_response
from .registry import HandlerBundle, QuestionTypeRegistry, get_registry
from .results import format_result, format_structured_answer
from .types import QuestionEvaluationResult, QuestionType, StructuredAnswer

__version__ = "1.0.0"

__all__ = [
    "HandlerBundle",
    "MigrationError",
    "QuestionEngineError",
    "QuestionEvaluationResult",
    "QuestionType",
    "QuestionTypeRegistry",
    "QuizResult",
    "StructuredAnswer",
    "UnregisteredTypeError",
    "auto_migrate_question",
    "auto_migrate_response",
    "evaluate_response",
    "format_result",
    "format_structured_answer",
    "get_registry",
    "grade_quiz",
    "parse_generated_questions",
]
