"""
Exceptions raised by the question engine.

Only registry lookups and reverse legacy conversion raise. Scoring,
validation and formatting return fallback values instead.
"""


class QuestionEngineError(Exception):
    """Base class for question engine errors."""
    pass


class UnregisteredTypeError(QuestionEngineError, KeyError):
    """Raised when no handler bundle is registered for a question type."""

    def __init__(self, question_type: str):
        self.question_type = question_type
        super().__init__(f"Question type '{question_type}' is not registered")

    def __str__(self) -> str:
        # KeyError quotes its message otherwise
        return self.args[0]


class MigrationError(QuestionEngineError, NotImplementedError):
    """Raised when a response cannot be converted to or from the legacy shape."""
    pass
