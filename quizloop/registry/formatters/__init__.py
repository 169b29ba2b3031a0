"""
Result formatters for review screens and persisted answers.

Dispatch and the generic fallback live in ``quizloop.results``.
"""
