"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import copy
import sys
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def registry():
    """Fresh registry holding only the built-in question types."""
    from quizloop.registry import QuestionTypeRegistry, install_default_types

    return install_default_types(QuestionTypeRegistry())


@pytest.fixture
def mc_question():
    """Provide a sample multiple-choice question."""
    return {
        "id": "q-mc-001",
        "type": "multiple-choice",
        "question": "Where did the speaker go?",
        "difficulty": "easy",
        "explanation": "They mention the park at [01:20].",
        "content": {
            "options": ["Home", "The park", "The museum", "The shop"],
            "correctAnswer": "B",
        },
    }


@pytest.fixture
def completion_question():
    """Provide a two-blank completion question."""
    return {
        "id": "q-comp-001",
        "type": "completion",
        "question": "Complete the sentence.",
        "difficulty": "medium",
        "explanation": "The weather was sunny and they went to the park.",
        "content": {
            "template": "It was a ___ day, so we went to the ___.",
            "blanks": [
                {"id": "b1", "position": 9, "acceptedAnswers": ["sunny", "nice"], "caseSensitive": False},
                {"id": "b2", "position": 35, "acceptedAnswers": ["park"], "caseSensitive": False},
            ],
        },
    }


@pytest.fixture
def three_blank_question(completion_question):
    question = copy.deepcopy(completion_question)
    question["id"] = "q-comp-003"
    question["content"]["template"] = "___ went to the ___ on ___."
    question["content"]["blanks"] = [
        {"id": "who", "position": 0, "acceptedAnswers": ["Anna"], "caseSensitive": True},
        {"id": "where", "position": 16, "answer": "park", "alternatives": ["garden"]},
        {"id": "when", "position": 23, "acceptedAnswers": ["Monday"], "caseSensitive": False},
    ]
    return question


def completion_response(*values, ids=None, index=0):
    """Build a canonical completion response from submitted values."""
    ids = ids or [f"b{i + 1}" for i in range(len(values))]
    return {
        "questionIndex": index,
        "questionType": "completion",
        "timestamp": "2026-01-01T00:00:00",
        "response": {
            "answers": [{"blankId": bid, "value": value} for bid, value in zip(ids, values)]
        },
    }


def mc_response(letter, index=0):
    return {
        "questionIndex": index,
        "questionType": "multiple-choice",
        "timestamp": "2026-01-01T00:00:00",
        "response": {"selectedOption": letter},
    }


@pytest.fixture
def make_completion_response():
    return completion_response


@pytest.fixture
def make_mc_response():
    return mc_response
