"""
Setup script for quizloop.

quizloop is the question engine of the quiz platform. It serves three roles:

1. Registry - One handler bundle per question type (multiple choice, completion, ...)
2. Grading - Validation and partial-credit scoring that never fails a quiz
3. Review - Display strings and structured answer records for persistence

The 'quizloop' command is a debug/admin view over the registry.
"""

from setuptools import find_packages, setup

setup(
    name="quizloop",
    version="1.0.0",
    description="Question type registry and evaluation engine for quizzes",
    long_description=open("README.md", encoding="utf-8").read() if __import__("os").path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    author="Quizloop",
    packages=find_packages(include=["quizloop", "quizloop.*"]),
    python_requires=">=3.10",
    install_requires=[
        # CLI
        "typer>=0.9.0",
        "rich>=13.0.0",
        # Config & Validation
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        # Logging
        "loguru>=0.7.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "ruff>=0.1.0",
            "mypy>=1.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "quizloop=quizloop.cli:run",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Intended Audience :: Education",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Education",
        "Topic :: Education :: Testing",
    ],
    keywords="quiz question-types grading education",
)
