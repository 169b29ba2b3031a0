"""
Handler bundle protocol and the question type registry.

A handler bundle groups everything the engine needs for one question type:
response validator, scorer, terminal presenter, result formatter and
metadata, plus the enable/production flags used for staged rollout.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any, Callable, Protocol

from loguru import logger
from rich.console import Console

from quizloop.errors import UnregisteredTypeError
from quizloop.types import (
    QuestionEvaluationResult,
    QuestionType,
    QuestionTypeMetadata,
    StructuredAnswer,
    as_payload,
    type_key,
)

Validator = Callable[[Any], bool]
Scorer = Callable[[dict, Any], QuestionEvaluationResult]
Presenter = Callable[[dict, Console], None]
EmptyEvaluator = Callable[[dict, "int | None"], QuestionEvaluationResult]
ResponseParser = Callable[[str], list[dict]]


class ResultFormatter(Protocol):
    """Protocol for per-type result formatters."""

    def format_user_answer(self, question: dict, response: Any) -> str:
        """Display string for the learner's answer."""
        ...

    def format_correct_answer(self, question: dict) -> str:
        """Display string for the expected answer."""
        ...

    def format_explanation(self, question: dict, evaluation: QuestionEvaluationResult) -> str:
        """Explanation shown under the answer on the results screen."""
        ...

    def format_structured_answer(
        self, question: dict, response: Any, evaluation: QuestionEvaluationResult
    ) -> StructuredAnswer:
        """Persistence record for the answer."""
        ...


@dataclass
class HandlerBundle:
    """Everything registered under one question type tag."""
    validator: Validator
    scorer: Scorer
    presenter: Presenter
    metadata: QuestionTypeMetadata
    formatter: ResultFormatter | None = None
    empty_evaluator: EmptyEvaluator | None = None
    response_parser: ResponseParser | None = None
    sample_factory: Callable[[], dict] | None = None

    # Feature flags
    is_enabled: bool = True
    is_production: bool = False


class QuestionTypeRegistry:
    """
    Registry of question type handler bundles.

    One instance is owned per process (see ``quizloop.registry.get_registry``).
    Registration is expected at import time only; lookups are plain dict
    reads, so there is no locking. A fresh instance can be passed to any
    function taking ``registry=`` to isolate tests.
    """

    def __init__(self) -> None:
        self._types: dict[str, HandlerBundle] = {}
        self._initialized = False

    def register(self, question_type: str | QuestionType, bundle: HandlerBundle) -> None:
        """Register a bundle. An existing registration is replaced wholesale."""
        key = type_key(question_type)
        if key in self._types:
            logger.warning(f"Question type '{key}' is already registered. Overwriting...")

        # Copy so that aliases sharing a bundle keep independent flags
        self._types[key] = dataclasses.replace(bundle)
        self._initialized = True
        logger.debug(f"Registered question type: {key}")

    def unregister(self, question_type: str | QuestionType) -> None:
        self._types.pop(type_key(question_type), None)

    def reset(self) -> None:
        """Drop every registration."""
        self._types.clear()
        self._initialized = False

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_bundle(self, question_type: str | QuestionType) -> HandlerBundle:
        """Get the bundle for a type. Raises UnregisteredTypeError if absent."""
        bundle = self._types.get(type_key(question_type))
        if bundle is None:
            raise UnregisteredTypeError(type_key(question_type))
        return bundle

    def is_registered(self, question_type: str | QuestionType) -> bool:
        return type_key(question_type) in self._types

    def is_enabled(self, question_type: str | QuestionType) -> bool:
        bundle = self._types.get(type_key(question_type))
        return bundle.is_enabled if bundle else False

    def get_all_types(self) -> list[str]:
        return list(self._types)

    def get_enabled_types(self) -> list[str]:
        return [key for key, bundle in self._types.items() if bundle.is_enabled]

    def get_production_types(self) -> list[str]:
        return [
            key for key, bundle in self._types.items()
            if bundle.is_enabled and bundle.is_production
        ]

    def get_all_metadata(self) -> dict[str, QuestionTypeMetadata]:
        return {key: bundle.metadata for key, bundle in self._types.items()}

    # ------------------------------------------------------------------
    # Administrative toggles
    # ------------------------------------------------------------------

    def set_enabled(self, question_type: str | QuestionType, enabled: bool) -> None:
        """Enable or disable a registered type. Unknown types are ignored."""
        key = type_key(question_type)
        bundle = self._types.get(key)
        if bundle is None:
            logger.warning(f"Cannot toggle unregistered question type: {key}")
            return
        bundle.is_enabled = enabled
        logger.info(f"{'Enabled' if enabled else 'Disabled'} question type: {key}")

    def set_production_ready(self, question_type: str | QuestionType, is_production: bool) -> None:
        """Mark a registered type as production-ready or in development."""
        key = type_key(question_type)
        bundle = self._types.get(key)
        if bundle is None:
            logger.warning(f"Cannot change rollout stage of unregistered question type: {key}")
            return
        bundle.is_production = is_production
        logger.info(f"{'Production' if is_production else 'Development'} mode for: {key}")

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def validate_response(self, question_type: str | QuestionType, response: Any) -> bool:
        """Validate a raw response against its type. False for unknown types."""
        bundle = self._types.get(type_key(question_type))
        if bundle is None:
            return False
        return bundle.validator(as_payload(response))

    def calculate_score(self, question: Any, response: Any) -> QuestionEvaluationResult:
        """
        Score a response with the scorer registered for ``question["type"]``.

        Raises UnregisteredTypeError for unknown types; the live quiz loop
        should go through ``quizloop.evaluation.evaluate_response`` instead.
        """
        payload = as_payload(question)
        bundle = self.get_bundle(payload.get("type", ""))
        return bundle.scorer(payload, as_payload(response))

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def get_status(self) -> dict[str, Any]:
        enabled = self.get_enabled_types()
        production = self.get_production_types()
        return {
            "initialized": self._initialized,
            "totalTypes": len(self._types),
            "enabledTypes": len(enabled),
            "productionTypes": len(production),
            "developmentTypes": len(enabled) - len(production),
        }

    def debug(self) -> None:
        """Log registry status and per-type details."""
        logger.info(f"Question type registry status: {self.get_status()}")
        logger.info(f"All types: {self.get_all_types()}")
        logger.info(f"Enabled types: {self.get_enabled_types()}")
        logger.info(f"Production types: {self.get_production_types()}")
        for key, bundle in self._types.items():
            logger.info(
                f"{key}: enabled={bundle.is_enabled} production={bundle.is_production} "
                f"complexity={bundle.metadata.complexity} features={bundle.metadata.features}"
            )
