"""
Unit tests for the question type registry.

Tests registration, lookups, rollout toggles and dispatch.
"""

import dataclasses

import pytest
from loguru import logger

from quizloop.errors import UnregisteredTypeError
from quizloop.registry import (
    HandlerBundle,
    QuestionTypeRegistry,
    apply_settings,
    get_registry,
    install_default_types,
)
from quizloop.config import Settings
from quizloop.types import QuestionEvaluationResult, QuestionType, QuestionTypeMetadata


def _stub_bundle(tag: str, **overrides) -> HandlerBundle:
    fields = dict(
        validator=lambda response: True,
        scorer=lambda question, response: QuestionEvaluationResult(
            question_index=None, question_type=tag, is_correct=True, score=1.0
        ),
        presenter=lambda question, console: console.print(tag),
        metadata=QuestionTypeMetadata(type=tag, display_name=tag.title(), description="stub"),
    )
    fields.update(overrides)
    return HandlerBundle(**fields)


class TestProcessRegistry:
    """Test the built-in registrations on the process registry."""

    def test_builtin_types_registered(self):
        registry = get_registry()
        assert registry.is_registered("multiple-choice")
        assert registry.is_registered("completion")
        assert registry.is_registered("fill-blank")

    def test_reserved_types_not_registered(self):
        registry = get_registry()
        for tag in ("matching", "short-answer", "diagram-labelling"):
            assert not registry.is_registered(tag)

    def test_lookup_by_enum(self):
        assert get_registry().is_registered(QuestionType.MULTIPLE_CHOICE)

    def test_get_registry_is_singleton(self):
        assert get_registry() is get_registry()

    def test_enabled_types_follow_toggles(self):
        """Enabled types are read live from the registry, not cached."""
        registry = get_registry()
        try:
            registry.set_enabled("fill-blank", False)
            assert "fill-blank" not in registry.get_enabled_types()
        finally:
            registry.set_enabled("fill-blank", True)
        assert "fill-blank" in registry.get_enabled_types()


class TestRegistration:
    """Test register/get_bundle semantics."""

    def test_get_bundle_unregistered_raises(self, registry):
        with pytest.raises(UnregisteredTypeError) as exc:
            registry.get_bundle("matching")
        assert "matching" in str(exc.value)

    def test_unregistered_error_is_key_error(self, registry):
        with pytest.raises(KeyError):
            registry.get_bundle("nope")

    def test_reregister_replaces_whole_bundle(self, registry):
        registry.register("matching", _stub_bundle("matching", is_production=True))
        replacement = _stub_bundle("matching")
        registry.register("matching", replacement)

        bundle = registry.get_bundle("matching")
        assert bundle.is_production is False
        assert bundle.scorer is replacement.scorer

    def test_register_copies_bundle(self, registry):
        shared = _stub_bundle("matching")
        registry.register("matching", shared)
        registry.set_enabled("matching", False)

        assert shared.is_enabled is True

    def test_alias_flags_are_independent(self, registry):
        registry.set_enabled("fill-blank", False)

        assert registry.is_enabled("completion") is True
        assert registry.is_enabled("fill-blank") is False

    def test_reset_clears_everything(self, registry):
        registry.reset()
        assert registry.get_all_types() == []
        assert registry.get_status()["initialized"] is False

    def test_install_default_types_restores(self):
        registry = install_default_types(QuestionTypeRegistry())
        assert set(registry.get_all_types()) == {"multiple-choice", "completion", "fill-blank"}

    def test_unregister(self, registry):
        registry.unregister("fill-blank")
        assert not registry.is_registered("fill-blank")


class TestRolloutFlags:
    """Test enable/production toggles and filtered views."""

    def test_enabled_types(self, registry):
        assert set(registry.get_enabled_types()) == {"multiple-choice", "completion", "fill-blank"}

    def test_production_types(self, registry):
        assert registry.get_production_types() == ["multiple-choice"]

    def test_disabled_type_leaves_enabled_view(self, registry):
        registry.set_enabled("completion", False)

        assert "completion" not in registry.get_enabled_types()
        assert registry.is_registered("completion")

    def test_disabled_production_type_not_in_production_view(self, registry):
        registry.set_enabled("multiple-choice", False)
        assert registry.get_production_types() == []

    def test_set_production_ready(self, registry):
        registry.set_production_ready("completion", True)
        assert "completion" in registry.get_production_types()

    def test_toggle_unknown_type_is_noop(self, registry):
        registry.set_enabled("matching", True)
        registry.set_production_ready("matching", True)
        assert not registry.is_registered("matching")

    def test_is_enabled_unknown_type(self, registry):
        assert registry.is_enabled("matching") is False

    def test_status_counts(self, registry):
        status = registry.get_status()
        assert status == {
            "initialized": True,
            "totalTypes": 3,
            "enabledTypes": 3,
            "productionTypes": 1,
            "developmentTypes": 2,
        }

    def test_metadata(self, registry):
        metadata = registry.get_all_metadata()
        assert metadata["completion"].display_name == "Fill in the Blanks"
        assert metadata["multiple-choice"].complexity == "low"

    def test_apply_settings(self, registry):
        settings = Settings(disabled_types="completion, fill-blank", production_types="completion")
        apply_settings(registry, settings)

        assert registry.get_enabled_types() == ["multiple-choice"]
        assert registry.get_bundle("completion").is_production is True


class TestDispatch:
    """Test validate_response/calculate_score dispatch."""

    def test_validate_unknown_type(self, registry):
        assert registry.validate_response("matching", {"questionType": "matching"}) is False

    def test_validate_dispatches(self, registry, make_mc_response):
        assert registry.validate_response("multiple-choice", make_mc_response("A")) is True

    def test_calculate_score_dispatches(self, registry, mc_question, make_mc_response):
        result = registry.calculate_score(mc_question, make_mc_response("B"))
        assert result.score == 1.0

    def test_calculate_score_unregistered_raises(self, registry, mc_question):
        question = dict(mc_question, type="matching")
        with pytest.raises(UnregisteredTypeError):
            registry.calculate_score(question, {})

    def test_new_type_needs_no_engine_changes(self, registry):
        registry.register("short-answer", _stub_bundle("short-answer"))
        result = registry.calculate_score({"type": "short-answer"}, {"response": {"text": "x"}})

        assert result.question_type == "short-answer"
        assert result.is_correct is True

    def test_bundle_is_a_dataclass_copy(self, registry):
        bundle = registry.get_bundle("completion")
        assert dataclasses.is_dataclass(bundle)

    def test_debug_logs_each_type(self, registry):
        messages = []
        sink_id = logger.add(messages.append, level="INFO")
        try:
            registry.debug()
        finally:
            logger.remove(sink_id)

        assert any("completion: enabled=True production=False" in m for m in messages)
        assert any("Production types: ['multiple-choice']" in m for m in messages)
