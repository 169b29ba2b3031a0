"""
Unit tests for result formatters and the result display dispatch.
"""

import pytest

from quizloop.registry import HandlerBundle
from quizloop.registry.formatters.completion import CompletionFormatter
from quizloop.registry.formatters.multiple_choice import DEFAULT_EXPLANATION, MultipleChoiceFormatter
from quizloop.registry.question_types.completion import calculate_completion_score
from quizloop.registry.question_types.multiple_choice import calculate_multiple_choice_score
from quizloop.results import format_result, format_structured_answer, has_formatter
from quizloop.types import QuestionEvaluationResult, QuestionTypeMetadata


def _evaluation(question_type="matching", **kwargs):
    fields = dict(question_index=0, question_type=question_type, is_correct=False, score=0.0)
    fields.update(kwargs)
    return QuestionEvaluationResult(**fields)


class TestMultipleChoiceFormatter:
    """Test lettered-option display strings."""

    @pytest.fixture
    def formatter(self):
        return MultipleChoiceFormatter()

    def test_user_answer_with_text(self, formatter, mc_question, make_mc_response):
        assert formatter.format_user_answer(mc_question, make_mc_response("C")) == "C. The museum"

    def test_user_answer_without_text(self, formatter, mc_question, make_mc_response):
        mc_question["content"]["options"] = ["Home", "The park"]
        assert formatter.format_user_answer(mc_question, make_mc_response("D")) == "D"

    def test_no_selection(self, formatter, mc_question):
        assert formatter.format_user_answer(mc_question, {"response": {}}) == "No answer selected"

    def test_correct_answer(self, formatter, mc_question):
        assert formatter.format_correct_answer(mc_question) == "B. The park"

    def test_correct_answer_unknown(self, formatter):
        assert formatter.format_correct_answer({"content": {}}) == "Unknown"

    def test_explanation_prefers_question(self, formatter, mc_question):
        evaluation = _evaluation("multiple-choice", feedback="Incorrect.")
        assert formatter.format_explanation(mc_question, evaluation) == mc_question["explanation"]

    def test_explanation_default(self, formatter):
        assert formatter.format_explanation({}, _evaluation("multiple-choice")) == DEFAULT_EXPLANATION

    def test_structured_answer(self, formatter, mc_question, make_mc_response):
        response = make_mc_response("B")
        evaluation = calculate_multiple_choice_score(mc_question, response)
        record = formatter.format_structured_answer(mc_question, response, evaluation)

        assert record.type == "multiple-choice"
        assert record.raw == {"selectedOption": "B"}
        assert record.display_text == "B. The park"
        assert record.metadata["optionCount"] == 4
        assert record.metadata["isCorrect"] is True


class TestCompletionFormatter:
    """Test blank answer display strings."""

    @pytest.fixture
    def formatter(self):
        return CompletionFormatter()

    @pytest.fixture
    def single_blank_question(self, completion_question):
        completion_question["content"]["blanks"] = completion_question["content"]["blanks"][:1]
        return completion_question

    def test_single_blank(self, formatter, single_blank_question, make_completion_response):
        assert formatter.format_user_answer(single_blank_question, make_completion_response("sunny")) == '"sunny"'

    def test_multiple_blanks(self, formatter, completion_question, make_completion_response):
        display = formatter.format_user_answer(completion_question, make_completion_response("sunny", "garden"))
        assert display == '1:"sunny" • 2:"garden"'

    def test_blanks_follow_template_position(self, formatter, completion_question, make_completion_response):
        """Blanks declared out of order are shown in template order."""
        completion_question["content"]["blanks"].reverse()
        display = formatter.format_user_answer(completion_question, make_completion_response("sunny", "park"))
        assert display == '1:"sunny" • 2:"park"'

    def test_empty_value(self, formatter, completion_question, make_completion_response):
        display = formatter.format_user_answer(completion_question, make_completion_response("", "park"))
        assert display == '1:"(empty)" • 2:"park"'

    def test_no_answers(self, formatter, completion_question):
        assert formatter.format_user_answer(completion_question, {}) == "No answer provided"

    def test_correct_answer_single_with_alternatives(self, formatter, single_blank_question):
        assert formatter.format_correct_answer(single_blank_question) == '"sunny" (+1 more)'

    def test_correct_answer_single(self, formatter, completion_question):
        completion_question["content"]["blanks"] = completion_question["content"]["blanks"][1:]
        assert formatter.format_correct_answer(completion_question) == '"park"'

    def test_correct_answer_multiple(self, formatter, completion_question):
        assert formatter.format_correct_answer(completion_question) == '1:"sunny" • 2:"park"'

    def test_correct_answer_alias_fields(self, formatter, three_blank_question):
        assert formatter.format_correct_answer(three_blank_question) == '1:"Anna" • 2:"park" • 3:"Monday"'

    def test_explanation_prefers_feedback(self, formatter, completion_question):
        evaluation = _evaluation("completion", feedback="Good work!")
        assert formatter.format_explanation(completion_question, evaluation) == "Good work!"

    def test_explanation_fallback(self, formatter):
        assert formatter.format_explanation({}, _evaluation("completion")) == "No explanation available"

    def test_structured_answer(self, formatter, completion_question, make_completion_response):
        response = make_completion_response("sunny", "")
        evaluation = calculate_completion_score(completion_question, response)
        record = formatter.format_structured_answer(completion_question, response, evaluation)

        assert record.raw == response["response"]
        assert record.metadata["blankCount"] == 2
        assert record.metadata["answeredCount"] == 1
        assert record.metadata["earned"] == 1
        assert record.metadata["possible"] == 2

    def test_structured_answer_keeps_unrecognized_payload(self, formatter, completion_question):
        """The submitted payload is stored as-is for re-processing."""
        response = {"questionIndex": 0, "questionType": "completion", "response": {"text": "sunny park"}}
        evaluation = calculate_completion_score(completion_question, response)
        record = formatter.format_structured_answer(completion_question, response, evaluation)

        assert record.raw == {"text": "sunny park"}
        assert record.display_text == "No answer provided"
        assert record.metadata["answeredCount"] == 0

    def test_structured_answer_bare_list(self, formatter, completion_question):
        answers = [{"blankId": "b1", "value": "sunny"}]
        evaluation = calculate_completion_score(completion_question, answers)
        record = formatter.format_structured_answer(completion_question, answers, evaluation)

        assert record.raw == answers


class TestResultDispatch:
    """Test format_result/format_structured_answer dispatch and fallbacks."""

    def test_dispatches_to_type_formatter(self, registry, completion_question, make_completion_response):
        response = make_completion_response("sunny", "garden")
        evaluation = calculate_completion_score(completion_question, response)
        display = format_result(completion_question, response, evaluation, registry=registry)

        assert display.user_answer == '1:"sunny" • 2:"garden"'
        assert display.score == 0.5
        assert display.details.earned == 1

    def test_mc_formatter_registered(self, registry):
        assert has_formatter("multiple-choice", registry) is True
        assert has_formatter("fill-blank", registry) is True

    def test_unregistered_type_uses_generic(self, registry):
        question = {"id": "m1", "type": "matching", "explanation": "Pairs."}
        response = {"response": {"pairs": [{"left": "a", "right": "1"}]}}
        display = format_result(question, response, _evaluation(), registry=registry)

        assert display.user_answer == '{"pairs": [{"left": "a", "right": "1"}]}'
        assert display.correct_answer == "See explanation"
        assert display.explanation == "Pairs."

    def test_generic_uses_evaluation_correct_answer(self, registry):
        evaluation = _evaluation(correct_answer="a-1")
        display = format_result({"type": "matching"}, {}, evaluation, registry=registry)
        assert display.correct_answer == "a-1"

    def test_failing_formatter_falls_back(self, registry, mc_question):
        class BrokenFormatter:
            def format_user_answer(self, question, response):
                raise RuntimeError("boom")

        bundle = registry.get_bundle("multiple-choice")
        registry.register(
            "short-answer",
            HandlerBundle(
                validator=bundle.validator,
                scorer=bundle.scorer,
                presenter=bundle.presenter,
                formatter=BrokenFormatter(),
                metadata=QuestionTypeMetadata(type="short-answer", display_name="Short", description=""),
            ),
        )
        display = format_result(
            {"type": "short-answer"}, {"response": {"text": "hi"}}, _evaluation("short-answer"), registry=registry
        )

        assert display.user_answer == '{"text": "hi"}'
        record = format_structured_answer(
            {"type": "short-answer"}, {"response": {"text": "hi"}}, _evaluation("short-answer"), registry=registry
        )
        assert record.raw == {"text": "hi"}

    @pytest.mark.parametrize("question", [None, "q", 3])
    def test_non_dict_question(self, registry, question):
        display = format_result(question, {}, _evaluation(""), registry=registry)
        assert display.correct_answer == "See explanation"

    def test_structured_generic(self, registry):
        record = format_structured_answer(
            {"type": "matching"}, {"response": {"pairs": []}}, _evaluation(), registry=registry
        )

        assert record.type == "matching"
        assert record.metadata == {"isCorrect": False, "score": 0.0}
