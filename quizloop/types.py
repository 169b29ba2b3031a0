"""
Question, response and evaluation types shared by every question type.

Questions and responses travel as JSON objects with camelCase keys (that is
what the generation pipeline and the quiz UI produce). The pydantic models
below are the typed view of those objects; handlers work on the plain
JSON-shaped dicts so that malformed input can still be graded.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator, model_validator
from pydantic.alias_generators import to_camel


class QuestionType(str, Enum):
    """Known question type tags. The registry accepts any string tag."""
    MULTIPLE_CHOICE = "multiple-choice"
    COMPLETION = "completion"
    FILL_BLANK = "fill-blank"  # alias of completion used by stored questions
    # Reserved: no handler bundle yet
    MATCHING = "matching"
    SHORT_ANSWER = "short-answer"
    DIAGRAM_LABELLING = "diagram-labelling"


class QuestionDifficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


MC_OPTION_LETTERS = ("A", "B", "C", "D")
OptionLetter = Literal["A", "B", "C", "D"]


def type_key(tag: str | QuestionType) -> str:
    """Plain string key for a tag (enum members hash differently from str)."""
    if isinstance(tag, QuestionType):
        return tag.value
    return str(tag)


# =============================================================================
# Question Models
# =============================================================================


class WireModel(BaseModel):
    """Base for models serialised with camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class QuestionContext(WireModel):
    """Window of the source material the question was generated from."""
    start_time: float
    end_time: float
    text: str


class BaseGeneratedQuestion(WireModel):
    id: str
    question: str
    difficulty: QuestionDifficulty = QuestionDifficulty.MEDIUM
    explanation: str = ""
    context: QuestionContext | None = None


class MultipleChoiceContent(WireModel):
    options: list[str]
    correct_answer: OptionLetter


class MultipleChoiceQuestion(BaseGeneratedQuestion):
    type: Literal["multiple-choice"] = "multiple-choice"
    content: MultipleChoiceContent


class CompletionBlank(WireModel):
    """
    A single blank in a completion template.

    Generated questions describe the acceptable answers either as an
    ``acceptedAnswers`` list or as a primary ``answer`` plus optional
    ``alternatives``. Both are folded into ``accepted_answers`` here.
    """
    id: str
    position: int = 0
    accepted_answers: list[str]
    case_sensitive: bool = False
    hint: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _merge_answer_alternatives(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        if data.get("acceptedAnswers") or data.get("accepted_answers"):
            return data
        primary = data.get("answer")
        if primary is None:
            return data
        merged = dict(data)
        accepted = [primary]
        alternatives = data.get("alternatives")
        if isinstance(alternatives, list):
            accepted.extend(alternatives)
        merged["acceptedAnswers"] = accepted
        return merged

    @field_validator("accepted_answers")
    @classmethod
    def _require_answer(cls, value: list[str]) -> list[str]:
        cleaned = [str(v) for v in value if str(v).strip()]
        if not cleaned:
            raise ValueError("blank must accept at least one non-empty answer")
        return cleaned


class CompletionContent(WireModel):
    template: str
    blanks: list[CompletionBlank]


class CompletionQuestion(BaseGeneratedQuestion):
    type: Literal["completion", "fill-blank"] = "completion"
    content: CompletionContent


class MatchingItem(WireModel):
    id: str
    text: str


class MatchingPair(WireModel):
    left: str
    right: str


class MatchingContent(WireModel):
    left_items: list[MatchingItem]
    right_items: list[MatchingItem]
    correct_pairs: list[MatchingPair]
    max_pairs: int | None = None
    shuffle_items: bool | None = None


class MatchingQuestion(BaseGeneratedQuestion):
    type: Literal["matching"] = "matching"
    content: MatchingContent


class ShortAnswerContent(WireModel):
    sample_answers: list[str]
    max_length: int
    evaluation_criteria: list[str]
    keywords: list[str] | None = None


class ShortAnswerQuestion(BaseGeneratedQuestion):
    type: Literal["short-answer"] = "short-answer"
    content: ShortAnswerContent


class LabelPoint(WireModel):
    id: str
    x: float  # percent from left
    y: float  # percent from top
    correct_label: str
    alternatives: list[str] | None = None
    hint: str | None = None


class DiagramLabellingContent(WireModel):
    diagram_url: str
    diagram_type: Literal["map", "chart", "flowchart", "diagram"]
    label_points: list[LabelPoint]


class DiagramLabellingQuestion(BaseGeneratedQuestion):
    type: Literal["diagram-labelling"] = "diagram-labelling"
    content: DiagramLabellingContent


GeneratedQuestion = Annotated[
    Union[
        MultipleChoiceQuestion,
        CompletionQuestion,
        MatchingQuestion,
        ShortAnswerQuestion,
        DiagramLabellingQuestion,
    ],
    Field(discriminator="type"),
]


# =============================================================================
# Response Models
# =============================================================================


class BaseQuestionResponse(WireModel):
    question_index: int
    timestamp: datetime = Field(default_factory=datetime.now)


class SelectedOption(WireModel):
    selected_option: OptionLetter


class MultipleChoiceResponse(BaseQuestionResponse):
    question_type: Literal["multiple-choice"] = "multiple-choice"
    response: SelectedOption


class BlankAnswer(WireModel):
    blank_id: str
    value: str = ""


class CompletionAnswers(WireModel):
    answers: list[BlankAnswer]


class CompletionResponse(BaseQuestionResponse):
    question_type: Literal["completion", "fill-blank"] = "completion"
    response: CompletionAnswers


class MatchingPairs(WireModel):
    pairs: list[MatchingPair]


class MatchingResponse(BaseQuestionResponse):
    question_type: Literal["matching"] = "matching"
    response: MatchingPairs


class ShortAnswerText(WireModel):
    text: str


class ShortAnswerResponse(BaseQuestionResponse):
    question_type: Literal["short-answer"] = "short-answer"
    response: ShortAnswerText


class PointLabel(WireModel):
    point_id: str
    label: str


class DiagramLabels(WireModel):
    labels: list[PointLabel]


class DiagramLabellingResponse(BaseQuestionResponse):
    question_type: Literal["diagram-labelling"] = "diagram-labelling"
    response: DiagramLabels


QuestionResponse = Annotated[
    Union[
        MultipleChoiceResponse,
        CompletionResponse,
        MatchingResponse,
        ShortAnswerResponse,
        DiagramLabellingResponse,
    ],
    Field(discriminator="question_type"),
]

_question_adapter: TypeAdapter = TypeAdapter(GeneratedQuestion)
_response_adapter: TypeAdapter = TypeAdapter(QuestionResponse)


def parse_question(data: dict[str, Any]) -> BaseGeneratedQuestion:
    """Parse a tagged question dict. Raises pydantic.ValidationError."""
    return _question_adapter.validate_python(data)


def parse_response(data: dict[str, Any]) -> BaseQuestionResponse:
    """Parse a tagged response dict. Raises pydantic.ValidationError."""
    return _response_adapter.validate_python(data)


def as_payload(obj: Any) -> Any:
    """Return the camelCase JSON shape of a model; anything else passes through."""
    if isinstance(obj, WireModel):
        return obj.to_payload()
    if isinstance(obj, BaseModel):
        return obj.model_dump(mode="json", by_alias=True)
    return obj


# =============================================================================
# Results
# =============================================================================


@dataclass
class PartialCredit:
    """Blank-by-blank credit for partially correct answers."""
    earned: int
    possible: int
    details: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"earned": self.earned, "possible": self.possible, "details": list(self.details)}


@dataclass
class QuestionEvaluationResult:
    """Graded outcome of one response. Built fresh by every scorer call."""
    question_index: int | None
    question_type: str
    is_correct: bool
    score: float  # 0.0-1.0
    max_score: float = 1.0
    feedback: str | None = None
    correct_answer: Any = None
    partial_credit: PartialCredit | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the camelCase record stored with quiz results."""
        data: dict[str, Any] = {
            "questionIndex": self.question_index,
            "questionType": self.question_type,
            "isCorrect": self.is_correct,
            "score": self.score,
            "maxScore": self.max_score,
        }
        if self.feedback is not None:
            data["feedback"] = self.feedback
        if self.correct_answer is not None:
            data["correctAnswer"] = self.correct_answer
        if self.partial_credit is not None:
            data["partialCredit"] = self.partial_credit.to_dict()
        return data


@dataclass
class StructuredAnswer:
    """
    Persistence record for an answer.

    ``raw`` keeps the submitted payload for re-processing, ``display_text``
    is what the review screen shows, and ``metadata`` holds flat fields for
    analytics queries (blank count, option count, ...).
    """
    type: str
    raw: Any
    display_text: str
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "raw": self.raw,
            "displayText": self.display_text,
            "metadata": dict(self.metadata),
        }


@dataclass
class ResultDisplay:
    """Display strings for one evaluated question on the results screen."""
    user_answer: str
    correct_answer: str
    explanation: str
    is_correct: bool
    score: float
    details: PartialCredit | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "userAnswer": self.user_answer,
            "correctAnswer": self.correct_answer,
            "explanation": self.explanation,
            "isCorrect": self.is_correct,
            "score": self.score,
        }
        if self.details is not None:
            data["details"] = self.details.to_dict()
        return data


@dataclass
class QuestionTypeMetadata:
    """Descriptive metadata shown on admin and debug surfaces."""
    type: str
    display_name: str
    description: str
    complexity: Literal["low", "medium", "high"] = "low"
    icon: str = ""
    dependencies: list[str] = field(default_factory=list)
    features: list[str] = field(default_factory=list)
