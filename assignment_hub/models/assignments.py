# FILE: assignment_hub/models/assignments.py
"""
Assignment models

Field aliases match the persisted record shape (camelCase); Python code uses
the snake_case attribute names.
"""
import re
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, List, Dict, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def _compact(value: str) -> str:
    return re.sub(r"[^a-z0-9]", "", value.lower())


class _LenientEnum(str, Enum):
    """Accepts case, spacing and punctuation variants of values and names"""

    @classmethod
    def _missing_(cls, value):
        if not isinstance(value, str):
            return None
        key = _compact(value)
        for member in cls:
            if key in (_compact(member.value), _compact(member.name)):
                return member
        return None


class Purpose(_LenientEnum):
    PRACTICE = "Practice"
    PRE_TEST = "Pre-Test"
    REVISION = "Revision"
    CHALLENGE = "Challenge"
    HOMEWORK = "Homework"


class Difficulty(_LenientEnum):
    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"


_FORMAT_ALIASES = {
    "multiplechoice": "MCQ",
    "mcqs": "MCQ",
    "short": "Short Answer",
    "long": "Long Answer",
    "essay": "Long Answer",
    "fillintheblanks": "Fill-in-the-Blank",
    "fillblanks": "Fill-in-the-Blank",
}


class QuestionFormat(_LenientEnum):
    MCQ = "MCQ"
    SHORT_ANSWER = "Short Answer"
    LONG_ANSWER = "Long Answer"
    FILL_BLANK = "Fill-in-the-Blank"

    @classmethod
    def _missing_(cls, value):
        member = super()._missing_(value)
        if member is None and isinstance(value, str):
            alias = _FORMAT_ALIASES.get(_compact(value))
            if alias:
                return cls(alias)
        return member


class Creator(_LenientEnum):
    PARENT = "parent"
    STUDENT = "student"


class AssignmentStatus(_LenientEnum):
    NOT_STARTED = "NotStarted"
    IN_PROGRESS = "InProgress"
    COMPLETED = "Completed"

    @property
    def rank(self) -> int:
        return list(AssignmentStatus).index(self)

    def can_move_to(self, target: "AssignmentStatus") -> bool:
        """Status only moves forward; Completed is final"""
        if self == AssignmentStatus.COMPLETED:
            return False
        return target.rank >= self.rank


class AssignmentCriteria(BaseModel):
    """What kind of assignment to generate. Immutable once submitted."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    subject: str = Field(..., min_length=1)
    topics: str = Field(..., min_length=1, description="Comma-joined topic names")
    purpose: Purpose = Purpose.PRACTICE
    difficulty: Difficulty = Difficulty.MEDIUM
    formats: List[QuestionFormat] = Field(..., min_length=1, alias="format")
    num_questions: int = Field(default=10, ge=1, le=50, alias="numQuestions")
    created_by: Creator = Field(default=Creator.PARENT, alias="createdBy")

    @field_validator("subject", mode="before")
    @classmethod
    def strip_subject(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("topics", mode="before")
    @classmethod
    def join_topics(cls, v):
        if isinstance(v, (list, tuple)):
            return ", ".join(str(t).strip() for t in v if str(t).strip())
        return v.strip() if isinstance(v, str) else v

    @field_validator("formats", mode="before")
    @classmethod
    def wrap_single_format(cls, v):
        if isinstance(v, str):
            return [v]
        return v

    @field_validator("formats")
    @classmethod
    def dedupe_formats(cls, v):
        seen = []
        for fmt in v:
            if fmt not in seen:
                seen.append(fmt)
        return seen


class Question(BaseModel):
    """A single assignment question"""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., min_length=1)
    type: QuestionFormat
    text: str = Field(..., min_length=1)
    options: Optional[List[str]] = None
    correct_answer: Optional[str] = Field(default=None, alias="correctAnswer")
    student_answer: str = Field(default="", alias="studentAnswer")
    is_correct: Optional[bool] = Field(default=None, alias="isCorrect")

    @field_validator("student_answer", mode="before")
    @classmethod
    def default_student_answer(cls, v):
        return "" if v is None else str(v)

    @model_validator(mode="after")
    def check_answer_key(self):
        if self.type == QuestionFormat.MCQ:
            if not self.options:
                raise ValueError(f"MCQ {self.id} has no options")
            if self.correct_answer not in self.options:
                raise ValueError(f"MCQ {self.id} correct answer is not one of its options")
        else:
            # Only MCQs carry an answer key
            self.options = None
            self.correct_answer = None
        return self

    def to_record(self) -> Dict[str, Any]:
        """Persisted shape; isCorrect stays present (null means not graded)"""
        data = self.model_dump(by_alias=True, mode="json")
        if data.get("options") is None:
            data.pop("options", None)
            data.pop("correctAnswer", None)
        return data


class Example(BaseModel):
    problem: str = ""
    solution: str = ""


class SanitizeOutcome(str, Enum):
    PARSED = "parsed"
    EMPTY_FALLBACK = "empty_fallback"


class GenerationResult(BaseModel):
    """
    Structured content recovered from model text.

    Always fully defined. outcome tells a real parse apart from the zero value
    returned when the text could not be reduced to an object.
    """
    outcome: SanitizeOutcome = SanitizeOutcome.PARSED
    explanation: str = ""
    examples: List[Dict[str, Any]] = Field(default_factory=list)
    questions: List[Dict[str, Any]] = Field(default_factory=list)

    @classmethod
    def empty(cls) -> "GenerationResult":
        return cls(outcome=SanitizeOutcome.EMPTY_FALLBACK)

    @property
    def is_empty_fallback(self) -> bool:
        return self.outcome == SanitizeOutcome.EMPTY_FALLBACK


# Keys dropped from the persisted record while unset, so presence is a signal
OPTIONAL_RECORD_FIELDS = (
    "parentId", "score", "explanation", "examples",
    "aiSuggestion", "parentComment", "completedAt",
)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Assignment(BaseModel):
    """Persisted assignment record"""
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = None
    student_id: str = Field(..., alias="studentId")
    parent_id: Optional[str] = Field(default=None, alias="parentId")

    # Criteria snapshot
    subject: str
    topics: str
    purpose: Purpose
    difficulty: Difficulty
    formats: List[QuestionFormat] = Field(..., alias="format")
    num_questions: int = Field(..., alias="numQuestions")
    created_by: Creator = Field(default=Creator.PARENT, alias="createdBy")

    questions: List[Question] = Field(default_factory=list)
    status: AssignmentStatus = AssignmentStatus.NOT_STARTED
    explanation: Optional[str] = None
    examples: Optional[List[Example]] = None
    score: Optional[int] = Field(default=None, ge=0, le=100)
    ai_suggestion: Optional[str] = Field(default=None, alias="aiSuggestion")
    parent_comment: Optional[str] = Field(default=None, alias="parentComment")
    created_at: datetime = Field(default_factory=utcnow, alias="createdAt")
    completed_at: Optional[datetime] = Field(default=None, alias="completedAt")
    version: int = 0

    @model_validator(mode="after")
    def check_completion_fields(self):
        if self.status != AssignmentStatus.COMPLETED and (
            self.score is not None or self.ai_suggestion is not None
        ):
            raise ValueError("score and aiSuggestion are only set once an assignment is Completed")
        return self

    @property
    def criteria(self) -> AssignmentCriteria:
        return AssignmentCriteria(
            subject=self.subject,
            topics=self.topics,
            purpose=self.purpose,
            difficulty=self.difficulty,
            formats=self.formats,
            num_questions=self.num_questions,
            created_by=self.created_by,
        )

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Assignment":
        return cls.model_validate(record)

    def to_record(self) -> Dict[str, Any]:
        """Serialize for the document store (id is the store key)"""
        data = self.model_dump(by_alias=True, mode="json", exclude={"id"})
        data["questions"] = [q.to_record() for q in self.questions]
        for key in OPTIONAL_RECORD_FIELDS:
            if data.get(key) is None:
                data.pop(key, None)
        return data


class AssignmentTemplate(BaseModel):
    """Saved criteria a parent can reuse"""
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = None
    parent_id: str = Field(..., alias="parentId")
    name: str = Field(..., min_length=1)
    criteria: AssignmentCriteria
    created_at: datetime = Field(default_factory=utcnow, alias="createdAt")


class TopicInsight(BaseModel):
    """A topic suggested to a student exploring a subject"""
    model_config = ConfigDict(populate_by_name=True)

    topic_name: str = Field(..., alias="topicName")
    explanation: str = ""
    example: str = ""
    quick_tip: str = Field(default="", alias="quickTip")


class GenerateAssignmentRequest(BaseModel):
    """Request to generate an assignment"""
    student_id: str
    parent_id: Optional[str] = None
    criteria: AssignmentCriteria


class AnswersRequest(BaseModel):
    """Save progress or submit answers"""
    answers: Dict[str, str] = Field(default_factory=dict)
    expected_version: Optional[int] = Field(default=None, ge=0)


class CommentRequest(BaseModel):
    """Parent comment on an assignment"""
    comment: str = Field(..., min_length=1)


class TopicRequest(BaseModel):
    """Topic suggestion request"""
    student_id: str
    subject: str = Field(..., min_length=1)


class TemplateCreateRequest(BaseModel):
    """Save a criteria template"""
    parent_id: str
    name: str = Field(..., min_length=1)
    criteria: AssignmentCriteria
