"""
Question Domain Model Module

This module defines the core domain entities for the question bank.
"""

import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Any
import uuid

from learnportal.common.error_handling import ValidationError
from learnportal.common.utils import utcnow, isoformat_or_none
from learnportal.common.validation import validate_identifier, validate_int_range, validate_text

MAX_TEXT_LENGTH = 1000


class QuestionType(enum.Enum):
    """
    Enum representing how a question is presented.

    All three types are scored the same way: one option index is correct.
    """
    MULTIPLE_CHOICE = "multiple_choice"
    SINGLE_CHOICE = "single_choice"
    TRUE_FALSE = "true_false"

    @classmethod
    def parse(cls, value: Any) -> 'QuestionType':
        """Coerce a raw value into a QuestionType, raising ValidationError."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise ValidationError(
                "Invalid question type. Must be one of: " + ", ".join(t.value for t in cls),
                details={"field": "question_type", "value": repr(value)}
            )


def validate_options(options: Any) -> List[str]:
    """Check that options is a non-empty list of non-blank strings."""
    if not isinstance(options, (list, tuple)) or not options:
        raise ValidationError("options must be a non-empty list", details={"field": "options"})
    return [validate_text(option, "options") for option in options]


def validate_answer_key(options: List[str], correct_option: Any, points: Any) -> None:
    """Check that correct_option indexes into options and points is positive."""
    validate_int_range(correct_option, "correct_option", minimum=0, maximum=len(options) - 1)
    validate_int_range(points, "points", minimum=1)


@dataclass
class Question:
    """
    Represents a question in an exam's question bank.

    Attributes:
        question_id: Unique identifier for the question
        text: The question text
        question_type: Presentation type of the question
        exam_id: The exam this question belongs to
        options: Ordered list of answer options
        correct_option: Zero-based index of the correct option
        points: Points awarded for a correct answer
        is_active: Whether the question is served in attempts
        created_at: When the question was created
        updated_at: When the question was last updated
        deleted_at: When the question was soft-deleted, if ever
    """
    question_id: str
    text: str
    question_type: QuestionType
    exam_id: str
    options: List[str]
    correct_option: int
    points: int = 1
    is_active: bool = True
    created_at: datetime = field(default_factory=utcnow)
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None

    @classmethod
    def create(cls,
               text: str,
               question_type: Any,
               exam_id: str,
               options: List[str],
               correct_option: int,
               points: int = 1,
               now: Optional[datetime] = None) -> 'Question':
        """
        Create a new, validated question with a generated ID.

        Args:
            text: The question text
            question_type: A QuestionType or its string value
            exam_id: Identifier of the owning exam
            options: Ordered list of answer options
            correct_option: Zero-based index of the correct option
            points: Points awarded for a correct answer
            now: Creation timestamp (defaults to the current UTC time)

        Returns:
            A new Question instance

        Raises:
            ValidationError: If any field is invalid
        """
        question = cls(
            question_id=str(uuid.uuid4()),
            text=text,
            question_type=QuestionType.parse(question_type),
            exam_id=exam_id,
            options=list(options) if isinstance(options, (list, tuple)) else options,
            correct_option=correct_option,
            points=points,
            created_at=now or utcnow()
        )
        question.validate()
        return question

    def validate(self) -> None:
        """
        Check every invariant, normalizing text fields in place.

        Raises:
            ValidationError: If an invariant does not hold
        """
        self.question_id = validate_identifier(self.question_id, "question_id")
        self.exam_id = validate_identifier(self.exam_id, "exam_id")
        self.text = validate_text(self.text, "text", MAX_TEXT_LENGTH)
        self.question_type = QuestionType.parse(self.question_type)
        self.options = validate_options(self.options)
        validate_answer_key(self.options, self.correct_option, self.points)

    def update(self,
               text: str,
               options: List[str],
               correct_option: int,
               points: int,
               now: Optional[datetime] = None) -> None:
        """
        Replace the editable content of the question.

        Validation runs on the new values before anything is assigned, so a
        rejected update leaves the question untouched.

        Raises:
            ValidationError: If the new values are invalid
        """
        text = validate_text(text, "text", MAX_TEXT_LENGTH)
        options = validate_options(options)
        validate_answer_key(options, correct_option, points)

        self.text = text
        self.options = options
        self.correct_option = correct_option
        self.points = points
        self.updated_at = now or utcnow()

    def is_correct(self, selected: Any) -> bool:
        """
        Check a selected option index against the answer key.

        Anything other than an integer equal to the correct index (None, a
        string, a bool, an out-of-range int) is simply incorrect.
        """
        if isinstance(selected, bool) or not isinstance(selected, int):
            return False
        return selected == self.correct_option

    def score_for(self, selected: Any) -> int:
        """Points earned for a selection."""
        return self.points if self.is_correct(selected) else 0

    def activate(self, now: Optional[datetime] = None) -> None:
        self.is_active = True
        self.updated_at = now or utcnow()

    def deactivate(self, now: Optional[datetime] = None) -> None:
        self.is_active = False
        self.updated_at = now or utcnow()

    def soft_delete(self, now: Optional[datetime] = None) -> None:
        """Mark the question deleted; deleted questions are never active."""
        self.deleted_at = now or utcnow()
        self.is_active = False

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def to_public_dict(self) -> Dict[str, Any]:
        """
        Sanitized view served to exam takers.

        The answer key is deliberately absent.
        """
        return {
            'id': self.question_id,
            'text': self.text,
            'type': self.question_type.value,
            'options': list(self.options),
            'points': self.points
        }

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the question to a dictionary.

        Returns:
            Dictionary representation of the question, answer key included
        """
        return {
            'question_id': self.question_id,
            'text': self.text,
            'question_type': self.question_type.value,
            'exam_id': self.exam_id,
            'options': list(self.options),
            'correct_option': self.correct_option,
            'points': self.points,
            'is_active': self.is_active,
            'created_at': self.created_at.isoformat(),
            'updated_at': isoformat_or_none(self.updated_at),
            'deleted_at': isoformat_or_none(self.deleted_at)
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Question':
        """
        Create a Question from a dictionary.

        Args:
            data: Dictionary containing question data

        Returns:
            A Question instance
        """
        def parse_dt(key: str) -> Optional[datetime]:
            value = data.get(key)
            return datetime.fromisoformat(value) if value else None

        return cls(
            question_id=data.get('question_id'),
            text=data.get('text'),
            question_type=QuestionType.parse(data.get('question_type')),
            exam_id=data.get('exam_id'),
            options=list(data.get('options', [])),
            correct_option=data.get('correct_option', 0),
            points=data.get('points', 1),
            is_active=data.get('is_active', True),
            created_at=parse_dt('created_at') or utcnow(),
            updated_at=parse_dt('updated_at'),
            deleted_at=parse_dt('deleted_at')
        )
