"""
Exam Domain Model Module

An exam groups questions under a title, an advisory duration and a
passing threshold.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

from learnportal.common.utils import utcnow, isoformat_or_none
from learnportal.common.validation import validate_identifier, validate_int_range, validate_text
from learnportal.domain.topics.model import validate_description

MAX_TITLE_LENGTH = 255
MIN_DURATION_MINUTES = 1
MAX_DURATION_MINUTES = 480


@dataclass
class Exam:
    """
    Represents an exam.

    Attributes:
        exam_id: Unique identifier for the exam
        title: Display title
        description: Free-form description (may be empty)
        duration_minutes: Advisory time limit, 1 to 480 minutes
        passing_score_percentage: Minimum percentage that passes, 0 to 100
        topic_id: Optional topic the exam belongs to
        is_active: Whether the exam can be assigned and started
        created_at: When the exam was created
        updated_at: When the exam was last updated
        deleted_at: When the exam was soft-deleted, if ever
    """
    exam_id: str
    title: str
    description: str = ""
    duration_minutes: int = 60
    passing_score_percentage: int = 70
    topic_id: Optional[str] = None
    is_active: bool = True
    created_at: datetime = field(default_factory=utcnow)
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None

    @classmethod
    def create(cls,
               title: str,
               description: str = "",
               duration_minutes: int = 60,
               passing_score_percentage: int = 70,
               topic_id: Optional[str] = None,
               now: Optional[datetime] = None) -> 'Exam':
        """
        Create a new, validated exam with a generated ID.

        Raises:
            ValidationError: If any field is invalid
        """
        exam = cls(
            exam_id=str(uuid.uuid4()),
            title=title,
            description=description,
            duration_minutes=duration_minutes,
            passing_score_percentage=passing_score_percentage,
            topic_id=topic_id,
            created_at=now or utcnow()
        )
        exam.validate()
        return exam

    def validate(self) -> None:
        self.exam_id = validate_identifier(self.exam_id, "exam_id")
        self.title = validate_text(self.title, "title", MAX_TITLE_LENGTH)
        self.description = validate_description(self.description)
        validate_int_range(self.duration_minutes, "duration_minutes",
                           MIN_DURATION_MINUTES, MAX_DURATION_MINUTES)
        validate_int_range(self.passing_score_percentage, "passing_score_percentage", 0, 100)
        if self.topic_id is not None:
            self.topic_id = validate_identifier(self.topic_id, "topic_id")

    @property
    def duration_seconds(self) -> int:
        return self.duration_minutes * 60

    def is_passing(self, percentage: float) -> bool:
        """Whether a percentage meets the passing threshold (inclusive)."""
        return percentage >= self.passing_score_percentage

    def update(self,
               title: str,
               description: str,
               duration_minutes: int,
               passing_score_percentage: int,
               now: Optional[datetime] = None) -> None:
        """
        Replace the editable fields. Nothing changes if any value is invalid.

        Raises:
            ValidationError: If any field is invalid
        """
        title = validate_text(title, "title", MAX_TITLE_LENGTH)
        description = validate_description(description)
        validate_int_range(duration_minutes, "duration_minutes", MIN_DURATION_MINUTES, MAX_DURATION_MINUTES)
        validate_int_range(passing_score_percentage, "passing_score_percentage", 0, 100)

        self.title = title
        self.description = description
        self.duration_minutes = duration_minutes
        self.passing_score_percentage = passing_score_percentage
        self.updated_at = now or utcnow()

    def activate(self, now: Optional[datetime] = None) -> None:
        self.is_active = True
        self.updated_at = now or utcnow()

    def deactivate(self, now: Optional[datetime] = None) -> None:
        self.is_active = False
        self.updated_at = now or utcnow()

    def soft_delete(self, now: Optional[datetime] = None) -> None:
        self.deleted_at = now or utcnow()
        self.is_active = False

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def summary(self) -> Dict[str, Any]:
        """The exam metadata shown to a user starting an attempt."""
        return {
            'id': self.exam_id,
            'title': self.title,
            'description': self.description,
            'duration_minutes': self.duration_minutes,
            'passing_score_percentage': self.passing_score_percentage
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            'exam_id': self.exam_id,
            'title': self.title,
            'description': self.description,
            'duration_minutes': self.duration_minutes,
            'passing_score_percentage': self.passing_score_percentage,
            'topic_id': self.topic_id,
            'is_active': self.is_active,
            'created_at': self.created_at.isoformat(),
            'updated_at': isoformat_or_none(self.updated_at),
            'deleted_at': isoformat_or_none(self.deleted_at)
        }
