"""
Topic Domain Model Module

Topics label questions for filtering and analytics. A question may carry
any number of topics; the link itself is a ``QuestionTopic``.
"""

import enum
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

from learnportal.common.error_handling import ValidationError
from learnportal.common.utils import utcnow, isoformat_or_none
from learnportal.common.validation import validate_identifier, validate_text

MAX_TITLE_LENGTH = 255
MAX_DESCRIPTION_LENGTH = 1000


class TopicLevel(enum.Enum):
    """Audience level of a topic."""
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
    EXPERT = "expert"

    @classmethod
    def parse(cls, value: Any) -> 'TopicLevel':
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise ValidationError(
                "Invalid topic level. Must be one of: " + ", ".join(level.value for level in cls),
                details={"field": "level", "value": repr(value)}
            )


def validate_description(value: Any) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError("description must be a string", details={"field": "description"})
    value = value.strip()
    if len(value) > MAX_DESCRIPTION_LENGTH:
        raise ValidationError(
            f"description cannot exceed {MAX_DESCRIPTION_LENGTH} characters",
            details={"field": "description", "max_length": MAX_DESCRIPTION_LENGTH}
        )
    return value


@dataclass
class Topic:
    """
    A subject area questions can be tagged with.

    Attributes:
        topic_id: Unique identifier for the topic
        title: Display title
        description: Free-form description (may be empty)
        level: Audience level
        is_active: Whether the topic is offered
        created_at: When the topic was created
        updated_at: When the topic was last updated
        deleted_at: When the topic was soft-deleted, if ever
    """
    topic_id: str
    title: str
    description: str = ""
    level: TopicLevel = TopicLevel.BEGINNER
    is_active: bool = True
    created_at: datetime = field(default_factory=utcnow)
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None

    @classmethod
    def create(cls, title: str, description: str = "", level: Any = TopicLevel.BEGINNER,
               now: Optional[datetime] = None) -> 'Topic':
        """
        Create a new, validated topic with a generated ID.

        Raises:
            ValidationError: If any field is invalid
        """
        topic = cls(
            topic_id=str(uuid.uuid4()),
            title=title,
            description=description,
            level=TopicLevel.parse(level),
            created_at=now or utcnow()
        )
        topic.validate()
        return topic

    def validate(self) -> None:
        self.topic_id = validate_identifier(self.topic_id, "topic_id")
        self.title = validate_text(self.title, "title", MAX_TITLE_LENGTH)
        self.description = validate_description(self.description)
        self.level = TopicLevel.parse(self.level)

    def update(self, title: str, description: str, level: Any, now: Optional[datetime] = None) -> None:
        title = validate_text(title, "title", MAX_TITLE_LENGTH)
        description = validate_description(description)
        level = TopicLevel.parse(level)

        self.title = title
        self.description = description
        self.level = level
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

    def to_dict(self) -> Dict[str, Any]:
        return {
            'topic_id': self.topic_id,
            'title': self.title,
            'description': self.description,
            'level': self.level.value,
            'is_active': self.is_active,
            'created_at': self.created_at.isoformat(),
            'updated_at': isoformat_or_none(self.updated_at),
            'deleted_at': isoformat_or_none(self.deleted_at)
        }


@dataclass
class QuestionTopic:
    """
    Association between one question and one topic.

    The (question_id, topic_id) pair is unique.
    """
    question_topic_id: str
    question_id: str
    topic_id: str
    created_at: datetime = field(default_factory=utcnow)

    @classmethod
    def create(cls, question_id: str, topic_id: str, now: Optional[datetime] = None) -> 'QuestionTopic':
        return cls(
            question_topic_id=str(uuid.uuid4()),
            question_id=question_id,
            topic_id=topic_id,
            created_at=now or utcnow()
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.question_topic_id,
            'question_id': self.question_id,
            'topic_id': self.topic_id,
            'created_at': self.created_at.isoformat()
        }
