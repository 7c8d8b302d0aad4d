"""
Exam Attempt Domain Model Module

An attempt is one timed sitting of an exam. It is created in progress and
written exactly once more, at submission, after which it never changes.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

from learnportal.common.utils import utcnow, isoformat_or_none


@dataclass
class ExamAttempt:
    """
    Represents a user's attempt at an exam.

    ``score`` (earned points) and ``passed`` are set together, exactly when
    ``completed_at`` is set.
    """
    attempt_id: str
    user_id: str
    exam_id: str
    started_at: datetime = field(default_factory=utcnow)
    completed_at: Optional[datetime] = None
    score: Optional[int] = None
    passed: Optional[bool] = None
    deleted_at: Optional[datetime] = None

    @classmethod
    def start(cls, user_id: str, exam_id: str, now: Optional[datetime] = None) -> 'ExamAttempt':
        return cls(
            attempt_id=str(uuid.uuid4()),
            user_id=user_id,
            exam_id=exam_id,
            started_at=now or utcnow()
        )

    @property
    def is_completed(self) -> bool:
        return self.completed_at is not None

    @property
    def is_in_progress(self) -> bool:
        return self.completed_at is None and self.deleted_at is None

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    @property
    def duration_seconds(self) -> Optional[int]:
        """Whole seconds between start and completion, None while in progress."""
        if self.completed_at is None:
            return None
        return int((self.completed_at - self.started_at).total_seconds())

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.attempt_id,
            'user_id': self.user_id,
            'exam_id': self.exam_id,
            'started_at': self.started_at.isoformat(),
            'completed_at': isoformat_or_none(self.completed_at),
            'score': self.score,
            'passed': self.passed,
            'duration_seconds': self.duration_seconds
        }
