"""
Exam Assignment Domain Model Module

An assignment records that a user is expected to take an exam, optionally
by a due date. Its only transition is Assigned -> Completed.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

from learnportal.common.utils import utcnow, isoformat_or_none


@dataclass
class ExamAssignment:
    """
    Represents an exam assigned to a user.

    ``completed_at`` is set exactly when ``is_completed`` is true. Overdue
    status is derived from the clock and never stored.

    Attributes:
        assignment_id: Unique identifier for the assignment
        user_id: The assignee
        exam_id: The assigned exam
        assigned_by: The user who made the assignment
        assigned_at: When the assignment was made
        due_date: Optional deadline
        is_completed: Whether the assignment has been completed
        completed_at: When it was completed
        deleted_at: When it was soft-deleted, if ever
    """
    assignment_id: str
    user_id: str
    exam_id: str
    assigned_by: str
    assigned_at: datetime = field(default_factory=utcnow)
    due_date: Optional[datetime] = None
    is_completed: bool = False
    completed_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None

    @classmethod
    def create(cls,
               user_id: str,
               exam_id: str,
               assigned_by: str,
               due_date: Optional[datetime] = None,
               now: Optional[datetime] = None) -> 'ExamAssignment':
        return cls(
            assignment_id=str(uuid.uuid4()),
            user_id=user_id,
            exam_id=exam_id,
            assigned_by=assigned_by,
            assigned_at=now or utcnow(),
            due_date=due_date
        )

    def complete(self, now: Optional[datetime] = None) -> bool:
        """
        Mark the assignment completed.

        Returns:
            True if the state changed, False if it was already completed
        """
        if self.is_completed:
            return False
        self.is_completed = True
        self.completed_at = now or utcnow()
        return True

    @property
    def is_pending(self) -> bool:
        return not self.is_completed

    def is_overdue(self, now: Optional[datetime] = None) -> bool:
        """Not completed, has a due date, and the due date has passed."""
        if self.is_completed or self.due_date is None:
            return False
        return self.due_date < (now or utcnow())

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def to_dict(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        return {
            'id': self.assignment_id,
            'user_id': self.user_id,
            'exam_id': self.exam_id,
            'assigned_by': self.assigned_by,
            'assigned_at': self.assigned_at.isoformat(),
            'due_date': isoformat_or_none(self.due_date),
            'is_completed': self.is_completed,
            'completed_at': isoformat_or_none(self.completed_at),
            'is_overdue': self.is_overdue(now)
        }
