"""
Exam Assignment Repository Module

Repository interface for ExamAssignment entities. Every finder and count
skips soft-deleted rows.
"""

import abc
from datetime import datetime
from typing import List, Optional

from .model import ExamAssignment


class AssignmentRepository(abc.ABC):
    """
    Abstract base class for assignment repositories.
    """

    @abc.abstractmethod
    async def get_by_id(self, assignment_id: str) -> Optional[ExamAssignment]:
        """
        Get an assignment by its ID.

        Returns:
            The entity if found (soft-deleted included), None otherwise
        """
        pass

    @abc.abstractmethod
    async def save(self, assignment: ExamAssignment) -> ExamAssignment:
        """Create or update an assignment."""
        pass

    @abc.abstractmethod
    async def mark_completed(self, assignment_id: str, completed_at: datetime) -> bool:
        """
        Complete an assignment with a single conditional write.

        Only a live assignment that is not yet completed is updated, so
        concurrent callers cannot move ``completed_at`` once it is set.

        Returns:
            True if this call performed the transition
        """
        pass

    @abc.abstractmethod
    async def set_due_date(self, assignment_id: str, due_date: Optional[datetime]) -> bool:
        """
        Write only the due date of a live, not-yet-completed assignment.

        Returns:
            True if the row was updated
        """
        pass

    @abc.abstractmethod
    async def soft_delete(self, assignment_id: str, deleted_at: datetime) -> bool:
        """
        Write only ``deleted_at`` of a live assignment.

        Returns:
            True if the row was updated
        """
        pass

    @abc.abstractmethod
    async def restore(self, assignment_id: str) -> bool:
        """
        Clear ``deleted_at`` of a soft-deleted assignment.

        Returns:
            True if the row was updated
        """
        pass

    @abc.abstractmethod
    async def find_by_user(self, user_id: str) -> List[ExamAssignment]:
        """Assignments of a user, most recently assigned first."""
        pass

    @abc.abstractmethod
    async def find_by_exam(self, exam_id: str) -> List[ExamAssignment]:
        """Assignments of an exam, most recently assigned first."""
        pass

    @abc.abstractmethod
    async def find_pending_by_user(self, user_id: str) -> List[ExamAssignment]:
        """Not-yet-completed assignments of a user, most recently assigned first."""
        pass

    @abc.abstractmethod
    async def find_completed_by_user(self, user_id: str) -> List[ExamAssignment]:
        """Completed assignments of a user, most recently completed first."""
        pass

    @abc.abstractmethod
    async def find_overdue_by_user(self, user_id: str, now: datetime) -> List[ExamAssignment]:
        """Overdue assignments of a user as of ``now``, earliest due first."""
        pass

    @abc.abstractmethod
    async def find_pending(self, user_id: str, exam_id: str) -> List[ExamAssignment]:
        """Not-yet-completed assignments of one exam for one user."""
        pass

    @abc.abstractmethod
    async def count(self) -> int:
        pass

    @abc.abstractmethod
    async def count_by_user(self, user_id: str) -> int:
        pass

    @abc.abstractmethod
    async def count_by_exam(self, exam_id: str) -> int:
        pass

    @abc.abstractmethod
    async def count_completed_by_user(self, user_id: str) -> int:
        pass

    @abc.abstractmethod
    async def count_pending_by_user(self, user_id: str) -> int:
        pass

    @abc.abstractmethod
    async def count_overdue_by_user(self, user_id: str, now: datetime) -> int:
        pass
