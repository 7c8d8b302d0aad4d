"""
Exam Attempt Repository Module

Repository interface for ExamAttempt entities. Every finder and count
skips soft-deleted rows.
"""

import abc
from datetime import datetime
from typing import List, Optional

from .model import ExamAttempt


class AttemptRepository(abc.ABC):
    """
    Abstract base class for attempt repositories.

    Implementations own the "one active attempt per (user, exam)" guarantee:
    ``create`` must refuse a second in-progress attempt atomically, across
    processes where the backend is shared.
    """

    @abc.abstractmethod
    async def get_by_id(self, attempt_id: str) -> Optional[ExamAttempt]:
        """
        Get an attempt by its ID.

        Returns:
            The entity if found (soft-deleted included), None otherwise
        """
        pass

    @abc.abstractmethod
    async def create(self, attempt: ExamAttempt) -> ExamAttempt:
        """
        Insert a new in-progress attempt.

        Raises:
            DuplicateError: If the user already has an in-progress attempt
                for the exam
        """
        pass

    @abc.abstractmethod
    async def complete(self, attempt_id: str, completed_at: datetime, score: int, passed: bool) -> bool:
        """
        Record the result of an attempt with a compare-and-set on
        ``completed_at IS NULL``.

        Returns:
            True if this call completed the attempt, False if it was already
            completed (or is missing/deleted)
        """
        pass

    @abc.abstractmethod
    async def find_active(self, user_id: str, exam_id: str) -> Optional[ExamAttempt]:
        """The in-progress attempt of a user for an exam, if any."""
        pass

    @abc.abstractmethod
    async def find_by_user(self, user_id: str) -> List[ExamAttempt]:
        """Attempts of a user, most recently started first."""
        pass

    @abc.abstractmethod
    async def find_by_exam(self, exam_id: str) -> List[ExamAttempt]:
        """Attempts at an exam, most recently started first."""
        pass

    @abc.abstractmethod
    async def find_completed_by_user(self, user_id: str) -> List[ExamAttempt]:
        """Completed attempts of a user, most recently completed first."""
        pass

    @abc.abstractmethod
    async def count(self, user_id: Optional[str] = None, exam_id: Optional[str] = None) -> int:
        """Count attempts, optionally restricted to a user and/or an exam."""
        pass

    @abc.abstractmethod
    async def count_completed(self, user_id: Optional[str] = None, exam_id: Optional[str] = None) -> int:
        pass

    @abc.abstractmethod
    async def count_passed(self, user_id: Optional[str] = None, exam_id: Optional[str] = None) -> int:
        pass

    @abc.abstractmethod
    async def average_score(self, user_id: Optional[str] = None, exam_id: Optional[str] = None) -> Optional[float]:
        """
        Mean earned points over completed attempts.

        Returns:
            The mean, or None when there are no completed attempts
        """
        pass
