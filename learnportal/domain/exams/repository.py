"""
Exam Repository Module

Repository interface for Exam entities.
"""

import abc
from datetime import datetime
from typing import List, Optional

from .model import Exam


class ExamRepository(abc.ABC):
    """
    Abstract base class for exam repositories.

    The attempt engine and the assignment service only need ``get_by_id``;
    the remaining methods serve administration and statistics.
    """

    @abc.abstractmethod
    async def get_by_id(self, exam_id: str) -> Optional[Exam]:
        """
        Get an exam by its ID.

        Returns:
            The Exam entity if found (soft-deleted included), None otherwise
        """
        pass

    @abc.abstractmethod
    async def save(self, exam: Exam) -> Exam:
        """Create or update an exam."""
        pass

    @abc.abstractmethod
    async def update_details(self, exam: Exam) -> bool:
        """
        Write the editable fields (title, description, duration, passing
        score, updated_at) of a live exam, leaving its activity and deletion
        state alone.

        Returns:
            True if a live row was updated
        """
        pass

    @abc.abstractmethod
    async def set_active(self, exam_id: str, is_active: bool, now: datetime) -> bool:
        """
        Toggle activity of a live exam.

        Returns:
            True if a live row was updated
        """
        pass

    @abc.abstractmethod
    async def soft_delete(self, exam_id: str, deleted_at: datetime) -> bool:
        """
        Soft-delete a live exam, which also deactivates it.

        Returns:
            True if a live row was updated
        """
        pass

    @abc.abstractmethod
    async def find_all(self, active_only: bool = False) -> List[Exam]:
        """List exams that are not soft-deleted, newest first."""
        pass

    @abc.abstractmethod
    async def find_by_topic(self, topic_id: str) -> List[Exam]:
        """List exams of a topic, newest first."""
        pass

    @abc.abstractmethod
    async def count(self) -> int:
        pass

    @abc.abstractmethod
    async def count_active(self) -> int:
        pass
