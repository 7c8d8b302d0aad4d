"""
Question Repository Module

This module defines the repository interface for accessing and storing
Question entities.
"""

import abc
from typing import List, Optional, Sequence

from .model import Question


class QuestionRepository(abc.ABC):
    """
    Abstract base class for question repositories.

    This interface defines the contract for accessing and storing Question entities.
    Soft-deleted questions are returned by ``get_by_id`` (callers decide how to
    treat them) but excluded from every finder and count.
    """

    @abc.abstractmethod
    async def get_by_id(self, question_id: str) -> Optional[Question]:
        """
        Get a question by its ID.

        Args:
            question_id: The ID of the question to retrieve

        Returns:
            The Question entity if found, None otherwise
        """
        pass

    @abc.abstractmethod
    async def save(self, question: Question) -> Question:
        """
        Save a question.

        If the question doesn't exist, it will be created.
        If it already exists, it will be updated.

        Args:
            question: The Question entity to save

        Returns:
            The saved Question entity
        """
        pass

    @abc.abstractmethod
    async def find_by_exam(self, exam_id: str, active_only: bool = True) -> List[Question]:
        """
        Find the questions of an exam, oldest first.

        Args:
            exam_id: The exam to search for
            active_only: Whether to skip deactivated questions

        Returns:
            List of matching Question entities
        """
        pass

    @abc.abstractmethod
    async def find_by_ids(self, question_ids: Sequence[str], active_only: bool = True) -> List[Question]:
        """
        Find the questions among the given ids, oldest first.

        Unknown and soft-deleted ids are skipped.
        """
        pass

    @abc.abstractmethod
    async def count(self) -> int:
        """Count questions that are not soft-deleted."""
        pass

    @abc.abstractmethod
    async def count_active(self) -> int:
        """Count active questions."""
        pass
