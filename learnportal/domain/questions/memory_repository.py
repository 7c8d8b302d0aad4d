"""
Memory Question Repository Module

This module provides an in-memory implementation of the QuestionRepository
interface for development and testing purposes.
"""

import copy
import logging
from typing import Dict, List, Optional, Sequence

from .model import Question
from .repository import QuestionRepository

# Setup logging
logger = logging.getLogger(__name__)


class MemoryQuestionRepository(QuestionRepository):
    """
    In-memory implementation of the QuestionRepository.

    Entities are copied on the way in and out so callers never share state
    with the store, mirroring what a database round-trip would do.
    """

    def __init__(self, initial_data: Optional[List[Question]] = None):
        """
        Initialize the repository with optional initial data.

        Args:
            initial_data: Optional list of Question entities to initialize with
        """
        self._questions: Dict[str, Question] = {}

        if initial_data:
            for question in initial_data:
                self._questions[question.question_id] = copy.deepcopy(question)

    async def get_by_id(self, question_id: str) -> Optional[Question]:
        question = self._questions.get(question_id)
        return copy.deepcopy(question) if question else None

    async def save(self, question: Question) -> Question:
        self._questions[question.question_id] = copy.deepcopy(question)
        return question

    async def find_by_exam(self, exam_id: str, active_only: bool = True) -> List[Question]:
        result = [
            question for question in self._questions.values()
            if question.exam_id == exam_id
            and not question.is_deleted
            and (question.is_active or not active_only)
        ]
        result.sort(key=lambda q: q.created_at)
        return [copy.deepcopy(q) for q in result]

    async def find_by_ids(self, question_ids: Sequence[str], active_only: bool = True) -> List[Question]:
        wanted = set(question_ids)
        result = [
            question for question in self._questions.values()
            if question.question_id in wanted
            and not question.is_deleted
            and (question.is_active or not active_only)
        ]
        result.sort(key=lambda q: q.created_at)
        return [copy.deepcopy(q) for q in result]

    async def count(self) -> int:
        return sum(1 for q in self._questions.values() if not q.is_deleted)

    async def count_active(self) -> int:
        return sum(1 for q in self._questions.values() if q.is_active and not q.is_deleted)
