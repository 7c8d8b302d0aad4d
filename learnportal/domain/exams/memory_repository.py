"""
Memory Exam Repository Module

In-memory implementation of the ExamRepository for development and testing.
"""

import copy
from datetime import datetime
from typing import Dict, List, Optional

from .model import Exam
from .repository import ExamRepository


class MemoryExamRepository(ExamRepository):

    def __init__(self, initial_data: Optional[List[Exam]] = None):
        self._exams: Dict[str, Exam] = {}
        for exam in initial_data or []:
            self._exams[exam.exam_id] = copy.deepcopy(exam)

    async def get_by_id(self, exam_id: str) -> Optional[Exam]:
        exam = self._exams.get(exam_id)
        return copy.deepcopy(exam) if exam else None

    async def save(self, exam: Exam) -> Exam:
        self._exams[exam.exam_id] = copy.deepcopy(exam)
        return exam

    def _live(self, exam_id: str) -> Optional[Exam]:
        exam = self._exams.get(exam_id)
        return exam if exam is not None and not exam.is_deleted else None

    async def update_details(self, exam: Exam) -> bool:
        stored = self._live(exam.exam_id)
        if stored is None:
            return False
        stored.title = exam.title
        stored.description = exam.description
        stored.duration_minutes = exam.duration_minutes
        stored.passing_score_percentage = exam.passing_score_percentage
        stored.updated_at = exam.updated_at
        return True

    async def set_active(self, exam_id: str, is_active: bool, now: datetime) -> bool:
        stored = self._live(exam_id)
        if stored is None:
            return False
        if is_active:
            stored.activate(now=now)
        else:
            stored.deactivate(now=now)
        return True

    async def soft_delete(self, exam_id: str, deleted_at: datetime) -> bool:
        stored = self._live(exam_id)
        if stored is None:
            return False
        stored.soft_delete(now=deleted_at)
        return True

    async def find_all(self, active_only: bool = False) -> List[Exam]:
        result = [
            exam for exam in self._exams.values()
            if not exam.is_deleted and (exam.is_active or not active_only)
        ]
        result.sort(key=lambda e: e.created_at, reverse=True)
        return [copy.deepcopy(e) for e in result]

    async def find_by_topic(self, topic_id: str) -> List[Exam]:
        return [exam for exam in await self.find_all() if exam.topic_id == topic_id]

    async def count(self) -> int:
        return sum(1 for e in self._exams.values() if not e.is_deleted)

    async def count_active(self) -> int:
        return sum(1 for e in self._exams.values() if e.is_active and not e.is_deleted)
