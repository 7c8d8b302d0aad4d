"""
Memory Attempt Repository Module

In-memory implementation of the AttemptRepository for development and
testing purposes.
"""

import copy
from datetime import datetime
from typing import Dict, List, Optional

from learnportal.common.error_handling import DuplicateError

from .model import ExamAttempt
from .repository import AttemptRepository


class MemoryAttemptRepository(AttemptRepository):
    """
    In-memory implementation of the AttemptRepository.

    The active-attempt check in ``create`` and the completion check in
    ``complete`` run without yielding to the event loop, so each is atomic
    for every coroutine sharing this instance.
    """

    def __init__(self, initial_data: Optional[List[ExamAttempt]] = None):
        self._attempts: Dict[str, ExamAttempt] = {}
        for attempt in initial_data or []:
            self._attempts[attempt.attempt_id] = copy.deepcopy(attempt)

    def _live(self, user_id: Optional[str] = None, exam_id: Optional[str] = None) -> List[ExamAttempt]:
        return [
            a for a in self._attempts.values()
            if not a.is_deleted
            and (user_id is None or a.user_id == user_id)
            and (exam_id is None or a.exam_id == exam_id)
        ]

    async def get_by_id(self, attempt_id: str) -> Optional[ExamAttempt]:
        attempt = self._attempts.get(attempt_id)
        return copy.deepcopy(attempt) if attempt else None

    async def create(self, attempt: ExamAttempt) -> ExamAttempt:
        if attempt.is_in_progress and any(
            a.is_in_progress for a in self._live(attempt.user_id, attempt.exam_id)
        ):
            raise DuplicateError("active attempt", f"{attempt.user_id}/{attempt.exam_id}")
        self._attempts[attempt.attempt_id] = copy.deepcopy(attempt)
        return attempt

    async def complete(self, attempt_id: str, completed_at: datetime, score: int, passed: bool) -> bool:
        attempt = self._attempts.get(attempt_id)
        if attempt is None or not attempt.is_in_progress:
            return False
        attempt.completed_at = completed_at
        attempt.score = score
        attempt.passed = passed
        return True

    async def find_active(self, user_id: str, exam_id: str) -> Optional[ExamAttempt]:
        for attempt in self._live(user_id, exam_id):
            if attempt.is_in_progress:
                return copy.deepcopy(attempt)
        return None

    async def find_by_user(self, user_id: str) -> List[ExamAttempt]:
        result = sorted(self._live(user_id=user_id), key=lambda a: a.started_at, reverse=True)
        return [copy.deepcopy(a) for a in result]

    async def find_by_exam(self, exam_id: str) -> List[ExamAttempt]:
        result = sorted(self._live(exam_id=exam_id), key=lambda a: a.started_at, reverse=True)
        return [copy.deepcopy(a) for a in result]

    async def find_completed_by_user(self, user_id: str) -> List[ExamAttempt]:
        result = [a for a in self._live(user_id=user_id) if a.is_completed]
        result.sort(key=lambda a: a.completed_at, reverse=True)
        return [copy.deepcopy(a) for a in result]

    async def count(self, user_id: Optional[str] = None, exam_id: Optional[str] = None) -> int:
        return len(self._live(user_id, exam_id))

    async def count_completed(self, user_id: Optional[str] = None, exam_id: Optional[str] = None) -> int:
        return sum(1 for a in self._live(user_id, exam_id) if a.is_completed)

    async def count_passed(self, user_id: Optional[str] = None, exam_id: Optional[str] = None) -> int:
        return sum(1 for a in self._live(user_id, exam_id) if a.passed)

    async def average_score(self, user_id: Optional[str] = None, exam_id: Optional[str] = None) -> Optional[float]:
        scores = [a.score for a in self._live(user_id, exam_id) if a.is_completed and a.score is not None]
        if not scores:
            return None
        return sum(scores) / len(scores)
