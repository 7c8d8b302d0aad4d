"""
Memory Assignment Repository Module

In-memory implementation of the AssignmentRepository for development and
testing purposes.
"""

import copy
from datetime import datetime
from typing import Callable, Dict, List, Optional

from .model import ExamAssignment
from .repository import AssignmentRepository


class MemoryAssignmentRepository(AssignmentRepository):
    """
    In-memory implementation of the AssignmentRepository.

    The conditional writes check and write without awaiting in between,
    which makes them atomic on a single event loop.
    """

    def __init__(self, initial_data: Optional[List[ExamAssignment]] = None):
        self._assignments: Dict[str, ExamAssignment] = {}
        for assignment in initial_data or []:
            self._assignments[assignment.assignment_id] = copy.deepcopy(assignment)

    def _select(self, predicate: Callable[[ExamAssignment], bool]) -> List[ExamAssignment]:
        return [
            copy.deepcopy(a) for a in self._assignments.values()
            if not a.is_deleted and predicate(a)
        ]

    @staticmethod
    def _newest_first(assignments: List[ExamAssignment]) -> List[ExamAssignment]:
        return sorted(assignments, key=lambda a: a.assigned_at, reverse=True)

    async def get_by_id(self, assignment_id: str) -> Optional[ExamAssignment]:
        assignment = self._assignments.get(assignment_id)
        return copy.deepcopy(assignment) if assignment else None

    async def save(self, assignment: ExamAssignment) -> ExamAssignment:
        self._assignments[assignment.assignment_id] = copy.deepcopy(assignment)
        return assignment

    async def mark_completed(self, assignment_id: str, completed_at: datetime) -> bool:
        assignment = self._assignments.get(assignment_id)
        if assignment is None or assignment.is_deleted:
            return False
        return assignment.complete(completed_at)

    async def set_due_date(self, assignment_id: str, due_date: Optional[datetime]) -> bool:
        assignment = self._assignments.get(assignment_id)
        if assignment is None or assignment.is_deleted or assignment.is_completed:
            return False
        assignment.due_date = due_date
        return True

    async def soft_delete(self, assignment_id: str, deleted_at: datetime) -> bool:
        assignment = self._assignments.get(assignment_id)
        if assignment is None or assignment.is_deleted:
            return False
        assignment.deleted_at = deleted_at
        return True

    async def restore(self, assignment_id: str) -> bool:
        assignment = self._assignments.get(assignment_id)
        if assignment is None or not assignment.is_deleted:
            return False
        assignment.deleted_at = None
        return True

    async def find_by_user(self, user_id: str) -> List[ExamAssignment]:
        return self._newest_first(self._select(lambda a: a.user_id == user_id))

    async def find_by_exam(self, exam_id: str) -> List[ExamAssignment]:
        return self._newest_first(self._select(lambda a: a.exam_id == exam_id))

    async def find_pending_by_user(self, user_id: str) -> List[ExamAssignment]:
        return self._newest_first(
            self._select(lambda a: a.user_id == user_id and not a.is_completed)
        )

    async def find_completed_by_user(self, user_id: str) -> List[ExamAssignment]:
        result = self._select(lambda a: a.user_id == user_id and a.is_completed)
        return sorted(result, key=lambda a: a.completed_at, reverse=True)

    async def find_overdue_by_user(self, user_id: str, now: datetime) -> List[ExamAssignment]:
        result = self._select(lambda a: a.user_id == user_id and a.is_overdue(now))
        return sorted(result, key=lambda a: a.due_date)

    async def find_pending(self, user_id: str, exam_id: str) -> List[ExamAssignment]:
        return self._newest_first(self._select(
            lambda a: a.user_id == user_id and a.exam_id == exam_id and not a.is_completed
        ))

    async def count(self) -> int:
        return len(self._select(lambda a: True))

    async def count_by_user(self, user_id: str) -> int:
        return len(self._select(lambda a: a.user_id == user_id))

    async def count_by_exam(self, exam_id: str) -> int:
        return len(self._select(lambda a: a.exam_id == exam_id))

    async def count_completed_by_user(self, user_id: str) -> int:
        return len(self._select(lambda a: a.user_id == user_id and a.is_completed))

    async def count_pending_by_user(self, user_id: str) -> int:
        return len(self._select(lambda a: a.user_id == user_id and not a.is_completed))

    async def count_overdue_by_user(self, user_id: str, now: datetime) -> int:
        return len(self._select(lambda a: a.user_id == user_id and a.is_overdue(now)))
