"""
Assignment Service

Creates and tracks exam assignments. The only state transition is
Assigned -> Completed; overdue status is derived from the service clock at
read time and never written.
"""

from datetime import datetime
from typing import Any, List, Optional

from learnportal.common.error_handling import NotFoundError, ValidationError
from learnportal.common.logger import app_logger, log_execution_time
from learnportal.common.utils import Clock, to_naive_utc, utcnow
from learnportal.common.validation import (
    validate_identifier, validate_identifiers, validate_optional_datetime
)
from learnportal.domain.assignments.model import ExamAssignment
from learnportal.domain.assignments.repository import AssignmentRepository
from learnportal.domain.exams.repository import ExamRepository
from learnportal.services.catalog import require_active_exam

logger = app_logger.getChild("services.assignment_service")


def _normalize_due_date(due_date: Any) -> Optional[datetime]:
    due_date = validate_optional_datetime(due_date, "due_date")
    return to_naive_utc(due_date) if due_date is not None else None


class AssignmentService:
    """
    Service for assigning exams to users and completing assignments.

    Args:
        assignments: Assignment storage
        exams: Optional exam storage; when given, ``assign`` only accepts
            existing, active exams
        clock: Source of the current time, used for timestamps and for
            overdue evaluation
    """

    def __init__(
        self,
        assignments: AssignmentRepository,
        exams: Optional[ExamRepository] = None,
        clock: Clock = utcnow
    ):
        self.assignments = assignments
        self.exams = exams
        self.clock = clock

    @log_execution_time(logger)
    async def assign(
        self,
        user_id: str,
        exam_id: str,
        assigned_by: str,
        due_date: Optional[datetime] = None
    ) -> ExamAssignment:
        """
        Assign an exam to a user.

        Assigning the same exam to the same user again creates another
        assignment; duplicates are not rejected.

        Raises:
            ValidationError: If an identifier or the due date is malformed
            NotFoundError: If the exam does not exist
            ConflictError: If the exam is not active
        """
        ids = validate_identifiers(user_id=user_id, exam_id=exam_id, assigned_by=assigned_by)
        due_date = _normalize_due_date(due_date)
        if self.exams is not None:
            await require_active_exam(self.exams, ids["exam_id"])

        assignment = ExamAssignment.create(
            user_id=ids["user_id"],
            exam_id=ids["exam_id"],
            assigned_by=ids["assigned_by"],
            due_date=due_date,
            now=self.clock()
        )
        await self.assignments.save(assignment)
        logger.info(
            f"Assigned exam {assignment.exam_id} to user {assignment.user_id} "
            f"(assignment {assignment.assignment_id}, due {assignment.due_date})"
        )
        return assignment

    async def mark_completed(self, assignment_id: str) -> ExamAssignment:
        """
        Complete an assignment.

        Calling this on an already-completed assignment is a no-op that
        returns it unchanged; ``completed_at`` keeps its first value.

        Raises:
            ValidationError: If the id is malformed
            NotFoundError: If the assignment is missing or soft-deleted
        """
        assignment_id = validate_identifier(assignment_id, "assignment_id")
        changed = await self.assignments.mark_completed(assignment_id, self.clock())

        assignment = await self.assignments.get_by_id(assignment_id)
        if assignment is None or assignment.is_deleted:
            raise NotFoundError("ExamAssignment", assignment_id)

        if changed:
            logger.info(f"Assignment {assignment_id} completed at {assignment.completed_at}")
        else:
            logger.debug(f"Assignment {assignment_id} was already completed")
        return assignment

    async def update_due_date(self, assignment_id: str, due_date: Optional[datetime]) -> ExamAssignment:
        """
        Move or clear the due date of an assignment that is not completed.

        Only the due date column is written, and only while the assignment
        is live and pending, so a concurrent completion is never undone.

        Raises:
            ValidationError: If the assignment is already completed
            NotFoundError: If the assignment is missing or soft-deleted
        """
        assignment_id = validate_identifier(assignment_id, "assignment_id")
        due_date = _normalize_due_date(due_date)
        changed = await self.assignments.set_due_date(assignment_id, due_date)

        assignment = await self.find_by_id(assignment_id)
        if not changed and assignment.is_completed:
            raise ValidationError(
                "Cannot change the due date of a completed assignment",
                details={"assignment_id": assignment_id}
            )
        return assignment

    async def delete(self, assignment_id: str) -> ExamAssignment:
        """
        Soft-delete an assignment. Completion state is left as it is.

        Raises:
            NotFoundError: If the assignment is missing or already deleted
        """
        assignment_id = validate_identifier(assignment_id, "assignment_id")
        if not await self.assignments.soft_delete(assignment_id, self.clock()):
            raise NotFoundError("ExamAssignment", assignment_id)

        logger.info(f"Deleted assignment {assignment_id}")
        return await self.assignments.get_by_id(assignment_id)

    async def restore(self, assignment_id: str) -> ExamAssignment:
        """Undo a soft delete. Restoring a live assignment is a no-op."""
        assignment_id = validate_identifier(assignment_id, "assignment_id")
        if await self.assignments.restore(assignment_id):
            logger.info(f"Restored assignment {assignment_id}")

        assignment = await self.assignments.get_by_id(assignment_id)
        if assignment is None:
            raise NotFoundError("ExamAssignment", assignment_id)
        return assignment

    async def find_by_id(self, assignment_id: str) -> ExamAssignment:
        assignment_id = validate_identifier(assignment_id, "assignment_id")
        assignment = await self.assignments.get_by_id(assignment_id)
        if assignment is None or assignment.is_deleted:
            raise NotFoundError("ExamAssignment", assignment_id)
        return assignment

    def is_overdue(self, assignment: ExamAssignment) -> bool:
        """Overdue status as of the service clock."""
        return assignment.is_overdue(self.clock())

    async def by_user(self, user_id: str) -> List[ExamAssignment]:
        return await self.assignments.find_by_user(validate_identifier(user_id, "user_id"))

    async def by_exam(self, exam_id: str) -> List[ExamAssignment]:
        return await self.assignments.find_by_exam(validate_identifier(exam_id, "exam_id"))

    async def pending_by_user(self, user_id: str) -> List[ExamAssignment]:
        return await self.assignments.find_pending_by_user(validate_identifier(user_id, "user_id"))

    async def overdue_by_user(self, user_id: str) -> List[ExamAssignment]:
        user_id = validate_identifier(user_id, "user_id")
        return await self.assignments.find_overdue_by_user(user_id, self.clock())

    async def completed_by_user(self, user_id: str) -> List[ExamAssignment]:
        return await self.assignments.find_completed_by_user(validate_identifier(user_id, "user_id"))

    async def pending_for(self, user_id: str, exam_id: str) -> List[ExamAssignment]:
        ids = validate_identifiers(user_id=user_id, exam_id=exam_id)
        return await self.assignments.find_pending(ids["user_id"], ids["exam_id"])

    async def count(self) -> int:
        return await self.assignments.count()

    async def count_by_user(self, user_id: str) -> int:
        return await self.assignments.count_by_user(validate_identifier(user_id, "user_id"))

    async def count_by_exam(self, exam_id: str) -> int:
        return await self.assignments.count_by_exam(validate_identifier(exam_id, "exam_id"))

    async def count_completed_by_user(self, user_id: str) -> int:
        return await self.assignments.count_completed_by_user(validate_identifier(user_id, "user_id"))

    async def count_pending_by_user(self, user_id: str) -> int:
        return await self.assignments.count_pending_by_user(validate_identifier(user_id, "user_id"))

    async def count_overdue_by_user(self, user_id: str) -> int:
        user_id = validate_identifier(user_id, "user_id")
        return await self.assignments.count_overdue_by_user(user_id, self.clock())
