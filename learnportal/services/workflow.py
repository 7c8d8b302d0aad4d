"""
Exam Workflow

Orchestrates the attempt engine and the assignment service so that neither
depends on the other: once a submission is recorded, every pending
assignment of that exam for that user is completed.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from learnportal.common.error_handling import PortalError, log_error
from learnportal.common.logger import app_logger
from learnportal.services.assignment_service import AssignmentService
from learnportal.services.attempt_engine import AttemptEngine, StartedAttempt, SubmissionResult

logger = app_logger.getChild("services.workflow")


@dataclass
class SubmissionOutcome:
    """A recorded submission plus what happened to the matching assignments."""
    result: SubmissionResult
    completed_assignment_ids: List[str] = field(default_factory=list)
    assignment_errors: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        data = self.result.to_dict()
        data['completed_assignments'] = list(self.completed_assignment_ids)
        if self.assignment_errors:
            data['assignment_errors'] = list(self.assignment_errors)
        return data


class ExamWorkflow:
    """Sequences attempt submission and assignment completion."""

    def __init__(self, engine: AttemptEngine, assignments: AssignmentService):
        self.engine = engine
        self.assignments = assignments

    async def start_exam(self, user_id: str, exam_id: str) -> StartedAttempt:
        return await self.engine.start(user_id, exam_id)

    async def submit_exam(self, attempt_id: str, answers: Optional[Mapping[str, Any]]) -> SubmissionOutcome:
        """
        Submit an attempt, then complete the user's pending assignments for
        the exam.

        Failures while completing assignments are logged and reported in the
        outcome; the recorded attempt stands regardless.
        """
        result = await self.engine.submit(attempt_id, answers)
        outcome = SubmissionOutcome(result=result)

        pending = await self.assignments.pending_for(result.user_id, result.exam_id)
        for assignment in pending:
            try:
                await self.assignments.mark_completed(assignment.assignment_id)
            except PortalError as e:
                log_error(e, context={"attempt_id": result.attempt_id}, log=logger)
                outcome.assignment_errors.append({
                    'assignment_id': assignment.assignment_id,
                    'code': e.code.value,
                    'message': e.message
                })
            else:
                outcome.completed_assignment_ids.append(assignment.assignment_id)

        if outcome.completed_assignment_ids:
            logger.info(
                f"Attempt {result.attempt_id} completed {len(outcome.completed_assignment_ids)} assignment(s)"
            )
        return outcome
