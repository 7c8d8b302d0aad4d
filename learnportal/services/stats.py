"""
Statistics Aggregator

Read-only aggregates over attempts, assignments and the catalog. Every
value is recomputed from storage on each call; nothing is cached.
"""

from typing import Any, Dict

from learnportal.common.logger import app_logger
from learnportal.common.utils import Clock, percentage, utcnow
from learnportal.common.validation import validate_identifier
from learnportal.domain.assignments.repository import AssignmentRepository
from learnportal.domain.attempts.repository import AttemptRepository
from learnportal.domain.exams.repository import ExamRepository
from learnportal.domain.questions.repository import QuestionRepository
from learnportal.domain.topics.repository import TopicRepository

logger = app_logger.getChild("services.stats")


class StatsAggregator:
    """
    Computes scores, pass rates and completion figures.

    Rates are percentages rounded to two decimals and are 0 when there is
    nothing to divide by.
    """

    def __init__(
        self,
        attempts: AttemptRepository,
        assignments: AssignmentRepository,
        questions: QuestionRepository,
        exams: ExamRepository,
        topics: TopicRepository,
        clock: Clock = utcnow
    ):
        self.attempts = attempts
        self.assignments = assignments
        self.questions = questions
        self.exams = exams
        self.topics = topics
        self.clock = clock

    async def average_score(self, exam_id: str) -> float:
        """Mean earned points over the completed attempts of an exam."""
        exam_id = validate_identifier(exam_id, "exam_id")
        average = await self.attempts.average_score(exam_id=exam_id)
        return round(average, 2) if average is not None else 0

    async def pass_rate(self, exam_id: str) -> float:
        """Passed attempts as a percentage of completed attempts of an exam."""
        exam_id = validate_identifier(exam_id, "exam_id")
        passed = await self.attempts.count_passed(exam_id=exam_id)
        completed = await self.attempts.count_completed(exam_id=exam_id)
        return percentage(passed, completed)

    async def exam_statistics(self, exam_id: str) -> Dict[str, Any]:
        exam_id = validate_identifier(exam_id, "exam_id")
        completed = await self.attempts.count_completed(exam_id=exam_id)
        passed = await self.attempts.count_passed(exam_id=exam_id)
        average = await self.attempts.average_score(exam_id=exam_id)
        return {
            'exam_id': exam_id,
            'total_attempts': await self.attempts.count(exam_id=exam_id),
            'completed_attempts': completed,
            'passed_attempts': passed,
            'average_score': round(average, 2) if average is not None else 0,
            'pass_rate': percentage(passed, completed),
            'total_assignments': await self.assignments.count_by_exam(exam_id)
        }

    async def user_attempt_statistics(self, user_id: str) -> Dict[str, Any]:
        user_id = validate_identifier(user_id, "user_id")
        completed = await self.attempts.count_completed(user_id=user_id)
        passed = await self.attempts.count_passed(user_id=user_id)
        average = await self.attempts.average_score(user_id=user_id)
        return {
            'total': await self.attempts.count(user_id=user_id),
            'completed': completed,
            'passed': passed,
            'average_score': round(average, 2) if average is not None else 0,
            'pass_rate': percentage(passed, completed)
        }

    async def assignment_statistics(self, user_id: str) -> Dict[str, Any]:
        """
        Completion figures for one user's assignments.

        Overdue is evaluated against the aggregator's clock.
        """
        user_id = validate_identifier(user_id, "user_id")
        total = await self.assignments.count_by_user(user_id)
        completed = await self.assignments.count_completed_by_user(user_id)
        return {
            'total': total,
            'completed': completed,
            'pending': total - completed,
            'overdue': await self.assignments.count_overdue_by_user(user_id, self.clock()),
            'completion_rate': percentage(completed, total)
        }

    async def learning_statistics(self) -> Dict[str, Any]:
        """Portal-wide totals for topics, exams, questions and attempts."""
        return {
            'topics': {
                'total': await self.topics.count(),
                'active': await self.topics.count_active()
            },
            'exams': {
                'total': await self.exams.count(),
                'active': await self.exams.count_active()
            },
            'questions': {
                'total': await self.questions.count(),
                'active': await self.questions.count_active()
            },
            'attempts': {
                'total': await self.attempts.count(),
                'completed': await self.attempts.count_completed(),
                'passed': await self.attempts.count_passed()
            }
        }
