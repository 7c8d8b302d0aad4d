"""
Attempt Engine

Runs the lifecycle of an exam attempt:

1. ``start`` opens an attempt and hands back the exam's questions with the
   answer key stripped, plus the advisory time limit
2. ``submit`` scores every active question of the exam against the given
   answers and records the result exactly once

At most one in-progress attempt exists per (user, exam). That rule is
enforced by the attempt storage, so it holds across processes sharing a
database.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

from learnportal.common.error_handling import ConflictError, DuplicateError, NotFoundError
from learnportal.common.logger import LoggerAdapter, app_logger, log_execution_time
from learnportal.common.utils import Clock, percentage, utcnow
from learnportal.common.validation import validate_answers, validate_identifier, validate_identifiers
from learnportal.domain.attempts.model import ExamAttempt
from learnportal.domain.attempts.repository import AttemptRepository
from learnportal.domain.exams.repository import ExamRepository
from learnportal.services.catalog import require_active_exam
from learnportal.services.question_bank import QuestionBank

logger = app_logger.getChild("services.attempt_engine")


@dataclass
class StartedAttempt:
    """What a user receives when an attempt starts."""
    attempt_id: str
    exam: Dict[str, Any]
    questions: List[Dict[str, Any]]
    started_at: datetime
    time_limit_seconds: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            'attempt_id': self.attempt_id,
            'exam': dict(self.exam),
            'questions': [dict(q) for q in self.questions],
            'started_at': self.started_at.isoformat(),
            'time_limit': self.time_limit_seconds
        }


@dataclass
class QuestionResult:
    """Scoring outcome for one question of a submission."""
    question_id: str
    text: str
    selected_answer: Any
    correct_answer: int
    is_correct: bool
    points: int
    earned_points: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            'question_id': self.question_id,
            'text': self.text,
            'selected_answer': self.selected_answer,
            'correct_answer': self.correct_answer,
            'is_correct': self.is_correct,
            'points': self.points,
            'earned_points': self.earned_points
        }


@dataclass
class SubmissionResult:
    """Score breakdown returned by a successful submission."""
    attempt_id: str
    user_id: str
    exam_id: str
    exam_title: str
    earned_points: int
    total_points: int
    percentage: float
    passed: bool
    passing_threshold: int
    completed_at: datetime
    duration_seconds: int
    question_results: List[QuestionResult] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'attempt_id': self.attempt_id,
            'exam_id': self.exam_id,
            'exam_title': self.exam_title,
            'score': {
                'earned': self.earned_points,
                'total': self.total_points,
                'percentage': self.percentage,
                'passed': self.passed,
                'passing_threshold': self.passing_threshold
            },
            'completion_time': self.completed_at.isoformat(),
            'duration': self.duration_seconds,
            'question_results': [r.to_dict() for r in self.question_results]
        }


class AttemptEngine:
    """
    Service that starts, scores and completes exam attempts.

    Args:
        attempts: Attempt storage; must refuse a second in-progress attempt
        question_bank: Source of questions and of the scoring rule
        exams: Exam metadata (title, duration, passing threshold, activity)
        clock: Source of the current time
    """

    def __init__(
        self,
        attempts: AttemptRepository,
        question_bank: QuestionBank,
        exams: ExamRepository,
        clock: Clock = utcnow
    ):
        self.attempts = attempts
        self.question_bank = question_bank
        self.exams = exams
        self.clock = clock

    @log_execution_time(logger)
    async def start(self, user_id: str, exam_id: str) -> StartedAttempt:
        """
        Start an attempt.

        Raises:
            ValidationError: If an identifier is malformed
            NotFoundError: If the exam does not exist
            ConflictError: If the exam is inactive or the user already has an
                active attempt for it
        """
        ids = validate_identifiers(user_id=user_id, exam_id=exam_id)
        log = LoggerAdapter(logger, ids)

        exam = await require_active_exam(self.exams, ids["exam_id"])
        questions = await self.question_bank.find_by_exam(exam.exam_id)

        attempt = ExamAttempt.start(ids["user_id"], exam.exam_id, now=self.clock())
        try:
            await self.attempts.create(attempt)
        except DuplicateError as e:
            log.info("Refused to start a second active attempt")
            raise ConflictError(
                "User already has an active attempt for this exam",
                details={"user_id": ids["user_id"], "exam_id": exam.exam_id},
                cause=e
            )

        log.with_context(attempt_id=attempt.attempt_id).info(
            f"Started attempt with {len(questions)} questions"
        )
        return StartedAttempt(
            attempt_id=attempt.attempt_id,
            exam=exam.summary(),
            questions=[q.to_public_dict() for q in questions],
            started_at=attempt.started_at,
            time_limit_seconds=exam.duration_seconds
        )

    @log_execution_time(logger)
    async def submit(self, attempt_id: str, answers: Optional[Mapping[str, Any]]) -> SubmissionResult:
        """
        Score and complete an attempt.

        Every active question of the exam counts toward the total; questions
        without an answer (or with an unusable one) earn nothing.

        Raises:
            ValidationError: If the id or the answers payload is malformed
            NotFoundError: If the attempt or its exam does not exist
            ConflictError: If the attempt is already completed, including when
                a concurrent submission completes it first
        """
        attempt_id = validate_identifier(attempt_id, "attempt_id")
        answers = validate_answers(answers)
        log = LoggerAdapter(logger, {"attempt_id": attempt_id})

        attempt = await self.find_by_id(attempt_id)
        if attempt.is_completed:
            raise ConflictError("Attempt has already been submitted", details={"attempt_id": attempt_id})

        exam = await self.exams.get_by_id(attempt.exam_id)
        if exam is None:
            raise NotFoundError("Exam", attempt.exam_id)
        questions = await self.question_bank.find_by_exam(exam.exam_id)

        results = []
        for question in questions:
            selected = answers.get(question.question_id)
            correct = self.question_bank.is_correct(question, selected)
            results.append(QuestionResult(
                question_id=question.question_id,
                text=question.text,
                selected_answer=selected,
                correct_answer=question.correct_option,
                is_correct=correct,
                points=question.points,
                earned_points=self.question_bank.score_for(question, selected)
            ))

        earned = sum(r.earned_points for r in results)
        total = sum(r.points for r in results)
        score_percentage = percentage(earned, total)
        passed = exam.is_passing(score_percentage)

        completed_at = self.clock()
        if not await self.attempts.complete(attempt_id, completed_at, earned, passed):
            log.warning("Attempt was completed concurrently; keeping the first result")
            raise ConflictError("Attempt has already been submitted", details={"attempt_id": attempt_id})

        log.info(f"Submitted attempt: {earned}/{total} points ({score_percentage}%), passed={passed}")
        return SubmissionResult(
            attempt_id=attempt_id,
            user_id=attempt.user_id,
            exam_id=exam.exam_id,
            exam_title=exam.title,
            earned_points=earned,
            total_points=total,
            percentage=score_percentage,
            passed=passed,
            passing_threshold=exam.passing_score_percentage,
            completed_at=completed_at,
            duration_seconds=int((completed_at - attempt.started_at).total_seconds()),
            question_results=results
        )

    async def find_by_id(self, attempt_id: str) -> ExamAttempt:
        """
        Raises:
            NotFoundError: If the attempt is missing or soft-deleted
        """
        attempt_id = validate_identifier(attempt_id, "attempt_id")
        attempt = await self.attempts.get_by_id(attempt_id)
        if attempt is None or attempt.is_deleted:
            raise NotFoundError("ExamAttempt", attempt_id)
        return attempt

    async def active_attempt(self, user_id: str, exam_id: str) -> Optional[ExamAttempt]:
        """The attempt to resume instead of starting a new one, if any."""
        ids = validate_identifiers(user_id=user_id, exam_id=exam_id)
        return await self.attempts.find_active(ids["user_id"], ids["exam_id"])

    async def by_user(self, user_id: str) -> List[ExamAttempt]:
        return await self.attempts.find_by_user(validate_identifier(user_id, "user_id"))

    async def by_exam(self, exam_id: str) -> List[ExamAttempt]:
        return await self.attempts.find_by_exam(validate_identifier(exam_id, "exam_id"))

    async def completed_by_user(self, user_id: str) -> List[ExamAttempt]:
        return await self.attempts.find_completed_by_user(validate_identifier(user_id, "user_id"))
