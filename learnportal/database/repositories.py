"""
SQL Repository Implementations

SQLAlchemy-backed implementations of every domain repository interface.
Each operation runs in its own short transaction obtained from an async
session factory; driver errors surface as ``DatabaseError`` and the
storage-enforced uniqueness rules surface as ``DuplicateError`` or as the
idempotent no-op the interface documents.
"""

from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncIterator, List, Optional, Sequence

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import sessionmaker

from learnportal.common.error_handling import DatabaseError, DuplicateError
from learnportal.common.logger import app_logger
from learnportal.database.models import (
    ExamAssignmentModel, ExamAttemptModel, ExamModel, QuestionModel,
    QuestionTopicModel, TopicModel
)
from learnportal.domain.assignments.model import ExamAssignment
from learnportal.domain.assignments.repository import AssignmentRepository
from learnportal.domain.attempts.model import ExamAttempt
from learnportal.domain.attempts.repository import AttemptRepository
from learnportal.domain.exams.model import Exam
from learnportal.domain.exams.repository import ExamRepository
from learnportal.domain.questions.model import Question
from learnportal.domain.questions.repository import QuestionRepository
from learnportal.domain.topics.model import QuestionTopic, Topic
from learnportal.domain.topics.repository import QuestionTopicRepository, TopicRepository

# Module logger
logger = app_logger.getChild("database.repositories")


def _is_integrity_error(error: DatabaseError) -> bool:
    return isinstance(error.cause, IntegrityError)


class SqlRepository:
    """
    Base repository implementation with common functionality.

    Subclasses get ``_session_scope``, a transactional scope that commits on
    success, rolls back on any failure and converts SQLAlchemy errors into
    ``DatabaseError``.
    """

    domain_type = "entity"

    def __init__(self, session_factory: sessionmaker):
        """
        Initialize the repository.

        Args:
            session_factory: Factory producing ``AsyncSession`` instances
        """
        self._session_factory = session_factory

    @asynccontextmanager
    async def _session_scope(self) -> AsyncIterator[AsyncSession]:
        """
        Provide an async transactional scope around a series of operations.
        """
        session = self._session_factory()
        try:
            yield session
            await session.commit()
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error(f"Database error in {self.domain_type} repository: {str(e)}")
            raise DatabaseError(f"{self.domain_type} repository: {str(e)}", cause=e)
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    async def _count(self, statement) -> int:
        async with self._session_scope() as session:
            return int(await session.scalar(statement) or 0)

    async def _update_one(self, statement) -> bool:
        """Run a conditional UPDATE and report whether it matched a row."""
        async with self._session_scope() as session:
            result = await session.execute(statement)
            return result.rowcount == 1


class SqlQuestionRepository(SqlRepository, QuestionRepository):
    domain_type = "question"

    async def get_by_id(self, question_id: str) -> Optional[Question]:
        async with self._session_scope() as session:
            row = await session.get(QuestionModel, question_id)
            return row.to_domain() if row else None

    async def save(self, question: Question) -> Question:
        async with self._session_scope() as session:
            await session.merge(QuestionModel.from_domain(question))
        return question

    async def find_by_exam(self, exam_id: str, active_only: bool = True) -> List[Question]:
        statement = select(QuestionModel).where(
            QuestionModel.exam_id == exam_id,
            QuestionModel.deleted_at.is_(None)
        )
        if active_only:
            statement = statement.where(QuestionModel.is_active.is_(True))
        statement = statement.order_by(QuestionModel.created_at, QuestionModel.id)

        async with self._session_scope() as session:
            rows = (await session.scalars(statement)).all()
            return [row.to_domain() for row in rows]

    async def find_by_ids(self, question_ids: Sequence[str], active_only: bool = True) -> List[Question]:
        if not question_ids:
            return []
        statement = select(QuestionModel).where(
            QuestionModel.id.in_(list(question_ids)),
            QuestionModel.deleted_at.is_(None)
        )
        if active_only:
            statement = statement.where(QuestionModel.is_active.is_(True))
        statement = statement.order_by(QuestionModel.created_at, QuestionModel.id)

        async with self._session_scope() as session:
            return [row.to_domain() for row in (await session.scalars(statement)).all()]

    async def count(self) -> int:
        return await self._count(
            select(func.count()).select_from(QuestionModel).where(QuestionModel.deleted_at.is_(None))
        )

    async def count_active(self) -> int:
        return await self._count(
            select(func.count()).select_from(QuestionModel).where(
                QuestionModel.deleted_at.is_(None),
                QuestionModel.is_active.is_(True)
            )
        )


class SqlTopicRepository(SqlRepository, TopicRepository):
    domain_type = "topic"

    async def get_by_id(self, topic_id: str) -> Optional[Topic]:
        async with self._session_scope() as session:
            row = await session.get(TopicModel, topic_id)
            return row.to_domain() if row else None

    async def save(self, topic: Topic) -> Topic:
        async with self._session_scope() as session:
            await session.merge(TopicModel.from_domain(topic))
        return topic

    def _update_live(self, topic_id: str, **values):
        return (
            update(TopicModel)
            .where(TopicModel.id == topic_id, TopicModel.deleted_at.is_(None))
            .values(**values)
            .execution_options(synchronize_session=False)
        )

    async def update_details(self, topic: Topic) -> bool:
        return await self._update_one(self._update_live(
            topic.topic_id,
            title=topic.title,
            description=topic.description,
            level=topic.level.value,
            updated_at=topic.updated_at
        ))

    async def set_active(self, topic_id: str, is_active: bool, now: datetime) -> bool:
        return await self._update_one(self._update_live(topic_id, is_active=is_active, updated_at=now))

    async def soft_delete(self, topic_id: str, deleted_at: datetime) -> bool:
        return await self._update_one(self._update_live(topic_id, is_active=False, deleted_at=deleted_at))

    async def find_all(self, active_only: bool = False) -> List[Topic]:
        statement = select(TopicModel).where(TopicModel.deleted_at.is_(None))
        if active_only:
            statement = statement.where(TopicModel.is_active.is_(True))
        statement = statement.order_by(TopicModel.created_at.desc())

        async with self._session_scope() as session:
            return [row.to_domain() for row in (await session.scalars(statement)).all()]

    async def count(self) -> int:
        return await self._count(
            select(func.count()).select_from(TopicModel).where(TopicModel.deleted_at.is_(None))
        )

    async def count_active(self) -> int:
        return await self._count(
            select(func.count()).select_from(TopicModel).where(
                TopicModel.deleted_at.is_(None),
                TopicModel.is_active.is_(True)
            )
        )


class SqlQuestionTopicRepository(SqlRepository, QuestionTopicRepository):
    """
    Question/topic links backed by the ``question_topics`` table.

    The unique constraint on (question_id, topic_id) makes ``add`` safe under
    concurrent duplicate calls: the loser's insert fails and is reported as
    "already linked".
    """

    domain_type = "question_topic"

    async def add(self, question_id: str, topic_id: str, now: datetime) -> bool:
        existing = select(QuestionTopicModel.id).where(
            QuestionTopicModel.question_id == question_id,
            QuestionTopicModel.topic_id == topic_id
        )
        try:
            async with self._session_scope() as session:
                if await session.scalar(existing) is not None:
                    return False
                session.add(QuestionTopicModel.from_domain(
                    QuestionTopic.create(question_id, topic_id, now=now)
                ))
                await session.flush()
        except DatabaseError as e:
            if _is_integrity_error(e):
                logger.debug(f"Link {question_id}/{topic_id} created concurrently")
                return False
            raise
        return True

    async def remove(self, question_id: str, topic_id: str) -> bool:
        statement = delete(QuestionTopicModel).where(
            QuestionTopicModel.question_id == question_id,
            QuestionTopicModel.topic_id == topic_id
        )
        async with self._session_scope() as session:
            result = await session.execute(statement)
            return result.rowcount > 0

    async def replace(self, question_id: str, topic_ids: Sequence[str], now: datetime) -> None:
        async with self._session_scope() as session:
            await session.execute(
                delete(QuestionTopicModel).where(QuestionTopicModel.question_id == question_id)
            )
            session.add_all([
                QuestionTopicModel.from_domain(QuestionTopic.create(question_id, topic_id, now=now))
                for topic_id in dict.fromkeys(topic_ids)
            ])

    async def remove_all(self, question_id: str) -> int:
        async with self._session_scope() as session:
            result = await session.execute(
                delete(QuestionTopicModel).where(QuestionTopicModel.question_id == question_id)
            )
            return result.rowcount

    async def topic_ids_for(self, question_id: str) -> List[str]:
        statement = (
            select(QuestionTopicModel.topic_id)
            .where(QuestionTopicModel.question_id == question_id)
            .order_by(QuestionTopicModel.created_at, QuestionTopicModel.id)
        )
        async with self._session_scope() as session:
            return list((await session.scalars(statement)).all())

    async def question_ids_for(self, topic_id: str) -> List[str]:
        statement = (
            select(QuestionTopicModel.question_id)
            .where(QuestionTopicModel.topic_id == topic_id)
            .order_by(QuestionTopicModel.created_at, QuestionTopicModel.id)
        )
        async with self._session_scope() as session:
            return list((await session.scalars(statement)).all())

    async def count_for_question(self, question_id: str) -> int:
        return await self._count(
            select(func.count()).select_from(QuestionTopicModel)
            .where(QuestionTopicModel.question_id == question_id)
        )

    async def count_for_topic(self, topic_id: str) -> int:
        return await self._count(
            select(func.count()).select_from(QuestionTopicModel)
            .where(QuestionTopicModel.topic_id == topic_id)
        )


class SqlExamRepository(SqlRepository, ExamRepository):
    domain_type = "exam"

    async def get_by_id(self, exam_id: str) -> Optional[Exam]:
        async with self._session_scope() as session:
            row = await session.get(ExamModel, exam_id)
            return row.to_domain() if row else None

    async def save(self, exam: Exam) -> Exam:
        async with self._session_scope() as session:
            await session.merge(ExamModel.from_domain(exam))
        return exam

    def _update_live(self, exam_id: str, **values):
        return (
            update(ExamModel)
            .where(ExamModel.id == exam_id, ExamModel.deleted_at.is_(None))
            .values(**values)
            .execution_options(synchronize_session=False)
        )

    async def update_details(self, exam: Exam) -> bool:
        return await self._update_one(self._update_live(
            exam.exam_id,
            title=exam.title,
            description=exam.description,
            duration_minutes=exam.duration_minutes,
            passing_score_percentage=exam.passing_score_percentage,
            updated_at=exam.updated_at
        ))

    async def set_active(self, exam_id: str, is_active: bool, now: datetime) -> bool:
        return await self._update_one(self._update_live(exam_id, is_active=is_active, updated_at=now))

    async def soft_delete(self, exam_id: str, deleted_at: datetime) -> bool:
        return await self._update_one(self._update_live(exam_id, is_active=False, deleted_at=deleted_at))

    async def _find(self, *criteria) -> List[Exam]:
        statement = (
            select(ExamModel)
            .where(ExamModel.deleted_at.is_(None), *criteria)
            .order_by(ExamModel.created_at.desc())
        )
        async with self._session_scope() as session:
            return [row.to_domain() for row in (await session.scalars(statement)).all()]

    async def find_all(self, active_only: bool = False) -> List[Exam]:
        if active_only:
            return await self._find(ExamModel.is_active.is_(True))
        return await self._find()

    async def find_by_topic(self, topic_id: str) -> List[Exam]:
        return await self._find(ExamModel.topic_id == topic_id)

    async def count(self) -> int:
        return await self._count(
            select(func.count()).select_from(ExamModel).where(ExamModel.deleted_at.is_(None))
        )

    async def count_active(self) -> int:
        return await self._count(
            select(func.count()).select_from(ExamModel).where(
                ExamModel.deleted_at.is_(None),
                ExamModel.is_active.is_(True)
            )
        )


class SqlAssignmentRepository(SqlRepository, AssignmentRepository):
    domain_type = "assignment"

    _live = ExamAssignmentModel.deleted_at.is_(None)
    _pending = ExamAssignmentModel.is_completed.is_(False)
    _completed = ExamAssignmentModel.is_completed.is_(True)

    @staticmethod
    def _overdue(now: datetime):
        return (
            ExamAssignmentModel.is_completed.is_(False),
            ExamAssignmentModel.due_date.is_not(None),
            ExamAssignmentModel.due_date < now
        )

    async def get_by_id(self, assignment_id: str) -> Optional[ExamAssignment]:
        async with self._session_scope() as session:
            row = await session.get(ExamAssignmentModel, assignment_id)
            return row.to_domain() if row else None

    async def save(self, assignment: ExamAssignment) -> ExamAssignment:
        async with self._session_scope() as session:
            await session.merge(ExamAssignmentModel.from_domain(assignment))
        return assignment

    async def mark_completed(self, assignment_id: str, completed_at: datetime) -> bool:
        statement = (
            update(ExamAssignmentModel)
            .where(
                ExamAssignmentModel.id == assignment_id,
                self._pending,
                self._live
            )
            .values(is_completed=True, completed_at=completed_at)
            .execution_options(synchronize_session=False)
        )
        return await self._update_one(statement)

    async def set_due_date(self, assignment_id: str, due_date: Optional[datetime]) -> bool:
        statement = (
            update(ExamAssignmentModel)
            .where(ExamAssignmentModel.id == assignment_id, self._pending, self._live)
            .values(due_date=due_date)
            .execution_options(synchronize_session=False)
        )
        return await self._update_one(statement)

    async def soft_delete(self, assignment_id: str, deleted_at: datetime) -> bool:
        statement = (
            update(ExamAssignmentModel)
            .where(ExamAssignmentModel.id == assignment_id, self._live)
            .values(deleted_at=deleted_at)
            .execution_options(synchronize_session=False)
        )
        return await self._update_one(statement)

    async def restore(self, assignment_id: str) -> bool:
        statement = (
            update(ExamAssignmentModel)
            .where(ExamAssignmentModel.id == assignment_id, ExamAssignmentModel.deleted_at.is_not(None))
            .values(deleted_at=None)
            .execution_options(synchronize_session=False)
        )
        return await self._update_one(statement)

    async def _find(self, *criteria, order_by=None) -> List[ExamAssignment]:
        statement = (
            select(ExamAssignmentModel)
            .where(self._live, *criteria)
            .order_by(order_by if order_by is not None else ExamAssignmentModel.assigned_at.desc())
        )
        async with self._session_scope() as session:
            return [row.to_domain() for row in (await session.scalars(statement)).all()]

    async def _count_where(self, *criteria) -> int:
        return await self._count(
            select(func.count()).select_from(ExamAssignmentModel).where(self._live, *criteria)
        )

    async def find_by_user(self, user_id: str) -> List[ExamAssignment]:
        return await self._find(ExamAssignmentModel.user_id == user_id)

    async def find_by_exam(self, exam_id: str) -> List[ExamAssignment]:
        return await self._find(ExamAssignmentModel.exam_id == exam_id)

    async def find_pending_by_user(self, user_id: str) -> List[ExamAssignment]:
        return await self._find(ExamAssignmentModel.user_id == user_id, self._pending)

    async def find_completed_by_user(self, user_id: str) -> List[ExamAssignment]:
        return await self._find(
            ExamAssignmentModel.user_id == user_id,
            self._completed,
            order_by=ExamAssignmentModel.completed_at.desc()
        )

    async def find_overdue_by_user(self, user_id: str, now: datetime) -> List[ExamAssignment]:
        return await self._find(
            ExamAssignmentModel.user_id == user_id,
            *self._overdue(now),
            order_by=ExamAssignmentModel.due_date.asc()
        )

    async def find_pending(self, user_id: str, exam_id: str) -> List[ExamAssignment]:
        return await self._find(
            ExamAssignmentModel.user_id == user_id,
            ExamAssignmentModel.exam_id == exam_id,
            self._pending
        )

    async def count(self) -> int:
        return await self._count_where()

    async def count_by_user(self, user_id: str) -> int:
        return await self._count_where(ExamAssignmentModel.user_id == user_id)

    async def count_by_exam(self, exam_id: str) -> int:
        return await self._count_where(ExamAssignmentModel.exam_id == exam_id)

    async def count_completed_by_user(self, user_id: str) -> int:
        return await self._count_where(ExamAssignmentModel.user_id == user_id, self._completed)

    async def count_pending_by_user(self, user_id: str) -> int:
        return await self._count_where(ExamAssignmentModel.user_id == user_id, self._pending)

    async def count_overdue_by_user(self, user_id: str, now: datetime) -> int:
        return await self._count_where(ExamAssignmentModel.user_id == user_id, *self._overdue(now))


class SqlAttemptRepository(SqlRepository, AttemptRepository):
    """
    Attempts backed by the ``exam_attempts`` table.

    A partial unique index on (user_id, exam_id) over rows that are neither
    completed nor deleted makes ``create`` safe across processes.
    """

    domain_type = "attempt"

    _live = ExamAttemptModel.deleted_at.is_(None)
    _completed = ExamAttemptModel.completed_at.is_not(None)

    def _scope(self, user_id: Optional[str], exam_id: Optional[str]) -> list:
        criteria = [self._live]
        if user_id is not None:
            criteria.append(ExamAttemptModel.user_id == user_id)
        if exam_id is not None:
            criteria.append(ExamAttemptModel.exam_id == exam_id)
        return criteria

    async def get_by_id(self, attempt_id: str) -> Optional[ExamAttempt]:
        async with self._session_scope() as session:
            row = await session.get(ExamAttemptModel, attempt_id)
            return row.to_domain() if row else None

    async def create(self, attempt: ExamAttempt) -> ExamAttempt:
        try:
            async with self._session_scope() as session:
                session.add(ExamAttemptModel.from_domain(attempt))
                await session.flush()
        except DatabaseError as e:
            if _is_integrity_error(e):
                raise DuplicateError("active attempt", f"{attempt.user_id}/{attempt.exam_id}", cause=e.cause)
            raise
        return attempt

    async def complete(self, attempt_id: str, completed_at: datetime, score: int, passed: bool) -> bool:
        statement = (
            update(ExamAttemptModel)
            .where(
                ExamAttemptModel.id == attempt_id,
                ExamAttemptModel.completed_at.is_(None),
                self._live
            )
            .values(completed_at=completed_at, score=score, passed=passed)
            .execution_options(synchronize_session=False)
        )
        return await self._update_one(statement)

    async def _find(self, *criteria, order_by=None) -> List[ExamAttempt]:
        statement = (
            select(ExamAttemptModel)
            .where(self._live, *criteria)
            .order_by(order_by if order_by is not None else ExamAttemptModel.started_at.desc())
        )
        async with self._session_scope() as session:
            return [row.to_domain() for row in (await session.scalars(statement)).all()]

    async def find_active(self, user_id: str, exam_id: str) -> Optional[ExamAttempt]:
        attempts = await self._find(
            ExamAttemptModel.user_id == user_id,
            ExamAttemptModel.exam_id == exam_id,
            ExamAttemptModel.completed_at.is_(None)
        )
        return attempts[0] if attempts else None

    async def find_by_user(self, user_id: str) -> List[ExamAttempt]:
        return await self._find(ExamAttemptModel.user_id == user_id)

    async def find_by_exam(self, exam_id: str) -> List[ExamAttempt]:
        return await self._find(ExamAttemptModel.exam_id == exam_id)

    async def find_completed_by_user(self, user_id: str) -> List[ExamAttempt]:
        return await self._find(
            ExamAttemptModel.user_id == user_id,
            self._completed,
            order_by=ExamAttemptModel.completed_at.desc()
        )

    async def count(self, user_id: Optional[str] = None, exam_id: Optional[str] = None) -> int:
        return await self._count(
            select(func.count()).select_from(ExamAttemptModel).where(*self._scope(user_id, exam_id))
        )

    async def count_completed(self, user_id: Optional[str] = None, exam_id: Optional[str] = None) -> int:
        return await self._count(
            select(func.count()).select_from(ExamAttemptModel)
            .where(self._completed, *self._scope(user_id, exam_id))
        )

    async def count_passed(self, user_id: Optional[str] = None, exam_id: Optional[str] = None) -> int:
        return await self._count(
            select(func.count()).select_from(ExamAttemptModel)
            .where(ExamAttemptModel.passed.is_(True), *self._scope(user_id, exam_id))
        )

    async def average_score(self, user_id: Optional[str] = None, exam_id: Optional[str] = None) -> Optional[float]:
        statement = (
            select(func.avg(ExamAttemptModel.score))
            .where(self._completed, *self._scope(user_id, exam_id))
        )
        async with self._session_scope() as session:
            value = await session.scalar(statement)
        return float(value) if value is not None else None
