"""
Database Table Models

Declarative models for every persisted LearnPortal entity. Rows map to the
domain dataclasses in ``learnportal.domain`` through ``to_domain`` and
``from_domain``; nothing outside ``learnportal.database`` sees these classes.
"""

from sqlalchemy import (
    JSON, Boolean, CheckConstraint, Column, DateTime, ForeignKey, Index,
    Integer, String, Text, UniqueConstraint
)
from sqlalchemy import text as sql_text

from learnportal.database.base import ModelBase
from learnportal.domain.assignments.model import ExamAssignment
from learnportal.domain.attempts.model import ExamAttempt
from learnportal.domain.exams.model import Exam
from learnportal.domain.questions.model import Question, QuestionType
from learnportal.domain.topics.model import QuestionTopic, Topic, TopicLevel

ID_LENGTH = 36

# Predicate of the partial unique index guarding in-progress attempts
ACTIVE_ATTEMPT_WHERE = "completed_at IS NULL AND deleted_at IS NULL"
ACTIVE_ATTEMPT_INDEX = "uq_exam_attempts_active_user_exam"


class TopicModel(ModelBase):
    __tablename__ = "topics"

    id = Column(String(ID_LENGTH), primary_key=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    level = Column(String(20), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=True)
    deleted_at = Column(DateTime, nullable=True)

    def to_domain(self) -> Topic:
        return Topic(
            topic_id=self.id,
            title=self.title,
            description=self.description or "",
            level=TopicLevel(self.level),
            is_active=self.is_active,
            created_at=self.created_at,
            updated_at=self.updated_at,
            deleted_at=self.deleted_at
        )

    @classmethod
    def from_domain(cls, topic: Topic) -> "TopicModel":
        return cls(
            id=topic.topic_id,
            title=topic.title,
            description=topic.description,
            level=topic.level.value,
            is_active=topic.is_active,
            created_at=topic.created_at,
            updated_at=topic.updated_at,
            deleted_at=topic.deleted_at
        )


class ExamModel(ModelBase):
    __tablename__ = "exams"
    __table_args__ = (
        CheckConstraint("duration_minutes BETWEEN 1 AND 480", name="duration_range"),
        CheckConstraint("passing_score_percentage BETWEEN 0 AND 100", name="passing_score_range"),
    )

    id = Column(String(ID_LENGTH), primary_key=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    duration_minutes = Column(Integer, nullable=False)
    passing_score_percentage = Column(Integer, nullable=False)
    topic_id = Column(String(ID_LENGTH), ForeignKey("topics.id"), nullable=True, index=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=True)
    deleted_at = Column(DateTime, nullable=True)

    def to_domain(self) -> Exam:
        return Exam(
            exam_id=self.id,
            title=self.title,
            description=self.description or "",
            duration_minutes=self.duration_minutes,
            passing_score_percentage=self.passing_score_percentage,
            topic_id=self.topic_id,
            is_active=self.is_active,
            created_at=self.created_at,
            updated_at=self.updated_at,
            deleted_at=self.deleted_at
        )

    @classmethod
    def from_domain(cls, exam: Exam) -> "ExamModel":
        return cls(
            id=exam.exam_id,
            title=exam.title,
            description=exam.description,
            duration_minutes=exam.duration_minutes,
            passing_score_percentage=exam.passing_score_percentage,
            topic_id=exam.topic_id,
            is_active=exam.is_active,
            created_at=exam.created_at,
            updated_at=exam.updated_at,
            deleted_at=exam.deleted_at
        )


class QuestionModel(ModelBase):
    __tablename__ = "questions"
    __table_args__ = (
        CheckConstraint("points >= 1", name="points_positive"),
        CheckConstraint("correct_option >= 0", name="correct_option_non_negative"),
    )

    id = Column(String(ID_LENGTH), primary_key=True)
    text = Column(Text, nullable=False)
    question_type = Column(String(32), nullable=False)
    exam_id = Column(String(ID_LENGTH), ForeignKey("exams.id"), nullable=False, index=True)
    options = Column(JSON, nullable=False)
    correct_option = Column(Integer, nullable=False)
    points = Column(Integer, nullable=False, default=1)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=True)
    deleted_at = Column(DateTime, nullable=True)

    def to_domain(self) -> Question:
        return Question(
            question_id=self.id,
            text=self.text,
            question_type=QuestionType(self.question_type),
            exam_id=self.exam_id,
            options=list(self.options or []),
            correct_option=self.correct_option,
            points=self.points,
            is_active=self.is_active,
            created_at=self.created_at,
            updated_at=self.updated_at,
            deleted_at=self.deleted_at
        )

    @classmethod
    def from_domain(cls, question: Question) -> "QuestionModel":
        return cls(
            id=question.question_id,
            text=question.text,
            question_type=question.question_type.value,
            exam_id=question.exam_id,
            options=list(question.options),
            correct_option=question.correct_option,
            points=question.points,
            is_active=question.is_active,
            created_at=question.created_at,
            updated_at=question.updated_at,
            deleted_at=question.deleted_at
        )


class QuestionTopicModel(ModelBase):
    __tablename__ = "question_topics"
    __table_args__ = (
        UniqueConstraint("question_id", "topic_id", name="uq_question_topics_question_topic"),
    )

    id = Column(String(ID_LENGTH), primary_key=True)
    question_id = Column(String(ID_LENGTH), ForeignKey("questions.id"), nullable=False, index=True)
    topic_id = Column(String(ID_LENGTH), ForeignKey("topics.id"), nullable=False, index=True)
    created_at = Column(DateTime, nullable=False)

    def to_domain(self) -> QuestionTopic:
        return QuestionTopic(
            question_topic_id=self.id,
            question_id=self.question_id,
            topic_id=self.topic_id,
            created_at=self.created_at
        )

    @classmethod
    def from_domain(cls, link: QuestionTopic) -> "QuestionTopicModel":
        return cls(
            id=link.question_topic_id,
            question_id=link.question_id,
            topic_id=link.topic_id,
            created_at=link.created_at
        )


class ExamAssignmentModel(ModelBase):
    __tablename__ = "exam_assignments"

    id = Column(String(ID_LENGTH), primary_key=True)
    user_id = Column(String(ID_LENGTH), nullable=False, index=True)
    exam_id = Column(String(ID_LENGTH), ForeignKey("exams.id"), nullable=False, index=True)
    assigned_by = Column(String(ID_LENGTH), nullable=False)
    assigned_at = Column(DateTime, nullable=False)
    due_date = Column(DateTime, nullable=True)
    is_completed = Column(Boolean, nullable=False, default=False)
    completed_at = Column(DateTime, nullable=True)
    deleted_at = Column(DateTime, nullable=True)

    def to_domain(self) -> ExamAssignment:
        return ExamAssignment(
            assignment_id=self.id,
            user_id=self.user_id,
            exam_id=self.exam_id,
            assigned_by=self.assigned_by,
            assigned_at=self.assigned_at,
            due_date=self.due_date,
            is_completed=self.is_completed,
            completed_at=self.completed_at,
            deleted_at=self.deleted_at
        )

    @classmethod
    def from_domain(cls, assignment: ExamAssignment) -> "ExamAssignmentModel":
        return cls(
            id=assignment.assignment_id,
            user_id=assignment.user_id,
            exam_id=assignment.exam_id,
            assigned_by=assignment.assigned_by,
            assigned_at=assignment.assigned_at,
            due_date=assignment.due_date,
            is_completed=assignment.is_completed,
            completed_at=assignment.completed_at,
            deleted_at=assignment.deleted_at
        )


class ExamAttemptModel(ModelBase):
    __tablename__ = "exam_attempts"
    __table_args__ = (
        Index(
            ACTIVE_ATTEMPT_INDEX,
            "user_id",
            "exam_id",
            unique=True,
            sqlite_where=sql_text(ACTIVE_ATTEMPT_WHERE),
            postgresql_where=sql_text(ACTIVE_ATTEMPT_WHERE)
        ),
    )

    id = Column(String(ID_LENGTH), primary_key=True)
    user_id = Column(String(ID_LENGTH), nullable=False, index=True)
    exam_id = Column(String(ID_LENGTH), ForeignKey("exams.id"), nullable=False, index=True)
    started_at = Column(DateTime, nullable=False)
    completed_at = Column(DateTime, nullable=True)
    score = Column(Integer, nullable=True)
    passed = Column(Boolean, nullable=True)
    deleted_at = Column(DateTime, nullable=True)

    def to_domain(self) -> ExamAttempt:
        return ExamAttempt(
            attempt_id=self.id,
            user_id=self.user_id,
            exam_id=self.exam_id,
            started_at=self.started_at,
            completed_at=self.completed_at,
            score=self.score,
            passed=self.passed,
            deleted_at=self.deleted_at
        )

    @classmethod
    def from_domain(cls, attempt: ExamAttempt) -> "ExamAttemptModel":
        return cls(
            id=attempt.attempt_id,
            user_id=attempt.user_id,
            exam_id=attempt.exam_id,
            started_at=attempt.started_at,
            completed_at=attempt.completed_at,
            score=attempt.score,
            passed=attempt.passed,
            deleted_at=attempt.deleted_at
        )
