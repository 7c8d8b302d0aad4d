"""
Service Container

Wires repositories into services for one storage backend. The HTTP layer
and the scripts build a container once and share it.
"""

from dataclasses import dataclass

from sqlalchemy.orm import sessionmaker

from learnportal.common.utils import Clock, utcnow
from learnportal.database.repositories import (
    SqlAssignmentRepository, SqlAttemptRepository, SqlExamRepository,
    SqlQuestionRepository, SqlQuestionTopicRepository, SqlTopicRepository
)
from learnportal.domain.assignments import AssignmentRepository, MemoryAssignmentRepository
from learnportal.domain.attempts import AttemptRepository, MemoryAttemptRepository
from learnportal.domain.exams import ExamRepository, MemoryExamRepository
from learnportal.domain.questions import MemoryQuestionRepository, QuestionRepository
from learnportal.domain.topics import (
    MemoryQuestionTopicRepository, MemoryTopicRepository, QuestionTopicRepository, TopicRepository
)
from learnportal.services import (
    AssignmentService, AttemptEngine, CatalogService, ExamWorkflow,
    PracticeTestService, QuestionBank, StatsAggregator, TopicTagger
)


@dataclass
class ServiceContainer:
    catalog: CatalogService
    question_bank: QuestionBank
    topic_tagger: TopicTagger
    assignments: AssignmentService
    attempts: AttemptEngine
    stats: StatsAggregator
    workflow: ExamWorkflow
    practice: PracticeTestService


def build_services(
    questions: QuestionRepository,
    topics: TopicRepository,
    links: QuestionTopicRepository,
    exams: ExamRepository,
    assignments: AssignmentRepository,
    attempts: AttemptRepository,
    clock: Clock = utcnow
) -> ServiceContainer:
    """Build every service over the given repositories, sharing one clock."""
    catalog = CatalogService(exams, topics, clock=clock)
    question_bank = QuestionBank(questions, exams, clock=clock)
    topic_tagger = TopicTagger(links, questions, topics, clock=clock)
    assignment_service = AssignmentService(assignments, exams, clock=clock)
    engine = AttemptEngine(attempts, question_bank, exams, clock=clock)
    stats = StatsAggregator(attempts, assignments, questions, exams, topics, clock=clock)

    return ServiceContainer(
        catalog=catalog,
        question_bank=question_bank,
        topic_tagger=topic_tagger,
        assignments=assignment_service,
        attempts=engine,
        stats=stats,
        workflow=ExamWorkflow(engine, assignment_service),
        practice=PracticeTestService(topics, topic_tagger, question_bank, clock=clock)
    )


def build_memory_services(clock: Clock = utcnow) -> ServiceContainer:
    """Services over fresh in-memory repositories."""
    return build_services(
        questions=MemoryQuestionRepository(),
        topics=MemoryTopicRepository(),
        links=MemoryQuestionTopicRepository(),
        exams=MemoryExamRepository(),
        assignments=MemoryAssignmentRepository(),
        attempts=MemoryAttemptRepository(),
        clock=clock
    )


def build_sql_services(session_factory: sessionmaker, clock: Clock = utcnow) -> ServiceContainer:
    """Services over the SQLAlchemy repositories."""
    return build_services(
        questions=SqlQuestionRepository(session_factory),
        topics=SqlTopicRepository(session_factory),
        links=SqlQuestionTopicRepository(session_factory),
        exams=SqlExamRepository(session_factory),
        assignments=SqlAssignmentRepository(session_factory),
        attempts=SqlAttemptRepository(session_factory),
        clock=clock
    )
