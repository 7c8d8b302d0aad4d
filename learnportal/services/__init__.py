"""
Service layer for LearnPortal.

Each service validates its inputs before touching storage and raises
``PortalError`` subclasses for every failure.
"""

from .question_bank import QuestionBank
from .topic_tagger import TopicTagger
from .catalog import CatalogService
from .assignment_service import AssignmentService
from .attempt_engine import AttemptEngine, StartedAttempt, SubmissionResult, QuestionResult
from .stats import StatsAggregator
from .workflow import ExamWorkflow, SubmissionOutcome
from .practice import PracticeTestService, PracticeTest, PracticeResult

__all__ = [
    'QuestionBank',
    'TopicTagger',
    'CatalogService',
    'AssignmentService',
    'AttemptEngine',
    'StartedAttempt',
    'SubmissionResult',
    'QuestionResult',
    'StatsAggregator',
    'ExamWorkflow',
    'SubmissionOutcome',
    'PracticeTestService',
    'PracticeTest',
    'PracticeResult',
]
