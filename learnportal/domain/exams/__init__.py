"""
Exam domain module for LearnPortal.
"""

from .model import Exam
from .repository import ExamRepository
from .memory_repository import MemoryExamRepository

__all__ = [
    'Exam',
    'ExamRepository',
    'MemoryExamRepository',
]
