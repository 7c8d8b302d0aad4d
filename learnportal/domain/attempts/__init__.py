"""
Attempt domain module for LearnPortal.
"""

from .model import ExamAttempt
from .repository import AttemptRepository
from .memory_repository import MemoryAttemptRepository

__all__ = [
    'ExamAttempt',
    'AttemptRepository',
    'MemoryAttemptRepository',
]
