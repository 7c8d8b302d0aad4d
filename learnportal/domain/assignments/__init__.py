"""
Assignment domain module for LearnPortal.
"""

from .model import ExamAssignment
from .repository import AssignmentRepository
from .memory_repository import MemoryAssignmentRepository

__all__ = [
    'ExamAssignment',
    'AssignmentRepository',
    'MemoryAssignmentRepository',
]
