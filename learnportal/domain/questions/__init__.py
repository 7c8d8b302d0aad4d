"""
Question domain module for LearnPortal.

This module contains the domain model and repositories for handling
questions in the question bank.
"""

from .model import Question, QuestionType
from .repository import QuestionRepository
from .memory_repository import MemoryQuestionRepository

__all__ = [
    'Question',
    'QuestionType',
    'QuestionRepository',
    'MemoryQuestionRepository',
]
