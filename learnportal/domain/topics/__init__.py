"""
Topic domain module for LearnPortal.

Topics and the many-to-many association between questions and topics.
"""

from .model import Topic, TopicLevel, QuestionTopic
from .repository import TopicRepository, QuestionTopicRepository
from .memory_repository import MemoryTopicRepository, MemoryQuestionTopicRepository

__all__ = [
    'Topic',
    'TopicLevel',
    'QuestionTopic',
    'TopicRepository',
    'QuestionTopicRepository',
    'MemoryTopicRepository',
    'MemoryQuestionTopicRepository',
]
