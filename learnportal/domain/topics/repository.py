"""
Topic Repository Module

Repository interfaces for topics and for the question/topic association.
"""

import abc
from datetime import datetime
from typing import List, Optional, Sequence

from .model import Topic


class TopicRepository(abc.ABC):
    """
    Abstract base class for topic repositories.
    """

    @abc.abstractmethod
    async def get_by_id(self, topic_id: str) -> Optional[Topic]:
        """
        Get a topic by its ID.

        Returns:
            The Topic entity if found (soft-deleted included), None otherwise
        """
        pass

    @abc.abstractmethod
    async def save(self, topic: Topic) -> Topic:
        """Create or update a topic."""
        pass

    @abc.abstractmethod
    async def update_details(self, topic: Topic) -> bool:
        """
        Write title, description, level and updated_at of a live topic.

        Returns:
            True if a live row was updated
        """
        pass

    @abc.abstractmethod
    async def set_active(self, topic_id: str, is_active: bool, now: datetime) -> bool:
        """
        Toggle activity of a live topic.

        Returns:
            True if a live row was updated
        """
        pass

    @abc.abstractmethod
    async def soft_delete(self, topic_id: str, deleted_at: datetime) -> bool:
        """
        Soft-delete a live topic, which also deactivates it. Its question
        links are kept.

        Returns:
            True if a live row was updated
        """
        pass

    @abc.abstractmethod
    async def find_all(self, active_only: bool = False) -> List[Topic]:
        """List topics that are not soft-deleted, newest first."""
        pass

    @abc.abstractmethod
    async def count(self) -> int:
        pass

    @abc.abstractmethod
    async def count_active(self) -> int:
        pass


class QuestionTopicRepository(abc.ABC):
    """
    Abstract base class for question/topic association storage.

    Implementations must keep (question_id, topic_id) unique and make
    ``replace`` atomic: readers see either the old set or the new one.
    """

    @abc.abstractmethod
    async def add(self, question_id: str, topic_id: str, now: datetime) -> bool:
        """
        Link a question to a topic.

        Returns:
            True if a link was created, False if it already existed
        """
        pass

    @abc.abstractmethod
    async def remove(self, question_id: str, topic_id: str) -> bool:
        """
        Unlink a question from a topic.

        Returns:
            True if a link was removed, False if none existed
        """
        pass

    @abc.abstractmethod
    async def replace(self, question_id: str, topic_ids: Sequence[str], now: datetime) -> None:
        """Replace the full topic set of a question in one transaction."""
        pass

    @abc.abstractmethod
    async def remove_all(self, question_id: str) -> int:
        """
        Remove every topic link of a question.

        Returns:
            Number of links removed
        """
        pass

    @abc.abstractmethod
    async def topic_ids_for(self, question_id: str) -> List[str]:
        """Topic ids linked to a question, in link order."""
        pass

    @abc.abstractmethod
    async def question_ids_for(self, topic_id: str) -> List[str]:
        """Question ids linked to a topic, in link order."""
        pass

    @abc.abstractmethod
    async def count_for_question(self, question_id: str) -> int:
        pass

    @abc.abstractmethod
    async def count_for_topic(self, topic_id: str) -> int:
        pass
