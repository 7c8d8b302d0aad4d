"""
Memory Topic Repository Module

In-memory implementations of the topic repositories for development and
testing purposes.
"""

import copy
import logging
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple

from .model import Topic, QuestionTopic
from .repository import TopicRepository, QuestionTopicRepository

logger = logging.getLogger(__name__)


class MemoryTopicRepository(TopicRepository):
    """
    In-memory implementation of the TopicRepository.
    """

    def __init__(self, initial_data: Optional[List[Topic]] = None):
        self._topics: Dict[str, Topic] = {}
        for topic in initial_data or []:
            self._topics[topic.topic_id] = copy.deepcopy(topic)

    async def get_by_id(self, topic_id: str) -> Optional[Topic]:
        topic = self._topics.get(topic_id)
        return copy.deepcopy(topic) if topic else None

    async def save(self, topic: Topic) -> Topic:
        self._topics[topic.topic_id] = copy.deepcopy(topic)
        return topic

    def _live(self, topic_id: str) -> Optional[Topic]:
        topic = self._topics.get(topic_id)
        return topic if topic is not None and not topic.is_deleted else None

    async def update_details(self, topic: Topic) -> bool:
        stored = self._live(topic.topic_id)
        if stored is None:
            return False
        stored.title = topic.title
        stored.description = topic.description
        stored.level = topic.level
        stored.updated_at = topic.updated_at
        return True

    async def set_active(self, topic_id: str, is_active: bool, now: datetime) -> bool:
        stored = self._live(topic_id)
        if stored is None:
            return False
        if is_active:
            stored.activate(now=now)
        else:
            stored.deactivate(now=now)
        return True

    async def soft_delete(self, topic_id: str, deleted_at: datetime) -> bool:
        stored = self._live(topic_id)
        if stored is None:
            return False
        stored.soft_delete(now=deleted_at)
        return True

    async def find_all(self, active_only: bool = False) -> List[Topic]:
        result = [
            topic for topic in self._topics.values()
            if not topic.is_deleted and (topic.is_active or not active_only)
        ]
        result.sort(key=lambda t: t.created_at, reverse=True)
        return [copy.deepcopy(t) for t in result]

    async def count(self) -> int:
        return sum(1 for t in self._topics.values() if not t.is_deleted)

    async def count_active(self) -> int:
        return sum(1 for t in self._topics.values() if t.is_active and not t.is_deleted)


class MemoryQuestionTopicRepository(QuestionTopicRepository):
    """
    In-memory implementation of the QuestionTopicRepository.

    Links are kept in a dict keyed by (question_id, topic_id), which gives
    uniqueness and link order for free.
    """

    def __init__(self):
        self._links: Dict[Tuple[str, str], QuestionTopic] = {}

    async def add(self, question_id: str, topic_id: str, now: datetime) -> bool:
        key = (question_id, topic_id)
        if key in self._links:
            return False
        self._links[key] = QuestionTopic.create(question_id, topic_id, now=now)
        return True

    async def remove(self, question_id: str, topic_id: str) -> bool:
        return self._links.pop((question_id, topic_id), None) is not None

    async def replace(self, question_id: str, topic_ids: Sequence[str], now: datetime) -> None:
        # No await between clearing and inserting, so no reader can observe
        # the intermediate empty set.
        for key in [key for key in self._links if key[0] == question_id]:
            del self._links[key]
        for topic_id in topic_ids:
            key = (question_id, topic_id)
            if key not in self._links:
                self._links[key] = QuestionTopic.create(question_id, topic_id, now=now)

    async def remove_all(self, question_id: str) -> int:
        keys = [key for key in self._links if key[0] == question_id]
        for key in keys:
            del self._links[key]
        return len(keys)

    async def topic_ids_for(self, question_id: str) -> List[str]:
        return [topic_id for (qid, topic_id) in self._links if qid == question_id]

    async def question_ids_for(self, topic_id: str) -> List[str]:
        return [qid for (qid, tid) in self._links if tid == topic_id]

    async def count_for_question(self, question_id: str) -> int:
        return len(await self.topic_ids_for(question_id))

    async def count_for_topic(self, topic_id: str) -> int:
        return len(await self.question_ids_for(topic_id))
