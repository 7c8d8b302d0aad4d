"""
Topic Tagger Service

Maintains the many-to-many association between questions and topics.
Tagging is independent of exam membership and of question/topic
lifecycles: every mutation is idempotent.
"""

from typing import Iterable, List, Optional

from learnportal.common.error_handling import NotFoundError
from learnportal.common.logger import app_logger
from learnportal.common.utils import Clock, utcnow
from learnportal.common.validation import validate_identifier, validate_identifier_list
from learnportal.domain.questions.model import Question
from learnportal.domain.questions.repository import QuestionRepository
from learnportal.domain.topics.repository import QuestionTopicRepository, TopicRepository

logger = app_logger.getChild("services.topic_tagger")


class TopicTagger:
    """
    Service for tagging questions with topics.

    When question and topic storage are supplied, every mutation first
    checks that the referenced question and topics exist.
    """

    def __init__(
        self,
        links: QuestionTopicRepository,
        questions: Optional[QuestionRepository] = None,
        topics: Optional[TopicRepository] = None,
        clock: Clock = utcnow
    ):
        self.links = links
        self.questions = questions
        self.topics = topics
        self.clock = clock

    async def _ensure_question(self, question_id: str) -> None:
        if self.questions is None:
            return
        question = await self.questions.get_by_id(question_id)
        if question is None or question.is_deleted:
            raise NotFoundError("Question", question_id)

    async def _ensure_topics(self, topic_ids: Iterable[str]) -> None:
        if self.topics is None:
            return
        for topic_id in topic_ids:
            topic = await self.topics.get_by_id(topic_id)
            if topic is None or topic.is_deleted:
                raise NotFoundError("Topic", topic_id)

    async def associate(self, question_id: str, topic_id: str) -> bool:
        """
        Tag a question with a topic. Re-tagging is a no-op.

        Returns:
            True if a new association was created

        Raises:
            ValidationError: If an id is malformed
            NotFoundError: If the question or topic does not exist
        """
        question_id = validate_identifier(question_id, "question_id")
        topic_id = validate_identifier(topic_id, "topic_id")
        await self._ensure_question(question_id)
        await self._ensure_topics([topic_id])

        created = await self.links.add(question_id, topic_id, self.clock())
        if created:
            logger.info(f"Associated question {question_id} with topic {topic_id}")
        return created

    async def disassociate(self, question_id: str, topic_id: str) -> bool:
        """
        Remove a tag. Removing a missing tag is a no-op.

        Returns:
            True if an association was removed
        """
        question_id = validate_identifier(question_id, "question_id")
        topic_id = validate_identifier(topic_id, "topic_id")

        removed = await self.links.remove(question_id, topic_id)
        if removed:
            logger.info(f"Disassociated question {question_id} from topic {topic_id}")
        return removed

    async def set_topics(self, question_id: str, topic_ids: Iterable[str]) -> List[str]:
        """
        Replace the full topic set of a question.

        Duplicate ids collapse. Validation and existence checks run before
        the replacement, which is a single storage transaction.

        Returns:
            The question's topic ids after the replacement
        """
        question_id = validate_identifier(question_id, "question_id")
        topic_ids = validate_identifier_list(topic_ids, "topic_ids")
        await self._ensure_question(question_id)
        await self._ensure_topics(topic_ids)

        await self.links.replace(question_id, topic_ids, self.clock())
        logger.info(f"Set {len(topic_ids)} topics for question {question_id}")
        return await self.links.topic_ids_for(question_id)

    async def clear_topics(self, question_id: str) -> int:
        """Remove every topic of a question, returning how many were removed."""
        question_id = validate_identifier(question_id, "question_id")
        removed = await self.links.remove_all(question_id)
        logger.info(f"Cleared {removed} topics from question {question_id}")
        return removed

    async def topics_for(self, question_id: str) -> List[str]:
        question_id = validate_identifier(question_id, "question_id")
        return await self.links.topic_ids_for(question_id)

    async def questions_for(self, topic_id: str) -> List[str]:
        topic_id = validate_identifier(topic_id, "topic_id")
        return await self.links.question_ids_for(topic_id)

    async def active_questions_for(self, topic_id: str) -> List[Question]:
        """
        Active, non-deleted questions tagged with a topic, oldest first.

        Needs question storage.

        Raises:
            NotFoundError: If the topic is missing or soft-deleted
        """
        topic_id = validate_identifier(topic_id, "topic_id")
        await self._ensure_topics([topic_id])
        question_ids = await self.links.question_ids_for(topic_id)
        return await self.questions.find_by_ids(question_ids, active_only=True)

    async def count_topics_for(self, question_id: str) -> int:
        question_id = validate_identifier(question_id, "question_id")
        return await self.links.count_for_question(question_id)

    async def count_questions_for(self, topic_id: str) -> int:
        topic_id = validate_identifier(topic_id, "topic_id")
        return await self.links.count_for_topic(topic_id)
