"""
Catalog Service

Administration of the exams and topics the assessment engine reads.

Changes to existing exams and topics are column updates that only touch
live rows. An edit writes the editable fields and nothing else.
"""

from typing import Any, List, Optional

from learnportal.common.error_handling import ConflictError, NotFoundError
from learnportal.common.logger import app_logger
from learnportal.common.utils import Clock, utcnow
from learnportal.common.validation import validate_identifier
from learnportal.domain.exams.model import Exam
from learnportal.domain.exams.repository import ExamRepository
from learnportal.domain.topics.model import Topic, TopicLevel
from learnportal.domain.topics.repository import TopicRepository

logger = app_logger.getChild("services.catalog")


class CatalogService:
    """Creates, edits, toggles and soft-deletes exams and topics."""

    def __init__(self, exams: ExamRepository, topics: TopicRepository, clock: Clock = utcnow):
        self.exams = exams
        self.topics = topics
        self.clock = clock

    async def create_topic(self, title: str, description: str = "", level: Any = TopicLevel.BEGINNER) -> Topic:
        topic = Topic.create(title, description, level, now=self.clock())
        await self.topics.save(topic)
        logger.info(f"Created topic {topic.topic_id} ({topic.title})")
        return topic

    async def get_topic(self, topic_id: str) -> Topic:
        topic_id = validate_identifier(topic_id, "topic_id")
        topic = await self.topics.get_by_id(topic_id)
        if topic is None or topic.is_deleted:
            raise NotFoundError("Topic", topic_id)
        return topic

    async def list_topics(self, active_only: bool = False) -> List[Topic]:
        return await self.topics.find_all(active_only=active_only)

    async def update_topic(self, topic_id: str, title: str, description: str, level: Any) -> Topic:
        """
        Replace title, description and level of a topic.

        Raises:
            ValidationError: If any field is malformed
            NotFoundError: If the topic is missing or soft-deleted
        """
        topic = await self.get_topic(topic_id)
        topic.update(title, description, level, now=self.clock())
        if not await self.topics.update_details(topic):
            raise NotFoundError("Topic", topic.topic_id)
        logger.info(f"Updated topic {topic.topic_id}")
        return await self.get_topic(topic.topic_id)

    async def activate_topic(self, topic_id: str) -> Topic:
        return await self._set_topic_active(topic_id, True)

    async def deactivate_topic(self, topic_id: str) -> Topic:
        return await self._set_topic_active(topic_id, False)

    async def _set_topic_active(self, topic_id: str, is_active: bool) -> Topic:
        topic_id = validate_identifier(topic_id, "topic_id")
        if not await self.topics.set_active(topic_id, is_active, self.clock()):
            raise NotFoundError("Topic", topic_id)
        return await self.get_topic(topic_id)

    async def delete_topic(self, topic_id: str) -> Topic:
        """
        Soft-delete a topic. Question links stay in place but the topic no
        longer appears in listings, tagging or practice tests.

        Raises:
            NotFoundError: If the topic is missing or already deleted
        """
        topic_id = validate_identifier(topic_id, "topic_id")
        if not await self.topics.soft_delete(topic_id, self.clock()):
            raise NotFoundError("Topic", topic_id)
        logger.info(f"Deleted topic {topic_id}")
        return await self.topics.get_by_id(topic_id)

    async def create_exam(
        self,
        title: str,
        description: str = "",
        duration_minutes: int = 60,
        passing_score_percentage: int = 70,
        topic_id: Optional[str] = None
    ) -> Exam:
        """
        Create an exam, checking that its topic exists when one is given.

        Raises:
            ValidationError: If any field is malformed or out of range
            NotFoundError: If the topic does not exist
        """
        exam = Exam.create(
            title=title,
            description=description,
            duration_minutes=duration_minutes,
            passing_score_percentage=passing_score_percentage,
            topic_id=topic_id,
            now=self.clock()
        )
        if exam.topic_id is not None:
            await self.get_topic(exam.topic_id)

        await self.exams.save(exam)
        logger.info(f"Created exam {exam.exam_id} ({exam.title})")
        return exam

    async def get_exam(self, exam_id: str) -> Exam:
        exam_id = validate_identifier(exam_id, "exam_id")
        exam = await self.exams.get_by_id(exam_id)
        if exam is None or exam.is_deleted:
            raise NotFoundError("Exam", exam_id)
        return exam

    async def list_exams(self, active_only: bool = False) -> List[Exam]:
        return await self.exams.find_all(active_only=active_only)

    async def update_exam(
        self,
        exam_id: str,
        title: str,
        description: str,
        duration_minutes: int,
        passing_score_percentage: int
    ) -> Exam:
        """
        Replace the editable fields of an exam.

        The new passing threshold applies to submissions made after the
        change, including those of attempts already in progress.

        Raises:
            ValidationError: If any field is malformed or out of range
            NotFoundError: If the exam is missing or soft-deleted
        """
        exam = await self.get_exam(exam_id)
        exam.update(title, description, duration_minutes, passing_score_percentage, now=self.clock())
        if not await self.exams.update_details(exam):
            raise NotFoundError("Exam", exam.exam_id)
        logger.info(f"Updated exam {exam.exam_id}")
        return await self.get_exam(exam.exam_id)

    async def activate_exam(self, exam_id: str) -> Exam:
        return await self._set_exam_active(exam_id, True)

    async def deactivate_exam(self, exam_id: str) -> Exam:
        return await self._set_exam_active(exam_id, False)

    async def _set_exam_active(self, exam_id: str, is_active: bool) -> Exam:
        exam_id = validate_identifier(exam_id, "exam_id")
        if not await self.exams.set_active(exam_id, is_active, self.clock()):
            raise NotFoundError("Exam", exam_id)
        return await self.get_exam(exam_id)

    async def delete_exam(self, exam_id: str) -> Exam:
        """
        Soft-delete an exam. It can no longer be assigned or started;
        attempts already in progress can still be submitted.

        Raises:
            NotFoundError: If the exam is missing or already deleted
        """
        exam_id = validate_identifier(exam_id, "exam_id")
        if not await self.exams.soft_delete(exam_id, self.clock()):
            raise NotFoundError("Exam", exam_id)
        logger.info(f"Deleted exam {exam_id}")
        return await self.exams.get_by_id(exam_id)


async def require_active_exam(exams: ExamRepository, exam_id: str) -> Exam:
    """
    Load an exam that can be assigned or started.

    Raises:
        NotFoundError: If the exam is missing or soft-deleted
        ConflictError: If the exam is deactivated
    """
    exam = await exams.get_by_id(exam_id)
    if exam is None or exam.is_deleted:
        raise NotFoundError("Exam", exam_id)
    if not exam.is_active:
        raise ConflictError("Exam is not active", details={"exam_id": exam_id})
    return exam
