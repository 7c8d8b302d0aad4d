"""
Question Bank Service

Owns question content: creation, the explicit update operation,
activation, soft deletion, lookups, and the per-question scoring rule the
attempt engine relies on.
"""

from typing import Any, List, Optional

from learnportal.common.error_handling import NotFoundError
from learnportal.common.logger import app_logger
from learnportal.common.utils import Clock, utcnow
from learnportal.common.validation import validate_identifier
from learnportal.domain.exams.repository import ExamRepository
from learnportal.domain.questions.model import Question
from learnportal.domain.questions.repository import QuestionRepository

logger = app_logger.getChild("services.question_bank")


class QuestionBank:
    """
    Service for managing and scoring questions.

    Args:
        questions: Question storage
        exams: Optional exam storage; when given, new questions must belong
            to an existing exam
        clock: Source of the current time
    """

    def __init__(
        self,
        questions: QuestionRepository,
        exams: Optional[ExamRepository] = None,
        clock: Clock = utcnow
    ):
        self.questions = questions
        self.exams = exams
        self.clock = clock

    async def save(self, question: Question) -> Question:
        """
        Upsert a question after checking its invariants.

        Raises:
            ValidationError: If the question is malformed
        """
        question.validate()
        saved = await self.questions.save(question)
        logger.debug(f"Saved question {saved.question_id} for exam {saved.exam_id}")
        return saved

    async def create_question(
        self,
        text: str,
        question_type: Any,
        exam_id: str,
        options: List[str],
        correct_option: int,
        points: int = 1
    ) -> Question:
        """
        Create and store a new question.

        Raises:
            ValidationError: If any field is malformed
            NotFoundError: If exam storage is configured and the exam is missing
        """
        question = Question.create(
            text=text,
            question_type=question_type,
            exam_id=exam_id,
            options=options,
            correct_option=correct_option,
            points=points,
            now=self.clock()
        )
        if self.exams is not None:
            exam = await self.exams.get_by_id(question.exam_id)
            if exam is None or exam.is_deleted:
                raise NotFoundError("Exam", question.exam_id)

        saved = await self.questions.save(question)
        logger.info(f"Created question {saved.question_id} ({saved.question_type.value}) for exam {saved.exam_id}")
        return saved

    async def update_question(
        self,
        question_id: str,
        text: str,
        options: List[str],
        correct_option: int,
        points: int
    ) -> Question:
        """
        Replace the text, options, answer key and points of a question.

        Raises:
            ValidationError: If the id or any new value is malformed
            NotFoundError: If the question is missing or deleted
        """
        question = await self.find_by_id(question_id)
        question.update(text, options, correct_option, points, now=self.clock())
        await self.questions.save(question)
        logger.info(f"Updated question {question.question_id}")
        return question

    async def activate(self, question_id: str) -> Question:
        question = await self.find_by_id(question_id)
        question.activate(now=self.clock())
        return await self.questions.save(question)

    async def deactivate(self, question_id: str) -> Question:
        question = await self.find_by_id(question_id)
        question.deactivate(now=self.clock())
        return await self.questions.save(question)

    async def delete_question(self, question_id: str) -> Question:
        """Soft-delete a question; attempts already scored keep their results."""
        question = await self.find_by_id(question_id)
        question.soft_delete(now=self.clock())
        await self.questions.save(question)
        logger.info(f"Deleted question {question.question_id}")
        return question

    async def find_by_id(self, question_id: str) -> Question:
        """
        Get a live question.

        Raises:
            ValidationError: If the id is malformed
            NotFoundError: If the question is missing or soft-deleted
        """
        question_id = validate_identifier(question_id, "question_id")
        question = await self.questions.get_by_id(question_id)
        if question is None or question.is_deleted:
            raise NotFoundError("Question", question_id)
        return question

    async def find_by_exam(self, exam_id: str) -> List[Question]:
        """Active questions of an exam, in exam order."""
        exam_id = validate_identifier(exam_id, "exam_id")
        return await self.questions.find_by_exam(exam_id, active_only=True)

    @staticmethod
    def is_correct(question: Question, selected: Any) -> bool:
        return question.is_correct(selected)

    @staticmethod
    def score_for(question: Question, selected: Any) -> int:
        return question.score_for(selected)

    async def count(self) -> int:
        return await self.questions.count()

    async def count_active(self) -> int:
        return await self.questions.count_active()
