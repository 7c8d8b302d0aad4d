"""
Practice Test Service

Quick self-checks drawn at random from the active questions of chosen
topics. Practice tests are never stored: ``create`` hands out questions
without their answer keys and ``submit`` scores whatever answers come back
with the same rule as exam attempts.
"""

import random
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional

from learnportal.common.error_handling import ValidationError
from learnportal.common.logger import app_logger, log_execution_time
from learnportal.common.utils import Clock, percentage, utcnow
from learnportal.common.validation import (
    is_identifier, validate_answers, validate_identifier, validate_identifier_list, validate_int_range
)
from learnportal.domain.questions.model import Question
from learnportal.domain.topics.model import Topic, TopicLevel
from learnportal.domain.topics.repository import TopicRepository
from learnportal.services.attempt_engine import QuestionResult
from learnportal.services.question_bank import QuestionBank
from learnportal.services.topic_tagger import TopicTagger

logger = app_logger.getChild("services.practice")

DEFAULT_QUESTION_COUNT = 10
MAX_QUESTION_COUNT = 50
PRACTICE_PASSING_PERCENTAGE = 70


@dataclass
class PracticeTest:
    """A freshly drawn practice test."""
    practice_test_id: str
    questions: List[Dict[str, Any]]
    topic_ids: List[str]
    level: Optional[TopicLevel]
    created_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            'practice_test_id': self.practice_test_id,
            'questions': [dict(q) for q in self.questions],
            'total_questions': len(self.questions),
            'selected_topics': list(self.topic_ids),
            'level': self.level.value if self.level else 'all',
            'created_at': self.created_at.isoformat()
        }


@dataclass
class PracticeResult:
    """Score of a submitted practice test."""
    practice_test_id: str
    earned_points: int
    total_points: int
    percentage: float
    passed: bool
    submitted_at: datetime
    question_results: List[QuestionResult] = field(default_factory=list)

    @property
    def correct_answers(self) -> int:
        return sum(1 for r in self.question_results if r.is_correct)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'practice_test_id': self.practice_test_id,
            'total_questions': len(self.question_results),
            'correct_answers': self.correct_answers,
            'earned_points': self.earned_points,
            'total_points': self.total_points,
            'percentage': self.percentage,
            'passed': self.passed,
            'question_results': [r.to_dict() for r in self.question_results],
            'submitted_at': self.submitted_at.isoformat()
        }


def parse_level(level: Any) -> Optional[TopicLevel]:
    """``None`` and ``"all"`` mean any level."""
    if level is None or level == "all":
        return None
    return TopicLevel.parse(level)


class PracticeTestService:
    """
    Draws and scores practice tests.

    Args:
        topics: Topic storage, used to skip inactive topics and filter by level
        tagger: Source of the active questions of a topic
        question_bank: Question lookup and the scoring rule
        clock: Source of the current time
        rng: Random source for question selection
    """

    def __init__(
        self,
        topics: TopicRepository,
        tagger: TopicTagger,
        question_bank: QuestionBank,
        clock: Clock = utcnow,
        rng: Optional[random.Random] = None
    ):
        self.topics = topics
        self.tagger = tagger
        self.question_bank = question_bank
        self.clock = clock
        self.rng = rng or random.Random()

    async def available_topics(self) -> List[Topic]:
        """Active topics a practice test can be drawn from."""
        return await self.topics.find_all(active_only=True)

    async def _candidates(self, topic_ids: Iterable[str], level: Optional[TopicLevel]) -> List[Question]:
        pool: Dict[str, Question] = {}
        for topic_id in topic_ids:
            topic = await self.topics.get_by_id(topic_id)
            if topic is None or topic.is_deleted or not topic.is_active:
                continue
            if level is not None and topic.level != level:
                continue
            for question in await self.tagger.active_questions_for(topic_id):
                pool.setdefault(question.question_id, question)
        return list(pool.values())

    @log_execution_time(logger)
    async def create(
        self,
        topic_ids: Iterable[str],
        question_count: int = DEFAULT_QUESTION_COUNT,
        level: Any = None
    ) -> PracticeTest:
        """
        Draw up to ``question_count`` (at most 50) random questions.

        Unknown, inactive and deleted topics are skipped, as are topics of
        another level when ``level`` is given. A question tagged with several
        of the chosen topics is drawn at most once.

        Raises:
            ValidationError: If no topic is given, the count is not a
                positive integer, the level is unknown, or the topics hold no
                active questions
        """
        topic_ids = validate_identifier_list(topic_ids, "topic_ids")
        if not topic_ids:
            raise ValidationError("At least one topic must be selected", details={"field": "topic_ids"})
        count = min(validate_int_range(question_count, "question_count", 1), MAX_QUESTION_COUNT)
        level = parse_level(level)

        candidates = await self._candidates(topic_ids, level)
        if not candidates:
            raise ValidationError(
                "No questions found for the selected topics and level",
                details={"topic_ids": topic_ids, "level": level.value if level else "all"}
            )

        self.rng.shuffle(candidates)
        selected = candidates[:count]

        practice_test = PracticeTest(
            practice_test_id=str(uuid.uuid4()),
            questions=[q.to_public_dict() for q in selected],
            topic_ids=topic_ids,
            level=level,
            created_at=self.clock()
        )
        logger.info(
            f"Drew practice test {practice_test.practice_test_id}: "
            f"{len(selected)} of {len(candidates)} questions"
        )
        return practice_test

    @log_execution_time(logger)
    async def submit(self, practice_test_id: str, answers: Optional[Mapping[str, Any]]) -> PracticeResult:
        """
        Score the answered questions of a practice test. Nothing is stored.

        Only answered questions count toward the total. Answers for unknown
        or deleted questions are ignored.

        Raises:
            ValidationError: If the id is malformed or no answers are given
        """
        practice_test_id = validate_identifier(practice_test_id, "practice_test_id")
        answers = validate_answers(answers)
        if not answers:
            raise ValidationError("answers are required", details={"field": "answers"})

        question_ids = [question_id for question_id in answers if is_identifier(question_id)]
        questions = await self.question_bank.questions.find_by_ids(question_ids, active_only=False)

        results = []
        for question in questions:
            selected = answers[question.question_id]
            results.append(QuestionResult(
                question_id=question.question_id,
                text=question.text,
                selected_answer=selected,
                correct_answer=question.correct_option,
                is_correct=self.question_bank.is_correct(question, selected),
                points=question.points,
                earned_points=self.question_bank.score_for(question, selected)
            ))

        earned = sum(r.earned_points for r in results)
        total = sum(r.points for r in results)
        score_percentage = percentage(earned, total)
        logger.info(f"Scored practice test {practice_test_id}: {earned}/{total} ({score_percentage}%)")
        return PracticeResult(
            practice_test_id=practice_test_id,
            earned_points=earned,
            total_points=total,
            percentage=score_percentage,
            passed=score_percentage >= PRACTICE_PASSING_PERCENTAGE,
            submitted_at=self.clock(),
            question_results=results
        )
