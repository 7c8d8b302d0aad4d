"""
Tests for the domain entities and the shared validation helpers.
"""

import uuid
from datetime import datetime, timedelta, timezone

import pytest

from learnportal.common.error_handling import ValidationError
from learnportal.common.utils import percentage, to_naive_utc
from learnportal.common.validation import (
    validate_answers, validate_identifier, validate_identifier_list, validate_identifiers,
    validate_int_range, validate_text
)
from learnportal.domain.assignments.model import ExamAssignment
from learnportal.domain.attempts.model import ExamAttempt
from learnportal.domain.exams.model import Exam
from learnportal.domain.questions.model import Question, QuestionType
from learnportal.domain.topics.model import Topic, TopicLevel

NOW = datetime(2024, 1, 15, 9, 0, 0)


def make_question(**overrides):
    fields = dict(
        text="What is 2 + 2?",
        question_type="multiple_choice",
        exam_id=str(uuid.uuid4()),
        options=["3", "4", "5"],
        correct_option=1,
        points=2,
        now=NOW
    )
    fields.update(overrides)
    return Question.create(**fields)


class TestValidation:
    def test_identifier_is_lower_cased(self):
        value = str(uuid.uuid4()).upper()
        assert validate_identifier(value, "user_id") == value.lower()

    @pytest.mark.parametrize("value", ["", "abc", None, 42, "1234-5678", str(uuid.uuid4()) + "x"])
    def test_identifier_rejects_malformed_values(self, value):
        with pytest.raises(ValidationError) as exc_info:
            validate_identifier(value, "user_id")
        assert exc_info.value.details["field"] == "user_id"

    def test_identifiers_reports_every_bad_field(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_identifiers(user_id="nope", exam_id=str(uuid.uuid4()), assigned_by=None)
        assert set(exc_info.value.details["fields"]) == {"user_id", "assigned_by"}

    def test_identifier_list_drops_duplicates_in_order(self):
        a, b = str(uuid.uuid4()), str(uuid.uuid4())
        assert validate_identifier_list([a, b, a.upper(), b], "topic_ids") == [a, b]

    def test_identifier_list_rejects_a_bare_string(self):
        with pytest.raises(ValidationError):
            validate_identifier_list(str(uuid.uuid4()), "topic_ids")

    def test_text_is_stripped_and_bounded(self):
        assert validate_text("  hello ", "title", 10) == "hello"
        with pytest.raises(ValidationError):
            validate_text("   ", "title")
        with pytest.raises(ValidationError):
            validate_text("x" * 11, "title", 10)

    def test_int_range_rejects_bool(self):
        with pytest.raises(ValidationError):
            validate_int_range(True, "points", minimum=1)
        assert validate_int_range(5, "points", minimum=1, maximum=5) == 5

    def test_answers(self):
        key = str(uuid.uuid4())
        assert validate_answers(None) == {}
        assert validate_answers({key.upper(): 1}) == {key: 1}
        with pytest.raises(ValidationError):
            validate_answers([1, 2])
        with pytest.raises(ValidationError):
            validate_answers({1: 0})


class TestUtils:
    def test_percentage(self):
        assert percentage(5, 8) == 62.5
        assert percentage(1, 3) == 33.33
        assert percentage(3, 0) == 0

    def test_to_naive_utc(self):
        aware = datetime(2024, 1, 1, 12, 0, tzinfo=timezone(timedelta(hours=2)))
        assert to_naive_utc(aware) == datetime(2024, 1, 1, 10, 0)
        assert to_naive_utc(NOW) is NOW


class TestQuestion:
    def test_create(self):
        question = make_question(text="  What is 2 + 2?  ")
        assert question.text == "What is 2 + 2?"
        assert question.question_type == QuestionType.MULTIPLE_CHOICE
        assert question.is_active
        assert question.created_at == NOW

    @pytest.mark.parametrize("overrides", [
        {"text": ""},
        {"text": "x" * 1001},
        {"question_type": "essay"},
        {"options": []},
        {"options": ["ok", "  "]},
        {"correct_option": 3},
        {"correct_option": -1},
        {"points": 0},
        {"exam_id": "not-a-uuid"},
    ])
    def test_create_rejects_invalid_fields(self, overrides):
        with pytest.raises(ValidationError):
            make_question(**overrides)

    @pytest.mark.parametrize("selected, expected", [
        (1, True),
        (0, False),
        (2, False),
        (7, False),
        (-1, False),
        (None, False),
        ("1", False),
        (True, False),
        (1.0, False),
    ])
    def test_is_correct(self, selected, expected):
        question = make_question(correct_option=1)
        assert question.is_correct(selected) is expected
        assert question.score_for(selected) == (2 if expected else 0)

    def test_update_is_all_or_nothing(self):
        question = make_question()
        with pytest.raises(ValidationError):
            question.update("New text", ["a", "b"], correct_option=5, points=1)
        assert question.text == "What is 2 + 2?"
        assert question.options == ["3", "4", "5"]

        later = NOW + timedelta(minutes=5)
        question.update("New text", ["a", "b"], correct_option=0, points=4, now=later)
        assert (question.text, question.correct_option, question.points) == ("New text", 0, 4)
        assert question.updated_at == later

    def test_public_dict_hides_answer_key(self):
        public = make_question().to_public_dict()
        assert set(public) == {"id", "text", "type", "options", "points"}
        assert "correct_option" not in public

    def test_soft_delete_deactivates(self):
        question = make_question()
        question.soft_delete(now=NOW)
        assert question.is_deleted
        assert not question.is_active

    def test_dict_round_trip(self):
        question = make_question()
        assert Question.from_dict(question.to_dict()) == question


class TestTopicAndExam:
    def test_topic_levels(self):
        assert TopicLevel.parse("expert") == TopicLevel.EXPERT
        with pytest.raises(ValidationError):
            TopicLevel.parse("guru")

    def test_topic_description_may_be_empty(self):
        topic = Topic.create("Loops", now=NOW)
        assert topic.description == ""
        with pytest.raises(ValidationError):
            Topic.create("Loops", description="x" * 1001)

    @pytest.mark.parametrize("overrides", [
        {"duration_minutes": 0},
        {"duration_minutes": 481},
        {"passing_score_percentage": 101},
        {"passing_score_percentage": -1},
        {"title": "x" * 256},
        {"topic_id": "bad"},
    ])
    def test_exam_rejects_out_of_range_fields(self, overrides):
        fields = dict(title="Exam", duration_minutes=30, passing_score_percentage=60)
        fields.update(overrides)
        with pytest.raises(ValidationError):
            Exam.create(**fields)

    def test_exam_bounds_are_inclusive(self):
        exam = Exam.create("Exam", duration_minutes=480, passing_score_percentage=0)
        assert exam.duration_seconds == 480 * 60
        assert exam.is_passing(0)

        exam = Exam.create("Exam", duration_minutes=1, passing_score_percentage=100)
        assert exam.is_passing(100)
        assert not exam.is_passing(99.99)


class TestAssignmentAndAttempt:
    def test_assignment_overdue(self):
        assignment = ExamAssignment.create(
            str(uuid.uuid4()), str(uuid.uuid4()), str(uuid.uuid4()),
            due_date=NOW + timedelta(days=1), now=NOW
        )
        assert not assignment.is_overdue(NOW)
        assert not assignment.is_overdue(NOW + timedelta(days=1))
        assert assignment.is_overdue(NOW + timedelta(days=1, seconds=1))

        assert assignment.complete(NOW + timedelta(days=2))
        assert not assignment.is_overdue(NOW + timedelta(days=3))

    def test_assignment_without_due_date_is_never_overdue(self):
        assignment = ExamAssignment.create(str(uuid.uuid4()), str(uuid.uuid4()), str(uuid.uuid4()), now=NOW)
        assert not assignment.is_overdue(NOW + timedelta(days=3650))

    def test_assignment_complete_keeps_first_timestamp(self):
        assignment = ExamAssignment.create(str(uuid.uuid4()), str(uuid.uuid4()), str(uuid.uuid4()), now=NOW)
        assert assignment.complete(NOW + timedelta(hours=1))
        assert not assignment.complete(NOW + timedelta(hours=2))
        assert assignment.completed_at == NOW + timedelta(hours=1)

    def test_attempt_duration(self):
        attempt = ExamAttempt.start(str(uuid.uuid4()), str(uuid.uuid4()), now=NOW)
        assert attempt.is_in_progress
        assert attempt.duration_seconds is None

        attempt.completed_at = NOW + timedelta(minutes=2, seconds=5)
        assert not attempt.is_in_progress
        assert attempt.duration_seconds == 125
