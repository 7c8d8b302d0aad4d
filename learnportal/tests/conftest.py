"""
Shared fixtures for the LearnPortal test suite.
"""

import uuid
from datetime import datetime, timedelta

import pytest

from learnportal.container import build_memory_services


class FakeClock:
    """Controllable clock handed to services in place of ``utcnow``."""

    def __init__(self, start: datetime = datetime(2024, 1, 15, 9, 0, 0)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


def new_id() -> str:
    return str(uuid.uuid4())


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def services(clock):
    """Every service over fresh in-memory storage, sharing the fake clock."""
    return build_memory_services(clock=clock)


@pytest.fixture
def user_id():
    return new_id()


@pytest.fixture
def admin_id():
    return new_id()


async def seed_exam(services, points=(5, 3), passing_score=60, duration_minutes=30):
    """
    Create an exam with one question per entry in ``points``.

    The correct option of every question is index 1.
    """
    exam = await services.catalog.create_exam(
        title="Python Basics",
        description="Fundamentals check",
        duration_minutes=duration_minutes,
        passing_score_percentage=passing_score
    )
    questions = []
    for i, value in enumerate(points):
        questions.append(await services.question_bank.create_question(
            text=f"Question {i + 1}",
            question_type="single_choice",
            exam_id=exam.exam_id,
            options=["A", "B", "C"],
            correct_option=1,
            points=value
        ))
    return exam, questions
