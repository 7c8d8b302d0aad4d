"""
Tests for the PracticeTestService.
"""

import random

import pytest

from learnportal.common.error_handling import ValidationError
from learnportal.services.practice import MAX_QUESTION_COUNT

from conftest import new_id, seed_exam


async def tagged_topic(services, title="Basics", level="beginner", points=(5, 3)):
    """Create a topic holding one fresh question per entry in ``points``."""
    _, questions = await seed_exam(services, points=points)
    topic = await services.catalog.create_topic(title, level=level)
    for question in questions:
        await services.topic_tagger.associate(question.question_id, topic.topic_id)
    return topic, questions


class TestCreatePracticeTest:
    @pytest.mark.asyncio
    async def test_draws_public_questions(self, services, clock):
        topic, questions = await tagged_topic(services)

        practice_test = await services.practice.create([topic.topic_id], question_count=10)
        data = practice_test.to_dict()

        assert data["total_questions"] == 2
        assert {q["id"] for q in data["questions"]} == {q.question_id for q in questions}
        assert all("correct_option" not in q for q in data["questions"])
        assert data["selected_topics"] == [topic.topic_id]
        assert data["level"] == "all"
        assert data["created_at"] == clock.now.isoformat()

    @pytest.mark.asyncio
    async def test_count_is_capped(self, services):
        topic, _ = await tagged_topic(services, points=(1,) * (MAX_QUESTION_COUNT + 5))
        services.practice.rng = random.Random(7)

        practice_test = await services.practice.create([topic.topic_id], question_count=500)
        assert len(practice_test.questions) == MAX_QUESTION_COUNT
        assert len({q["id"] for q in practice_test.questions}) == MAX_QUESTION_COUNT

        smaller = await services.practice.create([topic.topic_id], question_count=3)
        assert len(smaller.questions) == 3

    @pytest.mark.asyncio
    async def test_shared_question_is_drawn_once(self, services):
        first, (question, _) = await tagged_topic(services, "First")
        second = await services.catalog.create_topic("Second")
        await services.topic_tagger.associate(question.question_id, second.topic_id)

        practice_test = await services.practice.create([first.topic_id, second.topic_id])
        ids = [q["id"] for q in practice_test.questions]
        assert len(ids) == len(set(ids)) == 2

    @pytest.mark.asyncio
    async def test_level_filter(self, services):
        beginner, _ = await tagged_topic(services, "Intro", level="beginner")
        expert, expert_questions = await tagged_topic(services, "Deep", level="expert", points=(2,))
        topic_ids = [beginner.topic_id, expert.topic_id]

        practice_test = await services.practice.create(topic_ids, level="expert")
        assert [q["id"] for q in practice_test.questions] == [expert_questions[0].question_id]
        assert practice_test.to_dict()["level"] == "expert"

        assert len((await services.practice.create(topic_ids, level="all")).questions) == 3
        with pytest.raises(ValidationError):
            await services.practice.create(topic_ids, level="advanced")
        with pytest.raises(ValidationError):
            await services.practice.create(topic_ids, level="guru")

    @pytest.mark.asyncio
    async def test_skips_unavailable_topics_and_questions(self, services):
        live, (kept, retired) = await tagged_topic(services, "Live")
        hidden, _ = await tagged_topic(services, "Hidden")
        gone, _ = await tagged_topic(services, "Gone")
        await services.catalog.deactivate_topic(hidden.topic_id)
        await services.catalog.delete_topic(gone.topic_id)
        await services.question_bank.deactivate(retired.question_id)

        practice_test = await services.practice.create(
            [live.topic_id, hidden.topic_id, gone.topic_id, new_id()]
        )
        assert [q["id"] for q in practice_test.questions] == [kept.question_id]

        with pytest.raises(ValidationError):
            await services.practice.create([hidden.topic_id, gone.topic_id])

    @pytest.mark.asyncio
    async def test_invalid_requests(self, services):
        topic, _ = await tagged_topic(services)
        empty = await services.catalog.create_topic("Empty")

        with pytest.raises(ValidationError):
            await services.practice.create([])
        with pytest.raises(ValidationError):
            await services.practice.create(["not-an-id"])
        with pytest.raises(ValidationError):
            await services.practice.create([topic.topic_id], question_count=0)
        with pytest.raises(ValidationError):
            await services.practice.create([topic.topic_id], question_count=True)
        with pytest.raises(ValidationError):
            await services.practice.create([empty.topic_id])

    @pytest.mark.asyncio
    async def test_available_topics(self, services):
        shown = await services.catalog.create_topic("Shown")
        hidden = await services.catalog.create_topic("Hidden")
        await services.catalog.deactivate_topic(hidden.topic_id)

        topics = await services.practice.available_topics()
        assert [t.topic_id for t in topics] == [shown.topic_id]


class TestSubmitPracticeTest:
    @pytest.mark.asyncio
    async def test_scores_answered_questions(self, services, clock):
        _, (five, three) = await tagged_topic(services)

        result = await services.practice.submit(new_id(), {five.question_id: 1, three.question_id: 0})
        assert (result.earned_points, result.total_points) == (5, 8)
        assert result.percentage == 62.5
        assert result.correct_answers == 1
        assert not result.passed

        data = result.to_dict()
        assert data["total_questions"] == 2
        assert data["submitted_at"] == clock.now.isoformat()
        by_id = {r["question_id"]: r for r in data["question_results"]}
        assert by_id[three.question_id]["correct_answer"] == 1

    @pytest.mark.asyncio
    async def test_passes_at_seventy_percent(self, services):
        _, (seven, three) = await tagged_topic(services, points=(7, 3))

        result = await services.practice.submit(new_id(), {seven.question_id: 1, three.question_id: 2})
        assert result.percentage == 70
        assert result.passed

    @pytest.mark.asyncio
    async def test_unknown_questions_are_ignored(self, services):
        _, (five, _) = await tagged_topic(services)
        await services.question_bank.deactivate(five.question_id)

        result = await services.practice.submit(new_id(), {
            five.question_id: 1,
            new_id(): 1,
            "not-an-id": 0
        })
        assert [r.question_id for r in result.question_results] == [five.question_id]
        assert result.percentage == 100

        nothing = await services.practice.submit(new_id(), {new_id(): 1})
        assert (nothing.total_points, nothing.percentage, nothing.passed) == (0, 0, False)

    @pytest.mark.asyncio
    async def test_invalid_submissions(self, services):
        with pytest.raises(ValidationError):
            await services.practice.submit(new_id(), {})
        with pytest.raises(ValidationError):
            await services.practice.submit(new_id(), None)
        with pytest.raises(ValidationError):
            await services.practice.submit("nope", {new_id(): 1})

    @pytest.mark.asyncio
    async def test_nothing_is_stored(self, services):
        topic, (five, three) = await tagged_topic(services)

        practice_test = await services.practice.create([topic.topic_id])
        await services.practice.submit(practice_test.practice_test_id, {five.question_id: 1})

        assert await services.attempts.attempts.count() == 0
        assert await services.question_bank.count() == 2
