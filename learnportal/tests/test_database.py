"""
Integration tests for the SQLAlchemy repositories.

Each test runs the services against its own SQLite file created from the
table models.
"""

from datetime import timedelta

import pytest
import pytest_asyncio
from sqlalchemy import inspect
from sqlalchemy.ext.asyncio import create_async_engine

from learnportal.common.error_handling import ConflictError, DuplicateError, NotFoundError, ValidationError
from learnportal.container import build_sql_services
from learnportal.database.init_db import create_schema, create_session_factory, get_engine_kwargs
from learnportal.database.repositories import SqlAttemptRepository
from learnportal.domain.attempts.model import ExamAttempt

from conftest import new_id, seed_exam


@pytest.fixture
def test_db_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'test.db'}"


@pytest_asyncio.fixture
async def engine(test_db_url):
    engine = create_async_engine(test_db_url, **get_engine_kwargs(test_db_url))
    await create_schema(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def sql_services(session_factory, clock):
    return build_sql_services(session_factory, clock=clock)


class TestSchema:
    @pytest.mark.asyncio
    async def test_tables_and_active_attempt_index(self, engine):
        def describe(sync_conn):
            inspector = inspect(sync_conn)
            return (
                set(inspector.get_table_names()),
                {index["name"]: index for index in inspector.get_indexes("exam_attempts")}
            )

        async with engine.connect() as conn:
            tables, indexes = await conn.run_sync(describe)

        assert tables == {
            "topics", "exams", "questions", "question_topics", "exam_assignments", "exam_attempts"
        }
        assert "uq_exam_attempts_active_user_exam" in indexes
        assert indexes["uq_exam_attempts_active_user_exam"]["unique"]

    def test_pool_options_only_for_server_databases(self):
        assert "pool_size" not in get_engine_kwargs("sqlite+aiosqlite:///x.db")
        assert get_engine_kwargs("postgresql+asyncpg://db/portal", pool_size=3)["pool_size"] == 3


class TestSqlCatalogAndQuestions:
    @pytest.mark.asyncio
    async def test_question_round_trip(self, sql_services):
        exam, (five, three) = await seed_exam(sql_services)

        stored = await sql_services.question_bank.find_by_id(five.question_id)
        assert stored.options == ["A", "B", "C"]
        assert stored.points == 5
        assert stored.created_at == five.created_at

        found = await sql_services.question_bank.find_by_exam(exam.exam_id)
        assert {q.question_id for q in found} == {five.question_id, three.question_id}

    @pytest.mark.asyncio
    async def test_deleted_question_is_hidden(self, sql_services):
        exam, (five, three) = await seed_exam(sql_services)
        await sql_services.question_bank.delete_question(five.question_id)

        with pytest.raises(NotFoundError):
            await sql_services.question_bank.find_by_id(five.question_id)
        assert [q.question_id for q in await sql_services.question_bank.find_by_exam(exam.exam_id)] == [
            three.question_id
        ]
        assert await sql_services.question_bank.count() == 1

    @pytest.mark.asyncio
    async def test_topics_listed_newest_first(self, sql_services, clock):
        first = await sql_services.catalog.create_topic("First", level="expert")
        clock.advance(minutes=1)
        second = await sql_services.catalog.create_topic("Second")

        topics = await sql_services.catalog.list_topics()
        assert [t.topic_id for t in topics] == [second.topic_id, first.topic_id]
        assert topics[1].level.value == "expert"

    @pytest.mark.asyncio
    async def test_tagging(self, sql_services):
        _, (question, _) = await seed_exam(sql_services)
        a = await sql_services.catalog.create_topic("A")
        b = await sql_services.catalog.create_topic("B")

        assert await sql_services.topic_tagger.associate(question.question_id, a.topic_id)
        assert not await sql_services.topic_tagger.associate(question.question_id, a.topic_id)
        assert await sql_services.topic_tagger.count_topics_for(question.question_id) == 1

        result = await sql_services.topic_tagger.set_topics(question.question_id, [b.topic_id, b.topic_id])
        assert result == [b.topic_id]
        assert await sql_services.topic_tagger.questions_for(a.topic_id) == []

        assert await sql_services.topic_tagger.disassociate(question.question_id, b.topic_id)
        assert not await sql_services.topic_tagger.disassociate(question.question_id, b.topic_id)

    @pytest.mark.asyncio
    async def test_active_questions_for_topic(self, sql_services):
        _, (five, three) = await seed_exam(sql_services)
        topic = await sql_services.catalog.create_topic("Basics")
        await sql_services.topic_tagger.set_topics(five.question_id, [topic.topic_id])
        await sql_services.topic_tagger.set_topics(three.question_id, [topic.topic_id])

        await sql_services.question_bank.deactivate(three.question_id)
        questions = await sql_services.topic_tagger.active_questions_for(topic.topic_id)
        assert [q.question_id for q in questions] == [five.question_id]

        await sql_services.question_bank.delete_question(five.question_id)
        assert await sql_services.topic_tagger.active_questions_for(topic.topic_id) == []

    @pytest.mark.asyncio
    async def test_exam_update_and_delete(self, sql_services, clock):
        exam, _ = await seed_exam(sql_services)
        clock.advance(minutes=5)

        updated = await sql_services.catalog.update_exam(exam.exam_id, "Python II", "Harder", 45, 80)
        assert (updated.title, updated.duration_minutes, updated.passing_score_percentage) == ("Python II", 45, 80)
        assert updated.updated_at == clock.now

        assert not (await sql_services.catalog.deactivate_exam(exam.exam_id)).is_active
        assert (await sql_services.catalog.activate_exam(exam.exam_id)).is_active

        deleted = await sql_services.catalog.delete_exam(exam.exam_id)
        assert deleted.is_deleted
        assert not deleted.is_active
        assert await sql_services.catalog.list_exams() == []
        with pytest.raises(NotFoundError):
            await sql_services.catalog.update_exam(exam.exam_id, "Python III", "", 45, 80)
        with pytest.raises(NotFoundError):
            await sql_services.catalog.delete_exam(exam.exam_id)

    @pytest.mark.asyncio
    async def test_topic_update_and_delete(self, sql_services):
        topic = await sql_services.catalog.create_topic("Loops")

        updated = await sql_services.catalog.update_topic(topic.topic_id, "Iteration", "", "intermediate")
        assert (updated.title, updated.level.value) == ("Iteration", "intermediate")

        await sql_services.catalog.deactivate_topic(topic.topic_id)
        assert await sql_services.catalog.list_topics(active_only=True) == []

        await sql_services.catalog.delete_topic(topic.topic_id)
        assert await sql_services.catalog.list_topics() == []
        with pytest.raises(NotFoundError):
            await sql_services.catalog.activate_topic(topic.topic_id)

    @pytest.mark.asyncio
    async def test_practice_test(self, sql_services):
        _, (five, three) = await seed_exam(sql_services)
        topic = await sql_services.catalog.create_topic("Basics")
        await sql_services.topic_tagger.set_topics(five.question_id, [topic.topic_id])
        await sql_services.topic_tagger.set_topics(three.question_id, [topic.topic_id])

        practice_test = await sql_services.practice.create([topic.topic_id])
        assert {q["id"] for q in practice_test.questions} == {five.question_id, three.question_id}

        result = await sql_services.practice.submit(practice_test.practice_test_id, {
            five.question_id: 1,
            three.question_id: 1
        })
        assert result.percentage == 100
        assert result.passed


class TestSqlAssignments:
    @pytest.mark.asyncio
    async def test_mark_completed_keeps_first_timestamp(self, sql_services, clock, user_id, admin_id):
        exam, _ = await seed_exam(sql_services)
        assignment = await sql_services.assignments.assign(user_id, exam.exam_id, admin_id)

        clock.advance(hours=1)
        first = await sql_services.assignments.mark_completed(assignment.assignment_id)
        clock.advance(hours=1)
        second = await sql_services.assignments.mark_completed(assignment.assignment_id)

        assert first.is_completed
        assert second.completed_at == first.completed_at == clock.now - timedelta(hours=1)

    @pytest.mark.asyncio
    async def test_overdue_queries(self, sql_services, clock, user_id, admin_id):
        exam, _ = await seed_exam(sql_services)
        later = await sql_services.assignments.assign(user_id, exam.exam_id, admin_id, clock.now + timedelta(days=2))
        sooner = await sql_services.assignments.assign(user_id, exam.exam_id, admin_id, clock.now + timedelta(days=1))
        await sql_services.assignments.assign(user_id, exam.exam_id, admin_id)

        assert await sql_services.assignments.count_overdue_by_user(user_id) == 0
        clock.advance(days=3)
        overdue = await sql_services.assignments.overdue_by_user(user_id)
        assert [a.assignment_id for a in overdue] == [sooner.assignment_id, later.assignment_id]

        await sql_services.assignments.mark_completed(sooner.assignment_id)
        assert await sql_services.assignments.count_overdue_by_user(user_id) == 1
        assert await sql_services.assignments.count_pending_by_user(user_id) == 2

    @pytest.mark.asyncio
    async def test_deleted_assignment(self, sql_services, user_id, admin_id):
        exam, _ = await seed_exam(sql_services)
        assignment = await sql_services.assignments.assign(user_id, exam.exam_id, admin_id)
        await sql_services.assignments.delete(assignment.assignment_id)

        with pytest.raises(NotFoundError):
            await sql_services.assignments.mark_completed(assignment.assignment_id)
        assert await sql_services.assignments.count_by_exam(exam.exam_id) == 0

        restored = await sql_services.assignments.restore(assignment.assignment_id)
        assert not restored.is_deleted
        assert await sql_services.assignments.count_by_exam(exam.exam_id) == 1

    @pytest.mark.asyncio
    async def test_due_date_update_keeps_concurrent_completion(self, sql_services, clock, user_id, admin_id,
                                                               monkeypatch):
        exam, _ = await seed_exam(sql_services)
        assignment = await sql_services.assignments.assign(user_id, exam.exam_id, admin_id)
        repo = sql_services.assignments.assignments
        read = repo.get_by_id

        async def read_then_complete(assignment_id):
            found = await read(assignment_id)
            await repo.mark_completed(assignment_id, clock())
            return found

        monkeypatch.setattr(repo, "get_by_id", read_then_complete)
        due = clock.now + timedelta(days=1)
        await sql_services.assignments.update_due_date(assignment.assignment_id, due)
        monkeypatch.undo()

        stored = await repo.get_by_id(assignment.assignment_id)
        assert stored.is_completed
        assert stored.completed_at == clock.now
        assert stored.due_date == due

    @pytest.mark.asyncio
    async def test_due_date_of_completed_assignment_is_not_written(self, sql_services, user_id, admin_id, clock):
        exam, _ = await seed_exam(sql_services)
        assignment = await sql_services.assignments.assign(user_id, exam.exam_id, admin_id)
        await sql_services.assignments.mark_completed(assignment.assignment_id)

        with pytest.raises(ValidationError):
            await sql_services.assignments.update_due_date(assignment.assignment_id, clock.now)
        stored = await sql_services.assignments.find_by_id(assignment.assignment_id)
        assert stored.due_date is None
        assert stored.is_completed

    @pytest.mark.asyncio
    async def test_delete_keeps_concurrent_completion(self, sql_services, clock, user_id, admin_id, monkeypatch):
        exam, _ = await seed_exam(sql_services)
        assignment = await sql_services.assignments.assign(user_id, exam.exam_id, admin_id)
        repo = sql_services.assignments.assignments
        soft_delete = repo.soft_delete

        async def complete_then_delete(assignment_id, deleted_at):
            await repo.mark_completed(assignment_id, clock())
            return await soft_delete(assignment_id, deleted_at)

        monkeypatch.setattr(repo, "soft_delete", complete_then_delete)
        await sql_services.assignments.delete(assignment.assignment_id)
        monkeypatch.undo()

        stored = await repo.get_by_id(assignment.assignment_id)
        assert stored.is_deleted
        assert stored.is_completed
        assert stored.completed_at == clock.now


class TestSqlAttempts:
    @pytest.mark.asyncio
    async def test_second_active_attempt_is_rejected_by_the_index(self, session_factory, clock):
        repository = SqlAttemptRepository(session_factory)
        user_id, exam_id = new_id(), new_id()
        first = ExamAttempt.start(user_id, exam_id, now=clock.now)
        await repository.create(first)

        with pytest.raises(DuplicateError):
            await repository.create(ExamAttempt.start(user_id, exam_id, now=clock.now))

        assert await repository.complete(first.attempt_id, clock.now, 3, True)
        assert not await repository.complete(first.attempt_id, clock.now, 9, False)
        await repository.create(ExamAttempt.start(user_id, exam_id, now=clock.now))
        assert await repository.count(user_id=user_id) == 2

    @pytest.mark.asyncio
    async def test_attempt_lifecycle(self, sql_services, clock, user_id, admin_id):
        exam, (five, three) = await seed_exam(sql_services, points=(5, 3), passing_score=60)
        assignment = await sql_services.assignments.assign(user_id, exam.exam_id, admin_id)

        started = await sql_services.workflow.start_exam(user_id, exam.exam_id)
        with pytest.raises(ConflictError):
            await sql_services.workflow.start_exam(user_id, exam.exam_id)

        clock.advance(minutes=10)
        outcome = await sql_services.workflow.submit_exam(started.attempt_id, {five.question_id: 1})
        assert (outcome.result.earned_points, outcome.result.total_points) == (5, 8)
        assert outcome.result.percentage == 62.5
        assert outcome.result.passed
        assert outcome.completed_assignment_ids == [assignment.assignment_id]

        with pytest.raises(ConflictError):
            await sql_services.attempts.submit(started.attempt_id, {five.question_id: 1, three.question_id: 1})

        attempt = await sql_services.attempts.find_by_id(started.attempt_id)
        assert (attempt.score, attempt.passed, attempt.duration_seconds) == (5, True, 600)

        stats = await sql_services.stats.exam_statistics(exam.exam_id)
        assert stats["completed_attempts"] == 1
        assert stats["average_score"] == 5.0
        assert stats["pass_rate"] == 100.0
