"""
API tests for the LearnPortal HTTP layer.

The application is built over in-memory services and a fake clock, so every
test gets a clean portal.
"""

import pytest
from fastapi.testclient import TestClient

from learnportal.container import build_memory_services
from learnportal.main import create_app

from conftest import new_id

API = "/api/v1"


@pytest.fixture
def client(clock):
    app = create_app(build_memory_services(clock=clock))
    return TestClient(app)


@pytest.fixture
def exam(client):
    response = client.post(f"{API}/exams", json={
        "title": "HTTP Basics",
        "duration_minutes": 20,
        "passing_score_percentage": 60
    })
    assert response.status_code == 201
    exam = response.json()["data"]

    questions = []
    for points in (5, 3):
        response = client.post(f"{API}/exams/{exam['exam_id']}/questions", json={
            "text": f"Worth {points}",
            "question_type": "single_choice",
            "options": ["GET", "POST"],
            "correct_option": 0,
            "points": points
        })
        assert response.status_code == 201
        questions.append(response.json()["data"])
    exam["questions"] = questions
    return exam


class TestCatalogEndpoints:
    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert "LearnPortal" in response.json()["message"]

    def test_create_and_get_topic(self, client):
        response = client.post(f"{API}/topics", json={"title": "Networking", "level": "advanced"})
        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "success"

        topic_id = body["data"]["topic_id"]
        response = client.get(f"{API}/topics/{topic_id}")
        assert response.json()["data"]["level"] == "advanced"

    def test_invalid_topic_level(self, client):
        response = client.post(f"{API}/topics", json={"title": "Networking", "level": "guru"})
        assert response.status_code == 400
        body = response.json()
        assert body["status"] == "error"
        assert body["code"] == "validation_error"
        assert body["details"]["field"] == "level"

    def test_exam_not_found(self, client):
        response = client.get(f"{API}/exams/{new_id()}")
        assert response.status_code == 404
        assert response.json()["code"] == "not_found_error"

    def test_malformed_id(self, client):
        response = client.get(f"{API}/exams/not-a-uuid")
        assert response.status_code == 400

    def test_request_body_validation(self, client):
        response = client.post(f"{API}/exams", json={"duration_minutes": "soon"})
        assert response.status_code == 422
        assert response.json()["code"] == "validation_error"

    def test_admin_question_listing_includes_answer_key(self, client, exam):
        response = client.get(f"{API}/exams/{exam['exam_id']}/questions")
        data = response.json()["data"]
        assert [q["points"] for q in data] == [5, 3]
        assert all("correct_option" in q for q in data)

    def test_update_and_delete_exam(self, client, exam):
        exam_id = exam["exam_id"]
        response = client.put(f"{API}/exams/{exam_id}", json={
            "title": "HTTP Advanced",
            "duration_minutes": 40,
            "passing_score_percentage": 75
        })
        assert response.status_code == 200
        data = response.json()["data"]
        assert (data["title"], data["duration_minutes"], data["passing_score_percentage"]) == (
            "HTTP Advanced", 40, 75
        )

        response = client.put(f"{API}/exams/{exam_id}", json={
            "title": "HTTP Advanced",
            "duration_minutes": 40,
            "passing_score_percentage": 175
        })
        assert response.status_code == 400

        response = client.delete(f"{API}/exams/{exam_id}")
        assert response.status_code == 200
        assert response.json()["data"]["deleted_at"] is not None
        assert client.get(f"{API}/exams/{exam_id}").status_code == 404
        assert client.delete(f"{API}/exams/{exam_id}").status_code == 404

    def test_update_toggle_and_delete_topic(self, client):
        topic_id = client.post(f"{API}/topics", json={"title": "Verbs"}).json()["data"]["topic_id"]

        response = client.put(f"{API}/topics/{topic_id}", json={"title": "HTTP verbs", "level": "expert"})
        assert response.status_code == 200
        assert response.json()["data"]["level"] == "expert"

        assert client.post(f"{API}/topics/{topic_id}/deactivate").json()["data"]["is_active"] is False
        assert client.post(f"{API}/topics/{topic_id}/activate").json()["data"]["is_active"] is True

        assert client.delete(f"{API}/topics/{topic_id}").status_code == 200
        assert client.get(f"{API}/topics/{topic_id}").status_code == 404
        response = client.put(f"{API}/topics/{topic_id}", json={"title": "Gone", "level": "expert"})
        assert response.status_code == 404


class TestQuestionEndpoints:
    def test_update_and_tag_question(self, client, exam):
        question_id = exam["questions"][0]["question_id"]
        response = client.put(f"{API}/questions/{question_id}", json={
            "text": "Which verb is safe?",
            "options": ["GET", "POST", "PUT"],
            "correct_option": 0,
            "points": 2
        })
        assert response.status_code == 200
        assert response.json()["data"]["points"] == 2

        topic_id = client.post(f"{API}/topics", json={"title": "Verbs"}).json()["data"]["topic_id"]
        response = client.post(f"{API}/questions/{question_id}/topics/{topic_id}")
        assert response.status_code == 200

        response = client.get(f"{API}/topics/{topic_id}/questions")
        assert [q["question_id"] for q in response.json()["data"]] == [question_id]

        client.post(f"{API}/questions/{question_id}/deactivate")
        assert client.get(f"{API}/topics/{topic_id}/questions").json()["data"] == []

    def test_delete_question(self, client, exam):
        question_id = exam["questions"][1]["question_id"]
        assert client.delete(f"{API}/questions/{question_id}").status_code == 200
        assert client.get(f"{API}/questions/{question_id}").status_code == 404


class TestAttemptFlow:
    def test_full_flow(self, client, exam):
        user_id, admin_id = new_id(), new_id()
        response = client.post(f"{API}/assignments", json={
            "user_id": user_id,
            "exam_id": exam["exam_id"],
            "assigned_by": admin_id,
            "due_date": "2024-02-01T00:00:00"
        })
        assert response.status_code == 201
        assignment_id = response.json()["data"]["id"]

        response = client.post(f"{API}/attempts", json={"user_id": user_id, "exam_id": exam["exam_id"]})
        assert response.status_code == 201
        started = response.json()["data"]
        assert started["time_limit"] == 1200
        assert all("correct_option" not in q for q in started["questions"])

        response = client.post(f"{API}/attempts", json={"user_id": user_id, "exam_id": exam["exam_id"]})
        assert response.status_code == 409
        assert response.json()["message"] == "User already has an active attempt for this exam"

        first, second = exam["questions"]
        response = client.post(f"{API}/attempts/{started['attempt_id']}/submit", json={
            "answers": {first["question_id"]: 0, second["question_id"]: 1}
        })
        assert response.status_code == 200
        result = response.json()["data"]
        assert result["score"] == {
            "earned": 5, "total": 8, "percentage": 62.5, "passed": True, "passing_threshold": 60
        }
        assert result["completed_assignments"] == [assignment_id]

        response = client.post(f"{API}/attempts/{started['attempt_id']}/submit", json={"answers": {}})
        assert response.status_code == 409

        response = client.get(f"{API}/users/{user_id}/assignments", params={"status": "completed"})
        assert [a["id"] for a in response.json()["data"]] == [assignment_id]

        response = client.get(f"{API}/stats/exams/{exam['exam_id']}")
        stats = response.json()["data"]
        assert stats["completed_attempts"] == 1
        assert stats["pass_rate"] == 100.0

    def test_inactive_exam(self, client, exam):
        client.post(f"{API}/exams/{exam['exam_id']}/deactivate")
        response = client.post(f"{API}/attempts", json={"user_id": new_id(), "exam_id": exam["exam_id"]})
        assert response.status_code == 409
        assert response.json()["message"] == "Exam is not active"

    def test_submit_unknown_attempt(self, client):
        response = client.post(f"{API}/attempts/{new_id()}/submit", json={"answers": {}})
        assert response.status_code == 404


class TestAssignmentEndpoints:
    def test_overdue_listing_uses_the_clock(self, client, clock, exam):
        user_id = new_id()
        client.post(f"{API}/assignments", json={
            "user_id": user_id,
            "exam_id": exam["exam_id"],
            "assigned_by": new_id(),
            "due_date": clock.now.replace(day=16).isoformat()
        })
        response = client.get(f"{API}/users/{user_id}/assignments", params={"status": "overdue"})
        assert response.json()["data"] == []

        clock.advance(days=2)
        response = client.get(f"{API}/users/{user_id}/assignments", params={"status": "overdue"})
        data = response.json()["data"]
        assert len(data) == 1
        assert data[0]["is_overdue"]

        response = client.get(f"{API}/stats/users/{user_id}/assignments")
        assert response.json()["data"]["overdue"] == 1

    def test_complete_is_idempotent(self, client, exam):
        assignment_id = client.post(f"{API}/assignments", json={
            "user_id": new_id(), "exam_id": exam["exam_id"], "assigned_by": new_id()
        }).json()["data"]["id"]

        first = client.post(f"{API}/assignments/{assignment_id}/complete").json()["data"]
        second = client.post(f"{API}/assignments/{assignment_id}/complete").json()["data"]
        assert first["completed_at"] == second["completed_at"]
        assert second["is_completed"]

    def test_unknown_assignment(self, client):
        assert client.post(f"{API}/assignments/{new_id()}/complete").status_code == 404

    def test_learning_stats(self, client, exam):
        response = client.get(f"{API}/stats/learning")
        assert response.status_code == 200
        assert response.json()["data"]["questions"] == {"total": 2, "active": 2}


class TestPracticeEndpoints:
    def test_create_and_submit(self, client, exam):
        topic_id = client.post(f"{API}/topics", json={"title": "Verbs"}).json()["data"]["topic_id"]
        for question in exam["questions"]:
            client.post(f"{API}/questions/{question['question_id']}/topics/{topic_id}")

        response = client.get(f"{API}/practice/topics")
        assert [t["topic_id"] for t in response.json()["data"]] == [topic_id]

        response = client.post(f"{API}/practice-tests", json={"topic_ids": [topic_id], "question_count": 5})
        assert response.status_code == 201
        practice_test = response.json()["data"]
        assert practice_test["total_questions"] == 2
        assert all("correct_option" not in q for q in practice_test["questions"])

        answers = {q["id"]: 0 for q in practice_test["questions"]}
        response = client.post(
            f"{API}/practice-tests/{practice_test['practice_test_id']}/submit",
            json={"answers": answers}
        )
        assert response.status_code == 200
        result = response.json()["data"]
        assert (result["earned_points"], result["total_points"], result["correct_answers"]) == (8, 8, 2)
        assert result["passed"] is True

    def test_invalid_practice_requests(self, client):
        empty = client.post(f"{API}/topics", json={"title": "Empty"}).json()["data"]["topic_id"]

        assert client.post(f"{API}/practice-tests", json={"topic_ids": []}).status_code == 400
        assert client.post(f"{API}/practice-tests", json={"topic_ids": [empty]}).status_code == 400
        response = client.post(f"{API}/practice-tests", json={"topic_ids": [empty], "level": "guru"})
        assert response.status_code == 400
        response = client.post(f"{API}/practice-tests/{new_id()}/submit", json={"answers": {}})
        assert response.status_code == 400
