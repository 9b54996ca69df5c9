import pytest
from fastapi.testclient import TestClient

from main import app
from src.api.dependencies import get_orchestrator


@pytest.fixture
def client(orchestrator):
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def _create(client, **overrides):
    body = {
        "user_id": "student-7",
        "target_role": "frontend-developer",
        "interview_type": "behavioral",
        "difficulty": "beginner",
        "skills": ["React"],
        "total_questions": 1,
        **overrides,
    }
    response = client.post("/api/sessions", json=body)
    assert response.status_code == 201, response.text
    return response.json()


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_create_session(client):
    session = _create(client, personality="professional")

    assert session["status"] == "draft"
    assert session["personality"] == "professional"
    assert session["title"] == "Frontend Developer Behavioral Interview"
    assert session["progress"]["total_questions"] == 1
    assert session["progress"]["remaining_questions"] == 1


def test_create_session_validation_error(client):
    response = client.post("/api/sessions", json={"user_id": "u", "total_questions": 0})

    assert response.status_code == 422
    detail = response.json()["detail"]
    assert detail["error"] == "ValidationError"
    assert detail["errors"][0]["loc"] == ["total_questions"]


def test_full_flow(client):
    session_id = _create(client)["session_id"]

    started = client.post(f"/api/sessions/{session_id}/start").json()
    assert started["status"] == "in-progress"
    assert started["progress"]["current_question"] == "Main question 1"

    answered = client.post(
        f"/api/sessions/{session_id}/answer",
        json={"answer_text": "I once led a group project", "time_spent_seconds": 30},
    )
    assert answered.status_code == 200
    body = answered.json()
    assert body["status"] == "completed"
    assert body["progress"]["progress"] == 100
    assert body["feedback"]["overall_score"] == 80

    feedback = client.get(f"/api/sessions/{session_id}/feedback")
    assert feedback.status_code == 200
    assert feedback.json()["summary"] == "Solid interview overall"

    again = client.post(f"/api/sessions/{session_id}/complete")
    assert again.status_code == 200
    assert again.json()["feedback"] == body["feedback"]


def test_answer_before_start_conflicts(client):
    session_id = _create(client)["session_id"]

    response = client.post(f"/api/sessions/{session_id}/answer", json={"answer_text": "hi"})

    assert response.status_code == 409
    detail = response.json()["detail"]
    assert detail["error"] == "InvalidTransition"
    assert detail["status"] == "draft"
    assert detail["action"] == "answer"


def test_feedback_not_ready(client):
    session_id = _create(client)["session_id"]

    response = client.get(f"/api/sessions/{session_id}/feedback")

    assert response.status_code == 409
    assert response.json()["detail"]["action"] == "get_feedback"


def test_unknown_session(client):
    response = client.get("/api/sessions/does-not-exist")

    assert response.status_code == 404
    assert response.json()["detail"]["error"] == "SessionNotFound"


def test_cancel_twice(client):
    session_id = _create(client)["session_id"]

    assert client.post(f"/api/sessions/{session_id}/cancel").json()["status"] == "cancelled"
    response = client.post(f"/api/sessions/{session_id}/cancel")

    assert response.status_code == 409
    assert response.json()["detail"]["error"] == "SessionClosed"


def test_update_personality(client):
    session_id = _create(client)["session_id"]

    response = client.put(f"/api/sessions/{session_id}/personality", json={"personality": "challenging"})
    assert response.json()["personality"] == "challenging"

    bad = client.put(f"/api/sessions/{session_id}/personality", json={"personality": "sleepy"})
    assert bad.status_code == 422


def test_list_and_stats(client):
    first = _create(client)["session_id"]
    second = _create(client)["session_id"]
    client.post(f"/api/sessions/{second}/cancel")

    listed = client.get("/api/sessions", params={"user_id": "student-7"}).json()
    assert [s["session_id"] for s in listed] == [second, first]
    assert listed[0]["status"] == "cancelled"

    drafts = client.get("/api/sessions", params={"user_id": "student-7", "status": "draft"}).json()
    assert [s["session_id"] for s in drafts] == [first]

    bad = client.get("/api/sessions", params={"user_id": "student-7", "status": "paused"})
    assert bad.status_code == 422

    stats = client.get("/api/sessions/stats", params={"user_id": "student-7"}).json()
    assert stats["total"] == 2
    assert stats["by_status"]["draft"]["count"] == 1
    assert stats["by_status"]["cancelled"]["count"] == 1
