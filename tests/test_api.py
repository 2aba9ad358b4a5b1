import json

from fastapi.testclient import TestClient

from conftest import FakeProvider, make_questions
from quizgen import main
from quizgen.config import Settings
from quizgen.main import app, get_generator
from quizgen.services import QuizBatchGenerator


def use_provider(provider):
    generator = QuizBatchGenerator(provider)
    app.dependency_overrides[get_generator] = lambda: generator


def test_health(client):
    response = client.get("/api/health")

    assert response.status_code == 200
    assert response.json() == {"status": "OK", "message": "Server is running"}


def test_root_lists_endpoints(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.json()["endpoints"]["generate_quiz"] == "/api/generate-quiz"


def test_generate_quiz_wire_shape(client, provider):
    response = client.post("/api/generate-quiz", json={"topic": "graphs", "numQuestions": 3})

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["topic"] == "graphs"
    assert data["batch"] == 1
    assert data["questionsInBatch"] == 3
    assert data["totalQuestions"] == 3
    assert data["hasMoreBatches"] is False
    assert data["usedFallback"] is False
    assert [q["id"] for q in data["questions"]] == [1, 2, 3]
    assert set(data["questions"][0]) == {
        "id",
        "question",
        "options",
        "correctAnswers",
        "multipleChoice",
        "difficulty",
        "explanation",
        "category",
    }
    assert len(provider.calls) == 1


def test_second_batch_of_larger_quiz(client):
    use_provider(FakeProvider(json.dumps(make_questions(10))))

    response = client.post(
        "/api/generate-quiz",
        json={"topic": "graphs", "numQuestions": 25, "batch": 2, "totalQuestions": 25},
    )

    data = response.json()
    assert response.status_code == 200
    assert data["questions"][0]["id"] == 11
    assert data["questions"][-1]["id"] == 20
    assert data["hasMoreBatches"] is False


def test_first_batch_reports_more_batches(client):
    use_provider(FakeProvider(json.dumps(make_questions(10))))

    response = client.post(
        "/api/generate-quiz",
        json={"topic": "graphs", "numQuestions": 10, "totalQuestions": 25},
    )

    assert response.json()["hasMoreBatches"] is True


def test_missing_topic_is_bad_request(client, provider):
    response = client.post("/api/generate-quiz", json={"numQuestions": 5})

    assert response.status_code == 400
    assert response.json() == {"error": "Topic and number of questions are required"}
    assert provider.calls == []


def test_non_positive_count_is_bad_request(client, provider):
    response = client.post("/api/generate-quiz", json={"topic": "graphs", "numQuestions": 0})

    assert response.status_code == 400
    assert "error" in response.json()
    assert provider.calls == []


def test_malformed_body_is_bad_request(client, provider):
    response = client.post(
        "/api/generate-quiz",
        content="not json",
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid request body"}
    assert provider.calls == []


def test_unparsable_reply_returns_fallback(client):
    use_provider(FakeProvider("Here are your questions!"))

    response = client.post("/api/generate-quiz", json={"topic": "graphs", "numQuestions": 5})

    data = response.json()
    assert response.status_code == 200
    assert data["success"] is True
    assert data["usedFallback"] is True
    assert data["questionsInBatch"] == 1
    assert data["questions"][0]["category"] == "graphs"


def test_empty_array_reply_is_server_error(client):
    use_provider(FakeProvider("[]"))

    response = client.post("/api/generate-quiz", json={"topic": "graphs", "numQuestions": 5})

    assert response.status_code == 500
    assert response.json() == {
        "error": "Failed to generate quiz questions",
        "details": "Invalid question format received",
    }


def test_object_reply_is_server_error(client):
    use_provider(FakeProvider("{}"))

    response = client.post("/api/generate-quiz", json={"topic": "graphs", "numQuestions": 5})

    assert response.status_code == 500
    assert "Invalid question format" in response.json()["details"]


def test_provider_failure_is_server_error(client):
    use_provider(FakeProvider(error=ConnectionError("connection reset")))

    response = client.post("/api/generate-quiz", json={"topic": "graphs", "numQuestions": 5})

    assert response.status_code == 500
    assert response.json()["details"] == "connection reset"


def test_unconfigured_provider_is_server_error():
    app.dependency_overrides.clear()
    app.state.generator = None

    response = TestClient(app).post("/api/generate-quiz", json={"topic": "graphs", "numQuestions": 5})

    assert response.status_code == 500
    assert response.json()["details"] == "Completion provider is not configured"


def test_wrongly_typed_count_names_required_fields(client, provider):
    response = client.post("/api/generate-quiz", json={"topic": "graphs", "numQuestions": "many"})

    assert response.status_code == 400
    assert response.json() == {"error": "Topic and number of questions are required"}
    assert provider.calls == []


def test_wrongly_typed_batch_is_invalid_body(client, provider):
    response = client.post(
        "/api/generate-quiz",
        json={"topic": "graphs", "numQuestions": 5, "batch": "two"},
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid request body"}
    assert provider.calls == []


def test_startup_without_credentials_keeps_health(monkeypatch):
    app.dependency_overrides.clear()
    app.state.generator = None
    monkeypatch.delenv("GROQ_API_KEY", raising=False)
    monkeypatch.setattr(main, "settings", Settings(provider="groq", groq_api_key=None))

    with TestClient(app) as client:
        assert app.state.generator is None

        health = client.get("/api/health")
        quiz = client.post("/api/generate-quiz", json={"topic": "graphs", "numQuestions": 5})

    assert health.status_code == 200
    assert health.json()["status"] == "OK"
    assert quiz.status_code == 500
    assert quiz.json()["details"] == "Completion provider is not configured"
