from fastapi.testclient import TestClient

from api_server import create_app
from interview_session.models import CandidateProfile, QuestionAnswer
from storage.catalog import load_subtopic
from storage.results import create_result
from storage.sessions import create_session


def _client():
    return TestClient(create_app())


def test_result_is_returned_with_questions(completer, seeded):
    session = create_session(load_subtopic(seeded["subtopic_id"]), candidate=CandidateProfile(name="Ada"))
    create_result(
        session_id=session.id,
        score=64,
        evaluation="Score: 64\nGood coverage of HTTP verbs.",
        questions=[
            QuestionAnswer(question="Question 1: What is idempotency?", answer="Same effect when repeated"),
            QuestionAnswer(question="Question 2: When is PATCH used?", answer="No answer provided"),
        ],
    )

    with _client() as client:
        resp = client.get(f"/api/interview-sessions/{session.id}/result")

    assert resp.status_code == 200
    body = resp.json()
    assert body["session_id"] == session.id
    assert body["score"] == 64
    assert body["evaluation"].startswith("Score: 64")
    assert [q["question"] for q in body["questions"]] == [
        "Question 1: What is idempotency?",
        "Question 2: When is PATCH used?",
    ]
    assert body["questions"][0]["score"] is None


def test_missing_result_is_404(completer, seeded):
    session = create_session(load_subtopic(seeded["subtopic_id"]), candidate=CandidateProfile(name="Ada"))
    with _client() as client:
        resp = client.get(f"/api/interview-sessions/{session.id}/result")
    assert resp.status_code == 404
    assert resp.json() == {"detail": "Result not found"}
