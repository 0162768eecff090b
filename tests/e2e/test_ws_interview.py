from fastapi.testclient import TestClient

from api.hub import registry
from api_server import app
from interview_session.engine import DISCONNECT_SUMMARY
from interview_session.models import Language
from interview_session.phrases import notice, phrase
from storage.results import load_result
from storage.sessions import load_session
from storage.sqlite import get_conn

EN = Language.EN


def _message(speaker, text):
    return {"event": "message", "speaker": speaker, "text": text}


def _call(ws, method, **args):
    ws.send_json({"method": method, "args": args})


def test_full_interview_over_websocket(completer, seeded):
    completer.questions = ["What is a resource?", "How do you version an API?"]
    with TestClient(app) as client:
        with client.websocket_connect(f"/ws/interview?candidate_id={seeded['candidate_id']}") as ws:
            _call(ws, "startInterview", subjectId=seeded["subtopic_id"], language="en")
            assert ws.receive_json() == _message("Interviewer", phrase(EN, "greeting"))

            _call(ws, "sendAnswer", text="hello")
            assert ws.receive_json() == _message("Interviewer", phrase(EN, "lets_begin"))
            assert ws.receive_json() == _message("Interviewer", "Question 1: What is a resource?")

            _call(ws, "sendAnswer", text="Anything addressable by a URI")
            assert ws.receive_json() == _message("Interviewer", "Question 2: How do you version an API?")

            _call(ws, "completeInterview")
            completed = ws.receive_json()
            assert completed == {"event": "interviewCompleted", "score": 72, "evaluation": completer.evaluation}
            redirect = ws.receive_json()
            assert redirect["event"] == "redirectToResults"

        resp = client.get(f"/api/interview-sessions/{redirect['sessionId']}/result")
        assert resp.status_code == 200
        body = resp.json()
        assert body["score"] == 72
        assert [q["answer"] for q in body["questions"]] == ["Anything addressable by a URI", "No answer provided"]

        assert client.get("/api/interview-sessions/9999/result").status_code == 404
    assert len(registry) == 0


def test_malformed_frames_get_a_system_notice(completer, seeded):
    with TestClient(app) as client:
        with client.websocket_connect("/ws/interview") as ws:
            ws.send_text("not json")
            assert ws.receive_json() == _message("System", notice("malformed_frame"))
            _call(ws, "dance")
            assert ws.receive_json() == _message("System", notice("malformed_frame"))
            _call(ws, "sendAnswer")
            assert ws.receive_json() == _message("System", notice("malformed_frame"))
            _call(ws, "startInterview", subjectId=seeded["subtopic_id"])
            assert ws.receive_json() == _message("System", notice("not_authenticated"))


def test_disconnect_closes_open_session(completer, seeded):
    with TestClient(app) as client:
        with client.websocket_connect(f"/ws/interview?candidate_id={seeded['candidate_id']}") as ws:
            _call(ws, "startInterview", subjectId=seeded["subtopic_id"], language="en")
            ws.receive_json()
            _call(ws, "sendAnswer", text="hello")
            ws.receive_json()
            ws.receive_json()
            _call(ws, "endInterviewEarly")
            assert ws.receive_json() == _message("System", notice("ended_early"))
            early_id = ws.receive_json()["sessionId"]

            _call(ws, "startInterview", subjectId=seeded["subtopic_id"], language="en")
            ws.receive_json()
            _call(ws, "sendAnswer", text="hello")
            ws.receive_json()
            question = ws.receive_json()
            assert question["text"].startswith("Question 1:")

    early = load_session(early_id)
    assert early.is_completed and early.summary == ""
    abandoned = load_session(early_id + 1)
    assert abandoned.is_completed
    assert abandoned.summary == DISCONNECT_SUMMARY
    assert abandoned.current_question_number == 1


def test_disconnect_during_evaluation_still_stores_result(completer, seeded):
    completer.questions = ["What is a resource?", "How do you version an API?"]
    completer.evaluation_delay = 0.5
    with TestClient(app) as client:
        with client.websocket_connect(f"/ws/interview?candidate_id={seeded['candidate_id']}") as ws:
            _call(ws, "startInterview", subjectId=seeded["subtopic_id"], language="en")
            ws.receive_json()
            _call(ws, "sendAnswer", text="hello")
            ws.receive_json()
            ws.receive_json()
            _call(ws, "sendAnswer", text="Anything addressable by a URI")
            ws.receive_json()
            _call(ws, "completeInterview")
            assert completer.evaluation_started.wait(timeout=5)
            _call(ws, "startInterview", subjectId=seeded["subtopic_id"], language="en")

    with get_conn() as conn:
        session_ids = [row["id"] for row in conn.execute("SELECT id FROM interview_sessions")]
    assert len(session_ids) == 1
    assert len(completer.calls("evaluation")) == 1

    session = load_session(session_ids[0])
    assert session.is_completed
    assert session.summary == ""
    result = load_result(session.id)
    assert result.score == 72
    assert [q.answer for q in result.questions] == ["Anything addressable by a URI", "No answer provided"]
    assert len(registry) == 0
