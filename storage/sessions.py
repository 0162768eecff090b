"""Persistence helpers for interview sessions."""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from interview_session.models import CandidateProfile, InterviewSession, Language, SubTopic, utcnow

from .catalog import load_subtopic
from .messages import list_messages
from .sqlite import get_conn


class SessionPayload(BaseModel):
    subtopic_id: int
    candidate_id: Optional[int] = None
    candidate: CandidateProfile
    language: Language = Language.EN


def create_session(subtopic: SubTopic, **data) -> InterviewSession:
    """Insert a new open session and return it with its subject attached."""

    payload = SessionPayload(subtopic_id=subtopic.id, **data)
    started = utcnow()
    with get_conn() as conn:
        cur = conn.execute(
            """INSERT INTO interview_sessions
               (subtopic_id, candidate_id, candidate_name, candidate_email, candidate_education,
                candidate_experience, language, start_time)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                payload.subtopic_id,
                payload.candidate_id,
                payload.candidate.name,
                payload.candidate.email,
                payload.candidate.education,
                payload.candidate.experience,
                payload.language.value,
                started.isoformat(),
            ),
        )
        session_id = int(cur.lastrowid)
    return InterviewSession(
        id=session_id,
        subtopic_id=subtopic.id,
        subtopic=subtopic,
        candidate_id=payload.candidate_id,
        candidate=payload.candidate,
        language=payload.language,
        start_time=started,
    )


def load_session(session_id: int, *, with_messages: bool = True) -> InterviewSession:
    """Load a session with its subject and, optionally, its ordered messages.

    Raises:
        KeyError: If the session does not exist.
    """

    with get_conn() as conn:
        row = conn.execute("SELECT * FROM interview_sessions WHERE id = ?", (session_id,)).fetchone()
    if row is None:
        raise KeyError(f"Session '{session_id}' not found")
    return InterviewSession(
        id=row["id"],
        subtopic_id=row["subtopic_id"],
        subtopic=load_subtopic(row["subtopic_id"]),
        candidate_id=row["candidate_id"],
        candidate=CandidateProfile(
            name=row["candidate_name"],
            email=row["candidate_email"],
            education=row["candidate_education"],
            experience=row["candidate_experience"],
        ),
        language=Language(row["language"]),
        start_time=datetime.fromisoformat(row["start_time"]),
        end_time=datetime.fromisoformat(row["end_time"]) if row["end_time"] else None,
        summary=row["summary"] or "",
        current_question_number=row["current_question_number"],
        is_completed=bool(row["is_completed"]),
        messages=list_messages(session_id) if with_messages else [],
    )


def delete_session(session_id: int) -> None:
    """Remove a session and its messages (rollback after failed setup)."""

    with get_conn() as conn:
        conn.execute("DELETE FROM interview_sessions WHERE id = ?", (session_id,))


def set_question_number(session_id: int, number: int) -> None:
    """Persist the current question counter."""

    with get_conn() as conn:
        conn.execute(
            "UPDATE interview_sessions SET current_question_number = ? WHERE id = ?",
            (number, session_id),
        )


def mark_completed(session_id: int, *, end_time: datetime, summary: Optional[str] = None) -> bool:
    """Field-level completion update; returns False when the session was already completed."""

    with get_conn() as conn:
        if summary is None:
            cur = conn.execute(
                "UPDATE interview_sessions SET is_completed = 1, end_time = ? WHERE id = ? AND is_completed = 0",
                (end_time.isoformat(), session_id),
            )
        else:
            cur = conn.execute(
                """UPDATE interview_sessions SET is_completed = 1, end_time = ?, summary = ?
                   WHERE id = ? AND is_completed = 0""",
                (end_time.isoformat(), summary, session_id),
            )
        return cur.rowcount > 0
