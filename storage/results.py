"""Persistence helpers for interview results."""
from __future__ import annotations

import sqlite3
from datetime import datetime
from typing import List, Sequence

from pydantic import BaseModel, Field

from interview_session.models import InterviewResult, QuestionAnswer, utcnow

from .sqlite import get_conn


class ResultPayload(BaseModel):
    session_id: int
    score: int = Field(ge=0, le=100)
    evaluation: str
    questions: List[QuestionAnswer] = Field(default_factory=list)


class ResultExistsError(ValueError):  # Raised on a second result for the same session
    pass


def create_result(**data) -> InterviewResult:
    """Insert a result row with its question/answer children.

    Raises:
        ResultExistsError: If the session already has a result.
    """

    payload = ResultPayload(**data)
    created = utcnow()
    with get_conn() as conn:
        try:
            cur = conn.execute(
                "INSERT INTO interview_results (session_id, score, evaluation, created_at) VALUES (?, ?, ?, ?)",
                (payload.session_id, payload.score, payload.evaluation, created.isoformat()),
            )
        except sqlite3.IntegrityError as exc:
            raise ResultExistsError(f"Session '{payload.session_id}' already has a result") from exc
        result_id = int(cur.lastrowid)
        _insert_questions(conn, result_id, payload.questions)
    return InterviewResult(
        id=result_id,
        session_id=payload.session_id,
        score=payload.score,
        evaluation=payload.evaluation,
        created_at=created,
        questions=list(payload.questions),
    )


def _insert_questions(conn: sqlite3.Connection, result_id: int, questions: Sequence[QuestionAnswer]) -> None:
    for position, item in enumerate(questions):
        conn.execute(
            """INSERT INTO interview_questions (result_id, position, question, answer, score, feedback)
               VALUES (?, ?, ?, ?, ?, ?)""",
            (result_id, position, item.question, item.answer, item.score, item.feedback),
        )


def load_result(session_id: int) -> InterviewResult:
    """Load the result for a session.

    Raises:
        KeyError: If no result was stored.
    """

    with get_conn() as conn:
        row = conn.execute(
            "SELECT id, session_id, score, evaluation, created_at FROM interview_results WHERE session_id = ?",
            (session_id,),
        ).fetchone()
        if row is None:
            raise KeyError(f"No result for session '{session_id}'")
        question_rows = conn.execute(
            """SELECT question, answer, score, feedback FROM interview_questions
               WHERE result_id = ? ORDER BY position ASC""",
            (row["id"],),
        ).fetchall()
    return InterviewResult(
        id=row["id"],
        session_id=row["session_id"],
        score=row["score"],
        evaluation=row["evaluation"],
        created_at=datetime.fromisoformat(row["created_at"]),
        questions=[
            QuestionAnswer(
                question=item["question"],
                answer=item["answer"],
                score=item["score"],
                feedback=item["feedback"],
            )
            for item in question_rows
        ],
    )
