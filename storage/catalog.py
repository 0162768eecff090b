"""Persistence helpers for topics, subtopics and candidates."""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel

from interview_session.models import CandidateProfile, SubTopic, Topic

from .sqlite import get_conn


class TopicPayload(BaseModel):
    title: str
    objectives: Optional[str] = None


class SubTopicPayload(BaseModel):
    topic_id: int
    title: str
    description: Optional[str] = None


class CandidatePayload(BaseModel):
    full_name: str
    email: str
    education: Optional[str] = None
    experience: Optional[str] = None


def insert_topic(**data) -> int:
    """Insert a topic row and return its primary key."""

    payload = TopicPayload(**data)
    with get_conn() as conn:
        cur = conn.execute(
            "INSERT INTO topics (title, objectives) VALUES (?, ?)",
            (payload.title, payload.objectives),
        )
        return int(cur.lastrowid)


def insert_subtopic(**data) -> int:
    """Insert a subtopic row and return its primary key."""

    payload = SubTopicPayload(**data)
    with get_conn() as conn:
        cur = conn.execute(
            "INSERT INTO subtopics (topic_id, title, description) VALUES (?, ?, ?)",
            (payload.topic_id, payload.title, payload.description),
        )
        return int(cur.lastrowid)


def insert_candidate(**data) -> int:
    """Insert a candidate row and return its primary key."""

    payload = CandidatePayload(**data)
    with get_conn() as conn:
        cur = conn.execute(
            "INSERT INTO candidates (full_name, email, education, experience) VALUES (?, ?, ?, ?)",
            (payload.full_name, payload.email, payload.education, payload.experience),
        )
        return int(cur.lastrowid)


def load_subtopic(subtopic_id: int) -> SubTopic:
    """Load a subtopic together with its parent topic.

    Raises:
        KeyError: If the subtopic does not exist.
    """

    with get_conn() as conn:
        row = conn.execute(
            """SELECT s.id, s.title, s.description, t.id AS topic_id, t.title AS topic_title, t.objectives
               FROM subtopics s LEFT JOIN topics t ON t.id = s.topic_id
               WHERE s.id = ?""",
            (subtopic_id,),
        ).fetchone()
    if row is None:
        raise KeyError(f"Subtopic '{subtopic_id}' not found")
    topic = None
    if row["topic_id"] is not None:
        topic = Topic(id=row["topic_id"], title=row["topic_title"], objectives=row["objectives"])
    return SubTopic(id=row["id"], title=row["title"], description=row["description"], topic=topic)


def load_candidate(candidate_id: int) -> CandidateProfile:
    """Load a candidate snapshot, defaulting missing education and experience.

    Raises:
        KeyError: If the candidate does not exist.
    """

    with get_conn() as conn:
        row = conn.execute(
            "SELECT full_name, email, education, experience FROM candidates WHERE id = ?",
            (candidate_id,),
        ).fetchone()
    if row is None:
        raise KeyError(f"Candidate '{candidate_id}' not found")
    return CandidateProfile(
        name=row["full_name"],
        email=row["email"],
        education=row["education"] or "Not specified",
        experience=row["experience"] or "0",
    )
