"""Shared utilities for question generation prompts."""
from __future__ import annotations

from typing import Iterable, List

from interview_session.models import ChatMessage, InterviewSession, Language


def context_section(session: InterviewSession) -> str:
    """Describe the topic and subtopic objectives the interview should cover."""

    subtopic = session.subtopic
    topic = subtopic.topic
    return "\n".join(
        [
            f"Topic: {topic.title if topic else ''}",
            f"Topic Objective: {(topic.objectives if topic else None) or ''}",
            f"Subtopic: {subtopic.title}",
            f"Subtopic Objective: {subtopic.description or ''}",
        ]
    )


def candidate_line(session: InterviewSession) -> str:
    profile = session.candidate
    return f"{profile.education} education and {profile.experience} years of experience"


def is_spanish(session: InterviewSession) -> bool:
    return session.language is Language.ES


def transcript_lines(messages: Iterable[ChatMessage]) -> List[str]:
    """Render the conversation as Q{n}/A{n} lines.

    Bot turns appear only when labelled as questions; every user turn is kept and
    shares the number of the question it follows (A0 for the opening greeting).
    """

    lines: List[str] = []
    number = 0
    for message in messages:
        if message.is_user_message:
            lines.append(f"A{number}: {message.content}")
        elif message.looks_like_question():
            number += 1
            lines.append(f"Q{number}: {message.content}")
    return lines


def bullet_list(items: Iterable[str]) -> str:
    entries = [f"- {item}" for item in items if item]
    return "\n".join(entries) or "(none)"
