from __future__ import annotations  # Records exchanged between the engine, storage and transport

from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


def utcnow() -> datetime:  # Timezone-aware server clock
    return datetime.now(timezone.utc)


class Language(str, Enum):  # Interview language
    EN = "en"
    ES = "es"

    @classmethod
    def parse(cls, value: Optional[str]) -> "Language":
        return cls.ES if (value or "").strip().lower() == "es" else cls.EN


class Topic(BaseModel):  # Catalog topic with objectives
    id: int
    title: str
    objectives: Optional[str] = None


class SubTopic(BaseModel):  # Interview subject within a topic
    id: int
    title: str
    description: Optional[str] = None
    topic: Optional[Topic] = None


class CandidateProfile(BaseModel):  # Candidate snapshot copied into the session
    name: str = ""
    email: str = ""
    education: str = "Not specified"
    experience: str = "0"


class ChatMessage(BaseModel):  # One conversation turn; id is None until persisted
    id: Optional[int] = None
    session_id: int
    content: str
    is_user_message: bool
    timestamp: datetime = Field(default_factory=utcnow)

    def looks_like_question(self) -> bool:
        return not self.is_user_message and is_question_text(self.content)


class InterviewSession(BaseModel):  # Persisted coaching conversation
    id: int
    subtopic_id: int
    subtopic: SubTopic
    candidate_id: Optional[int] = None
    candidate: CandidateProfile = Field(default_factory=CandidateProfile)
    language: Language = Language.EN
    start_time: datetime = Field(default_factory=utcnow)
    end_time: Optional[datetime] = None
    summary: str = ""
    current_question_number: int = Field(default=0, ge=0)
    is_completed: bool = False
    messages: List[ChatMessage] = Field(default_factory=list)

    def ordered_messages(self) -> List[ChatMessage]:
        return sorted(self.messages, key=lambda item: (item.timestamp, item.id or 0))

    def pending_messages(self) -> List[ChatMessage]:
        return [message for message in self.messages if message.id is None]


class QuestionAnswer(BaseModel):  # Question paired with the answer that followed it
    question: str
    answer: str
    score: Optional[int] = Field(default=None, ge=0, le=100)
    feedback: Optional[str] = None


class InterviewResult(BaseModel):  # Final scored outcome, one per session
    id: int
    session_id: int
    score: int = Field(ge=0, le=100)
    evaluation: str
    created_at: datetime
    questions: List[QuestionAnswer] = Field(default_factory=list)


QUESTION_MARKERS = ("Question", "Pregunta")


def is_question_text(content: str) -> bool:  # Bot turns count as questions when labelled
    return any(marker in content for marker in QUESTION_MARKERS)


__all__ = [
    "CandidateProfile",
    "ChatMessage",
    "InterviewResult",
    "InterviewSession",
    "Language",
    "QUESTION_MARKERS",
    "QuestionAnswer",
    "SubTopic",
    "Topic",
    "is_question_text",
    "utcnow",
]
