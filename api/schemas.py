"""Pydantic schemas for the interview WebSocket and results API."""
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field


ClientMethod = Literal[
    "startInterview",
    "startPublicInterview",
    "resumeInterview",
    "sendAnswer",
    "sendPublicMessage",
    "completeInterview",
    "endInterviewEarly",
]


class ClientFrame(BaseModel):
    method: ClientMethod
    args: Dict[str, Any] = Field(default_factory=dict)


class StartInterviewArgs(BaseModel):
    subjectId: int
    language: Optional[str] = None


class StartPublicInterviewArgs(BaseModel):
    subjectId: int
    sessionId: int


class ResumeInterviewArgs(BaseModel):
    sessionId: int


class SendAnswerArgs(BaseModel):
    text: str


class SendPublicMessageArgs(BaseModel):
    text: str
    sessionId: int


class NoArgs(BaseModel):
    pass


class MessageEvent(BaseModel):
    event: Literal["message"] = "message"
    speaker: str
    text: str


class InterviewCompletedEvent(BaseModel):
    event: Literal["interviewCompleted"] = "interviewCompleted"
    score: int
    evaluation: str


class RedirectEvent(BaseModel):
    event: Literal["redirectToResults"] = "redirectToResults"
    sessionId: int


class QuestionAnswerOut(BaseModel):
    question: str
    answer: str
    score: Optional[int] = None
    feedback: Optional[str] = None


class ResultResponse(BaseModel):
    session_id: int
    score: int
    evaluation: str
    created_at: datetime
    questions: List[QuestionAnswerOut] = Field(default_factory=list)
