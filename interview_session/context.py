"""Per-connection interview context and its phase machine."""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Protocol

from interview_session.errors import InvalidTransition
from interview_session.models import InterviewSession
from interview_session.tracker import QuestionTracker


class InterviewPhase(str, Enum):
    CREATED = "created"
    AWAITING_GREETING = "awaiting_greeting"
    IN_PROGRESS = "in_progress"
    EXIT_OFFER_PENDING = "exit_offer_pending"
    COMPLETED = "completed"


TRANSITIONS: Dict[InterviewPhase, frozenset] = {
    InterviewPhase.CREATED: frozenset(
        {InterviewPhase.AWAITING_GREETING, InterviewPhase.IN_PROGRESS, InterviewPhase.COMPLETED}
    ),
    InterviewPhase.AWAITING_GREETING: frozenset({InterviewPhase.IN_PROGRESS, InterviewPhase.COMPLETED}),
    InterviewPhase.IN_PROGRESS: frozenset({InterviewPhase.EXIT_OFFER_PENDING, InterviewPhase.COMPLETED}),
    InterviewPhase.EXIT_OFFER_PENDING: frozenset({InterviewPhase.IN_PROGRESS, InterviewPhase.COMPLETED}),
    InterviewPhase.COMPLETED: frozenset(),
}


def can_transition(current: InterviewPhase, target: InterviewPhase) -> bool:
    return current is target or target in TRANSITIONS[current]


class ClientChannel(Protocol):  # Outbound events to a single connected client
    async def message(self, speaker: str, text: str) -> None: ...

    async def interview_completed(self, score: int, evaluation: str) -> None: ...

    async def redirect_to_results(self, session_id: int) -> None: ...


@dataclass
class ConnectionContext:
    """Everything the engine knows about one live connection."""

    connection_id: str
    channel: ClientChannel
    candidate_id: Optional[int] = None
    session: Optional[InterviewSession] = None
    tracker: Optional[QuestionTracker] = None
    non_answer_streak: int = 0
    phase: Optional[InterviewPhase] = None
    events: List[Dict[str, Any]] = field(default_factory=list)
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    tracker_lock: asyncio.Lock = field(default_factory=asyncio.Lock)

    def attach(self, session: InterviewSession) -> None:
        self.session = session
        self.tracker = None
        self.non_answer_streak = 0
        self.phase = InterviewPhase.CREATED

    def transition(self, target: InterviewPhase) -> None:
        if self.phase is None or not can_transition(self.phase, target):
            raise InvalidTransition(self.phase, target)
        self.phase = target

    def is_open(self, session_id: int) -> bool:
        """True while ``session_id`` is still the live, unfinished session on this connection."""

        return (
            self.session is not None
            and self.session.id == session_id
            and self.phase is not InterviewPhase.COMPLETED
        )

    def reset(self) -> None:
        self.session = None
        self.tracker = None
        self.non_answer_streak = 0
        self.phase = None


class ConnectionRegistry:
    """Live contexts keyed by connection id."""

    def __init__(self) -> None:
        self._contexts: Dict[str, ConnectionContext] = {}

    def open(
        self,
        connection_id: str,
        channel: ClientChannel,
        *,
        candidate_id: Optional[int] = None,
    ) -> ConnectionContext:
        ctx = ConnectionContext(connection_id=connection_id, channel=channel, candidate_id=candidate_id)
        existing = self._contexts.setdefault(connection_id, ctx)
        if existing is not ctx:
            raise KeyError(f"connection {connection_id} already registered")
        return ctx

    def get(self, connection_id: str) -> Optional[ConnectionContext]:
        return self._contexts.get(connection_id)

    def close(self, connection_id: str) -> Optional[ConnectionContext]:
        return self._contexts.pop(connection_id, None)

    def __len__(self) -> int:
        return len(self._contexts)


__all__ = [
    "ClientChannel",
    "ConnectionContext",
    "ConnectionRegistry",
    "InterviewPhase",
    "TRANSITIONS",
    "can_transition",
]
