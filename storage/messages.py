"""Persistence helpers for chat messages."""
from __future__ import annotations

from datetime import datetime
from typing import Iterable, List

from interview_session.models import ChatMessage, utcnow

from .sqlite import get_conn


def append_message(session_id: int, content: str, *, is_user_message: bool) -> ChatMessage:
    """Insert one message stamped with the server clock."""

    message = ChatMessage(session_id=session_id, content=content, is_user_message=is_user_message, timestamp=utcnow())
    return save_pending([message])[0]


def save_pending(messages: Iterable[ChatMessage]) -> List[ChatMessage]:
    """Insert messages that have no id yet; already-saved ones are skipped."""

    saved: List[ChatMessage] = []
    with get_conn() as conn:
        for message in messages:
            if message.id is not None:
                continue
            cur = conn.execute(
                """INSERT INTO chat_messages (session_id, content, is_user_message, timestamp)
                   VALUES (?, ?, ?, ?)""",
                (message.session_id, message.content, int(message.is_user_message), message.timestamp.isoformat()),
            )
            message.id = int(cur.lastrowid)
            saved.append(message)
    return saved


def list_messages(session_id: int) -> List[ChatMessage]:
    """Return a session's messages ordered by timestamp."""

    with get_conn() as conn:
        rows = conn.execute(
            """SELECT id, session_id, content, is_user_message, timestamp
               FROM chat_messages WHERE session_id = ?
               ORDER BY timestamp ASC, id ASC""",
            (session_id,),
        ).fetchall()
    return [
        ChatMessage(
            id=row["id"],
            session_id=row["session_id"],
            content=row["content"],
            is_user_message=bool(row["is_user_message"]),
            timestamp=datetime.fromisoformat(row["timestamp"]),
        )
        for row in rows
    ]
