"""SQLite schema migrations."""
from __future__ import annotations

from typing import Iterable

from storage.sqlite import get_conn

SCHEMA: Iterable[str] = [
    """
CREATE TABLE IF NOT EXISTS topics (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  title TEXT NOT NULL,
  objectives TEXT
);
""",
    """
CREATE TABLE IF NOT EXISTS subtopics (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  topic_id INTEGER NOT NULL REFERENCES topics(id),
  title TEXT NOT NULL,
  description TEXT
);
""",
    """
CREATE TABLE IF NOT EXISTS candidates (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  full_name TEXT NOT NULL,
  email TEXT NOT NULL,
  education TEXT,
  experience TEXT
);
""",
    """
CREATE TABLE IF NOT EXISTS interview_sessions (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  subtopic_id INTEGER NOT NULL REFERENCES subtopics(id),
  candidate_id INTEGER REFERENCES candidates(id),
  candidate_name TEXT NOT NULL,
  candidate_email TEXT NOT NULL,
  candidate_education TEXT NOT NULL,
  candidate_experience TEXT NOT NULL,
  language TEXT NOT NULL,
  start_time TEXT NOT NULL,
  end_time TEXT,
  summary TEXT NOT NULL DEFAULT '',
  current_question_number INTEGER NOT NULL DEFAULT 0,
  is_completed INTEGER NOT NULL DEFAULT 0
);
""",
    """
CREATE TABLE IF NOT EXISTS chat_messages (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  session_id INTEGER NOT NULL REFERENCES interview_sessions(id) ON DELETE CASCADE,
  content TEXT NOT NULL,
  is_user_message INTEGER NOT NULL,
  timestamp TEXT NOT NULL
);
""",
    """
CREATE TABLE IF NOT EXISTS interview_results (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  session_id INTEGER NOT NULL UNIQUE REFERENCES interview_sessions(id) ON DELETE CASCADE,
  score INTEGER NOT NULL,
  evaluation TEXT NOT NULL,
  created_at TEXT NOT NULL
);
""",
    """
CREATE TABLE IF NOT EXISTS interview_questions (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  result_id INTEGER NOT NULL REFERENCES interview_results(id) ON DELETE CASCADE,
  position INTEGER NOT NULL,
  question TEXT NOT NULL,
  answer TEXT NOT NULL,
  score INTEGER,
  feedback TEXT
);
""",
    "CREATE INDEX IF NOT EXISTS ix_chat_messages_session ON chat_messages(session_id, timestamp);",
]


def migrate(db_path: str = "data/interview.db") -> None:
    """Create any missing tables and indexes in ``db_path``."""

    with get_conn(db_path) as conn:
        for stmt in SCHEMA:
            conn.execute(stmt)


if __name__ == "__main__":
    from config.settings import settings

    migrate(settings.DB_PATH)
