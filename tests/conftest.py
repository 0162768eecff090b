import asyncio
import os
import sys
import tempfile
from pathlib import Path
from typing import Callable, Optional

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from config.registry import COMPLETION_KEY, bind_model
from config.settings import settings
from fakes import RecordingChannel, ScriptedCompleter
from interview_session.context import ConnectionContext
from interview_session.engine import InterviewEngine
from storage.catalog import insert_candidate, insert_subtopic, insert_topic
from storage.migrate import migrate


@pytest.fixture(autouse=True)
def tmp_db(monkeypatch):
    td = tempfile.TemporaryDirectory()
    db_path = os.path.join(td.name, "test.db")
    monkeypatch.setattr(settings, "DB_PATH", db_path, raising=False)
    migrate(db_path)
    try:
        yield
    finally:
        td.cleanup()


@pytest.fixture
def seeded():
    topic_id = insert_topic(title="Backend Engineering", objectives="Assess API design skills")
    subtopic_id = insert_subtopic(topic_id=topic_id, title="REST APIs", description="Resources, verbs and status codes")
    candidate_id = insert_candidate(
        full_name="Ada Lovelace",
        email="ada@example.com",
        education="Bachelor",
        experience="3",
    )
    return {"topic_id": topic_id, "subtopic_id": subtopic_id, "candidate_id": candidate_id}


@pytest.fixture
def completer():
    fake = ScriptedCompleter()
    bind_model(COMPLETION_KEY, fake)
    return fake


@pytest.fixture
def make_ctx(seeded) -> Callable[..., ConnectionContext]:
    def _make(candidate_id: Optional[int] = seeded["candidate_id"], name: str = "conn-1") -> ConnectionContext:
        return ConnectionContext(connection_id=name, channel=RecordingChannel(), candidate_id=candidate_id)

    return _make


@pytest.fixture
def engine(completer) -> InterviewEngine:
    return InterviewEngine(completer)


@pytest.fixture
def run():
    return asyncio.run
