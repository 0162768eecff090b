"""Reference question bank generated once per interview session."""
from __future__ import annotations

import difflib
import logging
from typing import List, Optional

from agents.parsing import parse_question_bank
from agents.qg.bank import build_bank_prompt
from interview_session.models import InterviewSession
from llm_gateway import TextCompleter
from observability import log_event

logger = logging.getLogger(__name__)

MATCH_CUTOFF = 0.6


class QuestionTracker:
    """Holds the generated bank and records which entries have been covered.

    The bank is reference material for the next-question prompt; questions the
    interviewer actually asks are adapted by the model and matched back to the
    closest bank entry.
    """

    def __init__(self, questions: List[str]) -> None:
        self.available: List[str] = list(questions)
        self.asked: List[str] = []

    def __len__(self) -> int:
        return len(self.available) + len(self.asked)

    def closest(self, question: str) -> Optional[str]:
        found = difflib.get_close_matches(question, self.available, n=1, cutoff=MATCH_CUTOFF)
        return found[0] if found else None

    def mark_asked(self, question: str) -> Optional[str]:
        """Record ``question`` as asked; returns the bank entry it covered, if any."""

        match = self.closest(question)
        if match is not None:
            self.available.remove(match)
            self.asked.append(match)
        return match

    def remaining(self) -> List[str]:
        return list(self.available)


async def generate_tracker(
    session: InterviewSession,
    complete: TextCompleter,
    *,
    count: int = 10,
) -> QuestionTracker:
    """Ask the model for ``count`` questions; raises ``LlmResponseError`` on a bad reply."""

    prompt = build_bank_prompt(session, count=count)
    raw = await complete(prompt)
    questions = parse_question_bank(raw, expected=count)
    log_event("question_bank_ready", session.id, outcome=len(questions))
    logger.debug("Question bank for session %s: %s", session.id, questions)
    return QuestionTracker(questions)


__all__ = ["QuestionTracker", "generate_tracker"]
