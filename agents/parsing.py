"""Typed parsers for the free-text protocol spoken with the LLM."""
from __future__ import annotations

import re
from typing import List, Literal, Optional

from pydantic import BaseModel

OBJECTIVE_MET = "OBJECTIVE_MET"
ERROR_MARKERS = ("No response received", "API Error", "Error")

_NUMBERED_LINE = re.compile(r"^\d+\.\s*(.+)$")
_LABEL_PREFIX = re.compile(r"^(Question|Pregunta)?\s*\d+\s*[:\.]?\s*", re.IGNORECASE)
_NUMBER_PREFIX = re.compile(r"^\d+\s*[\.:\)]?\s*")
_SCORE_PATTERNS = (re.compile(r"Score:\s*(\d+)"), re.compile(r"Puntuación:\s*(\d+)"))


class LlmResponseError(RuntimeError):  # Completion was empty or carried a failure marker
    def __init__(self, reason: str, raw: Optional[str] = None) -> None:
        super().__init__(reason)
        self.reason = reason
        self.raw = raw


class QuestionBankError(LlmResponseError):  # Completion did not yield enough questions
    def __init__(self, parsed: int, expected: int, raw: Optional[str] = None) -> None:
        super().__init__(f"parsed {parsed} of {expected} questions", raw)
        self.parsed = parsed
        self.expected = expected


class TurnOutcome(BaseModel):  # Parsed reply to a next-question prompt
    kind: Literal["question", "objective_met"]
    text: str = ""

    @property
    def objective_met(self) -> bool:
        return self.kind == "objective_met"


def ensure_usable(raw: Optional[str]) -> str:
    """Return ``raw`` unchanged or raise when it is empty or error-marked."""

    if raw is None or not raw.strip():
        raise LlmResponseError("empty completion", raw)
    for marker in ERROR_MARKERS:
        if marker in raw:
            raise LlmResponseError(f"completion contains '{marker}'", raw)
    return raw


def clean_question(text: str) -> str:
    """Strip leading numbering and "Question N:" / "Pregunta N:" labels."""

    cleaned = text.strip()
    cleaned = _LABEL_PREFIX.sub("", cleaned, count=1)
    cleaned = _NUMBER_PREFIX.sub("", cleaned, count=1)
    return cleaned.strip()


def parse_next_turn(raw: Optional[str]) -> TurnOutcome:
    """Interpret the interviewer model's reply as a question or the objective-met sentinel."""

    text = ensure_usable(raw).strip()
    if text.upper() == OBJECTIVE_MET:
        return TurnOutcome(kind="objective_met")
    question = clean_question(text)
    if not question:
        raise LlmResponseError("question text empty after cleanup", raw)
    return TurnOutcome(kind="question", text=question)


def parse_question_bank(raw: Optional[str], expected: int = 10) -> List[str]:
    """Extract ``expected`` questions from a numbered-list completion."""

    text = ensure_usable(raw)
    parsed: List[str] = []
    for line in text.split("\n"):
        stripped = line.strip()
        if not stripped:
            continue
        match = _NUMBERED_LINE.match(stripped)
        if match:
            question = match.group(1).strip()
            if len(question) > 5:
                parsed.append(question)
        elif "?" in stripped and len(stripped) > 10:
            parsed.append(stripped)
    if len(parsed) < expected:
        raise QuestionBankError(len(parsed), expected, raw)
    return parsed[:expected]


def parse_score(text: Optional[str]) -> int:
    """Read "Score: NN" (or "Puntuación: NN") from evaluation text; 0 when absent."""

    for pattern in _SCORE_PATTERNS:
        match = pattern.search(text or "")
        if match:
            return max(0, min(100, int(match.group(1))))
    return 0


__all__ = [
    "ERROR_MARKERS",
    "LlmResponseError",
    "OBJECTIVE_MET",
    "QuestionBankError",
    "TurnOutcome",
    "clean_question",
    "ensure_usable",
    "parse_next_turn",
    "parse_question_bank",
    "parse_score",
]
