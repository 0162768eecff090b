"""Heuristic answer scoring used when no model evaluation is available."""
from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, Tuple

from agents.non_answer import is_non_answer, normalize
from interview_session.models import Language, QuestionAnswer

KEYBOARD_FRAGMENTS = ("asd", "zxc", "qwe", "tyu", "iop", "jkl", "bnm")

LENGTH_BUCKETS: Tuple[Tuple[int, int], ...] = (
    (10, 10),
    (20, 20),
    (50, 40),
    (100, 60),
    (200, 80),
)
LONG_ANSWER_SCORE = 90
NONSENSE_SCORE = 5

PERFORMANCE_LEVELS = {
    Language.EN: ("excellent", "good", "fair", "needs improvement"),
    Language.ES: ("excelente", "bueno", "regular", "necesita mejorar"),
}


def has_repeated_pattern(text: str) -> bool:
    """True when a substring of length >= 3 repeats immediately (or one char later)."""

    size = len(text)
    if size < 6:
        return False
    for length in range(3, size // 2 + 1):
        for start in range(0, size - length * 2 + 1):
            pattern = text[start:start + length]
            nxt = text.find(pattern, start + length)
            if nxt != -1 and nxt < start + length + 2:
                return True
    return False


def is_nonsense(text: str) -> bool:
    """Keyboard mashing, stuttered repeats, or a tiny token with no structure."""

    if has_repeated_pattern(text):
        return True
    if len(text) < 5 and " " not in text and "." not in text:
        return True
    return any(fragment in text for fragment in KEYBOARD_FRAGMENTS)


def score_answer(answer: Optional[str]) -> int:
    """Score a single answer 0..100 from length and shape alone."""

    text = normalize(answer)
    if not text:
        return 0
    if is_non_answer(text):
        return 0
    if len(text) < 3:
        return 0
    if is_nonsense(text):
        return NONSENSE_SCORE
    for limit, score in LENGTH_BUCKETS:
        if len(text) < limit:
            return score
    return LONG_ANSWER_SCORE


def aggregate_score(pairs: Sequence[QuestionAnswer]) -> int:
    if not pairs:
        return 0
    total = sum(score_answer(pair.answer) for pair in pairs)
    return min(100, total // len(pairs))


def performance_level(score: int, language: Language = Language.EN) -> str:
    excellent, good, fair, weak = PERFORMANCE_LEVELS[language]
    if score >= 80:
        return excellent
    if score >= 60:
        return good
    if score >= 40:
        return fair
    return weak


def _lines_en(pairs: Sequence[QuestionAnswer], estimate: int, subject: str) -> List[str]:
    level = performance_level(estimate, Language.EN)
    lines = [
        f"Interview evaluation for {subject}.",
        "Score: 0",
        "The automated evaluation was unavailable, so no score was awarded.",
        f"Questions reviewed: {len(pairs)}.",
        f"Estimated performance from answer length and content: {level} ({estimate}/100).",
    ]
    for index, pair in enumerate(pairs, start=1):
        lines.append(f"Q{index}: estimated {score_answer(pair.answer)}/100")
    if estimate < 40:
        lines.append("Several answers were missing or too brief. Practice explaining concrete examples from your experience.")
    elif estimate < 80:
        lines.append("Good foundation. Add more detail and concrete examples to strengthen your answers.")
    else:
        lines.append("Strong, detailed answers. Keep practicing to stay sharp.")
    return lines


def _lines_es(pairs: Sequence[QuestionAnswer], estimate: int, subject: str) -> List[str]:
    level = performance_level(estimate, Language.ES)
    lines = [
        f"Evaluación de la entrevista sobre {subject}.",
        "Puntuación: 0",
        "La evaluación automática no estuvo disponible, por lo que no se asignó puntuación.",
        f"Preguntas revisadas: {len(pairs)}.",
        f"Desempeño estimado por la extensión y el contenido de las respuestas: {level} ({estimate}/100).",
    ]
    for index, pair in enumerate(pairs, start=1):
        lines.append(f"P{index}: estimado {score_answer(pair.answer)}/100")
    if estimate < 40:
        lines.append("Varias respuestas faltaron o fueron muy breves. Practica explicando ejemplos concretos de tu experiencia.")
    elif estimate < 80:
        lines.append("Buena base. Agrega más detalle y ejemplos concretos para fortalecer tus respuestas.")
    else:
        lines.append("Respuestas sólidas y detalladas. Sigue practicando para mantener el nivel.")
    return lines


def fallback_evaluation(
    pairs: Iterable[QuestionAnswer],
    *,
    subject: str,
    language: Language = Language.EN,
) -> str:
    """Report text for an interview the evaluator model returned nothing for.

    The recorded score is always 0 and the text leads with that score line;
    heuristic per-answer estimates follow as guidance only.
    """
    items = list(pairs)
    builder = _lines_es if language is Language.ES else _lines_en
    return "\n".join(builder(items, aggregate_score(items), subject))


__all__ = [
    "aggregate_score",
    "fallback_evaluation",
    "has_repeated_pattern",
    "is_nonsense",
    "performance_level",
    "score_answer",
]
