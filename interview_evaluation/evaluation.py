from __future__ import annotations  # End-of-interview evaluation pipeline

import logging
from typing import List, Optional, Sequence

from langchain_core.prompts import PromptTemplate

from agents.parsing import parse_score
from interview_session.models import ChatMessage, InterviewResult, InterviewSession, Language, QuestionAnswer, utcnow
from llm_gateway import TextCompleter
from observability import log_event
from services.scoring import fallback_evaluation
from storage.messages import list_messages, save_pending
from storage.results import create_result
from storage.sessions import mark_completed

logger = logging.getLogger(__name__)

NO_ANSWER = "No answer provided"

EVALUATION_INSTRUCTION = {  # Scoring rules handed to the evaluator model
    Language.EN: (
        "Evaluate this interview in English. Respond only in English. If an answer is incorrect or the user says "
        "'I don't know', 'none', 'no', 'n/a' or similar, give 0 points for that question and reflect this in the "
        "final score. If all answers are of this type, the total score must be 0/100, no exceptions. Do not give "
        "any minimum score for participation or education if no technical answers are correct."
    ),
    Language.ES: (
        "Evalúa esta entrevista en español. Responde solo en español. Si una respuesta es incorrecta o el usuario "
        "dice 'no lo sé', 'ninguna', 'no', 'n/a' o similar, asigna 0 puntos a esa pregunta y refleja esto en la "
        "puntuación final. Si todas las respuestas son de este tipo, la puntuación total debe ser 0/100, sin "
        "excepciones. No des ningún puntaje mínimo por participación o educación si ninguna respuesta técnica es "
        "correcta."
    ),
}

NO_PAIRS = {
    Language.EN: "No questions were answered in this interview.",
    Language.ES: "No se respondieron preguntas en esta entrevista.",
}

REPORT_REQUEST = {
    Language.EN: (
        "Provide a comprehensive evaluation:\n1. Score out of 100 (Score: XX)\n2. Detailed analysis of responses\n"
        "3. Identified strengths\n4. Areas for improvement\n5. Specific recommendations"
    ),
    Language.ES: (
        "Proporciona una evaluación completa:\n1. Puntuación de 0 a 100 (Puntuación: XX)\n"
        "2. Análisis detallado de las respuestas\n3. Fortalezas identificadas\n4. Áreas de mejora\n"
        "5. Recomendaciones específicas"
    ),
}

EVALUATION_TEMPLATE = PromptTemplate.from_template(
    "{instruction}\n\n"
    "Evaluate this interview for {name} about {subject}.\n"
    "Candidate has {education} education and {experience} years experience.\n"
    "Questions and answers:\n"
    "{pairs}\n\n"
    "{report_request}"
)


def extract_pairs(messages: Sequence[ChatMessage]) -> List[QuestionAnswer]:  # Pair each question with the next user reply
    ordered = sorted(messages, key=lambda item: (item.timestamp, item.id or 0))
    pairs: List[QuestionAnswer] = []
    for index, message in enumerate(ordered):
        if not message.looks_like_question():
            continue
        answer = next((item.content for item in ordered[index + 1:] if item.is_user_message), NO_ANSWER)
        pairs.append(QuestionAnswer(question=message.content, answer=answer))
    return pairs


def _truncate(answer: str, limit: int) -> str:
    return answer[:limit] + "..." if len(answer) > limit else answer


def build_evaluation_prompt(
    session: InterviewSession,
    pairs: Sequence[QuestionAnswer],
    *,
    truncate_chars: int = 500,
) -> str:  # Compose the evaluator prompt from the stored transcript
    if pairs:
        block = "\n\n".join(f"Q: {pair.question}\nA: {_truncate(pair.answer, truncate_chars)}" for pair in pairs)
    else:
        block = NO_PAIRS[session.language]
    return EVALUATION_TEMPLATE.format(
        instruction=EVALUATION_INSTRUCTION[session.language],
        name=session.candidate.name or "the candidate",
        subject=session.subtopic.title,
        education=session.candidate.education,
        experience=session.candidate.experience,
        pairs=block,
        report_request=REPORT_REQUEST[session.language],
    )


def close_session(session: InterviewSession, *, summary: Optional[str] = None) -> bool:  # Flush buffered turns, then mark completed
    try:
        save_pending(session.pending_messages())
    finally:
        ended = utcnow()
        changed = mark_completed(session.id, end_time=ended, summary=summary)
        session.is_completed = True
        if changed:
            session.end_time = ended
            if summary is not None:
                session.summary = summary
    return changed


async def run_evaluation(
    session: InterviewSession,
    complete: TextCompleter,
    *,
    truncate_chars: int = 500,
) -> InterviewResult:  # Close the session, score the transcript and store the result
    close_session(session)
    messages = list_messages(session.id)
    pairs = extract_pairs(messages)
    prompt = build_evaluation_prompt(session, pairs, truncate_chars=truncate_chars)
    raw = await complete(prompt)
    if raw and raw.strip():
        evaluation = raw.strip()
        score = parse_score(evaluation)
        source = "model"
    else:
        # Only the evaluator's own score counts; the heuristic report is text only.
        logger.warning("Empty evaluation reply for session %s; storing score 0 with heuristic notes", session.id)
        evaluation = fallback_evaluation(pairs, subject=session.subtopic.title, language=session.language)
        score = 0
        source = "fallback"
    result = create_result(session_id=session.id, score=score, evaluation=evaluation, questions=pairs)
    log_event("evaluation_stored", session.id, score=score, pairs=len(pairs), outcome=source)
    return result


__all__ = [
    "NO_ANSWER",
    "build_evaluation_prompt",
    "close_session",
    "extract_pairs",
    "run_evaluation",
]
