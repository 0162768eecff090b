"""User-facing interviewer and system texts in English and Spanish."""
from __future__ import annotations

from typing import Dict

from interview_session.models import Language

INTERVIEWER = "Interviewer"
SYSTEM = "System"

_CATALOG: Dict[Language, Dict[str, str]] = {
    Language.EN: {
        "greeting": "Hello! Welcome to your mock interview. Say hello to begin.",
        "lets_begin": "Nice to meet you! Let's begin the interview.",
        "welcome_back": "Welcome back! Let's continue your interview on {subject}. Where were we?",
        "question_label": "Question {number}: ",
        "nudge": (
            "I've noticed you don't have experience in this topic. Would you like to talk about another "
            "technology, your general experience, or continue with more general questions? If you'd prefer "
            "to end the interview, you can also let me know."
        ),
        "exit_offer": (
            "I've noticed you've answered several times that you don't have experience or don't know. "
            "Would you like to end the interview here? If you'd like to continue, please let me know."
        ),
        "objective_met": (
            "Perfect. I have evaluated your responses and consider that we have sufficiently covered the "
            "objective of this interview. I will now generate your evaluation."
        ),
        "question_cap": (
            "We have reached the limit of {limit} questions for this interview. I will now generate your "
            "evaluation based on the provided responses."
        ),
        "next_question_failed": "Failed to generate the next question. Please try again.",
    },
    Language.ES: {
        "greeting": "¡Hola! Bienvenido a tu entrevista simulada. Di hola para comenzar.",
        "lets_begin": "¡Encantado de conocerte! Comencemos la entrevista.",
        "welcome_back": "¡Bienvenido de vuelta! Continuemos tu entrevista sobre {subject}. ¿Dónde nos quedamos?",
        "question_label": "Pregunta {number}: ",
        "nudge": (
            "He notado que no tienes experiencia en este tema. ¿Te gustaría hablar de otra tecnología, tu "
            "experiencia general, o continuar con preguntas más generales? Si prefieres terminar la "
            "entrevista, también puedes indicarlo."
        ),
        "exit_offer": (
            "He notado que has respondido varias veces que no tienes experiencia o no sabes. ¿Te gustaría "
            "terminar la entrevista aquí? Si deseas continuar, por favor indícalo."
        ),
        "objective_met": (
            "Perfecto. He evaluado tus respuestas y considero que hemos cubierto suficientemente el objetivo "
            "de esta entrevista. Procederé a generar tu evaluación."
        ),
        "question_cap": (
            "Hemos llegado al límite de {limit} preguntas para esta entrevista. Procederé a generar tu "
            "evaluación basada en las respuestas proporcionadas."
        ),
        "next_question_failed": "No se pudo generar la siguiente pregunta. Intenta de nuevo.",
    },
}

# System notices are sent in English regardless of interview language.
NOTICES: Dict[str, str] = {
    "already_in_progress": "Interview already in progress",
    "invalid_subtopic": "Invalid subtopic selected",
    "not_authenticated": "User not authenticated",
    "user_not_found": "User not found",
    "questions_failed": "Failed to generate interview questions. Please try again later.",
    "resume_questions_failed": "Failed to generate interview questions. Please try starting a new interview.",
    "start_failed": "Failed to start interview. Please try again.",
    "resume_failed": "Failed to resume interview. Please try again.",
    "invalid_session": "Invalid session",
    "session_already_completed": "This interview session has already been completed",
    "session_not_found": "Session not found",
    "interview_already_completed": "This interview is already completed",
    "no_active_session": "No active session found.",
    "no_active_public_session": "No active interview session",
    "send_failed": "Failed to send message. Please try again.",
    "already_completed": "Interview already completed.",
    "completion_failed": "Error completing interview. Please check the results page.",
    "ended_early": "Interview ended early. Your progress has been saved.",
    "end_early_failed": "Failed to end the interview. Please try again.",
    "malformed_frame": "Unrecognized request.",
}


def phrase(language: Language, key: str, **values: object) -> str:
    return _CATALOG[language][key].format(**values)


def notice(key: str) -> str:
    return NOTICES[key]


__all__ = ["INTERVIEWER", "NOTICES", "SYSTEM", "notice", "phrase"]
