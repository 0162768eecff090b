"""Prompt for the adaptive next-question turn."""
from __future__ import annotations

from textwrap import dedent
from typing import Sequence

from langchain_core.prompts import PromptTemplate

from interview_session.models import InterviewSession

from agents.parsing import OBJECTIVE_MET
from .common import bullet_list, candidate_line, context_section, is_spanish, transcript_lines

INTERVIEWER_GUIDANCE_EN = dedent(
    f"""
    You are an expert technical interviewer. Before asking the next question, carefully interpret the candidate's
    previous answer and evaluate if the interview objective has been met. If the candidate responds with 'no',
    'I don't know', 'none', 'n/a', or similar, adapt the next question to be simpler and more supportive, or shift
    to general or motivational topics. If the candidate shows knowledge, increase the difficulty. Never repeat
    questions. If the objective has been met or you have enough information to evaluate the candidate, respond
    with '{OBJECTIVE_MET}' instead of a question. If you have reached question 10 and the objective is still not
    met, respond with '{OBJECTIVE_MET}' to end the interview. Only output the next question or '{OBJECTIVE_MET}',
    no explanations or numbering.
    """
).strip()

INTERVIEWER_GUIDANCE_ES = dedent(
    f"""
    Eres un entrevistador técnico experto. Antes de hacer la siguiente pregunta, analiza cuidadosamente la
    respuesta anterior del candidato y evalúa si el objetivo de la entrevista se ha cumplido. Si el candidato
    responde con 'no', 'no lo sé', 'ninguna' o respuestas similares, adapta la siguiente pregunta para ser más
    sencilla y de apoyo, o cambia el enfoque a conceptos generales o motivacionales. Si el candidato muestra
    conocimiento, aumenta la dificultad. Nunca repitas preguntas. Si consideras que el objetivo se ha cumplido o
    que ya tienes suficiente información para evaluar al candidato, responde con '{OBJECTIVE_MET}' en lugar de una
    pregunta. Si has llegado a la pregunta 10 y aún no has cumplido el objetivo, responde con '{OBJECTIVE_MET}'
    para terminar la entrevista. Solo responde con la siguiente pregunta o '{OBJECTIVE_MET}', sin explicaciones
    ni numeración.
    """
).strip()

NEXT_QUESTION_TEMPLATE = PromptTemplate.from_template(
    "{guidance}\n\n"
    "{context}\n\n"
    "You are conducting a technical interview on the topic '{subtopic}'.\n"
    "The candidate has {candidate}.\n\n"
    "This is question {number}. Do not repeat previous questions.\n\n"
    "Conversation so far:\n"
    "{transcript}\n\n"
    "Reference questions not yet covered (adapt freely, never copy one already asked):\n"
    "{reference}\n\n"
    "Based on the above, interpret the candidate's previous answer(s) and adapt the next question to their level "
    "and previous answers. Only output the next question, no explanations or numbering."
)


def build_next_question_prompt(
    session: InterviewSession,
    *,
    number: int,
    reference: Sequence[str] = (),
) -> str:
    """Compose the prompt for question ``number`` from the whole transcript so far."""

    guidance = INTERVIEWER_GUIDANCE_ES if is_spanish(session) else INTERVIEWER_GUIDANCE_EN
    transcript = "\n".join(transcript_lines(session.ordered_messages())) or "(no answers yet)"
    return NEXT_QUESTION_TEMPLATE.format(
        guidance=guidance,
        context=context_section(session),
        subtopic=session.subtopic.title,
        candidate=candidate_line(session),
        number=number,
        transcript=transcript,
        reference=bullet_list(reference),
    )
