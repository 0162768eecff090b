"""Prompt asking the model for the interview's reference question bank."""
from __future__ import annotations

from langchain_core.prompts import PromptTemplate

from interview_session.models import InterviewSession

from .common import candidate_line, context_section, is_spanish

LANGUAGE_INSTRUCTION = {
    False: "Generate all questions in English. Respond only in English.",
    True: "Genera todas las preguntas en español. Responde solo en español.",
}

BANK_TEMPLATE = PromptTemplate.from_template(
    "{language_instruction}\n\n"
    "You are an expert technical interviewer. Use the following context to conduct an interview with the user.\n"
    "{context}\n\n"
    "Generate exactly {count} unique and specific technical questions suitable for a candidate with {candidate}.\n\n"
    "Requirements:\n"
    "- Generate exactly {count} questions\n"
    "- Make each question unique and specific to the topic and objectives above\n"
    "- Questions should vary in difficulty based on experience level\n"
    "- Include practical, theoretical, and problem-solving questions\n"
    "- Format as numbered list: 1. Question, 2. Question, etc.\n"
    "- Do not include any explanations, just the questions\n"
    "- Each question should be different from the others\n"
    "- Focus on the specific topic: {subtopic}\n"
    "- Use both the topic and subtopic objectives to guide your questions"
)


def build_bank_prompt(session: InterviewSession, *, count: int = 10) -> str:
    return BANK_TEMPLATE.format(
        language_instruction=LANGUAGE_INSTRUCTION[is_spanish(session)],
        context=context_section(session),
        count=count,
        candidate=candidate_line(session),
        subtopic=session.subtopic.title,
    )
