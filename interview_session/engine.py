"""Turn engine driving one interview conversation per connection.

Every public coroutine is a client-facing operation: it never raises, and any
failure is logged and turned into a notice for the caller. Operations on one
connection are serialised through ``ConnectionContext.lock``. Disconnect
handling does not take that lock, so it can close a session while a model
call is still in flight, and the turn logic re-checks ``ctx.is_open`` after
every model call before acting on the reply.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Optional, Sequence

from agents.non_answer import is_non_answer, normalize
from agents.parsing import LlmResponseError, parse_next_turn
from agents.qg.next_question import build_next_question_prompt
from config.settings import Settings, settings as default_settings
from interview_evaluation.evaluation import close_session, run_evaluation
from interview_session.context import ConnectionContext, InterviewPhase
from interview_session.errors import SetupError
from interview_session.models import CandidateProfile, ChatMessage, InterviewSession, Language, SubTopic
from interview_session.phrases import INTERVIEWER, SYSTEM, notice, phrase
from interview_session.tracker import generate_tracker
from llm_gateway import TextCompleter
from observability import log_event, span
from storage.catalog import load_candidate, load_subtopic
from storage.messages import save_pending
from storage.sessions import create_session, delete_session, load_session, set_question_number

logger = logging.getLogger(__name__)

END_REPLIES = ("no", "end", "stop", "finish", "terminate", "exit", "quit")
CONTINUE_REPLIES = ("yes", "continue", "go on", "keep going", "proceed")
DISCONNECT_SUMMARY = "Disconnected before completion"


def _reply_matches(text: str, patterns: Sequence[str]) -> bool:
    return any(text == pattern or text.startswith(pattern + " ") for pattern in patterns)


def interpret_exit_reply(text: Optional[str]) -> Optional[str]:
    """Classify a reply to the exit offer as "end", "continue", or None when unclear."""

    sample = normalize(text)
    if _reply_matches(sample, END_REPLIES):
        return "end"
    if _reply_matches(sample, CONTINUE_REPLIES):
        return "continue"
    return None


class InterviewEngine:
    def __init__(self, complete: TextCompleter, *, config: Settings = default_settings) -> None:
        self._complete = complete
        self._config = config

    # ------------------------------------------------------------------ #
    # Connection lifecycle
    # ------------------------------------------------------------------ #
    async def connect(self, ctx: ConnectionContext) -> None:
        log_event("connection_opened", None, connection=ctx.connection_id)

    async def disconnect(self, ctx: ConnectionContext) -> None:
        """Close any open session as abandoned and clear the context."""

        session = ctx.session
        try:
            if session is not None and not session.is_completed:
                close_session(session, summary=DISCONNECT_SUMMARY)
                log_event(
                    "session_disconnected",
                    session.id,
                    connection=ctx.connection_id,
                    question_number=session.current_question_number,
                )
        except Exception:
            logger.exception("Error saving session on disconnect of %s", ctx.connection_id)
        finally:
            ctx.reset()
            log_event("connection_closed", None, connection=ctx.connection_id)

    # ------------------------------------------------------------------ #
    # Session setup
    # ------------------------------------------------------------------ #
    async def start_interview(self, ctx: ConnectionContext, subject_id: int, language: Optional[str] = None) -> None:
        async with ctx.lock:
            if ctx.session is not None:
                await self._notify(ctx, "already_in_progress")
                return
            try:
                subtopic = self._subject(subject_id)
                candidate = self._candidate(ctx)
                session = create_session(
                    subtopic,
                    candidate_id=ctx.candidate_id,
                    candidate=candidate,
                    language=Language.parse(language),
                )
                ctx.attach(session)
                log_event("session_started", session.id, connection=ctx.connection_id)
                if not await self._prepare_tracker(ctx, session):
                    delete_session(session.id)
                    await self._notify(ctx, "questions_failed")
                    return
                ctx.transition(InterviewPhase.AWAITING_GREETING)
                await self._say(ctx, phrase(session.language, "greeting"))
            except SetupError as exc:
                await self._notify(ctx, exc.notice_key)
            except Exception:
                logger.exception("Error in start_interview on %s", ctx.connection_id)
                ctx.reset()
                await self._notify(ctx, "start_failed")

    async def start_public_interview(self, ctx: ConnectionContext, subject_id: int, session_id: int) -> None:
        """Attach a pre-created session (public link flow) to this connection."""

        async with ctx.lock:
            if ctx.session is not None:
                await self._notify(ctx, "already_in_progress")
                return
            try:
                subtopic = self._subject(subject_id)
                session = self._existing(session_id, missing="invalid_session")
                if session.subtopic_id != subtopic.id:
                    raise SetupError("invalid_session")
                if session.is_completed:
                    raise SetupError("session_already_completed")
                resumed = session.current_question_number > 0
                ctx.attach(session)
                if not await self._prepare_tracker(ctx, session):
                    await self._notify(ctx, "questions_failed")
                    return
                ctx.transition(self._phase_for(session))
                key = "welcome_back" if resumed else "greeting"
                await self._say(ctx, phrase(session.language, key, subject=subtopic.title))
                log_event("session_attached", session.id, connection=ctx.connection_id, phase=ctx.phase.value)
            except SetupError as exc:
                await self._notify(ctx, exc.notice_key)
            except Exception:
                logger.exception("Error in start_public_interview on %s", ctx.connection_id)
                ctx.reset()
                await self._notify(ctx, "start_failed")

    async def resume_interview(self, ctx: ConnectionContext, session_id: int) -> None:
        async with ctx.lock:
            if ctx.session is not None:
                await self._notify(ctx, "already_in_progress")
                return
            try:
                session = self._existing(session_id, missing="session_not_found")
                if ctx.candidate_id is not None and session.candidate_id not in (None, ctx.candidate_id):
                    raise SetupError("session_not_found")
                if session.is_completed:
                    raise SetupError("interview_already_completed")
                ctx.attach(session)
                if not await self._prepare_tracker(ctx, session):
                    await self._notify(ctx, "resume_questions_failed")
                    return
                ctx.transition(self._phase_for(session))
                await self._say(ctx, phrase(session.language, "welcome_back", subject=session.subtopic.title))
                log_event(
                    "session_resumed",
                    session.id,
                    connection=ctx.connection_id,
                    question_number=session.current_question_number,
                )
            except SetupError as exc:
                await self._notify(ctx, exc.notice_key)
            except Exception:
                logger.exception("Error in resume_interview on %s", ctx.connection_id)
                ctx.reset()
                await self._notify(ctx, "resume_failed")

    # ------------------------------------------------------------------ #
    # Conversation turns
    # ------------------------------------------------------------------ #
    async def send_answer(self, ctx: ConnectionContext, text: str) -> None:
        async with ctx.lock:
            await self._handle_answer(ctx, text)

    async def send_public_message(self, ctx: ConnectionContext, text: str, session_id: int) -> None:
        async with ctx.lock:
            if ctx.session is None:
                await self._notify(ctx, "no_active_public_session")
                return
            if ctx.session.id != session_id:
                await self._notify(ctx, "invalid_session")
                return
            await self._handle_answer(ctx, text)

    async def complete_interview(self, ctx: ConnectionContext) -> None:
        async with ctx.lock:
            await self._finish(ctx)

    async def end_interview_early(self, ctx: ConnectionContext) -> None:
        """Close the session without an evaluation and send the client to results."""

        async with ctx.lock:
            session = ctx.session
            if session is None:
                await self._notify(ctx, "no_active_session")
                return
            try:
                ctx.transition(InterviewPhase.COMPLETED)
                close_session(session)
                log_event("interview_ended_early", session.id, question_number=session.current_question_number)
                await self._notify(ctx, "ended_early")
                await ctx.channel.redirect_to_results(session.id)
            except Exception:
                logger.exception("Error ending session %s early", session.id)
                await self._notify(ctx, "end_early_failed")
            finally:
                ctx.reset()

    async def _handle_answer(self, ctx: ConnectionContext, text: str) -> None:
        session = ctx.session
        if session is None or ctx.phase in (None, InterviewPhase.CREATED, InterviewPhase.COMPLETED):
            await self._notify(ctx, "no_active_session")
            return
        try:
            if ctx.phase is InterviewPhase.EXIT_OFFER_PENDING:
                await self._handle_exit_reply(ctx, session, text)
                return
            self._record(session, text, is_user_message=True)
            if ctx.phase is InterviewPhase.AWAITING_GREETING:
                ctx.transition(InterviewPhase.IN_PROGRESS)
                log_event("greeting_received", session.id, connection=ctx.connection_id)
                await self._say(ctx, phrase(session.language, "lets_begin"))
            else:
                self._track_streak(ctx, session, text)
            await self._advance(ctx, session)
        except Exception:
            logger.exception("Error handling answer for session %s", session.id)
            await self._notify(ctx, "send_failed")

    def _track_streak(self, ctx: ConnectionContext, session: InterviewSession, text: str) -> None:
        if is_non_answer(text):
            ctx.non_answer_streak += 1
        else:
            ctx.non_answer_streak = 0
        log_event(
            "answer_received",
            session.id,
            question_number=session.current_question_number,
            streak=ctx.non_answer_streak,
        )

    async def _handle_exit_reply(self, ctx: ConnectionContext, session: InterviewSession, text: str) -> None:
        choice = interpret_exit_reply(text)
        log_event("exit_offer_reply", session.id, outcome=choice or "unclear")
        if choice == "end":
            await self._finish(ctx)
        elif choice == "continue":
            ctx.non_answer_streak = 0
            ctx.transition(InterviewPhase.IN_PROGRESS)
            await self._advance(ctx, session)
        else:
            await self._say(ctx, phrase(session.language, "exit_offer"))

    async def _advance(self, ctx: ConnectionContext, session: InterviewSession) -> None:
        """Ask the next question, or escalate, or finish, depending on where the session stands."""

        cfg = self._config
        language = session.language
        if session.current_question_number >= cfg.MAX_QUESTIONS:
            await self._say(ctx, phrase(language, "question_cap", limit=cfg.MAX_QUESTIONS))
            log_event("question_cap_reached", session.id, question_number=session.current_question_number)
            await self._finish(ctx)
            return

        streak = ctx.non_answer_streak
        if streak >= cfg.EXIT_OFFER_STREAK:
            ctx.transition(InterviewPhase.EXIT_OFFER_PENDING)
            await self._say(ctx, phrase(language, "exit_offer"))
            log_event("exit_offered", session.id, streak=streak, phase=ctx.phase.value)
            return
        if streak >= cfg.NUDGE_STREAK:
            await self._say(ctx, phrase(language, "nudge"))
            log_event("nudge_sent", session.id, streak=streak)

        number = session.current_question_number + 1
        reference = ctx.tracker.remaining() if ctx.tracker is not None else []
        prompt = build_next_question_prompt(session, number=number, reference=reference)
        raw = await self._call_model(ctx, "next_question", prompt)
        if not ctx.is_open(session.id):
            log_event("late_reply_discarded", session.id, connection=ctx.connection_id, question_number=number)
            return

        try:
            outcome = parse_next_turn(raw)
        except LlmResponseError as exc:
            log_event("next_question_failed", session.id, question_number=number, reason=exc.reason)
            await ctx.channel.message(SYSTEM, phrase(language, "next_question_failed"))
            return

        if outcome.objective_met:
            await self._say(ctx, phrase(language, "objective_met"))
            log_event("objective_met", session.id, question_number=session.current_question_number)
            await self._finish(ctx)
            return

        question = phrase(language, "question_label", number=number) + outcome.text
        session.current_question_number = number
        set_question_number(session.id, number)
        self._record(session, question, is_user_message=False)
        if ctx.tracker is not None:
            ctx.tracker.mark_asked(outcome.text)
        await self._say(ctx, question)
        log_event("question_asked", session.id, question_number=number)

    async def _finish(self, ctx: ConnectionContext) -> None:
        """Run the evaluation pipeline and hand the client its result."""

        session = ctx.session
        if session is None:
            await self._notify(ctx, "no_active_session")
            return
        if session.is_completed or ctx.phase is InterviewPhase.COMPLETED:
            await self._say(ctx, notice("already_completed"))
            return
        try:
            ctx.transition(InterviewPhase.COMPLETED)
            result = await run_evaluation(
                session,
                lambda prompt: self._call_model(ctx, "evaluation", prompt),
                truncate_chars=self._config.ANSWER_TRUNCATE_CHARS,
            )
            await ctx.channel.interview_completed(result.score, result.evaluation)
            await ctx.channel.redirect_to_results(session.id)
            log_event("interview_completed", session.id, score=result.score, pairs=len(result.questions))
        except Exception:
            logger.exception("Error completing session %s", session.id)
            log_event("evaluation_failed", session.id)
            await self._notify(ctx, "completion_failed")
        finally:
            ctx.reset()

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #
    async def _prepare_tracker(self, ctx: ConnectionContext, session: InterviewSession) -> bool:
        """Generate the question bank once per attached session; False (and a cleared context) on failure."""

        async with ctx.tracker_lock:
            if ctx.tracker is not None:
                return True
            try:
                ctx.tracker = await generate_tracker(
                    session,
                    lambda prompt: self._call_model(ctx, "question_bank", prompt),
                    count=self._config.QUESTION_BANK_SIZE,
                )
            except Exception as exc:
                logger.warning("Question bank generation failed for session %s: %s", session.id, exc)
                log_event("question_bank_failed", session.id, reason=str(exc))
                ctx.reset()
                return False
        return True

    async def _call_model(self, ctx: ConnectionContext, name: str, prompt: str) -> str:
        with span(ctx, name):
            try:
                return await asyncio.wait_for(self._complete(prompt), timeout=self._config.LLM_TIMEOUT_S)
            except asyncio.TimeoutError:
                log_event("llm_timeout", ctx.session.id if ctx.session else None, reason=name)
                return ""

    def _record(self, session: InterviewSession, content: str, *, is_user_message: bool) -> ChatMessage:
        message = ChatMessage(session_id=session.id, content=content, is_user_message=is_user_message)
        session.messages.append(message)
        save_pending([message])
        return message

    def _subject(self, subject_id: int) -> SubTopic:
        try:
            return load_subtopic(subject_id)
        except KeyError:
            raise SetupError("invalid_subtopic") from None

    def _candidate(self, ctx: ConnectionContext) -> CandidateProfile:
        if ctx.candidate_id is None:
            raise SetupError("not_authenticated")
        try:
            return load_candidate(ctx.candidate_id)
        except KeyError:
            raise SetupError("user_not_found") from None

    def _existing(self, session_id: int, *, missing: str) -> InterviewSession:
        try:
            return load_session(session_id)
        except KeyError:
            raise SetupError(missing) from None

    @staticmethod
    def _phase_for(session: InterviewSession) -> InterviewPhase:
        if session.current_question_number > 0:
            return InterviewPhase.IN_PROGRESS
        return InterviewPhase.AWAITING_GREETING

    async def _say(self, ctx: ConnectionContext, text: str) -> None:
        await ctx.channel.message(INTERVIEWER, text)

    async def _notify(self, ctx: ConnectionContext, key: str) -> None:
        await ctx.channel.message(SYSTEM, notice(key))


__all__ = ["CONTINUE_REPLIES", "DISCONNECT_SUMMARY", "END_REPLIES", "InterviewEngine", "interpret_exit_reply"]
