"""Real-time interview hub served over a FastAPI WebSocket."""
from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Awaitable, Callable, Dict, Optional, Tuple, Type

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from pydantic import BaseModel, ValidationError
from starlette.websockets import WebSocketState

from api.schemas import (
    ClientFrame,
    InterviewCompletedEvent,
    MessageEvent,
    NoArgs,
    RedirectEvent,
    ResumeInterviewArgs,
    SendAnswerArgs,
    SendPublicMessageArgs,
    StartInterviewArgs,
    StartPublicInterviewArgs,
)
from config.registry import COMPLETION_KEY, get_model
from config.settings import settings
from interview_session.context import ConnectionContext, ConnectionRegistry
from interview_session.engine import InterviewEngine
from interview_session.phrases import SYSTEM, notice

logger = logging.getLogger(__name__)

router = APIRouter()
registry = ConnectionRegistry()

# A frame in flight may make a question call and then an evaluation call.
WORKER_GRACE_FACTOR = 2

Handler = Callable[[InterviewEngine, ConnectionContext, BaseModel], Awaitable[None]]

HANDLERS: Dict[str, Tuple[Type[BaseModel], Handler]] = {
    "startInterview": (
        StartInterviewArgs,
        lambda engine, ctx, args: engine.start_interview(ctx, args.subjectId, args.language),
    ),
    "startPublicInterview": (
        StartPublicInterviewArgs,
        lambda engine, ctx, args: engine.start_public_interview(ctx, args.subjectId, args.sessionId),
    ),
    "resumeInterview": (
        ResumeInterviewArgs,
        lambda engine, ctx, args: engine.resume_interview(ctx, args.sessionId),
    ),
    "sendAnswer": (
        SendAnswerArgs,
        lambda engine, ctx, args: engine.send_answer(ctx, args.text),
    ),
    "sendPublicMessage": (
        SendPublicMessageArgs,
        lambda engine, ctx, args: engine.send_public_message(ctx, args.text, args.sessionId),
    ),
    "completeInterview": (NoArgs, lambda engine, ctx, args: engine.complete_interview(ctx)),
    "endInterviewEarly": (NoArgs, lambda engine, ctx, args: engine.end_interview_early(ctx)),
}


class WebSocketChannel:  # Sends engine events as JSON frames; drops them once the socket is gone
    def __init__(self, websocket: WebSocket) -> None:
        self._websocket = websocket

    async def _send(self, frame: BaseModel) -> None:
        if self._websocket.client_state != WebSocketState.CONNECTED:
            logger.debug("Dropping %s frame for closed socket", frame.__class__.__name__)
            return
        try:
            await self._websocket.send_text(frame.model_dump_json())
        except (RuntimeError, WebSocketDisconnect) as exc:
            logger.warning("WebSocket send failed: %s", exc)

    async def message(self, speaker: str, text: str) -> None:
        await self._send(MessageEvent(speaker=speaker, text=text))

    async def interview_completed(self, score: int, evaluation: str) -> None:
        await self._send(InterviewCompletedEvent(score=score, evaluation=evaluation))

    async def redirect_to_results(self, session_id: int) -> None:
        await self._send(RedirectEvent(sessionId=session_id))


async def dispatch(engine: InterviewEngine, ctx: ConnectionContext, raw: str) -> None:
    """Validate one client frame and run the matching engine operation."""

    try:
        frame = ClientFrame.model_validate_json(raw)
        args_model, handler = HANDLERS[frame.method]
        args = args_model.model_validate(frame.args)
    except ValidationError as exc:
        logger.info("Rejected frame on %s: %s", ctx.connection_id, exc.errors()[:1])
        await ctx.channel.message(SYSTEM, notice("malformed_frame"))
        return
    await handler(engine, ctx, args)


async def _drain(engine: InterviewEngine, ctx: ConnectionContext, inbox: "asyncio.Queue[Optional[str]]") -> None:
    while True:
        raw = await inbox.get()
        if raw is None:
            return
        try:
            await dispatch(engine, ctx, raw)
        except Exception:
            logger.exception("Unhandled error processing frame on %s", ctx.connection_id)


def _discard_pending(inbox: "asyncio.Queue[Optional[str]]") -> int:
    dropped = 0
    while not inbox.empty():
        inbox.get_nowait()
        dropped += 1
    return dropped


async def _finish_worker(worker: "asyncio.Task[None]", connection_id: str, timeout: float) -> None:
    """Let the frame in progress run to its end; cancel only past ``timeout``."""

    done, _ = await asyncio.wait({worker}, timeout=timeout)
    if not done:
        logger.warning("Worker for %s still busy after %.1fs; cancelling", connection_id, timeout)
        worker.cancel()
        await asyncio.gather(worker, return_exceptions=True)


@router.websocket("/ws/interview")
async def interview_socket(websocket: WebSocket, candidate_id: Optional[int] = None) -> None:
    await websocket.accept()
    connection_id = uuid.uuid4().hex
    ctx = registry.open(connection_id, WebSocketChannel(websocket), candidate_id=candidate_id)
    engine = InterviewEngine(get_model(COMPLETION_KEY))
    await engine.connect(ctx)

    # Frames are handled one at a time by a worker so the receive loop can
    # notice a disconnect while a model call is still pending.
    inbox: "asyncio.Queue[Optional[str]]" = asyncio.Queue()
    worker = asyncio.create_task(_drain(engine, ctx, inbox))
    try:
        while True:
            await inbox.put(await websocket.receive_text())
    except WebSocketDisconnect:
        logger.info("Client disconnected: %s", connection_id)
    finally:
        await engine.disconnect(ctx)
        # Frames not yet started are dropped; the one in progress keeps its
        # model call and either stores its result or discards a late reply.
        dropped = _discard_pending(inbox)
        if dropped:
            logger.info("Dropped %d unprocessed frame(s) for %s", dropped, connection_id)
        inbox.put_nowait(None)
        await _finish_worker(worker, connection_id, WORKER_GRACE_FACTOR * settings.LLM_TIMEOUT_S)
        registry.close(connection_id)


__all__ = ["HANDLERS", "WebSocketChannel", "dispatch", "registry", "router"]
