import asyncio

from api.hub import _discard_pending, _finish_worker, dispatch
from interview_session.context import ConnectionContext
from interview_session.engine import InterviewEngine
from interview_session.phrases import SYSTEM, notice

from fakes import RecordingChannel, ScriptedCompleter


def test_dispatch_rejects_bad_frames(run):
    ctx = ConnectionContext(connection_id="c1", channel=RecordingChannel())
    engine = InterviewEngine(ScriptedCompleter())
    for raw in ("not json", '{"method": "dance"}', '{"method": "sendAnswer", "args": {}}'):
        run(dispatch(engine, ctx, raw))
    assert ctx.channel.messages == [(SYSTEM, notice("malformed_frame"))] * 3


def test_pending_frames_are_dropped():
    async def scenario():
        inbox = asyncio.Queue()
        for raw in ("a", "b"):
            inbox.put_nowait(raw)
        return _discard_pending(inbox), inbox.empty()

    assert asyncio.run(scenario()) == (2, True)


def test_finished_worker_is_awaited_not_cancelled():
    async def scenario():
        worker = asyncio.create_task(asyncio.sleep(0.05, result="stored"))
        await _finish_worker(worker, "c1", timeout=5)
        return worker.cancelled(), worker.result()

    assert asyncio.run(scenario()) == (False, "stored")


def test_stuck_worker_is_cancelled_after_grace():
    async def scenario():
        worker = asyncio.create_task(asyncio.sleep(30))
        await _finish_worker(worker, "c1", timeout=0.01)
        return worker.cancelled()

    assert asyncio.run(scenario())
