"""Timing spans for model calls made on behalf of a connection."""
from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Any, Dict, Iterator


@contextmanager
def span(ctx, name: str) -> Iterator[Dict[str, Any]]:
    """Append ``{"span", "ms", "ok"}`` to ``ctx.events`` when the block exits.

    The yielded dict is the event itself, so callers can attach extra fields.
    """
    event: Dict[str, Any] = {"span": name, "ok": True}
    started = time.perf_counter()
    try:
        yield event
    except BaseException:
        event["ok"] = False
        raise
    finally:
        event["ms"] = int((time.perf_counter() - started) * 1000)
        ctx.events.append(event)


__all__ = ["span"]
